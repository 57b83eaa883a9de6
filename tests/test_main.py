"""Tests for the console host."""

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from geoatc.airports.directory import Airport, AirportDirectory
from geoatc.main import ConsoleHost, build_aircraft_state, build_engine, parse_args
from geoatc.services.atc.atc_engine import ATCSessionEngine
from geoatc.services.atc.position_selector import ATCPosition
from geoatc.services.atc.providers.base import (
    CompletionResult,
    ICompletionProvider,
    INotificationSink,
)
from geoatc.services.atc.providers.http_completion import HTTPCompletionProvider
from geoatc.services.atc.providers.local import StaticTelemetryProvider
from geoatc.settings.atc_settings import ATCSettings
from geoatc.telemetry.aircraft_state import AircraftState

AIRPORTS = Path(__file__).parents[1] / "data" / "airports" / "airports.json"


class TestArguments:
    """Tests for argument handling."""

    def test_defaults(self) -> None:
        """Test default aircraft position is parked near KSEA."""
        args = parse_args([])
        state = build_aircraft_state(args)
        assert state.altitude_msl_ft == 433.0
        assert state.height_agl_ft == 0.0
        assert state.on_ground is False

    def test_airborne_state(self) -> None:
        """Test AGL from altitude and ground elevation."""
        args = parse_args(["--altitude", "3000", "--ground-elevation", "400", "--heading", "90"])
        state = build_aircraft_state(args)
        assert state.height_agl_ft == 2550.0
        assert state.heading_deg == 90.0


class TestBuildEngine:
    """Tests for engine wiring."""

    def test_wiring(self, tmp_path: Path) -> None:
        """Test providers are built from settings."""
        settings = ATCSettings(
            completion_url="http://llm.local:8080",
            _settings_path=tmp_path / "settings.json",
        )
        args = parse_args(
            ["--airports", str(AIRPORTS), "--offline-personas", "--callsign", "N172SP"]
        )

        engine = build_engine(args, settings, write=lambda line: None)

        assert isinstance(engine.completion, HTTPCompletionProvider)
        assert engine.completion.base_url == "http://llm.local:8080"
        assert engine.persona_cache.provider is None
        assert engine.telemetry.get_aircraft_info().callsign == "N172SP"
        assert "KSEA" in engine.directory


class TestConsoleHost:
    """Tests for command handling."""

    @pytest.fixture
    def engine(self) -> MagicMock:
        """Create engine stub."""
        return MagicMock(spec=ATCSessionEngine)

    @pytest.fixture
    def lines(self) -> list[str]:
        """Collected output lines."""
        return []

    @pytest.fixture
    def clock(self) -> list[float]:
        """Current time in seconds, advanced by tests."""
        return [100.0]

    @pytest.fixture
    def host(self, engine: MagicMock, lines: list[str], clock: list[float]) -> ConsoleHost:
        """Create host writing to a list."""
        settings = ATCSettings(
            auto_position_update_interval=5.0, nearest_airport_update_interval=10.0
        )
        return ConsoleHost(engine, lines.append, settings=settings, clock=lambda: clock[0])

    def test_message(self, host: ConsoleHost, engine: MagicMock) -> None:
        """Test plain text is a transmission."""
        assert host.handle_line("request taxi") is True
        engine.process_pilot_message.assert_called_once_with("request taxi")

    def test_commands(self, host: ConsoleHost, engine: MagicMock) -> None:
        """Test command dispatch."""
        host.handle_line("/tune ksea")
        host.handle_line("/position tower")
        host.handle_line("/voice")

        engine.tune_in.assert_called_once_with("ksea")
        engine.set_position.assert_called_once_with("tower")
        engine.start_voice_input.assert_called_once()

    def test_tune_defaults_to_nearest(self, host: ConsoleHost, engine: MagicMock) -> None:
        """Test /tune without a code uses the suggestion."""
        engine.suggest_frequency.return_value = "KBFI"
        host.handle_line("/tune")
        engine.tune_in.assert_called_once_with("KBFI")

    def test_nearest(self, host: ConsoleHost, engine: MagicMock, lines: list[str]) -> None:
        """Test /nearest output."""
        engine.suggest_frequency.return_value = ""
        host.handle_line("/nearest")
        assert lines == ["No airport in range"]

    def test_unknown_and_quit(self, host: ConsoleHost, lines: list[str]) -> None:
        """Test unknown commands and exit."""
        assert host.handle_line("/fly") is True
        assert lines == ["Unknown command: /fly"]
        assert host.handle_line("/quit") is False

    def test_run_until_eof(self, host: ConsoleHost, engine: MagicMock) -> None:
        """Test the loop stops at end of input."""
        inputs = iter(["hello"])

        def read(prompt: str) -> str:
            try:
                return next(inputs)
            except StopIteration:
                raise EOFError from None

        host.run(read)

        engine.poll_nearest_airport.assert_called_once()
        engine.process_pilot_message.assert_called_once_with("hello")
        engine.refresh_position.assert_called_once()

    def test_timers_follow_intervals(
        self, host: ConsoleHost, engine: MagicMock, clock: list[float]
    ) -> None:
        """Test polling and refresh run once per interval."""
        host.run_timers()
        host.run_timers()
        assert engine.poll_nearest_airport.call_count == 1
        assert engine.refresh_position.call_count == 1

        clock[0] += 5.0
        host.run_timers()
        assert engine.poll_nearest_airport.call_count == 1
        assert engine.refresh_position.call_count == 2

        clock[0] += 5.0
        host.run_timers()
        assert engine.poll_nearest_airport.call_count == 2
        assert engine.refresh_position.call_count == 3


class TestConsoleSession:
    """Tests for the host driving a real engine."""

    @pytest.fixture
    def completion(self) -> MagicMock:
        """Create completion stub."""
        mock = MagicMock(spec=ICompletionProvider)
        mock.name = "stub"
        mock.is_available.return_value = True
        mock.complete.return_value = CompletionResult.success("Runway 16L, cleared for takeoff.")
        return mock

    @pytest.fixture
    def clock(self) -> list[float]:
        """Current time in seconds."""
        return [0.0]

    @pytest.fixture
    def host(self, tmp_path: Path, completion: MagicMock, clock: list[float]) -> ConsoleHost:
        """Create host around an engine parked at KSEA."""
        settings = ATCSettings(_settings_path=tmp_path / "settings.json")
        engine = ATCSessionEngine(
            directory=AirportDirectory([Airport("KSEA", 47.449, -122.309)]),
            telemetry=StaticTelemetryProvider(
                AircraftState(47.449, -122.309, 433.0, 5.0, True, 160.0, 0.0)
            ),
            completion=completion,
            notifier=MagicMock(spec=INotificationSink),
            settings=settings,
        )
        return ConsoleHost(engine, lambda line: None, settings=settings, clock=lambda: clock[0])

    def run_lines(self, host: ConsoleHost, lines: list[str]) -> None:
        """Feed lines through the host loop."""
        inputs = iter(lines)

        def read(prompt: str) -> str:
            try:
                return next(inputs)
            except StopIteration:
                raise EOFError from None

        host.run(read)

    def test_switch_then_message(self, host: ConsoleHost) -> None:
        """Test a requested position handles the pilot's next message."""
        self.run_lines(host, ["/tune KSEA", "switch to tower", "request takeoff runway 16L"])

        session = host.engine.active_session
        assert session is not None
        assert session.effective_position == ATCPosition.TOWER
        assert [turn.position for turn in session.history] == [
            ATCPosition.TOWER,
            ATCPosition.TOWER,
        ]
        assert session.history[0].text == "request takeoff runway 16L"

    def test_refresh_after_interval(self, host: ConsoleHost, clock: list[float]) -> None:
        """Test the scheduled refresh returns to the automatic position."""
        self.run_lines(host, ["/tune KSEA", "switch to tower"])
        assert host.engine.effective_position == ATCPosition.TOWER

        clock[0] += host.settings.auto_position_update_interval
        host.run_timers()

        assert host.engine.effective_position == ATCPosition.GROUND
