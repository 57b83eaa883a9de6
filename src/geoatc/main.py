"""GeoATC console host.

Drives the ATC session engine from a terminal. The aircraft is parked at
a fixed position given on the command line; lines typed at the prompt are
radio transmissions, lines starting with "/" are commands.

Typical usage:
    python -m geoatc.main --lat 47.449 --lon -122.309 --on-ground
    geoatc --airports data/airports/airports.json --altitude 2500 --lat 47.6 --lon -122.3
"""

import argparse
import sys
import time
from collections.abc import Callable, Sequence
from pathlib import Path

from geoatc.airports.directory import AirportDirectory
from geoatc.core.logging_system import get_logger, initialize_logging
from geoatc.services.atc.atc_engine import ATCSessionEngine
from geoatc.services.atc.providers.http_completion import HTTPCompletionProvider
from geoatc.services.atc.providers.http_persona import RandomUserPersonaProvider
from geoatc.services.atc.providers.local import ConsoleNotificationSink, StaticTelemetryProvider
from geoatc.services.atc.switch_detector import SwitchDetector
from geoatc.settings.atc_settings import ATCSettings
from geoatc.telemetry.aircraft_state import AircraftInfo, AircraftState
from geoatc.version import get_version

logger = get_logger(__name__)

DEFAULT_AIRPORTS_PATH = Path("data/airports/airports.json")
LOGGING_CONFIG_PATH = Path("config/logging.yaml")
DEFAULT_SWITCH_RULES = Path("config/switch_rules.yaml")

HELP_TEXT = """Commands:
  /tune CODE       tune the radio to an airport
  /position NAME   auto, ground, tower, approach or center
  /nearest         show the nearest airport
  /voice           speak a transmission
  /help            show this help
  /quit            exit
Anything else is sent to ATC."""


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments.

    Args:
        argv: Arguments (sys.argv[1:] if None).

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(description="GeoATC - conversational air traffic control")

    parser.add_argument(
        "--airports",
        type=Path,
        default=DEFAULT_AIRPORTS_PATH,
        help="Airport directory JSON file",
    )
    parser.add_argument("--lat", type=float, default=47.449, help="Aircraft latitude")
    parser.add_argument("--lon", type=float, default=-122.309, help="Aircraft longitude")
    parser.add_argument(
        "--altitude", type=float, default=433.0, help="Aircraft altitude in feet MSL"
    )
    parser.add_argument(
        "--ground-elevation",
        type=float,
        default=None,
        help="Terrain elevation under the aircraft in feet (defaults to altitude - 50)",
    )
    parser.add_argument("--on-ground", action="store_true", help="Gear in contact with the ground")
    parser.add_argument("--heading", type=float, default=0.0, help="Heading in degrees")
    parser.add_argument("--airspeed", type=float, default=0.0, help="Airspeed in knots")
    parser.add_argument("--callsign", type=str, default=None, help="Aircraft callsign")
    parser.add_argument("--aircraft-type", type=str, default=None, help="Aircraft type name")
    parser.add_argument(
        "--settings", type=Path, default=None, help="Settings file (~/.geoatc/settings.json)"
    )
    parser.add_argument(
        "--offline-personas",
        action="store_true",
        help="Use local controller names instead of the persona service",
    )
    parser.add_argument("--log-level", type=str, default=None, help="Log level override")
    parser.add_argument("--version", action="version", version=f"%(prog)s {get_version()}")

    return parser.parse_args(argv)


def build_aircraft_state(args: argparse.Namespace) -> AircraftState:
    """Build the parked aircraft snapshot from arguments."""
    ground_elevation = args.ground_elevation
    if ground_elevation is None:
        ground_elevation = args.altitude - 50.0
    return AircraftState.from_sim_values(
        latitude=args.lat,
        longitude=args.lon,
        altitude_ft=args.altitude,
        ground_elevation_ft=ground_elevation,
        ground_contact=args.on_ground,
        heading_deg=args.heading,
        airspeed_kt=args.airspeed,
    )


def build_engine(
    args: argparse.Namespace,
    settings: ATCSettings,
    write: Callable[[str], None] = print,
) -> ATCSessionEngine:
    """Wire the engine with HTTP providers and a console sink.

    Args:
        args: Parsed arguments.
        settings: Loaded settings.
        write: Line writer for notifications.

    Returns:
        Ready engine.
    """
    directory = AirportDirectory()
    if not directory.load(args.airports):
        logger.warning("No airports loaded from %s", args.airports)

    info = AircraftInfo()
    if args.callsign or args.aircraft_type:
        info = AircraftInfo(
            callsign=args.callsign or info.callsign,
            aircraft_type=args.aircraft_type or info.aircraft_type,
        )
    telemetry = StaticTelemetryProvider(build_aircraft_state(args), info)

    completion = HTTPCompletionProvider(
        base_url=settings.completion_url,
        model=settings.completion_model,
        timeout=settings.atc_response_timeout,
        temperature=settings.completion_temperature,
    )

    persona_provider = None
    if settings.persona_url and not args.offline_personas:
        persona_provider = RandomUserPersonaProvider(
            url=settings.persona_url,
            nationalities=settings.persona_nationalities,
            timeout=settings.persona_timeout,
        )

    return ATCSessionEngine(
        directory=directory,
        telemetry=telemetry,
        completion=completion,
        notifier=ConsoleNotificationSink(write),
        persona_provider=persona_provider,
        settings=settings,
        switch_detector=SwitchDetector.from_yaml(DEFAULT_SWITCH_RULES),
    )


class ConsoleHost:
    """Read-eval loop around the engine.

    Stands in for the engine's timers: nearest-airport polling and
    automatic position refresh run between input lines, each at most once
    per its settings interval.
    """

    def __init__(
        self,
        engine: ATCSessionEngine,
        write: Callable[[str], None] = print,
        settings: ATCSettings | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize host.

        Args:
            engine: Engine to drive.
            write: Line writer.
            settings: Polling intervals (defaults if None).
            clock: Monotonic time source in seconds.
        """
        self.engine = engine
        self._write = write
        self.settings = settings or ATCSettings()
        self._clock = clock
        self._last_poll: float | None = None
        self._last_refresh: float | None = None

    def run_timers(self) -> None:
        """Poll the nearest airport and refresh the position when due."""
        now = self._clock()

        if (
            self._last_poll is None
            or now - self._last_poll >= self.settings.nearest_airport_update_interval
        ):
            self._last_poll = now
            self.engine.poll_nearest_airport()

        if (
            self._last_refresh is None
            or now - self._last_refresh >= self.settings.auto_position_update_interval
        ):
            self._last_refresh = now
            self.engine.refresh_position()

    def handle_line(self, line: str) -> bool:
        """Handle one input line.

        Args:
            line: Command or transmission.

        Returns:
            False when the host should exit.
        """
        line = line.strip()
        if not line:
            return True

        if not line.startswith("/"):
            self.engine.process_pilot_message(line)
            return True

        command, _, argument = line[1:].partition(" ")
        command = command.lower()
        argument = argument.strip()

        if command in ("quit", "exit"):
            return False
        if command == "tune":
            self.engine.tune_in(argument or self.engine.suggest_frequency())
        elif command == "position":
            self.engine.set_position(argument)
        elif command == "nearest":
            code = self.engine.suggest_frequency()
            self._write(f"Nearest airport: {code}" if code else "No airport in range")
        elif command == "voice":
            self.engine.start_voice_input()
        elif command == "help":
            self._write(HELP_TEXT)
        else:
            self._write(f"Unknown command: /{command}")
        return True

    def run(self, read: Callable[[str], str] = input) -> None:
        """Read lines until /quit or end of input."""
        while True:
            self.run_timers()
            try:
                line = read("pilot> ")
            except EOFError:
                break
            if not self.handle_line(line):
                break


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point.

    Returns:
        Exit code (0 for success).
    """
    args = parse_args(argv)
    initialize_logging(LOGGING_CONFIG_PATH, level=args.log_level)

    settings = ATCSettings()
    settings.load(args.settings)

    try:
        host = ConsoleHost(build_engine(args, settings), settings=settings)
        print(HELP_TEXT)
        host.run()
        return 0
    except KeyboardInterrupt:
        return 0
    except Exception as e:  # pylint: disable=broad-exception-caught
        logger.exception("Fatal error: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
