"""In-process implementations of the host ports.

Used by the console host and as stand-ins when no richer host is wired in.
"""

from collections.abc import Callable

from geoatc.core.logging_system import get_logger
from geoatc.services.atc.providers.base import INotificationSink, ITelemetryProvider, Persona
from geoatc.telemetry.aircraft_state import AircraftInfo, AircraftState

logger = get_logger(__name__)


class StaticTelemetryProvider(ITelemetryProvider):
    """Telemetry source returning whatever state was last set."""

    def __init__(
        self, state: AircraftState | None = None, info: AircraftInfo | None = None
    ) -> None:
        """Initialize provider.

        Args:
            state: Initial snapshot (None means telemetry unavailable).
            info: Aircraft info (defaults if None).
        """
        self._state = state
        self._info = info or AircraftInfo()

    def set_state(self, state: AircraftState | None) -> None:
        """Replace the current snapshot."""
        self._state = state

    def set_info(self, info: AircraftInfo) -> None:
        """Replace aircraft info."""
        self._info = info

    def get_aircraft_state(self) -> AircraftState | None:
        """Get the current snapshot."""
        return self._state

    def get_aircraft_info(self) -> AircraftInfo:
        """Get aircraft info."""
        return self._info


class ConsoleNotificationSink(INotificationSink):
    """Writes notifications as text lines.

    Speech is rendered as a text line too; there is no audio output.
    """

    def __init__(self, write: Callable[[str], None] = print, speak_aloud: bool = False) -> None:
        """Initialize sink.

        Args:
            write: Line writer (defaults to print).
            speak_aloud: Whether speak() also writes the text.
        """
        self._write = write
        self._speak_aloud = speak_aloud

    def announce_pilot(self, title: str, text: str) -> None:
        """Write a pilot transmission."""
        self._write(f"[{title}] {text}")

    def announce_controller(self, title: str, text: str, persona: Persona | None = None) -> None:
        """Write a controller reply."""
        speaker = f" ({persona.full_name})" if persona else ""
        self._write(f"[{title}{speaker}] {text}")

    def speak(self, text: str, persona: Persona | None = None) -> None:
        """Write spoken text when enabled."""
        logger.debug("Speak: %s", text)
        if self._speak_aloud:
            self._write(f"(spoken) {text}")

    def show_info(self, message: str, title: str = "Information") -> None:
        """Write an informational message."""
        self._write(f"{title}: {message}")

    def show_error(self, message: str, title: str = "Error") -> None:
        """Write an error message."""
        self._write(f"{title}: {message}")


class LoggingNotificationSink(INotificationSink):
    """Sends every notification to the log. Default when the host has no UI."""

    def announce_pilot(self, title: str, text: str) -> None:
        """Log a pilot transmission."""
        logger.info("%s: %s", title, text)

    def announce_controller(self, title: str, text: str, persona: Persona | None = None) -> None:
        """Log a controller reply."""
        logger.info("%s: %s", title, text)

    def speak(self, text: str, persona: Persona | None = None) -> None:
        """Log spoken text."""
        logger.debug("Speak: %s", text)

    def show_info(self, message: str, title: str = "Information") -> None:
        """Log an informational message."""
        logger.info("%s: %s", title, message)

    def show_error(self, message: str, title: str = "Error") -> None:
        """Log an error message."""
        logger.warning("%s: %s", title, message)
