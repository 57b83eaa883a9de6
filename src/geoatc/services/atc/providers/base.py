"""Abstract ports between the ATC engine and its host.

The engine talks to the outside world only through these interfaces:
telemetry, the text-completion service, the controller persona generator,
speech input, and notification/speech output. Any of them can be swapped
for a local, remote or test implementation.

Calls that can fail return a result object carrying either the payload or
a typed error. They do not raise for expected failures.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import TYPE_CHECKING, Any

from geoatc.telemetry.aircraft_state import AircraftInfo, AircraftState

if TYPE_CHECKING:
    from geoatc.services.atc.position_selector import ATCPosition


class ServiceErrorKind(Enum):
    """Why an external call produced no payload."""

    UNAVAILABLE = "unavailable"
    TIMEOUT = "timeout"
    SERVICE_FAILURE = "service_failure"


@dataclass(frozen=True)
class CompletionResult:
    """Outcome of a text-completion request.

    Attributes:
        text: Completion text (empty on failure).
        error: Error kind, None on success.
        message: Error detail for logging.
    """

    text: str = ""
    error: ServiceErrorKind | None = None
    message: str = ""

    @property
    def ok(self) -> bool:
        """Check if the request produced a reply."""
        return self.error is None

    @classmethod
    def success(cls, text: str) -> "CompletionResult":
        """Create a successful result."""
        return cls(text=text)

    @classmethod
    def failure(cls, error: ServiceErrorKind, message: str = "") -> "CompletionResult":
        """Create a failed result."""
        return cls(error=error, message=message)


@dataclass(frozen=True)
class Persona:
    """Controller identity shown alongside replies.

    Attributes:
        first_name: Given name.
        last_name: Family name.
        city: Home city.
        country: Country name or code.
        locale: Nationality/locale code (e.g., "US").
        picture_url: Thumbnail URL, may be empty.
    """

    first_name: str
    last_name: str = "Controller"
    city: str = "Control Center"
    country: str = "US"
    locale: str = "US"
    picture_url: str = ""

    @property
    def full_name(self) -> str:
        """Get "First Last"."""
        return f"{self.first_name} {self.last_name}".strip()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "first_name": self.first_name,
            "last_name": self.last_name,
            "city": self.city,
            "country": self.country,
            "locale": self.locale,
            "picture_url": self.picture_url,
        }


@dataclass(frozen=True)
class PersonaResult:
    """Outcome of a persona request.

    Attributes:
        persona: Generated persona, None on failure.
        error: Error kind, None on success.
        message: Error detail for logging.
    """

    persona: Persona | None = None
    error: ServiceErrorKind | None = None
    message: str = ""

    @property
    def ok(self) -> bool:
        """Check if a persona was produced."""
        return self.error is None and self.persona is not None

    @classmethod
    def success(cls, persona: Persona) -> "PersonaResult":
        """Create a successful result."""
        return cls(persona=persona)

    @classmethod
    def failure(cls, error: ServiceErrorKind, message: str = "") -> "PersonaResult":
        """Create a failed result."""
        return cls(error=error, message=message)


class ITelemetryProvider(ABC):
    """Source of aircraft snapshots."""

    @abstractmethod
    def get_aircraft_state(self) -> AircraftState | None:
        """Get a fresh aircraft snapshot.

        Returns:
            Current state, or None if telemetry is unavailable.
        """
        pass

    def get_aircraft_info(self) -> AircraftInfo:
        """Get callsign/type/pilot information.

        Returns:
            Aircraft info, defaults when the host has none.
        """
        return AircraftInfo()


class ICompletionProvider(ABC):
    """Text-completion service producing controller replies."""

    @abstractmethod
    def complete(self, prompt: str) -> CompletionResult:
        """Complete a prompt.

        Args:
            prompt: Full prompt text ending with the controller cue.

        Returns:
            CompletionResult with the reply or a typed failure.
        """
        pass

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the service is ready for use."""
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Get provider name for logging/display."""
        pass


class IPersonaProvider(ABC):
    """Generator of controller personas."""

    @abstractmethod
    def fetch_persona(
        self, airport_code: str, position: "ATCPosition", on_date: date
    ) -> PersonaResult:
        """Get a persona for a controller position.

        The same (airport, position, date) should give the same persona.

        Args:
            airport_code: Tuned airport code.
            position: Controller position.
            on_date: Calendar date used as part of the seed.

        Returns:
            PersonaResult with the persona or a typed failure.
        """
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Get provider name for logging/display."""
        pass


class ISpeechInputProvider(ABC):
    """Speech-to-text capture of a pilot transmission."""

    @abstractmethod
    def is_available(self) -> bool:
        """Check if speech recognition can be used on this host."""
        pass

    @abstractmethod
    def listen(self) -> str | None:
        """Capture one transmission.

        Returns:
            Transcribed text, or None if nothing was recognized.
        """
        pass


class INotificationSink(ABC):
    """Host output: on-screen notifications and speech synthesis.

    All methods are fire-and-forget from the engine's point of view.
    """

    @abstractmethod
    def announce_pilot(self, title: str, text: str) -> None:
        """Show a pilot transmission."""
        pass

    @abstractmethod
    def announce_controller(self, title: str, text: str, persona: Persona | None = None) -> None:
        """Show a controller reply."""
        pass

    @abstractmethod
    def speak(self, text: str, persona: Persona | None = None) -> None:
        """Read text aloud."""
        pass

    @abstractmethod
    def show_info(self, message: str, title: str = "Information") -> None:
        """Show an informational message."""
        pass

    @abstractmethod
    def show_error(self, message: str, title: str = "Error") -> None:
        """Show an error message."""
        pass
