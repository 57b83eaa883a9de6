"""Per-airport conversation state.

One :class:`ATCSession` exists per airport code the pilot has tuned. It is
created on first tune-in and lives as long as the engine; re-tuning the
same code picks up its history, position state and controller personas.

History is bounded: when a new turn exceeds the limit, the oldest turn is
dropped.
"""

from collections import deque
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

from geoatc.airports.directory import normalize_code
from geoatc.core.logging_system import get_logger
from geoatc.services.atc.position_selector import ATCPosition, PositionSelector, PositionThresholds
from geoatc.services.atc.prompt_builder import build_atc_prompt
from geoatc.services.atc.providers.base import Persona

if TYPE_CHECKING:
    from geoatc.airports.directory import Airport
    from geoatc.services.atc.personas import PersonaCache
    from geoatc.telemetry.aircraft_state import AircraftInfo, AircraftState

logger = get_logger(__name__)

DEFAULT_MAX_HISTORY = 20
DEFAULT_PROMPT_HISTORY = 4


class TurnRole(Enum):
    """Who transmitted a turn."""

    PILOT = "pilot"
    ATC = "atc"


@dataclass(frozen=True)
class Turn:
    """One recorded transmission.

    Attributes:
        role: Pilot or controller.
        text: Message text.
        position: Controller position active when the turn occurred.
        timestamp: UTC time the turn was recorded.
    """

    role: TurnRole
    text: str
    position: ATCPosition
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "role": self.role.value,
            "message": self.text,
            "position": self.position.value,
            "timestamp": self.timestamp.isoformat(),
        }


class ATCSession:
    """State bundle for one tuned airport.

    Attributes:
        airport_code: Tuned airport code.
        selector: Override mode and effective position.
        controllers: Persona per position, filled lazily.
    """

    def __init__(
        self,
        airport_code: str,
        max_history: int = DEFAULT_MAX_HISTORY,
        thresholds: PositionThresholds | None = None,
    ) -> None:
        """Initialize session.

        Args:
            airport_code: Airport code (normalized to upper case).
            max_history: Maximum number of turns kept.
            thresholds: Position selection limits.

        Raises:
            ValueError: If max_history is less than 1.
        """
        if max_history < 1:
            raise ValueError(f"max_history must be at least 1, got {max_history}")

        self.airport_code = normalize_code(airport_code)
        self.selector = PositionSelector(thresholds)
        self.controllers: dict[ATCPosition, Persona] = {}
        self._history: deque[Turn] = deque(maxlen=max_history)

    @property
    def max_history(self) -> int:
        """Get the history limit."""
        return self._history.maxlen or DEFAULT_MAX_HISTORY

    @property
    def effective_position(self) -> ATCPosition:
        """Get the position currently talking to the pilot."""
        return self.selector.effective_position

    @property
    def override(self) -> ATCPosition | None:
        """Get the manual override, None in auto mode."""
        return self.selector.override

    @property
    def history(self) -> list[Turn]:
        """Get recorded turns, oldest first."""
        return list(self._history)

    def append(self, turn: Turn) -> None:
        """Append a turn, dropping the oldest beyond the limit."""
        self._history.append(turn)

    def recent(self, count: int) -> list[Turn]:
        """Get the last ``count`` turns, oldest first."""
        if count <= 0:
            return []
        return list(self._history)[-count:]

    def __len__(self) -> int:
        return len(self._history)


class SessionStore:
    """Sessions keyed by airport code, with one active code at a time."""

    def __init__(self, session_factory: Callable[[str], ATCSession] = ATCSession) -> None:
        """Initialize store.

        Args:
            session_factory: Creates a session for a new airport code.
        """
        self._session_factory = session_factory
        self._sessions: dict[str, ATCSession] = {}
        self._active_code: str | None = None

    @property
    def active_code(self) -> str | None:
        """Get the tuned airport code, None before the first tune-in."""
        return self._active_code

    @property
    def active(self) -> ATCSession | None:
        """Get the tuned session."""
        if self._active_code is None:
            return None
        return self._sessions[self._active_code]

    def get(self, airport_code: str) -> ATCSession | None:
        """Get an existing session."""
        return self._sessions.get(normalize_code(airport_code))

    def tune(self, airport_code: str) -> tuple[ATCSession, bool]:
        """Make a code active, creating its session on first use.

        Args:
            airport_code: Airport code.

        Returns:
            (session, created) tuple.
        """
        code = normalize_code(airport_code)
        session = self._sessions.get(code)
        created = session is None
        if session is None:
            session = self._session_factory(code)
            self._sessions[code] = session
            logger.info("Created ATC session for %s", code)

        self._active_code = code
        return session, created

    def clear(self) -> None:
        """Drop all sessions (host reset)."""
        self._sessions.clear()
        self._active_code = None

    def __contains__(self, airport_code: object) -> bool:
        return isinstance(airport_code, str) and normalize_code(airport_code) in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

    def __iter__(self) -> Iterator[ATCSession]:
        return iter(self._sessions.values())


class ConversationContext:
    """Records turns and assembles prompts for a session."""

    def __init__(
        self,
        persona_cache: "PersonaCache",
        prompt_history: int = DEFAULT_PROMPT_HISTORY,
        ground_max_agl_ft: float = 50.0,
        vicinity_radius_nm: float = 10.0,
    ) -> None:
        """Initialize context manager.

        Args:
            persona_cache: Controller persona cache.
            prompt_history: Number of past turns included in prompts.
            ground_max_agl_ft: Height below which "on ground" is reported.
            vicinity_radius_nm: Distance below which no bearing is reported.
        """
        self.persona_cache = persona_cache
        self.prompt_history = prompt_history
        self.ground_max_agl_ft = ground_max_agl_ft
        self.vicinity_radius_nm = vicinity_radius_nm

    def _record(self, session: ATCSession, role: TurnRole, text: str) -> Turn:
        turn = Turn(role=role, text=text, position=session.effective_position)
        session.append(turn)
        logger.debug(
            "Recorded %s turn at %s (%s), history=%d",
            role.value,
            session.airport_code,
            turn.position.value,
            len(session),
        )
        return turn

    def record_pilot_turn(self, session: ATCSession, text: str) -> Turn:
        """Record a pilot transmission.

        Args:
            session: Session to record in.
            text: Pilot message.

        Returns:
            The recorded turn.
        """
        return self._record(session, TurnRole.PILOT, text)

    def record_controller_turn(self, session: ATCSession, text: str) -> Turn:
        """Record a controller reply.

        Args:
            session: Session to record in.
            text: Controller message.

        Returns:
            The recorded turn.
        """
        return self._record(session, TurnRole.ATC, text)

    def build_prompt(
        self,
        session: ATCSession,
        pilot_text: str,
        state: "AircraftState | None",
        airport: "Airport | None" = None,
        aircraft_info: "AircraftInfo | None" = None,
    ) -> str:
        """Assemble the completion prompt for a new pilot message.

        The new message itself is rendered after the history slice, so it
        should not be recorded before calling this.

        Args:
            session: Session being talked to.
            pilot_text: New pilot message.
            state: Aircraft snapshot, None if telemetry is unavailable.
            airport: Tuned airport (for distance and bearing).
            aircraft_info: Callsign/type information.

        Returns:
            Prompt text ending with the controller cue.
        """
        prompt = build_atc_prompt(
            airport_code=session.airport_code,
            position=session.effective_position,
            pilot_text=pilot_text,
            state=state,
            airport=airport,
            history=session.recent(self.prompt_history),
            aircraft_info=aircraft_info,
            ground_max_agl_ft=self.ground_max_agl_ft,
            vicinity_radius_nm=self.vicinity_radius_nm,
        )
        logger.debug("Built prompt for %s (%d chars)", session.airport_code, len(prompt))
        return prompt

    def get_or_create_persona(self, session: ATCSession, position: ATCPosition) -> Persona:
        """Get the controller persona for a position.

        Args:
            session: Session owning the persona cache.
            position: Controller position.

        Returns:
            Cached or newly created persona.
        """
        return self.persona_cache.get_or_create(session, position)
