"""ATC session engine.

Ties the pieces together for one pilot: the tuned airport and its
session, automatic/manual position selection, conversational position
switches, prompt assembly, the completion call and the notifications
shown to the pilot.

The engine defines no timers. A host calls poll_nearest_airport() and
refresh_position() on its own schedule (see ATCSettings intervals) and
process_pilot_message() for every transmission.

Typical usage:
    engine = ATCSessionEngine(directory, telemetry, completion, notifier)
    engine.tune_in("KSEA")
    exchange = engine.process_pilot_message("request taxi to runway 16L")
    if exchange.ok:
        print(exchange.reply)
"""

import random
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date
from enum import Enum

from geoatc.airports.directory import Airport, AirportDirectory, normalize_code
from geoatc.core.logging_system import get_logger
from geoatc.navigation.geo_math import distance_nm
from geoatc.services.atc.conversation import ATCSession, ConversationContext, SessionStore
from geoatc.services.atc.personas import PersonaCache, utc_today
from geoatc.services.atc.position_selector import AUTO_DISPLAY_NAME, ATCPosition
from geoatc.services.atc.prompt_builder import fallback_response
from geoatc.services.atc.providers.base import (
    ICompletionProvider,
    INotificationSink,
    IPersonaProvider,
    ISpeechInputProvider,
    ITelemetryProvider,
    Persona,
    ServiceErrorKind,
)
from geoatc.services.atc.providers.local import LoggingNotificationSink
from geoatc.services.atc.switch_detector import SwitchDetector
from geoatc.settings.atc_settings import ATCSettings, get_atc_settings

logger = get_logger(__name__)

MSG_EMPTY_CODE = "Please enter an airport code"
MSG_NOT_TUNED = "No ATC frequency tuned. Please tune to an airport first."
MSG_TUNE_FIRST = "Please tune to an airport first!"
MSG_INVALID_POSITION = "Invalid position. Please select from the list."
MSG_COMPLETION_FAILED = "Failed to get ATC response. Please try again."
MSG_SPEECH_UNSUPPORTED = "Speech recognition not supported. Use text input instead."
MSG_NO_SPEECH = "No speech detected. Please try again."

TITLE_FREQUENCY_SET = "Frequency Set"
TITLE_POSITION_CHANGED = "Position Changed"
TITLE_NEARBY_AIRPORT = "Nearby Airport"


class ExchangeStatus(Enum):
    """What happened to a pilot transmission."""

    NOT_TUNED = "not_tuned"  # No airport tuned, nothing sent
    EMPTY = "empty"  # Blank message ignored
    SWITCHED = "switched"  # Position switch only, no completion call
    REPLIED = "replied"  # Controller reply received and recorded
    FALLBACK = "fallback"  # Completion failed, stock reply shown


@dataclass(frozen=True)
class ATCExchange:
    """Outcome of one pilot transmission.

    Attributes:
        status: What happened.
        airport_code: Tuned airport, None when not tuned.
        position: Effective position that handled the message.
        pilot_text: Message sent for completion (after switch stripping).
        reply: Controller reply, or the stock reply on failure.
        persona: Controller persona that replied.
        error: Completion error kind on FALLBACK.
        handoff: Position the controller handed the pilot off to, if any.
    """

    status: ExchangeStatus
    airport_code: str | None = None
    position: ATCPosition | None = None
    pilot_text: str = ""
    reply: str = ""
    persona: Persona | None = None
    error: ServiceErrorKind | None = None
    handoff: ATCPosition | None = None

    @property
    def ok(self) -> bool:
        """Check if a real controller reply was received."""
        return self.status == ExchangeStatus.REPLIED


class ATCSessionEngine:
    """Conversational ATC for a single aircraft."""

    def __init__(
        self,
        directory: AirportDirectory,
        telemetry: ITelemetryProvider,
        completion: ICompletionProvider,
        notifier: INotificationSink | None = None,
        persona_provider: IPersonaProvider | None = None,
        speech_input: ISpeechInputProvider | None = None,
        settings: ATCSettings | None = None,
        switch_detector: SwitchDetector | None = None,
        rng: random.Random | None = None,
        today: Callable[[], date] = utc_today,
    ) -> None:
        """Initialize engine.

        Args:
            directory: Airport directory (read-only).
            telemetry: Aircraft state source.
            completion: Text-completion service for controller replies.
            notifier: Host output (logs only if None).
            persona_provider: Controller persona generator (local names if None).
            speech_input: Optional speech-to-text capture.
            settings: Engine settings (global settings if None).
            switch_detector: Position switch matcher (default rules if None).
            rng: Random source for stock replies and fallback names.
            today: Date source for persona seeds.
        """
        self.directory = directory
        self.telemetry = telemetry
        self.completion = completion
        self.notifier = notifier or LoggingNotificationSink()
        self.speech_input = speech_input
        self.settings = settings or get_atc_settings()
        self.switch_detector = switch_detector or SwitchDetector()
        self._rng = rng

        self.persona_cache = PersonaCache(persona_provider, today=today, rng=rng)
        self.context = ConversationContext(
            self.persona_cache,
            prompt_history=self.settings.prompt_history_turns,
            ground_max_agl_ft=self.settings.ground_max_agl_ft,
            vicinity_radius_nm=self.settings.vicinity_radius_nm,
        )
        self.sessions = SessionStore(self._create_session)
        # Warmed sessions for airports announced as nearby but never tuned
        self._nearby_sessions: dict[str, ATCSession] = {}
        self._nearest_code: str | None = None

    def _create_session(self, airport_code: str) -> ATCSession:
        session = self._nearby_sessions.pop(airport_code, None)
        if session is None:
            session = ATCSession(
                airport_code,
                max_history=self.settings.max_history_entries,
                thresholds=self.settings.thresholds(),
            )

        def on_position_change(old: ATCPosition, new: ATCPosition) -> None:
            logger.info("%s position changed: %s -> %s", airport_code, old.label, new.label)

        session.selector.add_change_listener(on_position_change)
        return session

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def active_session(self) -> ATCSession | None:
        """Get the tuned session, None before the first tune-in."""
        return self.sessions.active

    @property
    def tuned_airport(self) -> Airport | None:
        """Get the tuned airport."""
        code = self.sessions.active_code
        return self.directory.lookup(code) if code else None

    @property
    def effective_position(self) -> ATCPosition | None:
        """Get the position talking to the pilot, None when not tuned."""
        session = self.active_session
        return session.effective_position if session is not None else None

    @property
    def nearest_airport_code(self) -> str | None:
        """Get the code last announced as nearby."""
        return self._nearest_code

    def position_display_name(self) -> str:
        """Get the selected position for a menu (auto or manual)."""
        session = self.active_session
        if session is None or session.override is None:
            return AUTO_DISPLAY_NAME
        return session.override.display_name

    def current_controller(self) -> Persona | None:
        """Get the persona of the controller currently on frequency."""
        session = self.active_session
        if session is None:
            return None
        return self.context.get_or_create_persona(session, session.effective_position)

    # ------------------------------------------------------------------
    # Frequency
    # ------------------------------------------------------------------

    def suggest_frequency(self) -> str:
        """Suggest the nearest airport code for tuning.

        Returns:
            Code of the nearest airport in range, or "" if none/no telemetry.
        """
        state = self.telemetry.get_aircraft_state()
        if state is None:
            return ""

        found = self.directory.nearest(
            state.latitude, state.longitude, self.settings.nearest_airport_max_radius_nm
        )
        return found[0].icao if found else ""

    def tune_in(self, airport_code: str) -> ATCSession | None:
        """Tune the radio to an airport.

        Creates the airport's session on first tune-in, or resumes it.

        Args:
            airport_code: Airport code (trimmed and upper-cased).

        Returns:
            The active session, or None if the code is empty or unknown.
        """
        code = normalize_code(airport_code or "")
        if not code:
            self.notifier.show_error(MSG_EMPTY_CODE)
            return None

        airport = self.directory.lookup(code)
        if airport is None:
            logger.info("Tune-in rejected, unknown airport %s", code)
            self.notifier.show_error(f'Airport "{code}" not found')
            return None

        session, created = self.sessions.tune(code)
        self.persona_cache.warm(session)
        self._recompute(session, airport)

        logger.info(
            "Tuned to %s (%s session), position %s",
            code,
            "new" if created else "existing",
            session.effective_position.label,
        )
        self.notifier.show_info(
            f"Radio tuned to {airport.display_name()}. "
            f"Position: {session.effective_position.label}",
            TITLE_FREQUENCY_SET,
        )
        return session

    def poll_nearest_airport(self) -> Airport | None:
        """Announce a new nearest airport.

        Intended to be called by a host timer. Only a change of the nearest
        airport is announced; its controllers are prepared in advance.

        Returns:
            The newly announced airport, or None if nothing changed.
        """
        state = self.telemetry.get_aircraft_state()
        if state is None:
            return None

        found = self.directory.nearest(
            state.latitude, state.longitude, self.settings.nearest_airport_max_radius_nm
        )
        if found is None:
            return None

        airport, distance = found
        if airport.icao == self._nearest_code:
            return None

        self._nearest_code = airport.icao
        logger.info("Nearest airport is now %s (%.1f NM)", airport.icao, distance)
        self.notifier.show_info(
            f"Now in range of {airport.display_name()}. Tune to {airport.icao} to communicate.",
            TITLE_NEARBY_AIRPORT,
        )
        self.persona_cache.warm(self._prepare_session(airport.icao))
        return airport

    def _prepare_session(self, airport_code: str) -> ATCSession:
        session = self.sessions.get(airport_code)
        if session is not None:
            return session

        session = self._nearby_sessions.get(airport_code)
        if session is None:
            session = ATCSession(
                airport_code,
                max_history=self.settings.max_history_entries,
                thresholds=self.settings.thresholds(),
            )
            self._nearby_sessions[airport_code] = session
        return session

    # ------------------------------------------------------------------
    # Position
    # ------------------------------------------------------------------

    def _recompute(self, session: ATCSession, airport: Airport | None = None) -> ATCPosition:
        if not session.selector.is_auto:
            return session.effective_position

        state = self.telemetry.get_aircraft_state()
        if state is None:
            logger.warning("Telemetry unavailable, keeping %s", session.effective_position.label)
            return session.effective_position

        airport = airport or self.directory.lookup(session.airport_code)
        if airport is None:
            return session.effective_position

        distance = distance_nm(state.latitude, state.longitude, airport.latitude, airport.longitude)
        return session.selector.recompute(state, distance)

    def refresh_position(self) -> ATCPosition | None:
        """Re-derive the position from telemetry.

        Intended to be called by a host timer. Does nothing while the
        position is pinned manually.

        Returns:
            The effective position, None when not tuned.
        """
        session = self.active_session
        if session is None:
            return None
        return self._recompute(session)

    def set_position(self, name: str) -> ATCPosition | None:
        """Pin a controller position or return to automatic selection.

        Args:
            name: "auto", "ground", "tower", "approach" or "center".

        Returns:
            The effective position, None if not tuned or the name is invalid.
        """
        session = self.active_session
        if session is None:
            self.notifier.show_error(MSG_TUNE_FIRST)
            return None

        try:
            session.selector.set_override(name)
        except ValueError:
            logger.info("Rejected position %r", name)
            self.notifier.show_error(MSG_INVALID_POSITION)
            return None

        position = self._recompute(session)
        self.notifier.show_info(f"ATC position set to: {self.position_display_name()}")
        return position

    # ------------------------------------------------------------------
    # Conversation
    # ------------------------------------------------------------------

    def process_pilot_message(self, text: str) -> ATCExchange:
        """Handle one pilot transmission.

        A switch phrase moves the session to the requested position first.
        Whatever message remains is sent for completion; the reply is
        recorded and announced, and a handoff in it switches the position.
        On completion failure a stock reply is shown and no controller turn
        is recorded.

        Args:
            text: Pilot transmission.

        Returns:
            ATCExchange describing the outcome.
        """
        session = self.active_session
        if session is None:
            self.notifier.show_error(MSG_NOT_TUNED)
            return ATCExchange(ExchangeStatus.NOT_TUNED)

        message = (text or "").strip()
        if not message:
            return ATCExchange(ExchangeStatus.EMPTY, airport_code=session.airport_code)

        detection = self.switch_detector.analyze_pilot_text(message)
        if detection is not None:
            session.selector.apply_switch(detection.position)
            label = detection.position.label
            if not detection.has_message:
                self.notifier.show_info(
                    f"Now connected to {label} control. What is your message?",
                    TITLE_POSITION_CHANGED,
                )
                return ATCExchange(
                    ExchangeStatus.SWITCHED,
                    airport_code=session.airport_code,
                    position=detection.position,
                )
            self.notifier.show_info(f"Switched to {label} control", TITLE_POSITION_CHANGED)
            message = detection.residual_text

        return self._converse(session, message)

    def _converse(self, session: ATCSession, message: str) -> ATCExchange:
        state = self.telemetry.get_aircraft_state()
        if state is None:
            logger.warning("Telemetry unavailable for %s prompt", session.airport_code)
        info = self.telemetry.get_aircraft_info()
        airport = self.directory.lookup(session.airport_code)
        position = session.effective_position

        prompt = self.context.build_prompt(session, message, state, airport, info)
        self.context.record_pilot_turn(session, message)
        self.notifier.announce_pilot(info.title, message)

        persona = self.context.get_or_create_persona(session, position)
        title = f"{session.airport_code} {position.label}"

        if self.completion.is_available():
            result = self.completion.complete(prompt)
            error, detail = result.error, result.message
        else:
            result = None
            error, detail = ServiceErrorKind.UNAVAILABLE, f"{self.completion.name} not available"

        if result is None or not result.ok:
            logger.warning(
                "No ATC reply from %s (%s: %s)",
                self.completion.name,
                error.value if error else "unknown",
                detail,
            )
            reply = fallback_response(self._rng)
            self.notifier.show_error(MSG_COMPLETION_FAILED)
            self.notifier.announce_controller(title, reply, persona)
            self.notifier.speak(reply, persona)
            return ATCExchange(
                ExchangeStatus.FALLBACK,
                airport_code=session.airport_code,
                position=position,
                pilot_text=message,
                reply=reply,
                persona=persona,
                error=error,
            )

        reply = result.text
        self.context.record_controller_turn(session, reply)
        self.notifier.announce_controller(title, reply, persona)
        self.notifier.speak(reply, persona)

        handoff = self.switch_detector.detect_from_controller_text(reply)
        if handoff is not None:
            logger.info("Controller handed off to %s", handoff.label)
            session.selector.apply_switch(handoff)

        return ATCExchange(
            ExchangeStatus.REPLIED,
            airport_code=session.airport_code,
            position=position,
            pilot_text=message,
            reply=reply,
            persona=persona,
            handoff=handoff,
        )

    def start_voice_input(self) -> ATCExchange | None:
        """Capture a spoken transmission and process it.

        Returns:
            ATCExchange for the recognized text, None if speech input is
            unsupported or nothing was recognized.
        """
        if self.speech_input is None or not self.speech_input.is_available():
            self.notifier.show_error(MSG_SPEECH_UNSUPPORTED)
            return None

        text = self.speech_input.listen()
        if not text or not text.strip():
            self.notifier.show_error(MSG_NO_SPEECH)
            return None

        logger.debug("Recognized speech: %s", text)
        return self.process_pilot_message(text)
