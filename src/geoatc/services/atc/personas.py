"""Controller persona cache.

Each session holds one persona per position, created on first request.
Personas come from the persona provider, seeded by airport, position and
UTC date; if the provider is missing or fails, a local name pool is used.
"""

import random
from collections.abc import Callable
from datetime import UTC, date, datetime
from typing import TYPE_CHECKING

from geoatc.core.logging_system import get_logger
from geoatc.services.atc.position_selector import ATCPosition
from geoatc.services.atc.providers.base import IPersonaProvider, Persona

if TYPE_CHECKING:
    from geoatc.services.atc.conversation import ATCSession

logger = get_logger(__name__)

FALLBACK_NAMES: dict[ATCPosition, tuple[str, ...]] = {
    ATCPosition.GROUND: ("John", "Mike", "David"),
    ATCPosition.TOWER: ("Robert", "James", "Thomas"),
    ATCPosition.APPROACH: ("William", "Charles", "Richard"),
    ATCPosition.CENTER: ("Michael", "Christopher", "Daniel"),
}


def utc_today() -> date:
    """Get the current UTC date."""
    return datetime.now(UTC).date()


def fallback_persona(position: ATCPosition, rng: random.Random | None = None) -> Persona:
    """Create a persona from the local name pool.

    Args:
        position: Controller position.
        rng: Random source (module-level random if None).

    Returns:
        Persona with a pooled first name.
    """
    names = FALLBACK_NAMES.get(position, FALLBACK_NAMES[ATCPosition.TOWER])
    return Persona(first_name=(rng or random).choice(names))


class PersonaCache:
    """Creates and caches controller personas per session."""

    def __init__(
        self,
        provider: IPersonaProvider | None = None,
        today: Callable[[], date] = utc_today,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize cache.

        Args:
            provider: Persona generator, None to always use the fallback pool.
            today: Date source for the persona seed.
            rng: Random source for fallback names.
        """
        self.provider = provider
        self._today = today
        self._rng = rng

    def get_or_create(self, session: "ATCSession", position: ATCPosition) -> Persona:
        """Get the persona for a position, creating it on first use.

        Args:
            session: Session owning the cache.
            position: Controller position.

        Returns:
            Persona (never fails).
        """
        persona = session.controllers.get(position)
        if persona is None:
            persona = self._create(session.airport_code, position)
            session.controllers[position] = persona
        return persona

    def warm(self, session: "ATCSession") -> None:
        """Create personas for every position not yet cached.

        Fetches run one after another on the calling thread, so a cold
        session can block for up to four provider timeouts. Positions
        already cached cost nothing.
        """
        for position in ATCPosition:
            self.get_or_create(session, position)

    def _create(self, airport_code: str, position: ATCPosition) -> Persona:
        if self.provider is None:
            return fallback_persona(position, self._rng)

        try:
            result = self.provider.fetch_persona(airport_code, position, self._today())
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.warning("Persona provider %s raised: %s", self.provider.name, e)
            return fallback_persona(position, self._rng)

        if result.ok and result.persona is not None:
            logger.info(
                "Loaded %s controller %s for %s",
                position.value,
                result.persona.full_name,
                airport_code,
            )
            return result.persona

        logger.warning(
            "Failed to load %s controller for %s (%s: %s), using fallback",
            position.value,
            airport_code,
            result.error.value if result.error else "unknown",
            result.message,
        )
        return fallback_persona(position, self._rng)
