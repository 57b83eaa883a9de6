"""Controller persona generator backed by the randomuser.me API.

The request seed is ``{airport}-{position}-{YYYY-MM-DD}`` so the same
controller answers at a given airport/position for a whole day.
"""

from datetime import date
from typing import Any

import requests

from geoatc.core.logging_system import get_logger
from geoatc.services.atc.position_selector import ATCPosition
from geoatc.services.atc.providers.base import (
    IPersonaProvider,
    Persona,
    PersonaResult,
    ServiceErrorKind,
)

logger = get_logger(__name__)

DEFAULT_PERSONA_URL = "https://randomuser.me/api/"
DEFAULT_NATIONALITIES = "us,ca,gb,au"


def persona_seed(airport_code: str, position: ATCPosition, on_date: date) -> str:
    """Build the deterministic seed for a persona request."""
    return f"{airport_code}-{position.value}-{on_date.isoformat()}"


def persona_from_randomuser(record: dict[str, Any]) -> Persona | None:
    """Convert one randomuser.me result record.

    Args:
        record: Entry from the ``results`` array.

    Returns:
        Persona, or None if the record has no first name.
    """
    name = record.get("name") or {}
    first = name.get("first")
    if not first:
        return None

    location = record.get("location") or {}
    picture = record.get("picture") or {}
    return Persona(
        first_name=first,
        last_name=name.get("last") or "",
        city=location.get("city") or "",
        country=location.get("country") or "",
        locale=record.get("nat") or "",
        picture_url=picture.get("thumbnail") or "",
    )


class RandomUserPersonaProvider(IPersonaProvider):
    """Fetches controller personas over HTTP."""

    def __init__(
        self,
        url: str = DEFAULT_PERSONA_URL,
        nationalities: str = DEFAULT_NATIONALITIES,
        timeout: float = 5.0,
        session: requests.Session | None = None,
    ) -> None:
        """Initialize provider.

        Args:
            url: API endpoint.
            nationalities: Comma-separated nationality filter.
            timeout: Request timeout in seconds.
            session: Optional requests session.
        """
        self.url = url
        self.nationalities = nationalities
        self.timeout = timeout
        self._session = session or requests.Session()

    def fetch_persona(self, airport_code: str, position: ATCPosition, on_date: date) -> PersonaResult:
        """Fetch a persona for a controller position.

        Args:
            airport_code: Tuned airport code.
            position: Controller position.
            on_date: Date used in the seed.

        Returns:
            PersonaResult with the persona or a typed failure.
        """
        params = {
            "gender": "male",
            "nat": self.nationalities,
            "seed": persona_seed(airport_code, position, on_date),
        }

        try:
            response = self._session.get(self.url, params=params, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.Timeout:
            return PersonaResult.failure(ServiceErrorKind.TIMEOUT, "Request timed out")
        except requests.RequestException as e:
            return PersonaResult.failure(ServiceErrorKind.SERVICE_FAILURE, str(e))
        except ValueError:
            return PersonaResult.failure(ServiceErrorKind.SERVICE_FAILURE, "Invalid JSON")

        results = data.get("results") if isinstance(data, dict) else None
        persona = None
        if isinstance(results, list) and results and isinstance(results[0], dict):
            persona = persona_from_randomuser(results[0])
        if persona is None:
            return PersonaResult.failure(ServiceErrorKind.SERVICE_FAILURE, "No persona in response")

        logger.debug("Fetched %s controller %s for %s", position.value, persona.full_name, airport_code)
        return PersonaResult.success(persona)

    @property
    def name(self) -> str:
        """Get provider name."""
        return f"RandomUser({self.url})"
