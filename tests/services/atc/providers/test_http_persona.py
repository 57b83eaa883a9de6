"""Tests for the randomuser.me persona provider."""

from datetime import date
from unittest.mock import MagicMock

import pytest
import requests

from geoatc.services.atc.position_selector import ATCPosition
from geoatc.services.atc.providers.base import ServiceErrorKind
from geoatc.services.atc.providers.http_persona import (
    RandomUserPersonaProvider,
    persona_from_randomuser,
    persona_seed,
)

TODAY = date(2026, 10, 17)

RECORD = {
    "name": {"title": "Mr", "first": "Liam", "last": "Walker"},
    "location": {"city": "Perth", "country": "Australia"},
    "nat": "AU",
    "picture": {"thumbnail": "https://randomuser.me/api/portraits/thumb/men/1.jpg"},
}


class TestPersonaHelpers:
    """Tests for seed and record conversion."""

    def test_seed(self) -> None:
        """Test seed combines airport, position and date."""
        assert persona_seed("KSEA", ATCPosition.GROUND, TODAY) == "KSEA-ground-2026-10-17"

    def test_from_record(self) -> None:
        """Test conversion of a full record."""
        persona = persona_from_randomuser(RECORD)
        assert persona is not None
        assert persona.full_name == "Liam Walker"
        assert persona.city == "Perth"
        assert persona.locale == "AU"
        assert persona.picture_url.endswith("1.jpg")

    def test_record_with_null_fields(self) -> None:
        """Test JSON nulls become empty strings."""
        record = {
            "name": {"first": "Liam", "last": None},
            "location": {"city": None, "country": None},
            "nat": None,
            "picture": {"thumbnail": None},
        }

        persona = persona_from_randomuser(record)

        assert persona is not None
        assert persona.full_name == "Liam"
        assert persona.last_name == ""
        assert persona.city == ""
        assert persona.country == ""
        assert persona.locale == ""
        assert persona.picture_url == ""

    def test_record_without_name(self) -> None:
        """Test records without a first name are rejected."""
        assert persona_from_randomuser({"location": {}}) is None


class TestRandomUserPersonaProvider:
    """Tests for RandomUserPersonaProvider."""

    @pytest.fixture
    def session(self) -> MagicMock:
        """Create a requests session stub."""
        return MagicMock(spec=requests.Session)

    @pytest.fixture
    def provider(self, session: MagicMock) -> RandomUserPersonaProvider:
        """Create provider using the stub session."""
        return RandomUserPersonaProvider(session=session, timeout=2.0)

    def test_success(self, provider: RandomUserPersonaProvider, session: MagicMock) -> None:
        """Test persona fetched with a deterministic seed."""
        session.get.return_value.json.return_value = {"results": [RECORD]}

        result = provider.fetch_persona("KSEA", ATCPosition.TOWER, TODAY)

        assert result.ok is True
        assert result.persona is not None
        assert result.persona.first_name == "Liam"
        _, kwargs = session.get.call_args
        assert kwargs["params"] == {
            "gender": "male",
            "nat": "us,ca,gb,au",
            "seed": "KSEA-tower-2026-10-17",
        }
        assert kwargs["timeout"] == 2.0

    def test_timeout(self, provider: RandomUserPersonaProvider, session: MagicMock) -> None:
        """Test timeout is reported."""
        session.get.side_effect = requests.Timeout()
        result = provider.fetch_persona("KSEA", ATCPosition.TOWER, TODAY)
        assert result.ok is False
        assert result.error == ServiceErrorKind.TIMEOUT

    def test_request_error(self, provider: RandomUserPersonaProvider, session: MagicMock) -> None:
        """Test network errors are SERVICE_FAILURE."""
        session.get.side_effect = requests.ConnectionError()
        result = provider.fetch_persona("KSEA", ATCPosition.TOWER, TODAY)
        assert result.error == ServiceErrorKind.SERVICE_FAILURE

    @pytest.mark.parametrize("payload", [{}, {"results": []}, {"results": ["x"]}, [1]])
    def test_empty_results(
        self, provider: RandomUserPersonaProvider, session: MagicMock, payload: object
    ) -> None:
        """Test responses without a usable record."""
        session.get.return_value.json.return_value = payload
        result = provider.fetch_persona("KSEA", ATCPosition.TOWER, TODAY)
        assert result.error == ServiceErrorKind.SERVICE_FAILURE
