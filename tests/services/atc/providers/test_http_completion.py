"""Tests for the HTTP completion provider."""

from unittest.mock import MagicMock

import pytest
import requests

from geoatc.services.atc.providers.base import ServiceErrorKind
from geoatc.services.atc.providers.http_completion import HTTPCompletionProvider


def make_response(payload: object = None, status_error: Exception | None = None) -> MagicMock:
    """Create a requests response stub."""
    response = MagicMock()
    response.json.return_value = payload
    if status_error is not None:
        response.raise_for_status.side_effect = status_error
    return response


class TestHTTPCompletionProvider:
    """Tests for HTTPCompletionProvider."""

    @pytest.fixture
    def session(self) -> MagicMock:
        """Create a requests session stub."""
        return MagicMock(spec=requests.Session)

    @pytest.fixture
    def provider(self, session: MagicMock) -> HTTPCompletionProvider:
        """Create provider using the stub session."""
        return HTTPCompletionProvider(
            "http://llm.local:11434/", model="atc-model", timeout=12.0, session=session
        )

    def test_success(self, provider: HTTPCompletionProvider, session: MagicMock) -> None:
        """Test a reply is returned stripped."""
        session.post.return_value = make_response({"response": "  Cleared to land.\n"})

        result = provider.complete("prompt text")

        assert result.ok is True
        assert result.text == "Cleared to land."

    def test_request_format(self, provider: HTTPCompletionProvider, session: MagicMock) -> None:
        """Test endpoint, payload and timeout."""
        session.post.return_value = make_response({"response": "Roger"})

        provider.complete("prompt text")

        args, kwargs = session.post.call_args
        assert args[0] == "http://llm.local:11434/api/generate"
        assert kwargs["json"]["model"] == "atc-model"
        assert kwargs["json"]["prompt"] == "prompt text"
        assert kwargs["json"]["stream"] is False
        assert kwargs["timeout"] == 12.0

    def test_timeout(self, provider: HTTPCompletionProvider, session: MagicMock) -> None:
        """Test timeouts are reported as TIMEOUT."""
        session.post.side_effect = requests.Timeout()

        result = provider.complete("prompt")

        assert result.ok is False
        assert result.error == ServiceErrorKind.TIMEOUT
        assert result.text == ""

    def test_connection_error(self, provider: HTTPCompletionProvider, session: MagicMock) -> None:
        """Test connection errors are SERVICE_FAILURE."""
        session.post.side_effect = requests.ConnectionError("refused")
        assert provider.complete("prompt").error == ServiceErrorKind.SERVICE_FAILURE

    def test_http_error(self, provider: HTTPCompletionProvider, session: MagicMock) -> None:
        """Test HTTP error status is SERVICE_FAILURE."""
        session.post.return_value = make_response(status_error=requests.HTTPError("500"))
        assert provider.complete("prompt").error == ServiceErrorKind.SERVICE_FAILURE

    def test_invalid_json(self, provider: HTTPCompletionProvider, session: MagicMock) -> None:
        """Test malformed bodies are SERVICE_FAILURE."""
        response = make_response()
        response.json.side_effect = ValueError("no json")
        session.post.return_value = response
        assert provider.complete("prompt").error == ServiceErrorKind.SERVICE_FAILURE

    @pytest.mark.parametrize("payload", [{}, {"response": "   "}, {"response": 42}, ["x"]])
    def test_empty_reply(
        self, provider: HTTPCompletionProvider, session: MagicMock, payload: object
    ) -> None:
        """Test replies without text are SERVICE_FAILURE."""
        session.post.return_value = make_response(payload)
        assert provider.complete("prompt").error == ServiceErrorKind.SERVICE_FAILURE

    def test_unconfigured(self, session: MagicMock) -> None:
        """Test an empty URL means unavailable, without a request."""
        provider = HTTPCompletionProvider("", session=session)

        assert provider.is_available() is False
        assert provider.complete("prompt").error == ServiceErrorKind.UNAVAILABLE
        session.post.assert_not_called()

    def test_name(self, provider: HTTPCompletionProvider) -> None:
        """Test provider name includes model and URL."""
        assert provider.name == "HTTPCompletion(atc-model@http://llm.local:11434)"
