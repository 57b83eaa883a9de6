"""HTTP text-completion provider.

Talks to an Ollama-compatible ``/api/generate`` endpoint:

    POST {base_url}/api/generate
    {"model": "...", "prompt": "...", "stream": false, "options": {...}}
    -> {"response": "..."}

Failures are reported as typed results, never retried.

Typical usage:
    provider = HTTPCompletionProvider("http://localhost:11434", model="llama3.1:8b")
    result = provider.complete(prompt)
    if result.ok:
        print(result.text)
"""

from typing import Any

import requests

from geoatc.core.logging_system import get_logger
from geoatc.services.atc.providers.base import (
    CompletionResult,
    ICompletionProvider,
    ServiceErrorKind,
)

logger = get_logger(__name__)

DEFAULT_BASE_URL = "http://localhost:11434"
DEFAULT_MODEL = "llama3.1:8b"


class HTTPCompletionProvider(ICompletionProvider):
    """Completion provider backed by an HTTP model server."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        model: str = DEFAULT_MODEL,
        timeout: float = 30.0,
        temperature: float = 0.7,
        max_tokens: int = 200,
        session: requests.Session | None = None,
    ) -> None:
        """Initialize provider.

        Args:
            base_url: Server base URL (empty disables the provider).
            model: Model name sent with each request.
            timeout: Request timeout in seconds.
            temperature: Sampling temperature.
            max_tokens: Maximum tokens to generate.
            session: Optional requests session (for connection reuse/tests).
        """
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout
        self.temperature = temperature
        self.max_tokens = max_tokens
        self._session = session or requests.Session()

    @property
    def endpoint(self) -> str:
        """Get the generate endpoint URL."""
        return f"{self.base_url}/api/generate"

    def is_available(self) -> bool:
        """Check if a server is configured."""
        return bool(self.base_url)

    def _build_payload(self, prompt: str) -> dict[str, Any]:
        return {
            "model": self.model,
            "prompt": prompt,
            "stream": False,
            "options": {
                "temperature": self.temperature,
                "num_predict": self.max_tokens,
            },
        }

    def complete(self, prompt: str) -> CompletionResult:
        """Send a prompt and return the reply.

        Args:
            prompt: Full prompt text.

        Returns:
            CompletionResult with the stripped reply or a typed failure.
        """
        if not self.is_available():
            return CompletionResult.failure(
                ServiceErrorKind.UNAVAILABLE, "No completion server configured"
            )

        try:
            response = self._session.post(
                self.endpoint, json=self._build_payload(prompt), timeout=self.timeout
            )
            response.raise_for_status()
            data = response.json()
        except requests.Timeout:
            logger.warning("Completion request timed out after %.1fs", self.timeout)
            return CompletionResult.failure(ServiceErrorKind.TIMEOUT, "Request timed out")
        except requests.RequestException as e:
            logger.warning("Completion request failed: %s", e)
            return CompletionResult.failure(ServiceErrorKind.SERVICE_FAILURE, str(e))
        except ValueError as e:
            logger.warning("Completion response is not JSON: %s", e)
            return CompletionResult.failure(ServiceErrorKind.SERVICE_FAILURE, "Invalid JSON")

        text = data.get("response") if isinstance(data, dict) else None
        if not isinstance(text, str) or not text.strip():
            logger.warning("Completion response has no text: %s", data)
            return CompletionResult.failure(ServiceErrorKind.SERVICE_FAILURE, "Empty response")

        return CompletionResult.success(text.strip())

    @property
    def name(self) -> str:
        """Get provider name."""
        return f"HTTPCompletion({self.model}@{self.base_url})"
