"""ATC provider interfaces and implementations.

The engine reaches telemetry, the completion service, the persona
generator, speech input and notifications only through the ports in
``base``. HTTP implementations use requests; local ones run in-process.
"""

from geoatc.services.atc.providers.base import (
    CompletionResult,
    ICompletionProvider,
    INotificationSink,
    IPersonaProvider,
    ISpeechInputProvider,
    ITelemetryProvider,
    Persona,
    PersonaResult,
    ServiceErrorKind,
)
from geoatc.services.atc.providers.http_completion import HTTPCompletionProvider
from geoatc.services.atc.providers.http_persona import RandomUserPersonaProvider
from geoatc.services.atc.providers.local import (
    ConsoleNotificationSink,
    LoggingNotificationSink,
    StaticTelemetryProvider,
)

__all__ = [
    "CompletionResult",
    "ConsoleNotificationSink",
    "HTTPCompletionProvider",
    "ICompletionProvider",
    "INotificationSink",
    "IPersonaProvider",
    "ISpeechInputProvider",
    "ITelemetryProvider",
    "LoggingNotificationSink",
    "Persona",
    "PersonaResult",
    "RandomUserPersonaProvider",
    "ServiceErrorKind",
    "StaticTelemetryProvider",
]
