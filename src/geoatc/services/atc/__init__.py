"""ATC session engine.

Provides controller position selection, conversation history, prompt
assembly and position switch detection for a single aircraft.
"""

from geoatc.services.atc.atc_engine import ATCExchange, ATCSessionEngine, ExchangeStatus
from geoatc.services.atc.conversation import (
    ATCSession,
    ConversationContext,
    SessionStore,
    Turn,
    TurnRole,
)
from geoatc.services.atc.personas import PersonaCache
from geoatc.services.atc.position_selector import (
    ATCPosition,
    PositionSelector,
    PositionThresholds,
    select_position,
)
from geoatc.services.atc.switch_detector import SwitchDetection, SwitchDetector, SwitchRule

__all__ = [
    "ATCExchange",
    "ATCPosition",
    "ATCSession",
    "ATCSessionEngine",
    "ConversationContext",
    "ExchangeStatus",
    "PersonaCache",
    "PositionSelector",
    "PositionThresholds",
    "SessionStore",
    "SwitchDetection",
    "SwitchDetector",
    "SwitchRule",
    "Turn",
    "TurnRole",
    "select_position",
]
