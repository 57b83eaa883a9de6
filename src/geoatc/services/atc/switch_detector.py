"""Position-switch detection in pilot and controller transmissions.

Detection is rule based: an ordered list of (pattern, position) rules is
checked and the first rule that matches wins. Rule order, not the position
of the phrase in the text, decides. The default rules can be replaced
programmatically or from a YAML file of the form:

    pilot:
      - pattern: "(?:switch to|contact) ground"
        position: ground
    controller:
      - pattern: "contact tower"
        position: tower

Typical usage:
    detector = SwitchDetector()
    detection = detector.analyze_pilot_text("switch to ground, taxi to gate 3")
    if detection:
        print(detection.position, detection.residual_text)  # ground, "taxi to gate 3"
"""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from geoatc.core.logging_system import get_logger
from geoatc.services.atc.position_selector import ATCPosition

logger = get_logger(__name__)


@dataclass(frozen=True)
class SwitchRule:
    """One pattern -> position rule.

    Attributes:
        pattern: Compiled, case-insensitive pattern.
        position: Position the rule switches to.
    """

    pattern: re.Pattern[str]
    position: ATCPosition

    @classmethod
    def compile(cls, pattern: str, position: "ATCPosition | str") -> "SwitchRule":
        """Create a rule from a pattern string.

        Args:
            pattern: Regular expression, matched case-insensitively.
            position: Target position or its name.

        Returns:
            SwitchRule instance.

        Raises:
            ValueError: If the position is unknown or "auto".
        """
        parsed = ATCPosition.parse(position)
        if parsed is None:
            raise ValueError("Switch rules need a concrete position")
        return cls(re.compile(pattern, re.IGNORECASE), parsed)

    def matches(self, text: str) -> bool:
        """Check if the rule matches anywhere in the text."""
        return self.pattern.search(text) is not None


@dataclass(frozen=True)
class SwitchDetection:
    """Result of analysing a pilot transmission.

    Attributes:
        position: Position the pilot asked for.
        residual_text: Message left after removing the switch phrase, may be
            empty.
    """

    position: ATCPosition
    residual_text: str

    @property
    def has_message(self) -> bool:
        """Check if anything substantive remains to send to ATC."""
        return bool(self.residual_text)


DEFAULT_PILOT_RULES: list[SwitchRule] = [
    SwitchRule.compile(r"\b(?:switch to|contact|request) (?:ground|ground control)\b", "ground"),
    SwitchRule.compile(r"\b(?:switch to|contact|request) tower\b", "tower"),
    SwitchRule.compile(r"\b(?:switch to|contact|request) (?:approach|departure)\b", "approach"),
    SwitchRule.compile(r"\b(?:switch to|contact|request) (?:center|area control)\b", "center"),
    SwitchRule.compile(r"\bwith ground\b", "ground"),
    SwitchRule.compile(r"\bwith tower\b", "tower"),
]

DEFAULT_CONTROLLER_RULES: list[SwitchRule] = [
    SwitchRule.compile(r"contact ground", "ground"),
    SwitchRule.compile(r"contact tower", "tower"),
    SwitchRule.compile(r"contact approach", "approach"),
    SwitchRule.compile(r"contact departure", "approach"),
    SwitchRule.compile(r"contact center", "center"),
]

# Removes switch phrases from the pilot message before it goes to ATC
DEFAULT_STRIP_PATTERN = re.compile(
    r"\b(?:switch to|contact|request|with)\s+"
    r"(?:ground(?:\s+control)?|tower|approach|departure|center|area control)\b",
    re.IGNORECASE,
)

# Separators left dangling at either end after stripping
_LEADING_PUNCTUATION = " \t\n,;:.-"
_TRAILING_PUNCTUATION = " \t\n,;:-"


class SwitchDetector:
    """Pluggable matcher for position switches."""

    def __init__(
        self,
        pilot_rules: list[SwitchRule] | None = None,
        controller_rules: list[SwitchRule] | None = None,
        strip_pattern: re.Pattern[str] | None = None,
    ) -> None:
        """Initialize detector.

        Args:
            pilot_rules: Ordered rules for pilot text (defaults if None).
            controller_rules: Ordered rules for controller replies (defaults if None).
            strip_pattern: Pattern removed from pilot text (default if None).
        """
        self.pilot_rules = list(DEFAULT_PILOT_RULES if pilot_rules is None else pilot_rules)
        self.controller_rules = list(
            DEFAULT_CONTROLLER_RULES if controller_rules is None else controller_rules
        )
        self.strip_pattern = strip_pattern or DEFAULT_STRIP_PATTERN

    @classmethod
    def from_yaml(cls, config_path: str | Path) -> "SwitchDetector":
        """Create a detector from a YAML rules file.

        Sections missing from the file keep their default rules.

        Args:
            config_path: Path to the YAML rules file.

        Returns:
            SwitchDetector instance (defaults if the file does not exist).

        Raises:
            ValueError: If a rule names an unknown position.
        """
        path = Path(config_path)
        if not path.exists():
            logger.debug("No switch rules found at %s, using defaults", path)
            return cls()

        with open(path, encoding="utf-8") as f:
            config: dict[str, Any] = yaml.safe_load(f) or {}

        pilot = cls._rules_from_config(config.get("pilot"))
        controller = cls._rules_from_config(config.get("controller"))
        strip = config.get("strip_pattern")

        detector = cls(
            pilot_rules=pilot,
            controller_rules=controller,
            strip_pattern=re.compile(strip, re.IGNORECASE) if strip else None,
        )
        logger.info(
            "Loaded switch rules from %s (pilot=%d, controller=%d)",
            path,
            len(detector.pilot_rules),
            len(detector.controller_rules),
        )
        return detector

    @staticmethod
    def _rules_from_config(entries: list[dict[str, str]] | None) -> list[SwitchRule] | None:
        if entries is None:
            return None
        return [SwitchRule.compile(entry["pattern"], entry["position"]) for entry in entries]

    @staticmethod
    def _first_match(rules: list[SwitchRule], text: str) -> ATCPosition | None:
        for rule in rules:
            if rule.matches(text):
                logger.debug("Switch rule '%s' -> %s", rule.pattern.pattern, rule.position.value)
                return rule.position
        return None

    def detect_from_pilot_text(self, text: str) -> ATCPosition | None:
        """Find a position the pilot asks to switch to.

        Args:
            text: Pilot transmission.

        Returns:
            Requested position, or None.
        """
        return self._first_match(self.pilot_rules, text)

    def detect_from_controller_text(self, text: str) -> ATCPosition | None:
        """Find a position the controller hands the pilot off to.

        Args:
            text: Controller reply.

        Returns:
            Position to contact next, or None.
        """
        return self._first_match(self.controller_rules, text)

    def strip_switch_phrases(self, text: str) -> str:
        """Remove switch phrases and tidy the remainder.

        Args:
            text: Pilot transmission.

        Returns:
            Remaining message, possibly empty.
        """
        cleaned = self.strip_pattern.sub(" ", text)
        cleaned = re.sub(r"\s+", " ", cleaned)
        cleaned = re.sub(r"\s+([,;:.])", r"\1", cleaned)
        return cleaned.lstrip(_LEADING_PUNCTUATION).rstrip(_TRAILING_PUNCTUATION)

    def analyze_pilot_text(self, text: str) -> SwitchDetection | None:
        """Detect a switch and compute the residual message.

        Args:
            text: Pilot transmission.

        Returns:
            SwitchDetection, or None if the text requests no switch.
        """
        position = self.detect_from_pilot_text(text)
        if position is None:
            return None
        return SwitchDetection(position=position, residual_text=self.strip_switch_phrases(text))
