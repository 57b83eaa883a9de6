"""Tests for position-switch detection."""

import re
from pathlib import Path

import pytest

from geoatc.services.atc.position_selector import ATCPosition
from geoatc.services.atc.switch_detector import SwitchDetector, SwitchRule


@pytest.fixture
def detector() -> SwitchDetector:
    """Create detector with default rules."""
    return SwitchDetector()


class TestPilotDetection:
    """Tests for switches requested by the pilot."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("switch to ground, taxi to gate 3", ATCPosition.GROUND),
            ("Contact Ground Control", ATCPosition.GROUND),
            ("request tower", ATCPosition.TOWER),
            ("switch to departure", ATCPosition.APPROACH),
            ("contact approach please", ATCPosition.APPROACH),
            ("request area control", ATCPosition.CENTER),
            ("SWITCH TO CENTER", ATCPosition.CENTER),
            ("ready to taxi with ground", ATCPosition.GROUND),
            ("good day, with tower now", ATCPosition.TOWER),
        ],
    )
    def test_detects(self, detector: SwitchDetector, text: str, expected: ATCPosition) -> None:
        """Test recognised switch phrases."""
        assert detector.detect_from_pilot_text(text) == expected

    @pytest.mark.parametrize(
        "text",
        [
            "maintain heading",
            "request taxi to runway 16L",
            "contact",
            "requesting towering cumulus report",
        ],
    )
    def test_no_switch(self, detector: SwitchDetector, text: str) -> None:
        """Test ordinary transmissions are not switches."""
        assert detector.detect_from_pilot_text(text) is None

    def test_rule_order_wins(self, detector: SwitchDetector) -> None:
        """Test the first rule wins, not the first phrase in the text."""
        assert detector.detect_from_pilot_text("contact tower then switch to ground") == (
            ATCPosition.GROUND
        )


class TestControllerDetection:
    """Tests for handoffs in controller replies."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("Contact ground point niner", ATCPosition.GROUND),
            ("Cleared to land, contact tower 118.7", ATCPosition.TOWER),
            ("Radar service terminated, contact approach", ATCPosition.APPROACH),
            ("Contact departure 125.9", ATCPosition.APPROACH),
            ("contact center 128.5, good day", ATCPosition.CENTER),
        ],
    )
    def test_detects(self, detector: SwitchDetector, text: str, expected: ATCPosition) -> None:
        """Test recognised handoffs."""
        assert detector.detect_from_controller_text(text) == expected

    def test_no_handoff(self, detector: SwitchDetector) -> None:
        """Test plain replies are not handoffs."""
        assert detector.detect_from_controller_text("Taxi to runway 16L via Alpha") is None


class TestStripping:
    """Tests for residual message computation."""

    def test_residual_message(self, detector: SwitchDetector) -> None:
        """Test switch phrase and separator are removed."""
        detection = detector.analyze_pilot_text("switch to ground, taxi to gate 3")
        assert detection is not None
        assert detection.position == ATCPosition.GROUND
        assert detection.residual_text == "taxi to gate 3"
        assert detection.has_message is True

    def test_switch_only(self, detector: SwitchDetector) -> None:
        """Test a bare switch leaves nothing to send."""
        for text in ("Contact tower.", "request approach", "  switch to center ,"):
            detection = detector.analyze_pilot_text(text)
            assert detection is not None
            assert detection.residual_text == ""
            assert detection.has_message is False

    def test_phrase_in_middle(self, detector: SwitchDetector) -> None:
        """Test phrase removal inside a sentence."""
        assert (
            detector.strip_switch_phrases("N12345 with tower , inbound for landing")
            == "N12345, inbound for landing"
        )

    def test_no_switch_returns_none(self, detector: SwitchDetector) -> None:
        """Test analysis without a switch."""
        assert detector.analyze_pilot_text("maintain heading") is None


class TestCustomRules:
    """Tests for pluggable rules."""

    def test_programmatic_rules(self) -> None:
        """Test replacing the pilot rules."""
        detector = SwitchDetector(pilot_rules=[SwitchRule.compile(r"\bclearance\b", "ground")])
        assert detector.detect_from_pilot_text("request clearance") == ATCPosition.GROUND
        assert detector.detect_from_pilot_text("switch to tower") is None
        # Controller rules keep their defaults
        assert detector.detect_from_controller_text("contact tower") == ATCPosition.TOWER

    def test_rule_needs_concrete_position(self) -> None:
        """Test auto is not a valid rule target."""
        with pytest.raises(ValueError):
            SwitchRule.compile("anything", "auto")

    def test_custom_strip_pattern(self) -> None:
        """Test replacing the strip pattern."""
        detector = SwitchDetector(strip_pattern=re.compile(r"please", re.IGNORECASE))
        assert detector.strip_switch_phrases("Please taxi") == "taxi"

    def test_from_yaml(self, tmp_path: Path) -> None:
        """Test loading rules from YAML."""
        path = tmp_path / "rules.yaml"
        path.write_text(
            "pilot:\n"
            "  - pattern: 'go to ground'\n"
            "    position: ground\n"
            "controller:\n"
            "  - pattern: 'monitor tower'\n"
            "    position: tower\n"
        )

        detector = SwitchDetector.from_yaml(path)

        assert detector.detect_from_pilot_text("Go to ground") == ATCPosition.GROUND
        assert detector.detect_from_pilot_text("switch to ground") is None
        assert detector.detect_from_controller_text("monitor tower 118.3") == ATCPosition.TOWER

    def test_from_yaml_missing_file(self, tmp_path: Path) -> None:
        """Test missing file gives default rules."""
        detector = SwitchDetector.from_yaml(tmp_path / "missing.yaml")
        assert detector.detect_from_pilot_text("switch to tower") == ATCPosition.TOWER

    def test_from_yaml_unknown_position(self, tmp_path: Path) -> None:
        """Test unknown positions are rejected."""
        path = tmp_path / "rules.yaml"
        path.write_text("pilot:\n  - pattern: 'x'\n    position: ramp\n")
        with pytest.raises(ValueError):
            SwitchDetector.from_yaml(path)

    def test_bundled_rules_match_defaults(self) -> None:
        """Test the shipped rules file behaves like the defaults."""
        path = Path(__file__).parents[3] / "config" / "switch_rules.yaml"
        detector = SwitchDetector.from_yaml(path)

        detection = detector.analyze_pilot_text("switch to ground, taxi to gate 3")
        assert detection is not None
        assert detection.position == ATCPosition.GROUND
        assert detection.residual_text == "taxi to gate 3"
        assert detector.detect_from_controller_text("contact departure") == ATCPosition.APPROACH
