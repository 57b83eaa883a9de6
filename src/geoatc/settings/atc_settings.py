"""ATC engine settings management.

This module manages tunable values of the ATC engine: polling intervals,
history sizes, position selection thresholds, and the endpoints of the
completion and persona services.

Settings are stored in ~/.geoatc/settings.json under the "atc" key.

Typical usage:
    from geoatc.settings import get_atc_settings

    settings = get_atc_settings()
    settings.set_value("completion_model", "mistral")
    settings.save()
"""

import json
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import TYPE_CHECKING, Any

from geoatc.core.logging_system import get_logger

if TYPE_CHECKING:
    from geoatc.services.atc.position_selector import PositionThresholds

logger = get_logger(__name__)

SETTINGS_SECTION = "atc"


@dataclass
class ATCSettings:
    """ATC engine settings with persistence.

    Attributes:
        auto_position_update_interval: Seconds between auto position refreshes.
        nearest_airport_update_interval: Seconds between nearest-airport polls.
        atc_response_timeout: Completion request timeout in seconds.
        persona_timeout: Persona request timeout in seconds.
        max_history_entries: Turns kept per airport.
        prompt_history_turns: Turns included in each prompt.
        nearest_airport_max_radius_nm: Range of the nearby-airport search.
        ground_max_agl_ft: Height below which the aircraft is on the ground.
        tower_max_alt_ft: Tower ceiling (MSL).
        approach_max_alt_ft: Approach ceiling (MSL).
        center_min_alt_ft: Center floor (MSL).
        tower_range_nm: Tower range.
        approach_range_nm: Approach range.
        vicinity_radius_nm: Range reported as "in the vicinity".
        completion_url: Base URL of the completion server.
        completion_model: Model name for completions.
        completion_temperature: Sampling temperature.
        persona_url: Persona API endpoint (empty disables remote personas).
        persona_nationalities: Nationality filter for personas.
    """

    auto_position_update_interval: float = 5.0
    nearest_airport_update_interval: float = 5.0
    atc_response_timeout: float = 30.0
    persona_timeout: float = 5.0
    max_history_entries: int = 20
    prompt_history_turns: int = 4
    nearest_airport_max_radius_nm: float = 500.0
    ground_max_agl_ft: float = 50.0
    tower_max_alt_ft: float = 3000.0
    approach_max_alt_ft: float = 18000.0
    center_min_alt_ft: float = 18000.0
    tower_range_nm: float = 50.0
    approach_range_nm: float = 100.0
    vicinity_radius_nm: float = 10.0
    completion_url: str = "http://localhost:11434"
    completion_model: str = "llama3.1:8b"
    completion_temperature: float = 0.7
    persona_url: str = "https://randomuser.me/api/"
    persona_nationalities: str = "us,ca,gb,au"
    _settings_path: Path = field(
        default_factory=lambda: Path.home() / ".geoatc" / "settings.json"
    )
    _dirty: bool = field(default=False, repr=False)

    @classmethod
    def setting_names(cls) -> list[str]:
        """Get the names of all persisted settings."""
        return [f.name for f in fields(cls) if not f.name.startswith("_")]

    def set_value(self, name: str, value: Any) -> None:
        """Change one setting.

        Args:
            name: Setting name.
            value: New value, converted to the setting's current type.

        Raises:
            KeyError: If the setting does not exist.
            ValueError: If the value cannot be converted.
        """
        if name not in self.setting_names():
            raise KeyError(f"Unknown ATC setting: {name}")

        current = getattr(self, name)
        setattr(self, name, type(current)(value))
        self._dirty = True

    def thresholds(self) -> "PositionThresholds":
        """Get position selection thresholds."""
        # Imported here: the ATC services package imports these settings
        from geoatc.services.atc.position_selector import PositionThresholds

        return PositionThresholds(
            ground_max_agl_ft=self.ground_max_agl_ft,
            tower_max_alt_ft=self.tower_max_alt_ft,
            approach_max_alt_ft=self.approach_max_alt_ft,
            center_min_alt_ft=self.center_min_alt_ft,
            tower_range_nm=self.tower_range_nm,
            approach_range_nm=self.approach_range_nm,
        )

    def load(self, path: Path | str | None = None) -> bool:
        """Load settings from file.

        Unknown keys are ignored; values that cannot be converted keep
        their defaults.

        Args:
            path: Optional path to settings file.
                 Defaults to ~/.geoatc/settings.json.

        Returns:
            True if loaded successfully, False otherwise.
        """
        if path is not None:
            self._settings_path = Path(path)

        if not self._settings_path.exists():
            logger.info("No settings file found, using ATC defaults")
            return False

        try:
            with open(self._settings_path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.error("Failed to load ATC settings: %s", e)
            return False

        section = data.get(SETTINGS_SECTION, {}) if isinstance(data, dict) else {}
        for name in self.setting_names():
            if name not in section:
                continue
            try:
                setattr(self, name, type(getattr(self, name))(section[name]))
            except (TypeError, ValueError):
                logger.warning("Ignoring invalid ATC setting %s=%r", name, section[name])

        self._dirty = False
        logger.info("Loaded ATC settings from %s", self._settings_path)
        return True

    def save(self, path: Path | str | None = None) -> bool:
        """Save settings to file, preserving other sections.

        Args:
            path: Optional path to settings file.
                 Defaults to ~/.geoatc/settings.json.

        Returns:
            True if saved successfully, False otherwise.
        """
        if path is not None:
            self._settings_path = Path(path)

        try:
            self._settings_path.parent.mkdir(parents=True, exist_ok=True)

            existing_data: dict[str, Any] = {}
            if self._settings_path.exists():
                with open(self._settings_path, encoding="utf-8") as f:
                    existing_data = json.load(f)

            existing_data[SETTINGS_SECTION] = self.to_dict()

            with open(self._settings_path, "w", encoding="utf-8") as f:
                json.dump(existing_data, f, indent=2)
        except (OSError, ValueError) as e:
            logger.error("Failed to save ATC settings: %s", e)
            return False

        self._dirty = False
        logger.info("Saved ATC settings to %s", self._settings_path)
        return True

    @property
    def is_dirty(self) -> bool:
        """Check if settings have unsaved changes."""
        return self._dirty

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization.

        Returns:
            Dictionary representation of settings.
        """
        return {name: getattr(self, name) for name in self.setting_names()}


# Global singleton instance
_global_settings: ATCSettings | None = None


def get_atc_settings() -> ATCSettings:
    """Get the global ATC settings singleton.

    Loads settings from disk on first access.

    Returns:
        ATCSettings instance.
    """
    global _global_settings
    if _global_settings is None:
        _global_settings = ATCSettings()
        _global_settings.load()
    return _global_settings


def reset_atc_settings() -> None:
    """Reset the global ATC settings singleton.

    Forces reload on next access.
    """
    global _global_settings
    _global_settings = None
