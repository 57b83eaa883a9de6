"""User settings management for GeoATC.

Settings are persisted in ~/.geoatc/settings.json, one section per
settings group.
"""

from geoatc.settings.atc_settings import ATCSettings, get_atc_settings, reset_atc_settings

__all__ = [
    "ATCSettings",
    "get_atc_settings",
    "reset_atc_settings",
]
