"""Aircraft telemetry value types."""

from geoatc.telemetry.aircraft_state import AircraftInfo, AircraftState

__all__ = ["AircraftInfo", "AircraftState"]
