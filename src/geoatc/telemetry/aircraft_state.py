"""Aircraft telemetry snapshots consumed by the ATC engine.

The engine never holds on to a snapshot: it asks the telemetry port for a
fresh one on every decision and only reads it.
"""

from dataclasses import dataclass
from typing import Any

# Height of the gear above the reference point, subtracted from AGL
GEAR_HEIGHT_OFFSET_FT = 50.0

DEFAULT_CALLSIGN = "N12345"
DEFAULT_AIRCRAFT_TYPE = "General Aviation"
DEFAULT_PILOT_NAME = "Private Pilot"


@dataclass(frozen=True)
class AircraftState:
    """Snapshot of the player's aircraft.

    Attributes:
        latitude: Latitude in degrees.
        longitude: Longitude in degrees.
        altitude_msl_ft: Altitude above mean sea level in feet.
        height_agl_ft: Height above ground in feet, never negative.
        on_ground: Whether the gear is in contact with the ground.
        heading_deg: Heading in degrees.
        airspeed_kt: Indicated airspeed in knots.
        vertical_speed_fpm: Vertical speed in feet per minute.
    """

    latitude: float
    longitude: float
    altitude_msl_ft: float
    height_agl_ft: float = 0.0
    on_ground: bool = False
    heading_deg: float = 0.0
    airspeed_kt: float = 0.0
    vertical_speed_fpm: float = 0.0

    def __post_init__(self) -> None:
        if self.height_agl_ft < 0:
            object.__setattr__(self, "height_agl_ft", 0.0)

    @classmethod
    def from_sim_values(
        cls,
        latitude: float,
        longitude: float,
        altitude_ft: float,
        ground_elevation_ft: float,
        ground_contact: bool,
        heading_deg: float = 0.0,
        airspeed_kt: float = 0.0,
        vertical_speed_fpm: float = 0.0,
    ) -> "AircraftState":
        """Build a snapshot from raw simulator values.

        Height above ground is altitude minus ground elevation minus the gear
        offset, floored at zero.

        Args:
            latitude: Latitude in degrees.
            longitude: Longitude in degrees.
            altitude_ft: Altitude MSL in feet.
            ground_elevation_ft: Terrain elevation under the aircraft in feet.
            ground_contact: Whether the gear touches the ground.
            heading_deg: Heading in degrees.
            airspeed_kt: Airspeed in knots.
            vertical_speed_fpm: Vertical speed in feet per minute.

        Returns:
            AircraftState instance.
        """
        agl = max(altitude_ft - ground_elevation_ft - GEAR_HEIGHT_OFFSET_FT, 0.0)
        return cls(
            latitude=latitude,
            longitude=longitude,
            altitude_msl_ft=altitude_ft,
            height_agl_ft=agl,
            on_ground=ground_contact,
            heading_deg=heading_deg,
            airspeed_kt=airspeed_kt,
            vertical_speed_fpm=vertical_speed_fpm,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            "latitude": self.latitude,
            "longitude": self.longitude,
            "altitude_msl_ft": self.altitude_msl_ft,
            "height_agl_ft": self.height_agl_ft,
            "on_ground": self.on_ground,
            "heading_deg": self.heading_deg,
            "airspeed_kt": self.airspeed_kt,
            "vertical_speed_fpm": self.vertical_speed_fpm,
        }


@dataclass(frozen=True)
class AircraftInfo:
    """Who is flying what.

    Attributes:
        callsign: Radio callsign.
        aircraft_type: Aircraft type name.
        pilot_name: Pilot display name.
    """

    callsign: str = DEFAULT_CALLSIGN
    aircraft_type: str = DEFAULT_AIRCRAFT_TYPE
    pilot_name: str = DEFAULT_PILOT_NAME

    @property
    def title(self) -> str:
        """Get notification title (e.g., "Cessna 172: N12345")."""
        return f"{self.aircraft_type}: {self.callsign}"
