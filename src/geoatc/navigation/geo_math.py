"""Great-circle helpers for airport proximity and bearing.

All functions take latitudes/longitudes in decimal degrees and are pure.
NaN inputs propagate to NaN outputs.

Typical usage:
    from geoatc.navigation.geo_math import bearing_deg, compass_octant, distance_nm

    dist = distance_nm(47.449, -122.309, 47.906, -122.282)
    octant = compass_octant(bearing_deg(47.449, -122.309, 47.906, -122.282))
"""

import math
from enum import Enum

# Mean Earth radius in kilometres
EARTH_RADIUS_KM = 6371.0

# Kilometres per nautical mile
KM_PER_NM = 1.852


class CompassOctant(Enum):
    """Eight 45-degree compass sectors centred on the cardinal directions."""

    N = "north"
    NE = "northeast"
    E = "east"
    SE = "southeast"
    S = "south"
    SW = "southwest"
    W = "west"
    NW = "northwest"

    @property
    def full_name(self) -> str:
        """Get the spelled-out direction (e.g., "northeast")."""
        return self.value


# (start, end) of each sector in degrees. North wraps around 0/360.
OCTANT_SECTORS: list[tuple[float, float, CompassOctant]] = [
    (337.5, 22.5, CompassOctant.N),
    (22.5, 67.5, CompassOctant.NE),
    (67.5, 112.5, CompassOctant.E),
    (112.5, 157.5, CompassOctant.SE),
    (157.5, 202.5, CompassOctant.S),
    (202.5, 247.5, CompassOctant.SW),
    (247.5, 292.5, CompassOctant.W),
    (292.5, 337.5, CompassOctant.NW),
]


def distance_nm(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Calculate great-circle distance using the haversine formula.

    Args:
        lat1: Latitude of first point.
        lon1: Longitude of first point.
        lat2: Latitude of second point.
        lon2: Longitude of second point.

    Returns:
        Distance in nautical miles.
    """
    lat1_rad, lat2_rad = math.radians(lat1), math.radians(lat2)
    dlat = math.radians(lat2 - lat1)
    dlon = math.radians(lon2 - lon1)

    a = math.sin(dlat / 2) ** 2 + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(dlon / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return (EARTH_RADIUS_KM * c) / KM_PER_NM


def bearing_deg(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Calculate the initial great-circle bearing from point 1 to point 2.

    Args:
        lat1: Latitude of origin.
        lon1: Longitude of origin.
        lat2: Latitude of destination.
        lon2: Longitude of destination.

    Returns:
        Bearing in degrees, in [0, 360).
    """
    lat1_rad, lat2_rad = math.radians(lat1), math.radians(lat2)
    dlon = math.radians(lon2 - lon1)

    y = math.sin(dlon) * math.cos(lat2_rad)
    x = math.cos(lat1_rad) * math.sin(lat2_rad) - math.sin(lat1_rad) * math.cos(
        lat2_rad
    ) * math.cos(dlon)

    bearing = (math.degrees(math.atan2(y, x)) + 360) % 360
    # -1e-15 + 360 rounds to 360.0 in floating point
    return 0.0 if bearing >= 360 else bearing


def compass_octant(bearing: float) -> CompassOctant:
    """Map a bearing onto one of eight compass sectors.

    Args:
        bearing: Bearing in degrees, expected in [0, 360).

    Returns:
        The matching octant. North if nothing matches (NaN input).
    """
    for start, end, octant in OCTANT_SECTORS:
        if start > end:
            if bearing >= start or bearing < end:
                return octant
        elif start <= bearing < end:
            return octant

    return CompassOctant.N
