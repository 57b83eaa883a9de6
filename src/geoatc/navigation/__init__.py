"""Great-circle navigation helpers."""

from geoatc.navigation.geo_math import (
    EARTH_RADIUS_KM,
    KM_PER_NM,
    CompassOctant,
    bearing_deg,
    compass_octant,
    distance_nm,
)

__all__ = [
    "EARTH_RADIUS_KM",
    "KM_PER_NM",
    "CompassOctant",
    "bearing_deg",
    "compass_octant",
    "distance_nm",
]
