"""Read-only airport directory with nearest-airport search.

The directory is loaded once by the host (usually from an ``airports.json``
resource) and never mutated afterwards. Codes are normalized to upper case.

Two JSON shapes are accepted, keyed by airport code:

    {"KSEA": {"name": "Seattle-Tacoma Intl", "lat": 47.449, "lon": -122.309}}
    {"KSEA": [47.449, -122.309]}

Typical usage:
    from geoatc.airports.directory import AirportDirectory

    directory = AirportDirectory()
    directory.load("data/airports/airports.json")

    airport = directory.lookup("ksea")
    nearest = directory.nearest(47.5, -122.3, max_radius_nm=50)
    if nearest:
        airport, distance = nearest
"""

import json
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from geoatc.core.logging_system import get_logger
from geoatc.navigation.geo_math import distance_nm

logger = get_logger(__name__)

# Search limit for "nearby airport" announcements
DEFAULT_MAX_RADIUS_NM = 500.0


@dataclass(frozen=True)
class Airport:
    """Airport identity and location.

    Attributes:
        icao: Airport code, unique key (e.g., "KSEA").
        latitude: Latitude in degrees.
        longitude: Longitude in degrees.
        name: Airport name, may be empty.
        city: City/municipality name, may be empty.
        country: ISO country code, may be empty.
        iata: IATA code, may be empty.
        elevation_ft: Field elevation in feet.
    """

    icao: str
    latitude: float
    longitude: float
    name: str = ""
    city: str = ""
    country: str = ""
    iata: str = ""
    elevation_ft: float = 0.0

    def display_name(self) -> str:
        """Get display name for notifications.

        Returns:
            "Seattle-Tacoma Intl (KSEA)" when a name is known, else "KSEA".
        """
        if self.name:
            return f"{self.name} ({self.icao})"
        return self.icao


def normalize_code(code: str) -> str:
    """Normalize an airport code for lookup."""
    return code.strip().upper()


def airport_from_entry(code: str, entry: Any) -> Airport | None:
    """Build an Airport from one directory entry.

    Args:
        code: Airport code the entry is keyed by.
        entry: Either a mapping with lat/lon (or latitude/longitude) keys or
            a sequence starting with [lat, lon].

    Returns:
        Airport, or None if the entry has no usable coordinates.
    """
    icao = normalize_code(code)

    if isinstance(entry, Mapping):
        lat = entry.get("lat", entry.get("latitude"))
        lon = entry.get("lon", entry.get("longitude"))
        if lat is None or lon is None:
            return None
        return Airport(
            icao=icao,
            latitude=float(lat),
            longitude=float(lon),
            name=str(entry.get("name") or ""),
            city=str(entry.get("city") or entry.get("municipality") or ""),
            country=str(entry.get("country") or entry.get("iso_country") or ""),
            iata=str(entry.get("iata") or entry.get("iata_code") or ""),
            elevation_ft=float(entry.get("elevation_ft") or entry.get("elevation") or 0.0),
        )

    if isinstance(entry, list | tuple) and len(entry) >= 2:
        return Airport(icao=icao, latitude=float(entry[0]), longitude=float(entry[1]))

    return None


class AirportDirectory:
    """Airport lookup by code and nearest-airport search.

    Iteration order is insertion order, i.e. the order of the source file.
    Nearest-airport ties resolve to the entry seen first in that order.

    Examples:
        >>> directory = AirportDirectory([Airport("KSEA", 47.449, -122.309)])
        >>> directory.lookup("KSEA").latitude
        47.449
        >>> directory.lookup("XXXX") is None
        True
    """

    def __init__(self, airports: Iterable[Airport] | None = None) -> None:
        """Initialize directory.

        Args:
            airports: Optional initial airports. Later duplicates replace
                earlier ones.
        """
        self._airports: dict[str, Airport] = {}
        for airport in airports or []:
            self._airports[normalize_code(airport.icao)] = airport

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "AirportDirectory":
        """Create a directory from a code -> entry mapping.

        Entries without usable coordinates are skipped.

        Args:
            data: Mapping as found in airports.json.

        Returns:
            Populated AirportDirectory.
        """
        airports = []
        skipped = 0
        for code, entry in data.items():
            airport = airport_from_entry(code, entry)
            if airport is None:
                skipped += 1
                continue
            airports.append(airport)

        if skipped:
            logger.debug("Skipped %d airport entries without coordinates", skipped)
        return cls(airports)

    def load(self, json_path: str | Path) -> bool:
        """Load airports from a JSON file, replacing current content.

        Args:
            json_path: Path to airports.json.

        Returns:
            True if loaded successfully.
        """
        path = Path(json_path)
        if not path.exists():
            logger.error("Airport directory not found: %s", path)
            return False

        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error("Failed to load airport directory %s: %s", path, e)
            return False

        if not isinstance(data, dict):
            logger.error("Airport directory %s is not a JSON object", path)
            return False

        self._airports = AirportDirectory.from_mapping(data)._airports
        logger.info("Loaded %d airports from %s", len(self._airports), path)
        return True

    def lookup(self, code: str) -> Airport | None:
        """Get airport by code.

        Args:
            code: Airport code, any case, surrounding whitespace ignored.

        Returns:
            Airport if found, None otherwise.
        """
        return self._airports.get(normalize_code(code))

    def __contains__(self, code: object) -> bool:
        return isinstance(code, str) and normalize_code(code) in self._airports

    def __len__(self) -> int:
        return len(self._airports)

    def __iter__(self) -> Iterator[Airport]:
        return iter(self._airports.values())

    def nearest(
        self,
        latitude: float,
        longitude: float,
        max_radius_nm: float = DEFAULT_MAX_RADIUS_NM,
    ) -> tuple[Airport, float] | None:
        """Find the nearest airport strictly inside a radius.

        Linear scan; entries at or beyond ``max_radius_nm`` are ignored.

        Args:
            latitude: Position latitude.
            longitude: Position longitude.
            max_radius_nm: Exclusive search radius in nautical miles.

        Returns:
            (airport, distance_nm) tuple, or None if nothing is in range.
        """
        best: Airport | None = None
        best_distance = max_radius_nm

        for airport in self._airports.values():
            distance = distance_nm(latitude, longitude, airport.latitude, airport.longitude)
            if distance < best_distance:
                best = airport
                best_distance = distance

        if best is None:
            return None
        return best, best_distance
