"""Airport directory and nearest-airport search."""

from geoatc.airports.directory import Airport, AirportDirectory, normalize_code

__all__ = ["Airport", "AirportDirectory", "normalize_code"]
