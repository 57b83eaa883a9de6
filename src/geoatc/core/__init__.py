"""Core infrastructure shared by all GeoATC modules."""
