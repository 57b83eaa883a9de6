"""GeoATC - conversational air traffic control for browser flight simulators.

Tracks the aircraft relative to known airports, decides which controller
position is on frequency and turns pilot transmissions into controller
replies through a text-completion service.
"""

from geoatc.version import __version__

__all__ = ["__version__"]
