"""Version information for GeoATC.

Reads the VERSION file in the project root when running from a checkout,
otherwise falls back to the installed distribution metadata.
"""

from importlib import metadata
from pathlib import Path

__version__ = "0.1.0"  # Fallback version


def get_version() -> str:
    """Get the current version string.

    Returns:
        Version string (e.g., "0.1.0").
    """
    version_path = Path(__file__).parent.parent.parent / "VERSION"  # src/geoatc -> root
    if version_path.exists():
        return version_path.read_text(encoding="utf-8").strip()

    try:
        return metadata.version("geoatc")
    except metadata.PackageNotFoundError:
        return __version__
