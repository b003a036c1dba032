"""
geocoin package root.

A location-based coin collecting game: the player walks a grid of
latitude/longitude cells, some of which hold caches of uniquely identified
coins. The pure game state (tokens, cache registry, snapshots) lives here,
independent of any map or UI toolkit.
"""
from importlib.metadata import version, PackageNotFoundError

__all__ = ["__version__"]

try:
    __version__ = version("geocoin")
except PackageNotFoundError:  # pragma: no cover - during tests without packaging
    __version__ = "0.0.0"
