from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterator, Tuple


@dataclass(frozen=True)
class LatLng:
    lat: float
    lng: float

    def offset(self, dlat: float, dlng: float) -> "LatLng":
        return LatLng(self.lat + dlat, self.lng + dlng)

    def to_dict(self) -> dict:
        return {"lat": self.lat, "lng": self.lng}


@dataclass(frozen=True)
class Cell:
    """Integer grid coordinate of one cell of the world."""

    i: int
    j: int

    @property
    def key(self) -> str:
        return f"{self.i},{self.j}"

    @staticmethod
    def from_key(key: str) -> "Cell":
        """Parse a ``"i,j"`` key. Raises ValueError on anything else."""
        parts = key.split(",")
        if len(parts) != 2:
            raise ValueError(f"Invalid cell key: {key!r}")
        return Cell(int(parts[0]), int(parts[1]))


def cell_for(position: LatLng, tile_degrees: float) -> Cell:
    """Return the cell containing ``position``.

    Cells are global: cell (0, 0) has its south-west corner at lat/lng 0,0.
    """
    if tile_degrees <= 0:
        raise ValueError("tile_degrees must be positive")
    return Cell(math.floor(position.lat / tile_degrees), math.floor(position.lng / tile_degrees))


def cell_bounds(cell: Cell, tile_degrees: float) -> Tuple[LatLng, LatLng]:
    """South-west and north-east corners of ``cell``."""
    south_west = LatLng(cell.i * tile_degrees, cell.j * tile_degrees)
    north_east = LatLng((cell.i + 1) * tile_degrees, (cell.j + 1) * tile_degrees)
    return south_west, north_east


def neighborhood(center: Cell, size: int) -> Iterator[Cell]:
    """Cells in the square ``[center - size, center + size)`` on both axes."""
    for i in range(center.i - size, center.i + size):
        for j in range(center.j - size, center.j + size):
            yield Cell(i, j)
