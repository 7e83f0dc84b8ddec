"""Axis-aligned 3D bounding box."""

from __future__ import annotations

import re
from dataclasses import dataclass

import numpy as np

# Parse bounds like "([xmin, xmax], [ymin, ymax], [zmin, zmax])"
_BRACKET_PAIR = re.compile(r"\[\s*([^,\]]+)\s*,\s*([^,\]]+)\s*\]")


@dataclass(frozen=True)
class Bounds:
    """3D axis-aligned bounding box.

    Attributes:
        minx, miny, minz: Minimum corner coordinates.
        maxx, maxy, maxz: Maximum corner coordinates.
    """

    minx: float = 0.0
    miny: float = 0.0
    minz: float = 0.0
    maxx: float = 0.0
    maxy: float = 0.0
    maxz: float = 0.0

    @classmethod
    def from_arrays(cls, x: np.ndarray, y: np.ndarray, z: np.ndarray) -> Bounds:
        """Compute bounds from X, Y, Z arrays."""
        return cls(
            minx=float(np.min(x)),
            miny=float(np.min(y)),
            minz=float(np.min(z)),
            maxx=float(np.max(x)),
            maxy=float(np.max(y)),
            maxz=float(np.max(z)),
        )

    @classmethod
    def from_corners(
        cls,
        minimum: tuple[float, float, float],
        maximum: tuple[float, float, float],
    ) -> Bounds:
        """Build bounds from a (min corner, max corner) pair."""
        return cls(*(float(v) for v in minimum), *(float(v) for v in maximum))

    @classmethod
    def from_string(cls, bounds_str: str) -> Bounds:
        """Parse a PDAL-style bounds string.

        A 2D string ("([xmin, xmax], [ymin, ymax])") gives a box with Z = 0.
        """
        pairs = _BRACKET_PAIR.findall(bounds_str)
        if len(pairs) not in (2, 3):
            raise ValueError(
                f"Invalid bounds: '{bounds_str}'. "
                f"Expected: '([xmin, xmax], [ymin, ymax])' or "
                f"'([xmin, xmax], [ymin, ymax], [zmin, zmax])'"
            )
        values = [(float(lo), float(hi)) for lo, hi in pairs]
        if len(values) == 2:
            values.append((0.0, 0.0))
        (minx, maxx), (miny, maxy), (minz, maxz) = values
        return cls(minx, miny, minz, maxx, maxy, maxz)

    @property
    def minimum(self) -> tuple[float, float, float]:
        return (self.minx, self.miny, self.minz)

    @property
    def maximum(self) -> tuple[float, float, float]:
        return (self.maxx, self.maxy, self.maxz)

    def get_minimum(self, axis: int) -> float:
        """Minimum along axis 0 (X), 1 (Y) or 2 (Z)."""
        return self.minimum[axis]

    def get_maximum(self, axis: int) -> float:
        """Maximum along axis 0 (X), 1 (Y) or 2 (Z)."""
        return self.maximum[axis]

    def to_string(self) -> str:
        """Inverse of from_string."""
        return (
            f"([{self.minx!r}, {self.maxx!r}], "
            f"[{self.miny!r}, {self.maxy!r}], "
            f"[{self.minz!r}, {self.maxz!r}])"
        )

    def __repr__(self) -> str:
        return (
            f"Bounds(x=[{self.minx:.2f}, {self.maxx:.2f}], "
            f"y=[{self.miny:.2f}, {self.maxy:.2f}], "
            f"z=[{self.minz:.2f}, {self.maxz:.2f}])"
        )
