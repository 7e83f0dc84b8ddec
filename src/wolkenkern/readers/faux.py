"""Faux reader — synthetic point generator.

Generates points inside a bounding box in one of three modes:
    "constant"  — every point sits on the minimum corner
    "random"    — coordinates drawn uniformly inside the box
    "ramp"      — coordinates interpolated from the minimum corner (first
                  point) to the maximum corner (last point)

The Time dimension always holds the point's global index. Every value is a
function of the global index alone, so seeking and then reading yields the
same points as reading sequentially up to that position.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Iterable

import numpy as np

from wolkenkern.core.bounds import Bounds
from wolkenkern.core.dimensions import (
    DEFAULT_DIMENSIONS,
    Dimension,
    DimensionId,
    get_dimension_id,
)
from wolkenkern.core.pointbuffer import PointBuffer
from wolkenkern.core.schema import Schema
from wolkenkern.stages.base import Stage
from wolkenkern.stages.iterators import IteratorKind, RandomIterator, SequentialIterator
from wolkenkern.stages.registry import stage_registry

logger = logging.getLogger(__name__)

_XYZ = (DimensionId.X_F64, DimensionId.Y_F64, DimensionId.Z_F64)


class Mode(Enum):
    CONSTANT = "constant"
    RANDOM = "random"
    RAMP = "ramp"

    @classmethod
    def parse(cls, value: Mode | str) -> Mode:
        """Parse a mode name case-insensitively ("conSTanT" -> CONSTANT)."""
        if isinstance(value, Mode):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(
                f"Unknown faux mode '{value}'. "
                f"Available: {[m.value for m in cls]}"
            ) from None


def _coerce_dimension(value: Dimension | DimensionId | str) -> Dimension:
    if isinstance(value, Dimension):
        return value
    if isinstance(value, DimensionId):
        return Dimension(value)
    return Dimension(get_dimension_id(str(value)))


class FauxReader(Stage):
    """Synthetic reader producing a fixed number of generated points.

    Options:
        bounds: Bounds or str — box to generate in, e.g.
                "([1, 101], [2, 102], [3, 103])". Required.
        num_points: int — logical number of points. Required.
        mode: str — "constant", "random" or "ramp" (default "random").
        dimensions: list — Dimension, DimensionId or id names such as
                "RED_U8"; defaults to X, Y, Z (float64) and Time (uint64).
        seed: int — seed for random mode; drawn once per reader if omitted.
        spatialreference: str — CRS attached to the generated points.
        id: int — stage identifier.
    """

    def __init__(
        self,
        bounds: Bounds | str | None = None,
        num_points: int | None = None,
        mode: Mode | str | None = None,
        dimensions: Iterable[Dimension | DimensionId | str] | None = None,
        **options: Any,
    ) -> None:
        for key, value in (
            ("bounds", bounds),
            ("num_points", num_points),
            ("mode", mode),
            ("dimensions", dimensions),
        ):
            if value is not None:
                options[key] = value
        super().__init__(**options)

        if "bounds" not in self.options:
            raise ValueError("FauxReader requires 'bounds' option")
        if "num_points" not in self.options:
            raise ValueError("FauxReader requires 'num_points' option")

        raw_bounds = self.options["bounds"]
        self._generator_bounds = (
            raw_bounds if isinstance(raw_bounds, Bounds) else Bounds.from_string(str(raw_bounds))
        )
        self._total = int(self.options["num_points"])
        if self._total < 0:
            raise ValueError(f"num_points must be non-negative, got {self._total}")
        self.mode = Mode.parse(self.options.get("mode", Mode.RANDOM))

        dims = self.options.get("dimensions")
        self._generator_schema = Schema(
            DEFAULT_DIMENSIONS if dims is None else [_coerce_dimension(d) for d in dims]
        )

        seed = self.options.get("seed")
        self._seed = int(np.random.SeedSequence().entropy if seed is None else seed)
        if not 0 <= self._seed < 2**128:
            raise ValueError(f"seed must be in [0, 2**128), got {self._seed}")

    def _initialize(self) -> None:
        self._schema = self._generator_schema
        self._bounds = self._generator_bounds
        self._num_points = self._total
        logger.info(
            "Faux reader: %d points, mode=%s, %r", self._total, self.mode.value, self._bounds
        )

    @property
    def description(self) -> str:
        return "Faux Reader"

    # ── Generation ──────────────────────────────────────────────────

    def read_points(self, buffer: PointBuffer, start: int) -> int:
        """Generate points ``start, start + 1, ...`` into ``buffer``.

        Writes as many points as fit, stopping at the end of the stream.
        Only X, Y, Z (float64) and Time (uint64) columns are generated;
        other dimensions of the buffer keep their contents.

        Returns:
            Number of points written.
        """
        count = max(min(buffer.capacity, self._total - start), 0)
        if count == 0:
            return 0

        schema = buffer.schema
        indices = np.arange(start, start + count, dtype=np.uint64)
        coords = self._coordinates(indices)
        for axis, dim_id in enumerate(_XYZ):
            if dim_id in schema:
                buffer.column(schema.dimension_index(dim_id))[:count] = coords[:, axis]
        if DimensionId.TIME_U64 in schema:
            buffer.column(schema.dimension_index(DimensionId.TIME_U64))[:count] = indices

        logger.debug("Generated points [%d, %d)", start, start + count)
        return count

    def _coordinates(self, indices: np.ndarray) -> np.ndarray:
        """(len(indices), 3) array of X, Y, Z for the given global indices."""
        mins = np.array(self._generator_bounds.minimum, dtype=np.float64)
        maxs = np.array(self._generator_bounds.maximum, dtype=np.float64)
        n = len(indices)

        if self.mode is Mode.CONSTANT:
            return np.tile(mins, (n, 1))

        if self.mode is Mode.RAMP:
            if self._total <= 1:
                return np.tile(mins, (n, 1))
            fraction = indices.astype(np.float64) / (self._total - 1)
            return mins + (maxs - mins) * fraction[:, np.newaxis]

        # Random: Philox keyed by the seed. Each point consumes one counter
        # block (4 doubles, 3 used), so the counter is the global index.
        start = int(indices[0]) if n else 0
        bit_generator = np.random.Philox(key=self._seed, counter=start)
        draws = np.random.Generator(bit_generator).random((n, 4))
        return mins + (maxs - mins) * draws[:, :3]

    # ── Iterators ───────────────────────────────────────────────────

    def supports_iterator(self, kind: IteratorKind) -> bool:
        return kind in (IteratorKind.SEQUENTIAL, IteratorKind.RANDOM)

    def _create_sequential_iterator(self) -> SequentialIterator:
        return FauxSequentialIterator(self)

    def _create_random_iterator(self) -> RandomIterator:
        return FauxRandomIterator(self)

    @classmethod
    def type_name(cls) -> str:
        return "readers.faux"


class FauxSequentialIterator(SequentialIterator):
    def _read_buffer(self, buffer: PointBuffer) -> int:
        return self._stage.read_points(buffer, self._index)


class FauxRandomIterator(RandomIterator):
    def _read_buffer(self, buffer: PointBuffer) -> int:
        return self._stage.read_points(buffer, self._index)


stage_registry.register(FauxReader)
