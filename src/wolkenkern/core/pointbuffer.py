"""PointBuffer — fixed-capacity row store described by a SchemaLayout."""

from __future__ import annotations

from typing import Any

import numpy as np

from wolkenkern.core.bounds import Bounds
from wolkenkern.core.dimensions import DimensionId
from wolkenkern.core.schema import Schema, SchemaLayout


class PointBuffer:
    """Capacity-bounded table of points.

    Storage is one contiguous block of ``capacity * layout.byte_size``
    bytes, viewed as a NumPy structured array whose fields are the schema's
    dimensions. ``num_points`` counts the rows currently holding valid
    points and never exceeds ``capacity``.

    Field access is by (point index, dimension index). Values are always
    stored and returned with the dimension's declared dtype; passing a
    different ``dtype`` to an accessor is rejected rather than reinterpreted.

    Examples:
        >>> schema = Schema([Dimension(DimensionId.X_F64)])
        >>> buf = PointBuffer(schema.layout, capacity=10)
        >>> buf.set_field(0, 0, 1.5)
        >>> buf.num_points = 1
        >>> float(buf.get_field(0, 0))
        1.5
    """

    def __init__(self, layout: SchemaLayout, capacity: int) -> None:
        if capacity < 0:
            raise ValueError(f"Capacity must be non-negative, got {capacity}")
        self._layout = layout
        self._capacity = int(capacity)
        self._data = np.zeros(self._capacity, dtype=layout.dtype)
        self._num_points = 0

    # ── Properties ──────────────────────────────────────────────────

    @property
    def layout(self) -> SchemaLayout:
        return self._layout

    @property
    def schema(self) -> Schema:
        return self._layout.schema

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def num_points(self) -> int:
        """Number of valid points (rows ``0 .. num_points - 1``)."""
        return self._num_points

    @num_points.setter
    def num_points(self, value: int) -> None:
        if not 0 <= value <= self._capacity:
            raise ValueError(
                f"Point count {value} outside [0, {self._capacity}]"
            )
        self._num_points = int(value)

    # ── Field Access ────────────────────────────────────────────────

    def get_field(
        self, point_index: int, dim_index: int, dtype: Any = None
    ) -> np.generic:
        """Read one field, returned as a scalar of the declared dtype."""
        name = self._check_access(point_index, dim_index, dtype)
        return self._data[name][point_index]

    def set_field(
        self, point_index: int, dim_index: int, value: Any, dtype: Any = None
    ) -> None:
        """Write one field, stored with the declared dtype."""
        name = self._check_access(point_index, dim_index, dtype)
        self._data[name][point_index] = value

    def _check_access(self, point_index: int, dim_index: int, dtype: Any) -> str:
        if not 0 <= point_index < self._capacity:
            raise IndexError(
                f"Point index {point_index} out of range for capacity {self._capacity}"
            )
        declared = self.schema.get_dimension(dim_index).dtype
        if dtype is not None and np.dtype(dtype) != declared:
            raise TypeError(
                f"Dimension {dim_index} is declared as {declared}, "
                f"not {np.dtype(dtype)}"
            )
        return self._layout.field_name(dim_index)

    def column(self, dim_index: int) -> np.ndarray:
        """Writable view of one dimension over the full capacity."""
        return self._data[self._layout.field_name(dim_index)]

    def __getitem__(self, dim_id: DimensionId) -> np.ndarray:
        """View of one dimension over the valid points: buf[DimensionId.X_F64]."""
        index = self.schema.dimension_index(dim_id)
        return self.column(index)[: self._num_points]

    # ── Conversion ──────────────────────────────────────────────────

    def to_numpy(self) -> np.ndarray:
        """Copy of the valid points as a structured array."""
        return self._data[: self._num_points].copy()

    def tobytes(self) -> bytes:
        """Raw row-major bytes of the valid points."""
        return self._data[: self._num_points].tobytes()

    def calculate_bounds(self) -> Bounds:
        """Bounds of the valid points' X, Y, Z (float64 dimensions)."""
        if self._num_points == 0:
            raise ValueError("Cannot compute bounds of an empty buffer")
        return Bounds.from_arrays(
            self[DimensionId.X_F64], self[DimensionId.Y_F64], self[DimensionId.Z_F64]
        )

    def __len__(self) -> int:
        return self._num_points

    def __repr__(self) -> str:
        return (
            f"PointBuffer({self._num_points:,}/{self._capacity:,} points, "
            f"{self._layout.byte_size} bytes/point)"
        )
