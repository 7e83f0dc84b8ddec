"""Schema (ordered dimension list) and its derived byte layout."""

from __future__ import annotations

from functools import cached_property
from typing import Iterable, Iterator

import numpy as np

from wolkenkern.core.dimensions import Dimension, DimensionId


class Schema:
    """Ordered, immutable sequence of dimensions.

    Order is significant: it defines the column order of every buffer built
    from this schema. A dimension id may appear at most once.

    Examples:
        >>> schema = Schema([Dimension(DimensionId.X_F64), Dimension(DimensionId.Y_F64)])
        >>> schema.dimension_index(DimensionId.Y_F64)
        1
    """

    def __init__(self, dimensions: Iterable[Dimension] = ()) -> None:
        dims = tuple(dimensions)
        seen: set[DimensionId] = set()
        for dim in dims:
            if dim.id in seen:
                raise ValueError(f"Dimension '{dim.id.name}' appears more than once")
            seen.add(dim.id)
        self._dimensions = dims

    @property
    def dimensions(self) -> tuple[Dimension, ...]:
        return self._dimensions

    @cached_property
    def layout(self) -> SchemaLayout:
        """Byte layout for this schema, computed on first use and shared."""
        return SchemaLayout(self)

    def get_dimension(self, index: int) -> Dimension:
        return self._dimensions[index]

    def has_dimension(self, dim_id: DimensionId) -> bool:
        return any(d.id is dim_id for d in self._dimensions)

    def dimension_index(self, dim_id: DimensionId) -> int:
        """Column index of a dimension id."""
        for index, dim in enumerate(self._dimensions):
            if dim.id is dim_id:
                return index
        raise KeyError(
            f"Dimension '{dim_id.name}' not found. "
            f"Available: {[d.id.name for d in self._dimensions]}"
        )

    def __len__(self) -> int:
        return len(self._dimensions)

    def __iter__(self) -> Iterator[Dimension]:
        return iter(self._dimensions)

    def __contains__(self, dim_id: object) -> bool:
        return isinstance(dim_id, DimensionId) and self.has_dimension(dim_id)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Schema):
            return NotImplemented
        return self._dimensions == other._dimensions

    def __hash__(self) -> int:
        return hash(self._dimensions)

    def __repr__(self) -> str:
        return f"Schema([{', '.join(d.id.name for d in self._dimensions)}])"


class SchemaLayout:
    """Read-only mapping from a schema to per-dimension byte offsets.

    Rows are packed: each dimension starts right after the previous one,
    and the row width is the sum of the dimension widths.
    """

    def __init__(self, schema: Schema) -> None:
        self._schema = schema
        offsets = []
        offset = 0
        for dim in schema:
            offsets.append(offset)
            offset += dim.byte_size
        self._offsets = tuple(offsets)
        self._byte_size = offset
        self._dtype = np.dtype({
            "names": [d.id.name for d in schema],
            "formats": [d.dtype for d in schema],
            "offsets": list(self._offsets),
            "itemsize": self._byte_size,
        })

    @property
    def schema(self) -> Schema:
        return self._schema

    @property
    def byte_size(self) -> int:
        """Width of one point row in bytes."""
        return self._byte_size

    @property
    def dtype(self) -> np.dtype:
        """Equivalent NumPy structured dtype (one field per dimension)."""
        return self._dtype

    def offset(self, dim_index: int) -> int:
        """Byte offset of a dimension within a row."""
        return self._offsets[dim_index]

    def field_name(self, dim_index: int) -> str:
        return self._dtype.names[dim_index]

    def __repr__(self) -> str:
        return f"SchemaLayout({len(self._schema)} dims, {self._byte_size} bytes/point)"
