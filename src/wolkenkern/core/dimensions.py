"""Standard point dimension definitions."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

import numpy as np


class DimensionId(Enum):
    """Enumerated dimension identities: a name paired with a storage type.

    The same logical attribute may exist with several storage types
    (e.g. ``RED_U8`` and ``RED_U16``); each is a distinct identity.
    """

    X_F64 = ("X", "f8")
    Y_F64 = ("Y", "f8")
    Z_F64 = ("Z", "f8")
    X_I32 = ("X", "i4")
    Y_I32 = ("Y", "i4")
    Z_I32 = ("Z", "i4")
    TIME_U64 = ("Time", "u8")
    GPS_TIME_F64 = ("GpsTime", "f8")
    INTENSITY_U16 = ("Intensity", "u2")
    RETURN_NUMBER_U8 = ("ReturnNumber", "u1")
    NUMBER_OF_RETURNS_U8 = ("NumberOfReturns", "u1")
    CLASSIFICATION_U8 = ("Classification", "u1")
    SCAN_ANGLE_RANK_I8 = ("ScanAngleRank", "i1")
    USER_DATA_U8 = ("UserData", "u1")
    POINT_SOURCE_ID_U16 = ("PointSourceId", "u2")
    RED_U8 = ("Red", "u1")
    GREEN_U8 = ("Green", "u1")
    BLUE_U8 = ("Blue", "u1")
    RED_U16 = ("Red", "u2")
    GREEN_U16 = ("Green", "u2")
    BLUE_U16 = ("Blue", "u2")

    @property
    def dimension_name(self) -> str:
        return self.value[0]

    @property
    def dtype(self) -> np.dtype:
        return np.dtype(self.value[1])


@dataclass(frozen=True)
class Dimension:
    """A named, typed per-point attribute.

    Examples:
        >>> dim = Dimension(DimensionId.X_F64)
        >>> dim.name, dim.byte_size
        ('X', 8)
    """

    id: DimensionId

    @property
    def name(self) -> str:
        return self.id.dimension_name

    @property
    def dtype(self) -> np.dtype:
        return self.id.dtype

    @property
    def byte_size(self) -> int:
        """Storage width in bytes."""
        return self.id.dtype.itemsize

    def __repr__(self) -> str:
        return f"Dimension({self.id.name})"


# Schema produced by readers that are not given an explicit dimension list
DEFAULT_DIMENSIONS: tuple[Dimension, ...] = (
    Dimension(DimensionId.X_F64),
    Dimension(DimensionId.Y_F64),
    Dimension(DimensionId.Z_F64),
    Dimension(DimensionId.TIME_U64),
)


def get_dimension_id(key: str) -> DimensionId:
    """Look up a dimension id by member name (e.g. ``"RED_U8"``), case-insensitive."""
    try:
        return DimensionId[key.strip().upper()]
    except KeyError:
        raise KeyError(
            f"Unknown dimension '{key}'. "
            f"Available: {[d.name for d in DimensionId]}"
        ) from None
