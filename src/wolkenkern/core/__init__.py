"""Core data model for wolkenkern."""

from wolkenkern.core.bounds import Bounds
from wolkenkern.core.dimensions import DEFAULT_DIMENSIONS, Dimension, DimensionId
from wolkenkern.core.pointbuffer import PointBuffer
from wolkenkern.core.schema import Schema, SchemaLayout
from wolkenkern.core.spatialreference import SpatialReference, WKTMode

__all__ = [
    "Bounds",
    "DEFAULT_DIMENSIONS",
    "Dimension",
    "DimensionId",
    "PointBuffer",
    "Schema",
    "SchemaLayout",
    "SpatialReference",
    "WKTMode",
]
