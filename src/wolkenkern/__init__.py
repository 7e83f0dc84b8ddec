"""wolkenkern — streaming core for point cloud pipelines."""

from wolkenkern._version import __version__
from wolkenkern.core.bounds import Bounds
from wolkenkern.core.dimensions import Dimension, DimensionId
from wolkenkern.core.pointbuffer import PointBuffer
from wolkenkern.core.schema import Schema, SchemaLayout
from wolkenkern.core.spatialreference import SpatialReference, WKTMode
from wolkenkern.errors import (
    ImpedanceError,
    PreconditionError,
    ResourceAcquisitionError,
    TransformError,
    WolkenkernError,
)
from wolkenkern.filters.reprojection import ReprojectionFilter
from wolkenkern.pipeline.pipeline import Pipeline
from wolkenkern.readers.faux import FauxReader, Mode
from wolkenkern.stages.base import Filter, Stage
from wolkenkern.stages.iterators import IteratorKind, RandomIterator, SequentialIterator

__all__ = [
    "__version__",
    "Bounds",
    "Dimension",
    "DimensionId",
    "PointBuffer",
    "Schema",
    "SchemaLayout",
    "SpatialReference",
    "WKTMode",
    "WolkenkernError",
    "ImpedanceError",
    "PreconditionError",
    "ResourceAcquisitionError",
    "TransformError",
    "Stage",
    "Filter",
    "IteratorKind",
    "SequentialIterator",
    "RandomIterator",
    "FauxReader",
    "Mode",
    "ReprojectionFilter",
    "Pipeline",
]
