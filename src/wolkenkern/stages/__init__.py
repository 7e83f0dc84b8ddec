"""Stage and iterator contracts."""

from wolkenkern.stages.base import Filter, Stage
from wolkenkern.stages.iterators import IteratorKind, RandomIterator, SequentialIterator
from wolkenkern.stages.registry import get_stage, stage_registry

__all__ = [
    "Filter",
    "Stage",
    "IteratorKind",
    "RandomIterator",
    "SequentialIterator",
    "get_stage",
    "stage_registry",
]
