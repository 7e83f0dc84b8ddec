"""Base classes for pipeline stages (readers and filters)."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

from wolkenkern.core.bounds import Bounds
from wolkenkern.core.schema import Schema
from wolkenkern.core.spatialreference import SpatialReference
from wolkenkern.errors import PreconditionError
from wolkenkern.stages.iterators import IteratorKind, RandomIterator, SequentialIterator

logger = logging.getLogger(__name__)


class Stage(ABC):
    """Base class for every pipeline node.

    A stage owns its schema, bounds, spatial reference and logical point
    count. These are derived once, by :meth:`initialize`, and are read-only
    afterwards. Subclasses hook into initialization by overriding
    :meth:`_initialize` and produce iterators through
    :meth:`_create_sequential_iterator` / :meth:`_create_random_iterator`.
    """

    def __init__(self, **options: Any) -> None:
        self.options = options
        self._initialized = False
        self._schema = Schema()
        self._bounds = Bounds()
        self._spatial_reference = SpatialReference.coerce(
            options.get("spatialreference")
        )
        self._num_points = 0

    # ── Initialization ──────────────────────────────────────────────

    def initialize(self) -> None:
        """Derive this stage's metadata. Must be called exactly once."""
        if self._initialized:
            raise PreconditionError(f"{self.type_name()} is already initialized")
        self._initialize()
        self._initialized = True
        logger.debug(
            "Initialized %s: %d points, %r", self.type_name(), self._num_points, self._schema
        )

    def _initialize(self) -> None:
        """Stage-specific metadata derivation (runs inside initialize())."""

    @property
    def initialized(self) -> bool:
        return self._initialized

    def _require_initialized(self) -> None:
        if not self._initialized:
            raise PreconditionError(
                f"{self.type_name()} must be initialized before use"
            )

    # ── Metadata ────────────────────────────────────────────────────

    @property
    def schema(self) -> Schema:
        self._require_initialized()
        return self._schema

    @property
    def bounds(self) -> Bounds:
        self._require_initialized()
        return self._bounds

    @property
    def spatial_reference(self) -> SpatialReference:
        self._require_initialized()
        return self._spatial_reference

    @property
    def num_points(self) -> int:
        """Logical number of points this stage produces."""
        self._require_initialized()
        return self._num_points

    @property
    def id(self) -> int:
        return int(self.options.get("id", 0))

    @property
    def description(self) -> str:
        return type(self).__name__

    # ── Iterators ───────────────────────────────────────────────────

    @abstractmethod
    def supports_iterator(self, kind: IteratorKind) -> bool:
        """Whether this stage can produce an iterator of the given kind."""

    def create_sequential_iterator(self) -> SequentialIterator:
        self._check_iterator(IteratorKind.SEQUENTIAL)
        return self._create_sequential_iterator()

    def create_random_iterator(self) -> RandomIterator:
        self._check_iterator(IteratorKind.RANDOM)
        return self._create_random_iterator()

    def _check_iterator(self, kind: IteratorKind) -> None:
        self._require_initialized()
        if not self.supports_iterator(kind):
            raise PreconditionError(
                f"{self.type_name()} does not support {kind.value} iteration"
            )

    def _create_sequential_iterator(self) -> SequentialIterator:
        raise NotImplementedError

    def _create_random_iterator(self) -> RandomIterator:
        raise NotImplementedError

    # ── Resources ───────────────────────────────────────────────────

    def close(self) -> None:
        """Release resources acquired during initialize(). Idempotent."""

    def __enter__(self) -> Stage:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    @classmethod
    @abstractmethod
    def type_name(cls) -> str:
        """Pipeline type identifier (e.g., 'filters.reprojection')."""

    def __repr__(self) -> str:
        opts = ", ".join(f"{k}={v!r}" for k, v in self.options.items())
        return f"{self.type_name()}({opts})"


class Filter(Stage):
    """A stage with exactly one upstream stage.

    The upstream reference is not owned: the upstream stage must outlive
    the filter. By default a filter inherits the upstream schema, bounds,
    spatial reference and point count, then runs :meth:`check_impedance`.
    """

    def __init__(self, prev_stage: Stage, **options: Any) -> None:
        super().__init__(**options)
        self._prev_stage = prev_stage

    @property
    def prev_stage(self) -> Stage:
        return self._prev_stage

    def _initialize(self) -> None:
        if self._prev_stage is None:
            raise PreconditionError(f"{self.type_name()} requires an upstream stage")
        if not self._prev_stage.initialized:
            self._prev_stage.initialize()

        upstream = self._prev_stage
        self._schema = upstream.schema
        self._bounds = upstream.bounds
        self._num_points = upstream.num_points
        if self._spatial_reference.empty:
            self._spatial_reference = upstream.spatial_reference

        self.check_impedance()

    def check_impedance(self) -> None:
        """Validate the inherited schema (raise ImpedanceError on mismatch)."""

    def __repr__(self) -> str:
        return f"{super().__repr__()} <- {self._prev_stage!r}"
