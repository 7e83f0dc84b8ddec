"""Reprojection filter — transform coordinates between CRS."""

from __future__ import annotations

import logging
from contextlib import ExitStack
from typing import Any, NoReturn

import numpy as np

from wolkenkern.core.bounds import Bounds
from wolkenkern.core.dimensions import DimensionId
from wolkenkern.core.pointbuffer import PointBuffer
from wolkenkern.core.spatialreference import SpatialReference, WKTMode
from wolkenkern.errors import (
    ImpedanceError,
    PreconditionError,
    ResourceAcquisitionError,
    TransformError,
)
from wolkenkern.stages.base import Filter, Stage
from wolkenkern.stages.iterators import IteratorKind, SequentialIterator
from wolkenkern.stages.registry import stage_registry
from wolkenkern.utils.crs import CoordinateTransform, acquire_transform

logger = logging.getLogger(__name__)

_XYZ = (DimensionId.X_F64, DimensionId.Y_F64, DimensionId.Z_F64)


class ReprojectionFilter(Filter):
    """Reproject point coordinates from one CRS to another.

    Options:
        out_srs: str or SpatialReference — Target CRS (e.g., "EPSG:4326").
                 Required.
        in_srs: str or SpatialReference — Source CRS (e.g., "EPSG:25832").
                If omitted, the upstream stage's spatial reference is used.

    ``in_srs`` and ``out_srs`` may also be passed as keyword arguments.
    """

    def __init__(
        self,
        prev_stage: Stage,
        in_srs: SpatialReference | str | None = None,
        out_srs: SpatialReference | str | None = None,
        **options: Any,
    ) -> None:
        if in_srs is not None:
            options["in_srs"] = in_srs
        if out_srs is not None:
            options["out_srs"] = out_srs
        super().__init__(prev_stage, **options)
        if "out_srs" not in self.options:
            raise ValueError("ReprojectionFilter requires 'out_srs' option")

        self._out_srs = SpatialReference.coerce(self.options["out_srs"])
        self._infer_input_srs = "in_srs" not in self.options
        self._in_srs = SpatialReference.coerce(self.options.get("in_srs"))
        self._transform: CoordinateTransform | None = None

    @property
    def in_srs(self) -> SpatialReference:
        return self._in_srs

    @property
    def out_srs(self) -> SpatialReference:
        return self._out_srs

    @property
    def description(self) -> str:
        return "Reprojection Filter"

    # ── Initialization ──────────────────────────────────────────────

    def _initialize(self) -> None:
        super()._initialize()

        if self._infer_input_srs:
            self._in_srs = self._prev_stage.spatial_reference
        if self._in_srs.empty:
            raise ResourceAcquisitionError(
                "No input spatial reference: set 'in_srs' option or give the "
                "upstream stage a spatial reference"
            )

        with ExitStack() as stack:
            self._transform = acquire_transform(
                self._in_srs.get_wkt(WKTMode.COMPOUND_OK),
                self._out_srs.get_wkt(WKTMode.COMPOUND_OK),
            )
            stack.callback(self.close)

            self._spatial_reference = self._out_srs
            self.update_bounds()
            stack.pop_all()

        logger.info("Reprojecting %s -> %s", self._in_srs.wkt, self._out_srs.wkt)

    def check_impedance(self) -> None:
        missing = [d.name for d in _XYZ if d not in self._schema]
        if missing:
            raise ImpedanceError(
                "Reprojection filter requires X,Y,Z dimensions as doubles "
                f"(missing: {', '.join(missing)})"
            )

    def update_bounds(self) -> None:
        """Replace bounds by the transformed corner pair.

        Bounds are advisory: if a corner cannot be transformed the previous
        bounds are kept. The result is only an approximation of the true
        reprojected extent.
        """
        old = self._bounds
        try:
            minimum = self.transform(*old.minimum)
            maximum = self.transform(*old.maximum)
        except TransformError as err:
            logger.debug("Keeping bounds %r: %s", old, err)
            return
        self._bounds = Bounds.from_corners(minimum, maximum)

    # ── Transformation ──────────────────────────────────────────────

    def transform(self, x: float, y: float, z: float) -> tuple[float, float, float]:
        """Transform a single coordinate triple.

        Raises:
            TransformError: If the backend cannot project the point.
        """
        coord = self._require_transform()
        try:
            new_x, new_y, new_z = coord.apply(x, y, z)
        except TransformError as err:
            raise TransformError(
                f"Could not project point ({x}, {y}, {z}): {err.diagnostic}",
                diagnostic=err.diagnostic,
                point=(x, y, z),
            ) from err
        return float(new_x), float(new_y), float(new_z)

    def process_buffer(self, buffer: PointBuffer) -> None:
        """Transform X, Y, Z of every valid point in place.

        The whole buffer fails if any point fails; coordinates are only
        written back once every point has been transformed.
        """
        coord = self._require_transform()
        count = buffer.num_points
        if count == 0:
            return

        schema = buffer.schema
        columns = [buffer.column(schema.dimension_index(d)) for d in _XYZ]
        x, y, z = (np.ascontiguousarray(c[:count], dtype=np.float64) for c in columns)
        try:
            results = coord.apply(x, y, z)
        except TransformError as err:
            self._raise_point_failure(x, y, z, err)

        for column, values in zip(columns, results):
            column[:count] = values
        logger.debug("Reprojected %d points", count)

    def _raise_point_failure(
        self, x: np.ndarray, y: np.ndarray, z: np.ndarray, err: TransformError
    ) -> NoReturn:
        """Re-raise a buffer failure as the error of the first failing point."""
        for px, py, pz in zip(x.tolist(), y.tolist(), z.tolist()):
            self.transform(px, py, pz)
        raise TransformError(
            f"Could not project buffer: {err.diagnostic}", diagnostic=err.diagnostic
        ) from err

    def _require_transform(self) -> CoordinateTransform:
        if self._transform is None:
            raise PreconditionError(f"{self.type_name()} has no coordinate transformation")
        return self._transform

    def close(self) -> None:
        if self._transform is not None:
            self._transform.close()
            self._transform = None

    # ── Iterators ───────────────────────────────────────────────────

    def supports_iterator(self, kind: IteratorKind) -> bool:
        return kind is IteratorKind.SEQUENTIAL and self._prev_stage.supports_iterator(kind)

    def _create_sequential_iterator(self) -> SequentialIterator:
        return ReprojectionSequentialIterator(self)

    @classmethod
    def type_name(cls) -> str:
        return "filters.reprojection"


class ReprojectionSequentialIterator(SequentialIterator):
    """Pulls buffers from the upstream stage and reprojects them."""

    def __init__(self, stage: ReprojectionFilter) -> None:
        super().__init__(stage)
        self._upstream = stage.prev_stage.create_sequential_iterator()

    def read(self, buffer: PointBuffer) -> int:
        try:
            return super().read(buffer)
        finally:
            # a failed buffer is consumed upstream; keep the cursor in step
            self._index = self._upstream.index

    def _read_buffer(self, buffer: PointBuffer) -> int:
        count = self._upstream.read(buffer)
        self._stage.process_buffer(buffer)
        return count

    def _skip_impl(self, count: int) -> int:
        return self._upstream.skip(count)

    @property
    def at_end(self) -> bool:
        return self._upstream.at_end


stage_registry.register(ReprojectionFilter)
