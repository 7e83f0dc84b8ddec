"""Pipeline — build a stage chain from JSON and pull it buffer by buffer."""

from __future__ import annotations

import json
import logging
from enum import Enum
from typing import Any, Iterator

from wolkenkern.core.bounds import Bounds
from wolkenkern.core.dimensions import Dimension, DimensionId
from wolkenkern.core.pointbuffer import PointBuffer
from wolkenkern.core.spatialreference import SpatialReference
from wolkenkern.stages.base import Filter, Stage
from wolkenkern.stages.registry import get_stage

logger = logging.getLogger(__name__)


def _jsonable(value: Any) -> Any:
    """json.dumps fallback for option values that are not plain JSON."""
    if isinstance(value, Bounds):
        return value.to_string()
    if isinstance(value, SpatialReference):
        return value.wkt
    if isinstance(value, Dimension):
        return value.id.name
    if isinstance(value, DimensionId):
        return value.name
    if isinstance(value, Enum):
        return value.value
    raise TypeError(f"Option value {value!r} is not JSON serializable")


class Pipeline:
    """Linear stage chain: one reader followed by any number of filters.

    Each filter is attached to the stage defined just before it. Points are
    pulled from the last stage through its sequential iterator.

    Examples:
        >>> import json
        >>> p = Pipeline(json.dumps({
        ...     "pipeline": [
        ...         {"type": "readers.faux", "bounds": "([0, 10], [0, 10], [0, 10])",
        ...          "num_points": 100, "mode": "ramp",
        ...          "spatialreference": "EPSG:4326"},
        ...         {"type": "filters.reprojection", "out_srs": "EPSG:3857"},
        ...     ]
        ... }))
        >>> count = p.execute()
    """

    def __init__(
        self,
        json_str: str | None = None,
        stages: list | None = None,
    ) -> None:
        self._stages: list[Stage] = []
        self._count: int = 0

        if json_str is not None:
            self._parse_json(json_str)
        elif stages is not None:
            self._parse_stages(stages)

    def _parse_json(self, json_str: str) -> None:
        """Parse a JSON pipeline definition."""
        data = json.loads(json_str)

        if isinstance(data, dict):
            stages = data.get("pipeline", [])
        elif isinstance(data, list):
            stages = data
        else:
            raise ValueError("Pipeline JSON must be a dict with 'pipeline' key or a list")

        self._parse_stages(stages)

    def _parse_stages(self, stages: list) -> None:
        """Parse stage definitions (dicts or ready-made Stage objects)."""
        for stage in stages:
            if isinstance(stage, Stage):
                self._stages.append(stage)
            elif isinstance(stage, dict):
                self._parse_dict_stage(stage)
            else:
                raise ValueError(f"Invalid pipeline stage: {stage!r}")

    def _parse_dict_stage(self, stage: dict[str, Any]) -> None:
        """Parse a dict stage definition."""
        stage_type = stage.get("type", "")
        options = {k: v for k, v in stage.items() if k != "type"}

        if stage_type.startswith("readers."):
            if self._stages:
                raise ValueError(f"Reader must be the first stage: {stage}")
            self._stages.append(get_stage(stage_type, **options))

        elif stage_type.startswith("filters."):
            if not self._stages:
                raise ValueError(f"Filter has no upstream stage: {stage}")
            self._stages.append(get_stage(stage_type, self._stages[-1], **options))

        else:
            raise ValueError(f"Cannot determine stage type: {stage}")

    @property
    def stages(self) -> list[Stage]:
        return list(self._stages)

    @property
    def stage(self) -> Stage:
        """The last stage of the chain (the one points are pulled from)."""
        if not self._stages:
            raise ValueError("Pipeline has no stages")
        return self._stages[-1]

    def validate(self) -> list[str]:
        """Validate the pipeline configuration.

        Returns:
            List of error messages (empty = valid).
        """
        errors = []
        if not self._stages:
            errors.append("Pipeline has no stages")
            return errors
        if isinstance(self._stages[0], Filter):
            errors.append("Pipeline must start with a reader")
        for prev, stage in zip(self._stages, self._stages[1:]):
            if not isinstance(stage, Filter):
                errors.append(f"{stage.type_name()} is not a filter")
            elif stage.prev_stage is not prev:
                errors.append(f"{stage.type_name()} is not attached to {prev.type_name()}")
        return errors

    def initialize(self) -> None:
        """Initialize the chain (upstream stages are initialized on the way)."""
        errors = self.validate()
        if errors:
            raise ValueError(f"Invalid pipeline: {'; '.join(errors)}")
        if not self.stage.initialized:
            logger.info("Initializing %r", self)
            self.stage.initialize()

    def iter_buffers(self, chunk_size: int = 1_000_000) -> Iterator[PointBuffer]:
        """Pull the chain and yield one new buffer per non-empty read."""
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        self.initialize()
        self._count = 0
        iterator = self.stage.create_sequential_iterator()
        layout = self.stage.schema.layout

        chunk_num = 0
        while True:
            buffer = PointBuffer(layout, chunk_size)
            count = iterator.read(buffer)
            if count > 0:
                chunk_num += 1
                self._count += count
                logger.info(
                    "Chunk %d: %d points (total read: %d)", chunk_num, count, self._count
                )
                yield buffer
            if count < chunk_size:
                break

    def execute(self, chunk_size: int = 1_000_000) -> int:
        """Drain the pipeline.

        Returns:
            Total number of points produced by the last stage.
        """
        for _ in self.iter_buffers(chunk_size):
            pass
        return self._count

    def close(self) -> None:
        for stage in reversed(self._stages):
            stage.close()

    @property
    def count(self) -> int:
        """Points produced by the last execution."""
        return self._count

    @property
    def metadata(self) -> dict[str, Any]:
        """Metadata of the (initialized) last stage."""
        if not self._stages or not self.stage.initialized:
            return {}
        stage = self.stage
        return {
            "point_count": stage.num_points,
            "dimensions": [d.id.name for d in stage.schema],
            "bounds": stage.bounds.to_string(),
            "spatialreference": stage.spatial_reference.wkt,
        }

    def to_json(self) -> str:
        """Serialize the pipeline back to JSON."""
        stages = [{"type": s.type_name(), **s.options} for s in self._stages]
        return json.dumps({"pipeline": stages}, indent=2, default=_jsonable)

    def __repr__(self) -> str:
        return f"Pipeline({' -> '.join(s.type_name() for s in self._stages)})"
