"""Pull iterators over a stage's points.

An iterator owns nothing but its cursor and a reference to the stage that
created it; several iterators over one stage never share position.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import TYPE_CHECKING

from wolkenkern.core.pointbuffer import PointBuffer

if TYPE_CHECKING:
    from wolkenkern.stages.base import Stage


class IteratorKind(Enum):
    SEQUENTIAL = "sequential"
    RANDOM = "random"


class StageIterator(ABC):
    """Base iterator: fills caller-owned buffers from the current cursor.

    Subclasses implement :meth:`_read_buffer`, which writes points starting
    at global index ``self.index`` into rows ``0..n-1`` of the buffer and
    returns ``n`` (at most ``buffer.capacity``).
    """

    def __init__(self, stage: Stage) -> None:
        self._stage = stage
        self._index = 0

    @property
    def stage(self) -> Stage:
        return self._stage

    @property
    def index(self) -> int:
        """Global index of the next point to be read."""
        return self._index

    def read(self, buffer: PointBuffer) -> int:
        """Read up to ``buffer.capacity`` points into ``buffer``.

        Returns:
            Number of points written; ``buffer.num_points`` is set to the
            same value. Fewer than ``buffer.capacity`` means end of stream.
        """
        count = self._read_buffer(buffer)
        buffer.num_points = count
        self._index += count
        return count

    @abstractmethod
    def _read_buffer(self, buffer: PointBuffer) -> int:
        """Fill ``buffer`` starting at ``self.index``; return the point count."""

    def _remaining(self) -> int:
        return max(self._stage.num_points - self._index, 0)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(stage={self._stage!r}, index={self._index})"


class SequentialIterator(StageIterator):
    """Forward-only iterator. The cursor never moves backwards."""

    def skip(self, count: int) -> int:
        """Advance past up to ``count`` points without reading them.

        Returns:
            Number of points actually skipped (clamped at end of stream).
        """
        if count < 0:
            raise ValueError(f"Cannot skip a negative number of points: {count}")
        skipped = self._skip_impl(count)
        self._index += skipped
        return skipped

    def _skip_impl(self, count: int) -> int:
        return min(count, self._remaining())

    @property
    def at_end(self) -> bool:
        return self._index >= self._stage.num_points


class RandomIterator(StageIterator):
    """Iterator that can be repositioned to any global point index."""

    def seek(self, position: int) -> int:
        """Move the cursor so the next read starts at ``position``.

        Returns:
            The new cursor position.
        """
        if position < 0:
            raise ValueError(f"Cannot seek to a negative position: {position}")
        self._index = self._seek_impl(int(position))
        return self._index

    def _seek_impl(self, position: int) -> int:
        return position
