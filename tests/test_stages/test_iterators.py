"""Tests for the stage lifecycle and iterator contracts."""

import numpy as np
import pytest

from wolkenkern.core.pointbuffer import PointBuffer
from wolkenkern.errors import PreconditionError
from wolkenkern.readers.faux import FauxReader
from wolkenkern.stages.iterators import IteratorKind


@pytest.fixture
def reader(bounds) -> FauxReader:
    r = FauxReader(bounds, 25, "ramp")
    r.initialize()
    return r


class TestStageLifecycle:
    def test_metadata_before_initialize_raises(self, bounds):
        r = FauxReader(bounds, 25, "ramp")
        assert not r.initialized
        with pytest.raises(PreconditionError, match="initialized"):
            _ = r.schema
        with pytest.raises(PreconditionError):
            _ = r.bounds
        with pytest.raises(PreconditionError):
            _ = r.spatial_reference

    def test_iterator_before_initialize_raises(self, bounds):
        r = FauxReader(bounds, 25, "ramp")
        with pytest.raises(PreconditionError):
            r.create_sequential_iterator()
        with pytest.raises(PreconditionError):
            r.create_random_iterator()

    def test_double_initialize_raises(self, reader):
        with pytest.raises(PreconditionError, match="already initialized"):
            reader.initialize()

    def test_context_manager(self, bounds):
        with FauxReader(bounds, 5, "constant") as r:
            r.initialize()
            assert r.num_points == 5


class TestSequentialIterator:
    def test_end_of_stream_is_stable(self, reader):
        data = PointBuffer(reader.schema.layout, 10)
        it = reader.create_sequential_iterator()
        assert it.read(data) == 10
        assert it.read(data) == 10
        assert it.read(data) == 5
        assert data.num_points == 5
        for _ in range(3):
            assert it.read(data) == 0
            assert data.num_points == 0
        assert it.at_end

    def test_cursor_advances(self, reader):
        data = PointBuffer(reader.schema.layout, 4)
        it = reader.create_sequential_iterator()
        assert it.index == 0
        it.read(data)
        assert it.index == 4

    def test_skip(self, reader):
        data = PointBuffer(reader.schema.layout, 3)
        it = reader.create_sequential_iterator()
        assert it.skip(20) == 20
        it.read(data)
        np.testing.assert_array_equal(data.column(3), [20, 21, 22])

    def test_skip_clamps_at_end(self, reader):
        it = reader.create_sequential_iterator()
        assert it.skip(100) == 25
        assert it.at_end
        assert it.skip(1) == 0

    def test_negative_skip_raises(self, reader):
        with pytest.raises(ValueError, match="negative"):
            reader.create_sequential_iterator().skip(-1)

    def test_iterators_are_independent(self, reader):
        layout = reader.schema.layout
        a = reader.create_sequential_iterator()
        b = reader.create_sequential_iterator()
        a.read(PointBuffer(layout, 10))
        data = PointBuffer(layout, 2)
        b.read(data)
        assert a.index == 10
        assert b.index == 2
        assert data.get_field(0, 3) == 0

    def test_reading_does_not_change_stage(self, reader):
        before = (reader.schema, reader.bounds, reader.num_points)
        it = reader.create_sequential_iterator()
        it.read(PointBuffer(reader.schema.layout, 25))
        del it
        assert (reader.schema, reader.bounds, reader.num_points) == before


class TestRandomIterator:
    def test_continuity_after_reads(self, bounds):
        r = FauxReader(bounds, 1000, "ramp")
        r.initialize()
        layout = r.schema.layout
        it = r.create_random_iterator()
        it.read(PointBuffer(layout, 20))
        assert it.index == 20

        data = PointBuffer(layout, 10)
        assert it.seek(99) == 99
        it.read(data)
        np.testing.assert_array_equal(data.column(3), np.arange(99, 109))

        assert it.seek(7) == 7
        it.read(data)
        np.testing.assert_array_equal(data.column(3), np.arange(7, 17))

    def test_seek_past_end_reads_nothing(self, reader):
        data = PointBuffer(reader.schema.layout, 10)
        it = reader.create_random_iterator()
        assert it.seek(500) == 500
        assert it.read(data) == 0
        assert data.num_points == 0

    def test_seek_near_end_reads_remainder(self, reader):
        data = PointBuffer(reader.schema.layout, 10)
        it = reader.create_random_iterator()
        it.seek(22)
        assert it.read(data) == 3

    def test_negative_seek_raises(self, reader):
        with pytest.raises(ValueError, match="negative"):
            reader.create_random_iterator().seek(-1)

    def test_capability_query(self, reader):
        assert reader.supports_iterator(IteratorKind.RANDOM)
