"""Tests for the pipeline engine."""

import json

import numpy as np
import pytest

from wolkenkern.core.bounds import Bounds
from wolkenkern.core.dimensions import DimensionId
from wolkenkern.errors import PreconditionError
from wolkenkern.filters.reprojection import ReprojectionFilter
from wolkenkern.pipeline.pipeline import Pipeline
from wolkenkern.readers.faux import FauxReader


def _faux_stage(**extra):
    stage = {
        "type": "readers.faux",
        "bounds": "([5, 15], [45, 55], [0, 100])",
        "num_points": 250,
        "mode": "ramp",
        "spatialreference": "EPSG:4326",
    }
    stage.update(extra)
    return stage


class TestPipelineParsing:
    def test_parse_dict_format(self):
        p = Pipeline(json.dumps({"pipeline": [_faux_stage()]}))
        assert len(p.stages) == 1
        assert isinstance(p.stage, FauxReader)

    def test_parse_list_format(self):
        p = Pipeline(json.dumps([
            _faux_stage(),
            {"type": "filters.reprojection", "out_srs": "EPSG:3857"},
        ]))
        assert len(p.stages) == 2
        assert isinstance(p.stage, ReprojectionFilter)
        assert p.stage.prev_stage is p.stages[0]

    def test_stage_objects(self):
        reader = FauxReader(Bounds(0, 0, 0, 1, 1, 1), 10, "constant")
        p = Pipeline(stages=[reader])
        assert p.stage is reader

    def test_reader_must_be_first(self):
        with pytest.raises(ValueError, match="Reader must be the first stage"):
            Pipeline(json.dumps([_faux_stage(), _faux_stage()]))

    def test_filter_without_upstream(self):
        with pytest.raises(ValueError, match="no upstream"):
            Pipeline(json.dumps([{"type": "filters.reprojection", "out_srs": "EPSG:3857"}]))

    def test_unknown_type(self):
        with pytest.raises(ValueError, match="Cannot determine stage type"):
            Pipeline(json.dumps([{"type": "writers.las"}]))

    def test_invalid_json_shape(self):
        with pytest.raises(ValueError, match="must be a dict"):
            Pipeline(json.dumps("readers.faux"))


class TestPipelineValidation:
    def test_empty_pipeline(self):
        assert Pipeline().validate() == ["Pipeline has no stages"]
        with pytest.raises(ValueError, match="Invalid pipeline"):
            Pipeline().initialize()

    def test_valid_pipeline(self):
        p = Pipeline(json.dumps([_faux_stage()]))
        assert p.validate() == []

    def test_detached_filter(self, geo_reader):
        other = FauxReader(Bounds(0, 0, 0, 1, 1, 1), 1, spatialreference="EPSG:4326")
        f = ReprojectionFilter(other, out_srs="EPSG:3857")
        errors = Pipeline(stages=[geo_reader, f]).validate()
        assert any("not attached" in e for e in errors)

    def test_second_reader_is_error(self, geo_reader):
        other = FauxReader(Bounds(0, 0, 0, 1, 1, 1), 1)
        errors = Pipeline(stages=[geo_reader, other]).validate()
        assert any("is not a filter" in e for e in errors)


class TestPipelineExecution:
    def test_execute_returns_count(self):
        p = Pipeline(json.dumps([
            _faux_stage(),
            {"type": "filters.reprojection", "out_srs": "EPSG:3857"},
        ]))
        assert p.execute(chunk_size=100) == 250
        assert p.count == 250

    def test_iter_buffers_chunks(self):
        p = Pipeline(json.dumps([_faux_stage()]))
        sizes = [b.num_points for b in p.iter_buffers(chunk_size=100)]
        assert sizes == [100, 100, 50]

    def test_exact_multiple_has_no_empty_chunk(self):
        p = Pipeline(json.dumps([_faux_stage(num_points=200)]))
        sizes = [b.num_points for b in p.iter_buffers(chunk_size=100)]
        assert sizes == [100, 100]

    def test_chunks_concatenate_to_whole(self):
        p = Pipeline(json.dumps([_faux_stage()]))
        times = np.concatenate(
            [b[DimensionId.TIME_U64] for b in p.iter_buffers(chunk_size=64)]
        )
        np.testing.assert_array_equal(times, np.arange(250))

    def test_reprojected_output(self):
        p = Pipeline(json.dumps([
            _faux_stage(),
            {"type": "filters.reprojection", "out_srs": "EPSG:3857"},
        ]))
        (buffer,) = list(p.iter_buffers())
        assert buffer[DimensionId.X_F64].min() > 500_000
        assert buffer[DimensionId.Y_F64].min() > 5_000_000

    def test_invalid_chunk_size(self):
        p = Pipeline(json.dumps([_faux_stage()]))
        with pytest.raises(ValueError, match="chunk_size"):
            p.execute(chunk_size=0)

    def test_close_releases_filters(self):
        p = Pipeline(json.dumps([
            _faux_stage(),
            {"type": "filters.reprojection", "out_srs": "EPSG:3857"},
        ]))
        p.execute()
        p.close()
        with pytest.raises(PreconditionError):
            p.stage.transform(10.0, 50.0, 0.0)


class TestPipelineIntrospection:
    def test_metadata(self):
        p = Pipeline(json.dumps([
            _faux_stage(),
            {"type": "filters.reprojection", "out_srs": "EPSG:3857"},
        ]))
        assert p.metadata == {}
        p.initialize()
        meta = p.metadata
        assert meta["point_count"] == 250
        assert meta["dimensions"] == ["X_F64", "Y_F64", "Z_F64", "TIME_U64"]
        assert meta["spatialreference"] == "EPSG:3857"
        assert Bounds.from_string(meta["bounds"]).minx > 500_000

    def test_to_json_roundtrip(self):
        p = Pipeline(json.dumps([
            _faux_stage(),
            {"type": "filters.reprojection", "out_srs": "EPSG:3857"},
        ]))
        p2 = Pipeline(p.to_json())
        assert [s.type_name() for s in p2.stages] == [
            "readers.faux",
            "filters.reprojection",
        ]
        assert p2.execute() == 250

    def test_to_json_serializes_objects(self):
        reader = FauxReader(
            Bounds(0.0, 0.0, 0.0, 1.0, 1.0, 1.0), 3, "ramp", [DimensionId.X_F64, DimensionId.Y_F64]
        )
        data = json.loads(Pipeline(stages=[reader]).to_json())
        stage = data["pipeline"][0]
        assert stage["bounds"] == "([0.0, 1.0], [0.0, 1.0], [0.0, 1.0])"
        assert stage["mode"] == "ramp"
        assert stage["dimensions"] == ["X_F64", "Y_F64"]

    def test_repr(self):
        p = Pipeline(json.dumps([
            _faux_stage(),
            {"type": "filters.reprojection", "out_srs": "EPSG:3857"},
        ]))
        assert repr(p) == "Pipeline(readers.faux -> filters.reprojection)"
