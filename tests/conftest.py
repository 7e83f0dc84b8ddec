"""Shared test fixtures."""

import pytest

from wolkenkern.core.bounds import Bounds
from wolkenkern.core.dimensions import Dimension, DimensionId
from wolkenkern.core.schema import Schema
from wolkenkern.readers.faux import FauxReader


@pytest.fixture
def bounds() -> Bounds:
    """Box used by most faux reader tests."""
    return Bounds(1.0, 2.0, 3.0, 101.0, 102.0, 103.0)


@pytest.fixture
def xyz_schema() -> Schema:
    return Schema([
        Dimension(DimensionId.X_F64),
        Dimension(DimensionId.Y_F64),
        Dimension(DimensionId.Z_F64),
    ])


@pytest.fixture
def geo_reader() -> FauxReader:
    """Ramp of 100 lon/lat points in EPSG:4326, away from the poles."""
    return FauxReader(
        Bounds(5.0, 45.0, 0.0, 15.0, 55.0, 100.0),
        100,
        "ramp",
        spatialreference="EPSG:4326",
    )
