"""
Shared test configuration and fixtures for tripgpx
"""

import pytest
import tempfile
from pathlib import Path

# Disable loguru during tests to reduce noise
import loguru

from tests.fixtures import GPXTestDataFactory

loguru.logger.disable("src")


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files"""
    with tempfile.TemporaryDirectory() as tmp:
        yield Path(tmp)


@pytest.fixture(autouse=True)
def _clear_settings_env(monkeypatch):
    """Keep TRIPGPX_* variables from the developer shell out of tests"""
    for name in (
        "TRIPGPX_TOLERANCE_DEG",
        "TRIPGPX_COORD_PRECISION",
        "TRIPGPX_ELEVATION_PRECISION",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def sample_gpx_text():
    """Small exported route with metadata, elevation and a time element"""
    return GPXTestDataFactory.create_simple_gpx_text()


@pytest.fixture
def days_dir(temp_dir):
    """Content tree with two routed days, a day without route and a stray folder"""
    root = temp_dir / "days"
    GPXTestDataFactory.write_day(
        root, "day-01", GPXTestDataFactory.create_dense_gpx_text(name="Chennai")
    )
    GPXTestDataFactory.write_day(
        root, "day-02", GPXTestDataFactory.create_simple_gpx_text()
    )
    (root / "day-03").mkdir(parents=True)
    (root / "drafts").mkdir(parents=True)
    (root / "drafts" / "route.gpx").write_text(
        GPXTestDataFactory.create_simple_gpx_text(), encoding="utf-8"
    )
    return root


@pytest.fixture
def sample_point_data():
    """Coordinates used across stats and simplifier tests"""
    return {
        "collinear": [(0.0, 0.0, 0.0), (1.0, 0.0, 5.0), (2.0, 0.0, 10.0)],
        "chennai_pair": [(12.6000, 80.2000, 100.0), (12.6100, 80.2000, 150.0)],
        "out_of_range": [(95.0, 200.0, None), (-95.0, -200.0, None)],
    }
