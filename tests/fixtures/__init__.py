"""
Test fixtures and data factories
"""

from .test_data import (
    GPXTestDataFactory,
    TrackPointTestDataFactory,
)

__all__ = [
    "GPXTestDataFactory",
    "TrackPointTestDataFactory",
]
