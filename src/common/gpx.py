"""
gpxpy-backed GPX utilities shared across route tooling
"""

from typing import Iterator

import gpxpy
import gpxpy.gpx


class GPXParseError(ValueError):
    """Raised when a GPX document is rejected by strict parsing"""


class GPXUtils:
    """gpxpy loading helpers used by strict parsing"""

    @staticmethod
    def load(gpx_string: str) -> gpxpy.gpx.GPX:
        """Parse GPX text with gpxpy, rejecting malformed XML or coordinates"""
        if not gpx_string or not gpx_string.strip():
            raise GPXParseError("Empty GPX document")

        try:
            return gpxpy.parse(gpx_string)
        except (gpxpy.gpx.GPXException, ValueError) as e:
            raise GPXParseError(f"Invalid GPX document: {e}") from e

    @staticmethod
    def iter_track_points(gpx: gpxpy.gpx.GPX) -> Iterator[gpxpy.gpx.GPXTrackPoint]:
        """Yield every track point of every track and segment in document order"""
        for track in gpx.tracks:
            for segment in track.segments:
                yield from segment.points

