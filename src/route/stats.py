"""
Route statistics computed from parsed track points
"""

import math
import sys
from typing import List, Optional, Sequence

from loguru import logger

from ..common.models import ElevationSample, GPXStats, TrackBounds, TrackPoint
from ..common.utils import round_half_up

# Earth radius in kilometers
EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two points in kilometers"""
    delta_lat = math.radians(lat2 - lat1)
    delta_lon = math.radians(lon2 - lon1)

    a = (
        math.sin(delta_lat / 2) ** 2
        + math.cos(math.radians(lat1))
        * math.cos(math.radians(lat2))
        * math.sin(delta_lon / 2) ** 2
    )
    a = min(a, 1.0)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def _segment_km(start: TrackPoint, end: TrackPoint) -> float:
    return haversine_km(start.lat, start.lon, end.lat, end.lon)


def total_distance_km(points: Sequence[TrackPoint]) -> float:
    """Unrounded Haversine length of the track"""
    return sum(_segment_km(points[i - 1], points[i]) for i in range(1, len(points)))


def compute_stats(points: Sequence[TrackPoint]) -> GPXStats:
    """Compute distance and elevation statistics for a track.

    Elevation gain and loss only accumulate over consecutive pairs where both
    points carry an elevation, so gaps in elevation data undercount the climb
    compared to the net change between the first and last elevation readings.
    """
    if not points:
        return GPXStats()

    gain = 0.0
    loss = 0.0
    for previous, current in zip(points, points[1:]):
        if not (previous.has_elevation and current.has_elevation):
            continue
        delta = current.elevation - previous.elevation
        if not math.isfinite(delta):
            logger.debug(
                f"Skipping unmeasurable elevation change "
                f"{previous.elevation} -> {current.elevation}"
            )
            continue
        # Totals saturate instead of overflowing to infinity
        if delta > 0:
            gain = min(gain + delta, sys.float_info.max)
        else:
            loss = min(loss - delta, sys.float_info.max)

    elevations = [p.elevation for p in points if p.has_elevation]
    min_elevation: Optional[int] = None
    max_elevation: Optional[int] = None
    if elevations:
        min_elevation = int(round_half_up(min(elevations)))
        max_elevation = int(round_half_up(max(elevations)))

    return GPXStats(
        distance_km=round_half_up(total_distance_km(points), 1),
        elevation_gain_m=int(round_half_up(gain)),
        elevation_loss_m=int(round_half_up(loss)),
        min_elevation_m=min_elevation,
        max_elevation_m=max_elevation,
    )


def elevation_profile(points: Sequence[TrackPoint]) -> List[ElevationSample]:
    """Cumulative distance at each elevation-bearing point, for elevation charts"""
    samples: List[ElevationSample] = []
    cumulative = 0.0

    for i, point in enumerate(points):
        if i > 0:
            cumulative += _segment_km(points[i - 1], point)
        if point.has_elevation:
            samples.append(
                ElevationSample(distance_km=cumulative, elevation_m=point.elevation)
            )

    return samples


def compute_bounds(points: Sequence[TrackPoint]) -> Optional[TrackBounds]:
    """Bounding box of the track, or None when it has no points"""
    if not points:
        return None

    lats = [p.lat for p in points]
    lons = [p.lon for p in points]
    return TrackBounds(
        min_lat=min(lats), min_lon=min(lons), max_lat=max(lats), max_lon=max(lons)
    )

