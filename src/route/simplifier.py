"""
Douglas-Peucker route simplification and minimal GPX re-serialization.

Distances are measured in the (lon, lat) plane: longitude is X and latitude is
Y. This planar approximation holds for the small regional extents of a single
day's route.
"""

import math
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from jinja2 import Environment, FileSystemLoader, TemplateNotFound
from loguru import logger

from ..common.models import GPXDocumentMetadata, TrackPoint
from ..common.utils import format_decimal, round_half_up
from .models import (
    DEFAULT_COORD_PRECISION,
    DEFAULT_ELEVATION_PRECISION,
    DEFAULT_TOLERANCE_DEG,
    SimplifyResult,
    SimplifySettings,
)
from .parser import ParseMode, extract_metadata, parse

GPX_CREATOR = "tripgpx"
GPX_TEMPLATE = "route.gpx.j2"

_TEMPLATE_ENV: Optional[Environment] = None


def _get_template_env() -> Environment:
    """Return a cached Jinja environment for GPX templates."""
    global _TEMPLATE_ENV
    if _TEMPLATE_ENV is None:
        _TEMPLATE_ENV = Environment(
            loader=FileSystemLoader(str(Path(__file__).parent / "templates")),
            autoescape=True,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )
    return _TEMPLATE_ENV


def perpendicular_distance(
    point: TrackPoint, line_start: TrackPoint, line_end: TrackPoint
) -> float:
    """Distance from point to the segment line_start-line_end.

    The projection parameter is clamped to [0, 1], so a zero-length segment
    reduces to the plain distance between two points.
    """
    dx = line_end.lon - line_start.lon
    dy = line_end.lat - line_start.lat

    if dx == 0 and dy == 0:
        return math.hypot(point.lon - line_start.lon, point.lat - line_start.lat)

    t = ((point.lon - line_start.lon) * dx + (point.lat - line_start.lat) * dy) / (
        dx * dx + dy * dy
    )
    t = max(0.0, min(1.0, t))

    nearest_x = line_start.lon + t * dx
    nearest_y = line_start.lat + t * dy
    return math.hypot(point.lon - nearest_x, point.lat - nearest_y)


def douglas_peucker(
    points: Sequence[TrackPoint], tolerance_deg: float = DEFAULT_TOLERANCE_DEG
) -> List[TrackPoint]:
    """Reduce a polyline, keeping points that deviate more than tolerance_deg.

    Works over an explicit stack of index ranges instead of recursion so long
    tracks cannot exhaust the interpreter stack. On equal deviations the first
    point in track order is chosen as the split point.
    """
    count = len(points)
    if count <= 2:
        return list(points)

    keep = [False] * count
    keep[0] = keep[-1] = True
    ranges = [(0, count - 1)]

    while ranges:
        first, last = ranges.pop()
        if last - first < 2:
            continue

        max_distance = 0.0
        max_index = first
        start, end = points[first], points[last]
        for i in range(first + 1, last):
            distance = perpendicular_distance(points[i], start, end)
            if distance > max_distance:
                max_distance = distance
                max_index = i

        if max_distance > tolerance_deg:
            keep[max_index] = True
            ranges.append((max_index, last))
            ranges.append((first, max_index))

    return [point for point, kept in zip(points, keep) if kept]


def quantize_point(
    point: TrackPoint, coord_precision: int, elevation_precision: int
) -> TrackPoint:
    """Snap a point to the precision it will be written with"""
    return TrackPoint(
        lat=round_half_up(point.lat, coord_precision),
        lon=round_half_up(point.lon, coord_precision),
        elevation=(
            round_half_up(point.elevation, elevation_precision)
            if point.has_elevation
            else None
        ),
    )


def _point_context(
    point: TrackPoint, coord_precision: int, elevation_precision: int
) -> Dict[str, Any]:
    return {
        "lat": format_decimal(point.lat, coord_precision),
        "lon": format_decimal(point.lon, coord_precision),
        "ele": (
            format_decimal(point.elevation, elevation_precision)
            if point.has_elevation
            else None
        ),
    }


def render_gpx(
    points: Sequence[TrackPoint],
    metadata: Optional[GPXDocumentMetadata] = None,
    coord_precision: int = DEFAULT_COORD_PRECISION,
    elevation_precision: int = DEFAULT_ELEVATION_PRECISION,
) -> str:
    """Serialize points as a minimal single-track GPX 1.1 document"""
    try:
        template = _get_template_env().get_template(GPX_TEMPLATE)
    except TemplateNotFound as exc:
        raise RuntimeError(f"Missing GPX template: {GPX_TEMPLATE}") from exc

    return template.render(
        creator=GPX_CREATOR,
        metadata=metadata or GPXDocumentMetadata(),
        points=[
            _point_context(p, coord_precision, elevation_precision) for p in points
        ],
    )


def simplify(
    gpx_text: str,
    tolerance_deg: float = DEFAULT_TOLERANCE_DEG,
    coord_precision: int = DEFAULT_COORD_PRECISION,
    elevation_precision: int = DEFAULT_ELEVATION_PRECISION,
) -> SimplifyResult:
    """Simplify a GPX document and report point and byte counts"""
    settings = SimplifySettings(
        tolerance_deg=tolerance_deg,
        coord_precision=coord_precision,
        elevation_precision=elevation_precision,
    )

    # Reduce the coordinates as they will be written, so re-simplifying the
    # output at the same settings judges exactly the same values
    points = [
        quantize_point(p, settings.coord_precision, settings.elevation_precision)
        for p in parse(gpx_text, ParseMode.REGEX)
    ]
    metadata = extract_metadata(gpx_text)

    simplified = douglas_peucker(points, settings.tolerance_deg)
    text = render_gpx(
        simplified,
        metadata,
        coord_precision=settings.coord_precision,
        elevation_precision=settings.elevation_precision,
    )

    logger.debug(
        f"Simplified {len(points)} -> {len(simplified)} points "
        f"(tolerance {settings.tolerance_deg})"
    )

    return SimplifyResult(
        text=text,
        original_point_count=len(points),
        simplified_point_count=len(simplified),
        original_byte_size=len(gpx_text.encode("utf-8")),
        new_byte_size=len(text.encode("utf-8")),
    )


def simplify_with_settings(gpx_text: str, settings: SimplifySettings) -> SimplifyResult:
    """Simplify using a settings object, as loaded from the environment"""
    return simplify(
        gpx_text,
        tolerance_deg=settings.tolerance_deg,
        coord_precision=settings.coord_precision,
        elevation_precision=settings.elevation_precision,
    )
