"""
Batch processing of per-day route files in a content directory
"""

from pathlib import Path
from typing import Dict, Iterator, Optional, Tuple

from loguru import logger

from ..common.models import GPXStats
from ..common.utils import format_bytes
from .models import BatchSummary, RouteReport, SimplifySettings
from .parser import ParseMode, parse
from .simplifier import simplify_with_settings
from .stats import compute_stats

DAY_PREFIX = "day-"
ROUTE_FILENAME = "route.gpx"


def iter_day_routes(days_dir: Path) -> Iterator[Tuple[str, Path]]:
    """Yield (day, route path) for each day directory holding a route file"""
    days_dir = Path(days_dir)
    if not days_dir.is_dir():
        logger.warning(f"Days directory '{days_dir}' does not exist")
        return

    for day_dir in sorted(days_dir.iterdir()):
        if not day_dir.is_dir() or not day_dir.name.startswith(DAY_PREFIX):
            continue
        route_path = day_dir / ROUTE_FILENAME
        if route_path.is_file():
            yield day_dir.name, route_path


def write_text_atomic(path: Path, content: str) -> None:
    """Write a file by replacing it with a fully written temp file"""
    temp_file = path.with_suffix(path.suffix + ".tmp")
    try:
        with temp_file.open("w", encoding="utf-8", newline="") as f:
            f.write(content)
        temp_file.replace(path)
    except OSError:
        if temp_file.exists():
            try:
                temp_file.unlink()
            except OSError:
                pass
        raise


def simplify_route_file(
    day: str, route_path: Path, settings: SimplifySettings, dry_run: bool = False
) -> RouteReport:
    """Simplify one route file in place and describe the reduction"""
    content = route_path.read_text(encoding="utf-8")
    result = simplify_with_settings(content, settings)

    if not dry_run:
        write_text_atomic(route_path, result.text)

    return RouteReport(
        day=day,
        path=str(route_path),
        original_point_count=result.original_point_count,
        simplified_point_count=result.simplified_point_count,
        original_byte_size=result.original_byte_size,
        new_byte_size=result.new_byte_size,
    )


def _log_reduction(
    label: str,
    original_size: int,
    new_size: int,
    pct: float,
    original_points: int,
    new_points: int,
) -> None:
    logger.info(
        f"{label}: Size {format_bytes(original_size)} -> {format_bytes(new_size)} "
        f"({pct:.1f}% reduction), Points {original_points} -> {new_points}"
    )


def simplify_days(
    days_dir: Path,
    settings: Optional[SimplifySettings] = None,
    dry_run: bool = False,
) -> BatchSummary:
    """Simplify every day's route under days_dir"""
    settings = settings or SimplifySettings()
    summary = BatchSummary()

    logger.info("Simplifying GPX files...")
    if dry_run:
        logger.info("Dry run: files will not be modified")

    for day, route_path in iter_day_routes(days_dir):
        try:
            report = simplify_route_file(day, route_path, settings, dry_run=dry_run)
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Failed to simplify {route_path}: {e}")
            summary.failed.append(day)
            continue

        summary.reports.append(report)
        _log_reduction(
            day,
            report.original_byte_size,
            report.new_byte_size,
            report.size_reduction_pct,
            report.original_point_count,
            report.simplified_point_count,
        )

    if not summary.reports:
        logger.warning(f"No route files found under '{days_dir}'")
        return summary

    _log_reduction(
        "TOTAL",
        summary.total_original_byte_size,
        summary.total_new_byte_size,
        summary.size_reduction_pct,
        summary.total_original_point_count,
        summary.total_simplified_point_count,
    )
    logger.success(f"Simplified {len(summary.reports)} route files")
    if summary.failed:
        logger.warning(f"Failed routes: {', '.join(summary.failed)}")

    return summary


def collect_day_stats(
    days_dir: Path, mode: ParseMode = ParseMode.DOM
) -> Dict[str, GPXStats]:
    """Compute route statistics for every day, keyed by day directory name"""
    stats: Dict[str, GPXStats] = {}

    for day, route_path in iter_day_routes(days_dir):
        try:
            content = route_path.read_text(encoding="utf-8")
            points = parse(content, mode)
        except (OSError, UnicodeDecodeError, ValueError) as e:
            logger.error(f"Error parsing GPX for {day}: {e}")
            continue

        stats[day] = compute_stats(points)
        logger.debug(f"{day}: {len(points)} points, {stats[day].distance_km} km")

    return stats
