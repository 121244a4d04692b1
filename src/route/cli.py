"""Route CLI commands."""

from __future__ import annotations

import csv
import io
import json
from pathlib import Path
from typing import Optional

import click
from loguru import logger
from pydantic import ValidationError

from ..common.units import format_distance, format_elevation
from ..common.utils import format_bytes
from .batch import collect_day_stats, simplify_days, write_text_atomic
from .fetch import GPXFetchError, fetch_gpx_text, is_url
from .models import SimplifySettings
from .parser import GPXParseError, ParseMode, parse
from .simplifier import simplify_with_settings
from .stats import compute_bounds, compute_stats, elevation_profile

MODE_CHOICE = click.Choice([mode.value for mode in ParseMode], case_sensitive=False)


def _tuning_options(command):
    """Attach the simplification tuning options shared by simplify commands"""
    options = [
        click.option(
            "--tolerance",
            type=float,
            default=None,
            help="Douglas-Peucker tolerance in degrees (default: 0.00005, or TRIPGPX_TOLERANCE_DEG)",
        ),
        click.option(
            "--coord-precision",
            type=int,
            default=None,
            help="Decimal digits kept for coordinates (default: 5, or TRIPGPX_COORD_PRECISION)",
        ),
        click.option(
            "--elevation-precision",
            type=int,
            default=None,
            help="Decimal digits kept for elevation (default: 1, or TRIPGPX_ELEVATION_PRECISION)",
        ),
        click.option(
            "--dry-run",
            is_flag=True,
            help="Report the reduction without writing any file",
        ),
    ]
    for option in reversed(options):
        command = option(command)
    return command


def _build_settings(
    tolerance: Optional[float],
    coord_precision: Optional[int],
    elevation_precision: Optional[int],
) -> SimplifySettings:
    """Load settings from the environment, letting CLI options override them"""
    overrides = {
        "tolerance_deg": tolerance,
        "coord_precision": coord_precision,
        "elevation_precision": elevation_precision,
    }
    try:
        return SimplifySettings(
            **{key: value for key, value in overrides.items() if value is not None}
        )
    except ValidationError as e:
        logger.error(f"Invalid simplification settings: {e}")
        raise click.Abort()


def _read_source(source: str) -> str:
    """Read GPX text from a local path or an http(s) URL"""
    try:
        if is_url(source):
            return fetch_gpx_text(source)
        return Path(source).read_text(encoding="utf-8")
    except GPXFetchError as e:
        raise click.ClickException(str(e)) from e
    except (OSError, UnicodeDecodeError) as e:
        raise click.ClickException(f"Cannot read {source}: {e}") from e


def _parse_source(source: str, mode: str):
    try:
        return parse(_read_source(source), ParseMode(mode.lower()))
    except GPXParseError as e:
        raise click.ClickException(str(e)) from e


@click.group()
def route():
    """GPX route statistics and simplification commands"""
    pass


@route.command()
@click.argument("source")
@click.option(
    "--mode",
    type=MODE_CHOICE,
    default=ParseMode.DOM.value,
    show_default=True,
    help="Track point extraction mode",
)
@click.option(
    "--json", "as_json", is_flag=True, help="Print page metadata JSON with map bounds"
)
def stats(source: str, mode: str, as_json: bool):
    """Show distance and elevation statistics for a GPX file or URL."""

    points = _parse_source(source, mode)
    route_stats = compute_stats(points)
    bounds = compute_bounds(points)

    if as_json:
        payload = route_stats.to_page_metadata()
        if bounds is not None:
            # Leaflet fitBounds order: [[south, west], [north, east]]
            payload["bounds"] = [
                [bounds.min_lat, bounds.min_lon],
                [bounds.max_lat, bounds.max_lon],
            ]
            payload["center"] = list(bounds.center)
        click.echo(json.dumps(payload, indent=2))
        return

    click.echo(f"Points:    {len(points)}")
    click.echo(f"Distance:  {format_distance(route_stats.distance_km)}")
    click.echo(f"Gain:      {format_elevation(route_stats.elevation_gain_m)}")
    click.echo(f"Loss:      {format_elevation(route_stats.elevation_loss_m)}")
    if route_stats.min_elevation_m is not None:
        click.echo(f"Lowest:    {format_elevation(route_stats.min_elevation_m)}")
        click.echo(f"Highest:   {format_elevation(route_stats.max_elevation_m)}")
    if bounds is not None:
        center_lat, center_lon = bounds.center
        click.echo(f"Center:    {center_lat:.5f}, {center_lon:.5f}")


@route.command()
@click.argument("gpx_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the simplified GPX here instead of overwriting GPX_FILE",
)
@_tuning_options
def simplify(
    gpx_file: Path,
    output: Optional[Path],
    tolerance: Optional[float],
    coord_precision: Optional[int],
    elevation_precision: Optional[int],
    dry_run: bool,
):
    """Simplify a single GPX file with Douglas-Peucker."""

    settings = _build_settings(tolerance, coord_precision, elevation_precision)
    content = _read_source(str(gpx_file))
    result = simplify_with_settings(content, settings)

    logger.info(
        f"Size: {format_bytes(result.original_byte_size)} -> "
        f"{format_bytes(result.new_byte_size)} "
        f"({result.size_reduction_pct:.1f}% reduction)"
    )
    logger.info(
        f"Points: {result.original_point_count} -> {result.simplified_point_count}"
    )

    if dry_run:
        return

    target = output or gpx_file
    try:
        write_text_atomic(target, result.text)
    except OSError as e:
        logger.error(f"Failed to save {target}: {e}")
        raise click.Abort()
    logger.success(f"Saved: {target}")


@route.command("simplify-days")
@click.argument(
    "days_dir", type=click.Path(exists=True, file_okay=False, path_type=Path)
)
@_tuning_options
def simplify_days_command(
    days_dir: Path,
    tolerance: Optional[float],
    coord_precision: Optional[int],
    elevation_precision: Optional[int],
    dry_run: bool,
):
    """Simplify every day-*/route.gpx under DAYS_DIR in place."""

    settings = _build_settings(tolerance, coord_precision, elevation_precision)
    summary = simplify_days(days_dir, settings, dry_run=dry_run)
    if summary.failed:
        raise click.ClickException(
            f"{len(summary.failed)} route file(s) could not be simplified"
        )


@route.command("day-stats")
@click.argument(
    "days_dir", type=click.Path(exists=True, file_okay=False, path_type=Path)
)
@click.option(
    "--mode",
    type=MODE_CHOICE,
    default=ParseMode.DOM.value,
    show_default=True,
    help="Track point extraction mode",
)
def day_stats(days_dir: Path, mode: str):
    """Print route statistics for every day as page metadata JSON."""

    all_stats = collect_day_stats(days_dir, ParseMode(mode.lower()))
    payload = {day: s.to_page_metadata() for day, s in all_stats.items()}
    click.echo(json.dumps(payload, indent=2))


@route.command()
@click.argument("source")
@click.option(
    "--mode",
    type=MODE_CHOICE,
    default=ParseMode.DOM.value,
    show_default=True,
    help="Track point extraction mode",
)
def profile(source: str, mode: str):
    """Print the elevation profile (distance_km, elevation_m) as CSV."""

    samples = elevation_profile(_parse_source(source, mode))
    if not samples:
        logger.warning("No elevation data available")
        return

    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(["distance_km", "elevation_m"])
    for sample in samples:
        writer.writerow([f"{sample.distance_km:.3f}", f"{sample.elevation_m:g}"])
    click.echo(buffer.getvalue(), nl=False)
