"""
Common utility functions shared across route tooling
"""

import math
import re
from typing import Optional

from loguru import logger

# Leading numeric prefix, read the way a lenient float reader does ("12.5abc" -> 12.5)
_FLOAT_PREFIX = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def parse_float_prefix(text: Optional[str]) -> Optional[float]:
    """Parse the leading number of a string, or None if there is none"""
    if text is None:
        return None

    match = _FLOAT_PREFIX.match(text.strip())
    if not match:
        return None

    try:
        value = float(match.group(0))
    except (ValueError, OverflowError):
        return None

    return value if math.isfinite(value) else None


def safe_float(text: Optional[str], default: float = 0.0) -> float:
    """Parse a coordinate attribute, falling back to default when unparsable"""
    value = parse_float_prefix(text)
    if value is None:
        logger.debug(f"Unparsable numeric value {text!r}, using {default}")
        return default
    return value


def round_half_up(value: float, precision: int = 0) -> float:
    """Round to precision decimal digits with ties going up.

    Computed as floor(value * 10^precision + 0.5) / 10^precision so results are
    reproducible regardless of Python's banker's rounding. Values too large to
    scale are returned unchanged; they have no fractional digits left to round.
    """
    factor = 10**precision
    scaled = value * factor + 0.5
    if not math.isfinite(scaled):
        return value
    return math.floor(scaled) / factor


def format_decimal(value: float, precision: int) -> str:
    """Round and print a number without trailing zeros ("12.60000" -> "12.6")"""
    text = f"{round_half_up(value, precision):.{precision}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text == "-0":
        text = "0"
    return text


def format_bytes(size: int) -> str:
    """Format a byte count as a human readable string"""
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.1f} MB"


def reduction_percent(original: int, new: int) -> float:
    """Percentage by which new is smaller than original"""
    if original <= 0:
        return 0.0
    return (1 - new / original) * 100
