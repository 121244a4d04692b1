"""
Metric/imperial conversions for displaying route statistics
"""

from .utils import round_half_up

KM_TO_MILES = 0.621371
METERS_TO_FEET = 3.28084


def km_to_miles(km: float) -> float:
    """Convert kilometers to miles, rounded to 1 decimal"""
    return round_half_up(km * KM_TO_MILES, 1)


def meters_to_feet(meters: float) -> int:
    """Convert meters to whole feet"""
    return int(round_half_up(meters * METERS_TO_FEET))


def format_distance(km: float) -> str:
    """Format distance with both metric and imperial units"""
    return f"{km:g} km / {km_to_miles(km):g} mi"


def format_elevation(meters: float) -> str:
    """Format elevation with both metric and imperial units"""
    return f"{meters:g} m / {meters_to_feet(meters)} ft"
