"""
GPX track point parsing.

Three named modes share one TrackPoint output type:

- DOM: full XML parse, every <trkpt> in document order. Malformed XML yields an
  empty track rather than an error.
- REGEX: permissive scan tolerant of attribute order, quoting and whitespace, so
  hand-edited or tool-exported files still yield a best-effort partial track.
- STRICT: gpxpy parse that rejects malformed XML or coordinates.

DOM and REGEX are lenient: unparsable latitude/longitude become 0.0 and an
unparsable elevation is treated as absent.
"""

import html
import re
import xml.etree.ElementTree as ET
from enum import Enum
from typing import List, Optional

from loguru import logger

from ..common.gpx import GPXParseError, GPXUtils
from ..common.models import GPXDocumentMetadata, TrackPoint
from ..common.utils import parse_float_prefix, safe_float

__all__ = [
    "GPXParseError",
    "ParseMode",
    "extract_metadata",
    "parse",
    "parse_dom",
    "parse_regex",
    "parse_strict",
]


class ParseMode(str, Enum):
    """Track point extraction strategy"""

    DOM = "dom"
    REGEX = "regex"
    STRICT = "strict"


_TRKPT_BLOCK = re.compile(
    r"<trkpt\b(?P<attrs>[^>]*?)(?:/>|>(?P<body>.*?)</trkpt\s*>)",
    re.DOTALL | re.IGNORECASE,
)
_ELE = re.compile(r"<ele\b[^>]*>(?P<value>[^<]*)</ele\s*>", re.IGNORECASE)
_NAME = re.compile(r"<name\b[^>]*>(?P<value>[^<]+)</name\s*>", re.IGNORECASE)
_TYPE = re.compile(r"<type\b[^>]*>(?P<value>[^<]+)</type\s*>", re.IGNORECASE)


def _attribute_pattern(name: str) -> "re.Pattern[str]":
    return re.compile(
        r"(?:^|\s)" + name + r"\s*=\s*(?:\"(?P<dq>[^\"]*)\"|'(?P<sq>[^']*)')",
        re.IGNORECASE,
    )


_LAT_ATTR = _attribute_pattern("lat")
_LON_ATTR = _attribute_pattern("lon")


def _attribute_value(pattern: "re.Pattern[str]", attrs: str) -> Optional[str]:
    match = pattern.search(attrs)
    if not match:
        return None
    value = match.group("dq")
    return value if value is not None else match.group("sq")


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def parse_dom(gpx_text: str) -> List[TrackPoint]:
    """Parse every <trkpt> of a well-formed document in document order"""
    try:
        root = ET.fromstring(gpx_text)
    except ET.ParseError as e:
        logger.warning(f"Malformed GPX XML, no track points extracted: {e}")
        return []

    points: List[TrackPoint] = []
    for element in root.iter():
        if not isinstance(element.tag, str) or _local_name(element.tag) != "trkpt":
            continue

        elevation = None
        for child in element:
            if isinstance(child.tag, str) and _local_name(child.tag) == "ele":
                elevation = parse_float_prefix(child.text)
                break

        points.append(
            TrackPoint(
                lat=safe_float(element.get("lat")),
                lon=safe_float(element.get("lon")),
                elevation=elevation,
            )
        )

    logger.debug(f"DOM parse extracted {len(points)} track points")
    return points


def parse_regex(gpx_text: str) -> List[TrackPoint]:
    """Scan <trkpt> blocks without building a document tree"""
    points: List[TrackPoint] = []

    for match in _TRKPT_BLOCK.finditer(gpx_text):
        attrs = match.group("attrs")
        body = match.group("body") or ""

        ele_match = _ELE.search(body)
        elevation = parse_float_prefix(ele_match.group("value")) if ele_match else None

        points.append(
            TrackPoint(
                lat=safe_float(_attribute_value(_LAT_ATTR, attrs)),
                lon=safe_float(_attribute_value(_LON_ATTR, attrs)),
                elevation=elevation,
            )
        )

    logger.debug(f"Regex scan extracted {len(points)} track points")
    return points


def parse_strict(gpx_text: str) -> List[TrackPoint]:
    """Parse with gpxpy, raising GPXParseError on malformed input"""
    gpx = GPXUtils.load(gpx_text)
    return [
        TrackPoint(lat=point.latitude, lon=point.longitude, elevation=point.elevation)
        for point in GPXUtils.iter_track_points(gpx)
    ]


_PARSERS = {
    ParseMode.DOM: parse_dom,
    ParseMode.REGEX: parse_regex,
    ParseMode.STRICT: parse_strict,
}


def parse(gpx_text: str, mode: ParseMode = ParseMode.DOM) -> List[TrackPoint]:
    """Extract the ordered track points of a GPX document"""
    return _PARSERS[ParseMode(mode)](gpx_text)


def _first_text(pattern: "re.Pattern[str]", gpx_text: str) -> Optional[str]:
    match = pattern.search(gpx_text)
    if not match:
        return None
    return html.unescape(match.group("value"))


def extract_metadata(gpx_text: str) -> GPXDocumentMetadata:
    """Read the first <name> and <type> of the document"""
    return GPXDocumentMetadata(
        name=_first_text(_NAME, gpx_text),
        type=_first_text(_TYPE, gpx_text),
    )
