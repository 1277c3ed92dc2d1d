# src/Services/trip_notes/tokenizer.py
"""
Notes Tokenizer
===============
Splits a trip's notes field into classified lines.

The notes field mixes three kinds of content written one per line:

    [TRIPMETA:status=in_progress,startedAt=2024-01-01T08:00:00.000Z]   META
    [Start] 10.123456, 105.123456                                      WAYPOINT_LABEL
    https://www.google.com/maps?q=10.123456,105.123456                 WAYPOINT_LINK
    Đổ xăng ở Long Thành                                               TEXT

Each line is classified independently; pairing labels with links and
anchoring the metadata prefix to the first line is done by the callers
(metadata_codec, gps_annotator). Classification never raises.

Legacy labels written by older app builds are recognized as well:
    📍 Điểm đi: <lat>, <lng>     (start)
    📍 Điểm đến: <lat>, <lng>    (end)
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional


META_PREFIX = "[TRIPMETA:"

_META_RE = re.compile(r"^\[TRIPMETA:([^\]]*)\]\r?$")

_NUMBER = r"[-+]?\d+(?:\.\d+)?"

_LABEL_RE = re.compile(
    r"^\s*(?:\[(?P<tag>Start|End)\]|📍\s*(?P<legacy>Điểm đi|Điểm đến):)"
    rf"\s*(?P<lat>{_NUMBER})\s*,\s*(?P<lng>{_NUMBER})\s*$",
    re.IGNORECASE,
)

_LINK_RE = re.compile(r"^\s*(?:🔗\s*)?(?P<url>https?://\S+)\s*$")

# Any "<lat>,<lng>" pair in the URL (q=, ll=, /@lat,lng,zoom ...), comma possibly encoded
_LINK_COORDS_RE = re.compile(rf"(?<![\w.])(?P<lat>{_NUMBER})(?:,|%2C)(?P<lng>{_NUMBER})", re.IGNORECASE)

_LEGACY_ROLES = {"điểm đi": "start", "điểm đến": "end"}


class LineKind(str, Enum):
    META = "meta"
    WAYPOINT_LABEL = "waypoint_label"
    WAYPOINT_LINK = "waypoint_link"
    TEXT = "text"


@dataclass(frozen=True)
class NoteLine:
    kind: LineKind
    raw: str
    role: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    url: Optional[str] = None
    meta_body: Optional[str] = None
    # every coordinate pair found in a link URL; lat/lng hold the first one
    points: tuple[tuple[float, float], ...] = ()


def _valid_coordinates(lat: float, lng: float) -> bool:
    return -90.0 <= lat <= 90.0 and -180.0 <= lng <= 180.0


def classify_line(line: str) -> NoteLine:
    """Classify a single line (without its line break)."""
    meta = _META_RE.match(line)
    if meta:
        return NoteLine(LineKind.META, line, meta_body=meta.group(1))

    label = _LABEL_RE.match(line)
    if label:
        lat, lng = float(label.group("lat")), float(label.group("lng"))
        if _valid_coordinates(lat, lng):
            if label.group("tag"):
                role = label.group("tag").lower()
            else:
                role = _LEGACY_ROLES[label.group("legacy").lower()]
            return NoteLine(LineKind.WAYPOINT_LABEL, line, role=role, lat=lat, lng=lng)
        return NoteLine(LineKind.TEXT, line)

    link = _LINK_RE.match(line)
    if link:
        url = link.group("url")
        points = tuple(
            (float(m.group("lat")), float(m.group("lng")))
            for m in _LINK_COORDS_RE.finditer(url)
        )
        if points:
            lat, lng = points[0]
            return NoteLine(LineKind.WAYPOINT_LINK, line, lat=lat, lng=lng, url=url, points=points)

    return NoteLine(LineKind.TEXT, line)


def tokenize(notes: Optional[str]) -> list[NoteLine]:
    """
    Split notes on '\\n' and classify every line.

    Returns an empty list for None or "". Line order is preserved, and
    joining the `raw` values with '\\n' reproduces the input exactly.
    """
    if not notes:
        return []
    return [classify_line(line) for line in notes.split("\n")]


def same_point(label: NoteLine, link: NoteLine) -> bool:
    """
    True when the link URL carries the label's coordinates anywhere
    (6-decimal precision), whatever the map provider's query format.
    """
    target = (f"{label.lat:.6f}", f"{label.lng:.6f}")
    return any(
        (f"{lat:.6f}", f"{lng:.6f}") == target
        for lat, lng in (link.points or ((link.lat, link.lng),))
    )
