# src/Services/trip_notes/gps_annotator.py
"""
GPS Annotator
=============
Writes and reads GPS waypoints embedded in a trip's notes field.

A waypoint is two consecutive lines:

    [Start] 10.123456, 105.123456
    https://www.google.com/maps?q=10.123456,105.123456

- Coordinates are written with exactly 6 decimals; any precision is read.
- The link line is derived from the coordinates with settings.MAP_URL_TEMPLATE.
- A label line only counts when the NEXT line is a link to the same point.
  Half-written entries (label without link) are never reported.
- Metadata prefix and free-text lines are ignored and do not break the scan.

Functions:
- append_waypoint(): add a label+link pair at the end of the notes
- insert_waypoint(): add a pair at the end of the waypoint block (canonical order)
- parse_waypoints(): list the recognized pairs
- waypoint_block(): the recognized pairs, verbatim
- strip_waypoints(): remove the recognized pairs
"""

from typing import Optional

from src.Core.config import settings
from src.Schemas.trip import Waypoint
from src.Services.trip_notes.tokenizer import LineKind, NoteLine, tokenize, same_point


ROLE_LABELS = {"start": "[Start]", "end": "[End]"}


def format_coordinates(lat: float, lng: float) -> tuple[str, str]:
    return f"{lat:.6f}", f"{lng:.6f}"


def map_url(lat: float, lng: float) -> str:
    """Map link for a point, formatted with settings.MAP_URL_TEMPLATE."""
    lat_s, lng_s = format_coordinates(lat, lng)
    return settings.MAP_URL_TEMPLATE.format(lat=lat_s, lng=lng_s)


def waypoint_lines(role: str, lat: float, lng: float) -> tuple[str, str]:
    """
    Build the (label, link) lines for one waypoint.

    Raises:
        ValueError: unknown role or coordinates out of range
    """
    if role not in ROLE_LABELS:
        raise ValueError(f"Unknown waypoint role: {role!r}")
    if not (-90.0 <= lat <= 90.0 and -180.0 <= lng <= 180.0):
        raise ValueError(f"Coordinates out of range: {lat}, {lng}")

    lat_s, lng_s = format_coordinates(lat, lng)
    return f"{ROLE_LABELS[role]} {lat_s}, {lng_s}", map_url(lat, lng)


def append_waypoint(notes: Optional[str], role: str, lat: float, lng: float) -> str:
    """
    Append a waypoint (two lines) to the end of `notes`.

    Existing content is kept verbatim, including the metadata prefix and
    previous waypoints.
    """
    label, link = waypoint_lines(role, lat, lng)
    if not notes:
        return f"{label}\n{link}"
    return f"{notes}\n{label}\n{link}"


def _paired(tokens: list[NoteLine]) -> list[tuple[int, NoteLine, NoteLine]]:
    """Indexes of label lines immediately followed by their matching link line."""
    pairs = []
    i = 0
    while i < len(tokens) - 1:
        label, link = tokens[i], tokens[i + 1]
        if (
            label.kind is LineKind.WAYPOINT_LABEL
            and link.kind is LineKind.WAYPOINT_LINK
            and same_point(label, link)
        ):
            pairs.append((i, label, link))
            i += 2
        else:
            i += 1
    return pairs


def insert_waypoint(notes: Optional[str], role: str, lat: float, lng: float) -> str:
    """
    Add a waypoint right after the last existing waypoint pair, or after the
    metadata prefix when there is none, so free text stays last.

    Every existing line is kept verbatim and in order.
    """
    tokens = tokenize(notes)
    pairs = _paired(tokens)

    if pairs:
        split_at = pairs[-1][0] + 2
    elif tokens and tokens[0].kind is LineKind.META:
        split_at = 1
    else:
        split_at = 0

    head = "\n".join(t.raw for t in tokens[:split_at])
    tail = "\n".join(t.raw for t in tokens[split_at:])

    head = append_waypoint(head, role, lat, lng)
    return f"{head}\n{tail}" if tail else head


def parse_waypoints(notes: Optional[str]) -> list[Waypoint]:
    """
    Extract the waypoints recorded in `notes`, in order of appearance.

    Never raises. Malformed or unpaired entries are skipped.

    Example:
        >>> notes = "[Start] 10.000000, 105.000000\\nhttps://www.google.com/maps?q=10.000000,105.000000"
        >>> parse_waypoints(notes)[0].role
        'start'
    """
    tokens = tokenize(notes)
    pairs = _paired(tokens)

    paired_labels = {i for i, _, _ in pairs}
    unpaired = [
        i for i, t in enumerate(tokens)
        if t.kind is LineKind.WAYPOINT_LABEL and i not in paired_labels
    ]
    if unpaired:
        print(f"[TRIP_GPS] ⚠️  Skipping {len(unpaired)} waypoint label(s) without map link")

    return [
        Waypoint(role=label.role, lat=label.lat, lng=label.lng, map_url=link.url)
        for _, label, link in pairs
    ]


def waypoint_block(notes: Optional[str]) -> str:
    """The recognized waypoint pairs of `notes`, verbatim and in order."""
    tokens = tokenize(notes)
    return "\n".join(
        f"{label.raw}\n{link.raw}" for _, label, link in _paired(tokens)
    )


def strip_waypoints(notes: Optional[str]) -> str:
    """
    Remove every recognized waypoint pair from `notes`.

    All other lines (metadata prefix, free text, unpaired labels) are kept
    in their original relative order.
    """
    tokens = tokenize(notes)
    drop = set()
    for i, _, _ in _paired(tokens):
        drop.update((i, i + 1))
    return "\n".join(t.raw for i, t in enumerate(tokens) if i not in drop)
