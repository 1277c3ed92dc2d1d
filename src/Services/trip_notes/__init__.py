# src/Services/trip_notes/__init__.py
"""
Trip Notes Module
=================
Everything that reads or writes the encoded `notes` field of a trip.

Componentes:
- tokenizer: classifies note lines (meta, waypoint label, waypoint link, text)
- metadata_codec: [TRIPMETA:...] prefix line with lifecycle fields
- gps_annotator: [Start]/[End] waypoint line pairs with map links
- trip_notes: typed read-only view (TripNotes) plus timestamp helpers
"""

from .tokenizer import LineKind, NoteLine, classify_line, tokenize
from .metadata_codec import encode, decode, strip, replace
from .gps_annotator import (
    append_waypoint,
    insert_waypoint,
    parse_waypoints,
    strip_waypoints,
    waypoint_block,
    map_url
)
from .trip_notes import (
    TripNotes,
    STATUS_IN_PROGRESS,
    STATUS_COMPLETED,
    format_timestamp,
    parse_timestamp
)

__all__ = [
    # Tokenizer
    'LineKind',
    'NoteLine',
    'classify_line',
    'tokenize',

    # Metadata codec
    'encode',
    'decode',
    'strip',
    'replace',

    # GPS annotator
    'append_waypoint',
    'insert_waypoint',
    'parse_waypoints',
    'strip_waypoints',
    'waypoint_block',
    'map_url',

    # Value object
    'TripNotes',
    'STATUS_IN_PROGRESS',
    'STATUS_COMPLETED',
    'format_timestamp',
    'parse_timestamp',
]
