# src/Services/trip_notes/trip_notes.py
"""
TripNotes value object
======================
Typed, read-only view over a trip's encoded notes field.

Callers that need the lifecycle status, timestamps, waypoints or the user's
own text should go through TripNotes instead of touching the raw string:

    view = TripNotes.parse(trip.notes)
    view.status          # 'in_progress' | 'completed'
    view.started_at      # aware datetime or None
    view.waypoints       # [Waypoint(role='start', ...)]
    view.text            # free text only

Timestamps are stored as UTC ISO-8601 with millisecond precision and a 'Z'
suffix (2024-01-01T08:00:00.000Z). Any ISO-8601 form with 'Z' or an explicit
offset is accepted on read.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from src.Schemas.trip import Waypoint
from src.Services.trip_notes import metadata_codec, gps_annotator


STATUS_IN_PROGRESS = "in_progress"
STATUS_COMPLETED = "completed"

META_STATUS = "status"
META_STARTED_AT = "startedAt"
META_COMPLETED_AT = "completedAt"


def format_timestamp(moment: datetime) -> str:
    """
    Serialize an aware datetime as UTC ISO-8601 with 'Z' suffix.

    Naive datetimes are assumed to be UTC.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    iso_str = moment.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    return iso_str.replace("+00:00", "Z")


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse a stored timestamp; returns None when missing or unreadable."""
    if not value:
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        moment = datetime.fromisoformat(text)
    except ValueError:
        return None
    return moment if moment.tzinfo else moment.replace(tzinfo=timezone.utc)


@dataclass(frozen=True)
class TripNotes:
    metadata: dict[str, str] = field(default_factory=dict)
    waypoints: list[Waypoint] = field(default_factory=list)
    text: str = ""

    @classmethod
    def parse(cls, notes: Optional[str]) -> "TripNotes":
        body = gps_annotator.strip_waypoints(metadata_codec.strip(notes))
        return cls(
            metadata=metadata_codec.decode(notes),
            waypoints=gps_annotator.parse_waypoints(notes),
            text=body.strip(),
        )

    @property
    def status(self) -> str:
        # No prefix means the trip was logged in one step
        if self.metadata.get(META_STATUS) == STATUS_IN_PROGRESS:
            return STATUS_IN_PROGRESS
        return STATUS_COMPLETED

    @property
    def is_in_progress(self) -> bool:
        return self.status == STATUS_IN_PROGRESS

    @property
    def started_at(self) -> Optional[datetime]:
        return parse_timestamp(self.metadata.get(META_STARTED_AT))

    @property
    def completed_at(self) -> Optional[datetime]:
        return parse_timestamp(self.metadata.get(META_COMPLETED_AT))

    def waypoint(self, role: str) -> Optional[Waypoint]:
        """Last recorded waypoint for `role`, if any."""
        matches = [w for w in self.waypoints if w.role == role]
        return matches[-1] if matches else None
