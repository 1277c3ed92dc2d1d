# src/Services/trip_lifecycle.py
"""
Trip Lifecycle Service - start now, complete later.

Responsibilities:
- Start a trip (status in_progress, end_km placeholder = start_km)
- Complete a started trip (end odometer, end place, end GPS, completedAt)
- Log a finished trip in one step (no metadata, implicitly completed)
- Derived queries: is_in_progress(), trip_status(), duration()

Key Concepts:
- There is no status column. State lives in the [TRIPMETA:...] prefix of
  the notes field, next to GPS waypoints and the user's own text.
- A trip whose notes carry no prefix is completed.
- Each mutator validates first and then performs exactly ONE persistence
  call (create_trip or update_trip). A rejected call leaves the stored
  record untouched.

State machine:
    start_trip()      ->  in_progress
    complete_trip()   in_progress -> completed
    direct_create()   ->  completed
"""

import math
from datetime import date, datetime, timezone
from typing import Callable, Optional
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session

from src.Core.config import settings
from src.Core.exceptions import TripValidationError, TripStateError
from src.Models.trip import Trip
from src.Repositories import trip as trip_repo
from src.Schemas.trip import (
    GpsPoint,
    Trip_create,
    Trip_direct_create,
    Trip_edit,
    Trip_update,
    TripDuration
)
from src.Services.trip_notes import (
    TripNotes,
    STATUS_IN_PROGRESS,
    STATUS_COMPLETED,
    append_waypoint,
    insert_waypoint,
    decode,
    encode,
    replace,
    strip,
    waypoint_block,
    format_timestamp
)
from src.Services.trip_notes.trip_notes import META_STATUS, META_STARTED_AT, META_COMPLETED_AT
from src.Services.trip_notes.tokenizer import META_PREFIX


Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# ==========================================================
# DERIVED QUERIES (pure)
# ==========================================================

def trip_status(trip) -> str:
    """'in_progress' or 'completed' for any object with a `notes` attribute."""
    return TripNotes.parse(getattr(trip, "notes", None)).status


def is_in_progress(trip) -> bool:
    return decode(getattr(trip, "notes", None)).get(META_STATUS) == STATUS_IN_PROGRESS


def duration(trip) -> TripDuration:
    """
    Lifecycle timestamps and elapsed minutes of a trip.

    minutes = round((completedAt - startedAt) / 60 s), halves rounded up.
    Missing timestamps give minutes=None. A negative interval (hand-edited
    notes, clock changes) is returned as a negative number.
    """
    view = TripNotes.parse(getattr(trip, "notes", None))
    started_at, completed_at = view.started_at, view.completed_at

    minutes = None
    if started_at is not None and completed_at is not None:
        elapsed_s = (completed_at - started_at).total_seconds()
        minutes = math.floor(elapsed_s / 60 + 0.5)

    return TripDuration(started_at=started_at, completed_at=completed_at, minutes=minutes)


def _with_free_text(notes: str, text: Optional[str]) -> str:
    """
    Append the user's free text below the structured lines.

    Raises:
        TripValidationError: a line of the text is a metadata prefix, which
            would be read back as lifecycle state
    """
    text = (text or "").strip()
    if any(line.strip().startswith(META_PREFIX) for line in text.split("\n")):
        raise TripValidationError(
            f"Notes must not contain a line starting with {META_PREFIX!r}",
            field="notes"
        )
    if not text:
        return notes
    return f"{notes}\n{text}" if notes else text


# ==========================================================
# CLASE: TRIP LIFECYCLE
# ==========================================================

class TripLifecycle:
    """
    Trip state machine over the persistence boundary.

    Args:
        clock: callable returning the current aware datetime (tests inject
            a fixed clock to get exact timestamps and durations)
        strict_completion: reject complete_trip() on trips that are not in
            progress (default settings.TRIP_STRICT_COMPLETION)
    """

    def __init__(
        self,
        clock: Optional[Clock] = None,
        strict_completion: Optional[bool] = None
    ):
        self.clock = clock or utc_now
        self.strict_completion = (
            settings.TRIP_STRICT_COMPLETION if strict_completion is None else strict_completion
        )
        self.local_zone = ZoneInfo(settings.TRIP_LOCAL_TIMEZONE)

        print(f"[TRIP_LIFECYCLE] Initialized (zone: {settings.TRIP_LOCAL_TIMEZONE}, "
              f"strict completion: {self.strict_completion})")

    def _now(self) -> datetime:
        moment = self.clock()
        return moment if moment.tzinfo else moment.replace(tzinfo=timezone.utc)

    def today(self) -> date:
        """Current local calendar date, as used for trip_date."""
        return self._now().astimezone(self.local_zone).date()

    # ------------------------------------------------------
    # START
    # ------------------------------------------------------

    def start_trip(
        self,
        DB: Session,
        vehicle_id: str,
        start_km: int,
        start_location: Optional[str] = None,
        start_gps: Optional[GpsPoint] = None,
        trip_type: str = "other",
        notes: Optional[str] = None
    ) -> Trip:
        """
        Record the departure of a trip that will be completed later.

        Raises:
            TripValidationError: start_km is negative, or the free text
                contains a metadata prefix line
        """
        if start_km is None or start_km < 0:
            raise TripValidationError("Start odometer must be zero or greater", field="start_km")

        now = self._now()
        local_now = now.astimezone(self.local_zone)

        encoded = encode({
            META_STATUS: STATUS_IN_PROGRESS,
            META_STARTED_AT: format_timestamp(now),
        })
        if start_gps is not None:
            encoded = append_waypoint(encoded, "start", start_gps.lat, start_gps.lng)
        encoded = _with_free_text(encoded, notes)

        trip_data = Trip_create(
            vehicle_id=vehicle_id,
            trip_date=local_now.date(),
            trip_time=local_now.time().replace(microsecond=0),
            trip_type=trip_type,
            start_km=start_km,
            end_km=start_km,
            start_location=start_location,
            notes=encoded,
        )
        trip = trip_repo.create_trip(DB, trip_data)

        print(f"[TRIP_LIFECYCLE] ▶️  Trip started: {trip.id} at {start_km} km")
        return trip

    # ------------------------------------------------------
    # COMPLETE
    # ------------------------------------------------------

    def complete_trip(
        self,
        DB: Session,
        trip: Trip,
        end_km: int,
        end_location: Optional[str] = None,
        end_gps: Optional[GpsPoint] = None
    ) -> Optional[Trip]:
        """
        Record the arrival of a started trip.

        The metadata prefix is rewritten with status=completed and a
        completedAt timestamp; every other stored key, the start waypoint
        and the user's text are kept.

        Raises:
            TripValidationError: end_km is not greater than trip.start_km
            TripStateError: strict completion is on and the trip is not in progress

        Returns:
            The updated trip, or None if the row was deleted meanwhile
        """
        if end_km is None or end_km <= trip.start_km:
            raise TripValidationError(
                f"End odometer must be greater than start odometer ({trip.start_km} km)",
                field="end_km"
            )

        if self.strict_completion and not is_in_progress(trip):
            raise TripStateError(f"Trip {trip.id} is not in progress", field="status")

        metadata = decode(trip.notes)
        metadata[META_STATUS] = STATUS_COMPLETED
        metadata[META_COMPLETED_AT] = format_timestamp(self._now())

        notes = replace(trip.notes, metadata)
        if end_gps is not None:
            notes = insert_waypoint(notes, "end", end_gps.lat, end_gps.lng)

        values = {"end_km": end_km, "notes": notes}
        if end_location is not None:
            values["end_location"] = end_location
        changes = Trip_update(**values)

        updated = trip_repo.update_trip(
            DB,
            trip.id,
            changes,
            expected_status=STATUS_IN_PROGRESS if self.strict_completion else None
        )
        if updated is not None:
            print(f"[TRIP_LIFECYCLE] ⏹️  Trip completed: {trip.id} "
                  f"({trip.start_km} -> {end_km} km, {updated.distance_km} km)")
        return updated

    # ------------------------------------------------------
    # DIRECT CREATE
    # ------------------------------------------------------

    def direct_create(self, DB: Session, fields: Trip_direct_create) -> Trip:
        """
        Log a finished trip in one step (both odometer readings known).

        No metadata prefix is written; the trip reads as completed. Start/end
        waypoints, when given, are written before the user's text.

        Raises:
            TripValidationError: the free text contains a metadata prefix line
        """
        notes = ""
        if fields.start_gps is not None:
            notes = append_waypoint(notes, "start", fields.start_gps.lat, fields.start_gps.lng)
        if fields.end_gps is not None:
            notes = append_waypoint(notes, "end", fields.end_gps.lat, fields.end_gps.lng)
        notes = _with_free_text(notes, fields.notes)

        trip_data = Trip_create(
            **fields.model_dump(include=set(Trip_create.model_fields), exclude={"notes"}),
            notes=notes or None,
        )
        trip = trip_repo.create_trip(DB, trip_data)

        print(f"[TRIP_LIFECYCLE] ✅ Trip logged: {trip.id} ({trip.distance_km} km)")
        return trip

    # ------------------------------------------------------
    # EDIT
    # ------------------------------------------------------

    def update_trip_fields(self, DB: Session, trip: Trip, changes: Trip_edit) -> Optional[Trip]:
        """
        Apply a form edit to a trip.

        `changes.notes` replaces only the free text; the metadata prefix and
        GPS waypoints already stored stay where they are.

        Raises:
            TripValidationError: the free text contains a metadata prefix line
        """
        data = changes.model_dump(exclude_unset=True)

        if "notes" in data:
            stored = trip.notes or ""
            meta_line = stored[: len(stored) - len(strip(stored))].rstrip("\n")
            structured = "\n".join(
                part for part in (meta_line, waypoint_block(stored)) if part
            )
            data["notes"] = _with_free_text(structured, data["notes"]) or None

        return trip_repo.update_trip(DB, trip.id, Trip_update(**data))
