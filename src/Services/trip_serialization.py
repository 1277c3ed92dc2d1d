# src/Services/trip_serialization.py

from datetime import date
from typing import Iterable, Optional

from src.Models.trip import Trip
from src.Schemas.trip import Trip_get, Trip_view, TripDayGroup, TripStatistics
from src.Services.trip_notes import TripNotes
from src.Services import trip_aggregator
from src.Services.trip_lifecycle import duration


def serialize_trip(row: Trip | None) -> Trip_view | None:
    """
    Convert a Trip ORM row into its decoded view.

    - Uses the Pydantic schema for validation.
    - Decodes notes into status, waypoints, duration and free text.
    - The raw notes field is kept as-is.
    """
    if row is None:
        return None

    data = Trip_get.model_validate(row).model_dump()
    view = TripNotes.parse(row.notes)

    return Trip_view(
        **data,
        status=view.status,
        waypoints=view.waypoints,
        duration=duration(row),
        clean_notes=view.text,
    )


def serialize_many(rows: Iterable[Trip]) -> list[Trip_view]:
    """Serialize a list of Trip rows, skipping None entries."""
    return [serialized for row in rows if (serialized := serialize_trip(row)) is not None]


def group_for_display(rows: Iterable[Trip], today: Optional[date] = None) -> list[TripDayGroup]:
    """
    Group trips by day (newest first) with a relative label
    ('Today', 'Yesterday', ...) and the day's total distance.
    """
    today = today or date.today()
    groups = []
    for date_key, trips in trip_aggregator.group_by_date(rows).items():
        groups.append(TripDayGroup(
            trip_date=date.fromisoformat(date_key),
            label=trip_aggregator.relative_day_label(date_key, today),
            trips=serialize_many(trips),
            total_distance_km=trip_aggregator.aggregate(trips).total_distance_km,
        ))
    return groups


def summarize(rows: Iterable[Trip], top: int = 5) -> TripStatistics:
    """Statistics for a set of trips (usually one vehicle over one period)."""
    rows = list(rows)
    totals = trip_aggregator.aggregate(rows)
    done = trip_aggregator.completed_trips(rows)

    return TripStatistics(
        count=totals.count,
        total_distance_km=totals.total_distance_km,
        completed_count=len(done),
        in_progress_count=totals.count - len(done),
        by_type=trip_aggregator.trip_type_breakdown(rows),
        top_trips=serialize_many(trip_aggregator.top_trips(rows, limit=top)),
    )
