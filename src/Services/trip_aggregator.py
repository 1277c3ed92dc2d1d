# src/Services/trip_aggregator.py
"""
Trip Aggregator - read-side filtering, grouping and statistics.

Every function is pure: it works on any sequence of trip-like objects
(ORM Trip rows, Trip_get / Trip_view schemas) exposing the fields
trip_date, trip_type, start_km, end_km, distance_km and notes.

Periods are inclusive closed intervals. Month, week, quarter and day
ranges end at 23:59:59 of their last day so that trips dated that day are
included.
"""

import calendar
from collections import Counter, defaultdict
from datetime import date, datetime, time, timedelta
from typing import Iterable, Optional, Sequence

from src.Schemas.trip import TripAggregate, TripTypeShare, MonthlyTripSummary
from src.Services.trip_lifecycle import is_in_progress


END_OF_DAY = time(23, 59, 59)

PERIODS = ('day', 'week', 'month', 'quarter', 'all')


# ==========================================================
# HELPERS
# ==========================================================

def _trip_date(trip) -> Optional[date]:
    value = getattr(trip, "trip_date", None)
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value[:10])
        except ValueError:
            return None
    return None


def _as_datetime(value) -> datetime:
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    return datetime.combine(value, time.min)


def trip_distance(trip) -> int:
    """distance_km when stored, else end_km - start_km."""
    distance = getattr(trip, "distance_km", None)
    if distance is None:
        distance = (trip.end_km or 0) - (trip.start_km or 0)
    return distance


def _date_key(trip) -> str:
    trip_day = _trip_date(trip)
    return trip_day.isoformat() if trip_day else ""


# ==========================================================
# PERIODS
# ==========================================================

def month_range(year: int, month: int) -> tuple[datetime, datetime]:
    """First day 00:00:00 through last day 23:59:59 of a calendar month."""
    last_day = calendar.monthrange(year, month)[1]
    return (
        datetime(year, month, 1),
        datetime.combine(date(year, month, last_day), END_OF_DAY),
    )


def _shift_month(year: int, month: int, offset: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) + offset
    return index // 12, index % 12 + 1


def period_range(period: str, offset: int = 0, today: Optional[date] = None) -> tuple[datetime, datetime]:
    """
    Inclusive bounds of a period relative to `today`.

    Args:
        period: 'day', 'week' (Monday to Sunday), 'month', 'quarter' or 'all'
        offset: 0 for the current period, -1 for the previous one, ...
        today: reference date (defaults to date.today())

    Raises:
        ValueError: unknown period
    """
    today = today or date.today()

    if period == 'day':
        day = today + timedelta(days=offset)
        return datetime.combine(day, time.min), datetime.combine(day, END_OF_DAY)

    if period == 'week':
        monday = today - timedelta(days=today.weekday()) + timedelta(weeks=offset)
        return datetime.combine(monday, time.min), datetime.combine(monday + timedelta(days=6), END_OF_DAY)

    if period == 'month':
        return month_range(*_shift_month(today.year, today.month, offset))

    if period == 'quarter':
        quarter_index = (today.month - 1) // 3 + offset
        year = today.year + quarter_index // 4
        first_month = (quarter_index % 4) * 3 + 1
        start, _ = month_range(year, first_month)
        _, end = month_range(year, first_month + 2)
        return start, end

    if period == 'all':
        return datetime.min, datetime.max

    raise ValueError(f"Unknown period: {period!r} (expected one of {', '.join(PERIODS)})")


# ==========================================================
# FILTERS
# ==========================================================

def filter_by_period(trips: Iterable, period_start, period_end) -> list:
    """Trips whose trip_date lies in [period_start, period_end]."""
    start, end = _as_datetime(period_start), _as_datetime(period_end)
    kept = []
    for trip in trips:
        trip_day = _trip_date(trip)
        if trip_day is not None and start <= _as_datetime(trip_day) <= end:
            kept.append(trip)
    return kept


def filter_by_month(trips: Iterable, year: int, month: int) -> list:
    return filter_by_period(trips, *month_range(year, month))


def filter_by_type(trips: Iterable, trip_type: str) -> list:
    """Exact match on trip_type; 'all' keeps everything."""
    if trip_type == 'all':
        return list(trips)
    return [trip for trip in trips if trip.trip_type == trip_type]


def completed_trips(trips: Iterable) -> list:
    return [trip for trip in trips if not is_in_progress(trip)]


# ==========================================================
# GROUPING
# ==========================================================

def group_by_date(trips: Iterable) -> dict[str, list]:
    """
    Group trips by ISO trip_date key, newest day first.

    Trips keep their input order inside each day.
    """
    groups = defaultdict(list)
    for trip in trips:
        groups[_date_key(trip)].append(trip)
    return {key: groups[key] for key in sorted(groups, reverse=True)}


def relative_day_label(date_key: str, today: date) -> str:
    """
    'Today', 'Yesterday' or 'Monday, 15/01/2024' for an ISO date key.

    Unparseable keys are returned unchanged.
    """
    try:
        day = date.fromisoformat(date_key)
    except (TypeError, ValueError):
        return date_key

    if day == today:
        return "Today"
    if day == today - timedelta(days=1):
        return "Yesterday"
    return f"{calendar.day_name[day.weekday()]}, {day:%d/%m/%Y}"


# ==========================================================
# STATISTICS
# ==========================================================

def aggregate(trips: Iterable) -> TripAggregate:
    """
    Count and total distance.

    In-progress trips are counted but contribute 0 km, whatever their
    odometer fields say.
    """
    count = 0
    total = 0
    for trip in trips:
        count += 1
        if not is_in_progress(trip):
            total += trip_distance(trip)
    return TripAggregate(count=count, total_distance_km=total)


def trip_type_breakdown(trips: Iterable) -> list[TripTypeShare]:
    """Completed trips per type, most frequent first, with integer percentages."""
    done = completed_trips(trips)
    counts = Counter(trip.trip_type for trip in done)
    return [
        TripTypeShare(
            trip_type=trip_type,
            count=count,
            percent=int(count * 100 / len(done) + 0.5),
        )
        for trip_type, count in counts.most_common()
    ]


def top_trips(trips: Iterable, limit: int = 5) -> list:
    """Longest completed trips."""
    return sorted(completed_trips(trips), key=trip_distance, reverse=True)[:limit]


def months_window(months: int, today: Optional[date] = None) -> tuple[datetime, datetime]:
    """Inclusive bounds of the last `months` calendar months, current month included."""
    today = today or date.today()
    start, _ = month_range(*_shift_month(today.year, today.month, -(months - 1)))
    _, end = month_range(today.year, today.month)
    return start, end


def monthly_summary(trips: Sequence, months: int = 6, today: Optional[date] = None) -> list[MonthlyTripSummary]:
    """
    Completed-trip count and distance for the last `months` calendar months,
    oldest month first. Months without trips are included with zeros.
    """
    today = today or date.today()
    done = completed_trips(trips)

    summary = []
    for offset in range(-(months - 1), 1):
        year, month = _shift_month(today.year, today.month, offset)
        in_month = filter_by_month(done, year, month)
        totals = aggregate(in_month)
        summary.append(MonthlyTripSummary(
            month=f"{year:04d}-{month:02d}",
            count=totals.count,
            total_distance_km=totals.total_distance_km,
        ))
    return summary
