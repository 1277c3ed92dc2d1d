# tests/test_trip_aggregator.py

from datetime import date, datetime
from types import SimpleNamespace

import pytest

from src.Services import trip_aggregator as agg


IN_PROGRESS = "[TRIPMETA:status=in_progress,startedAt=2024-01-15T08:00:00.000Z]"


def make_trip(trip_date, start_km, end_km, trip_type="work", notes=None, distance_km=None):
    return SimpleNamespace(
        trip_date=trip_date,
        trip_type=trip_type,
        start_km=start_km,
        end_km=end_km,
        distance_km=distance_km,
        notes=notes,
    )


@pytest.fixture
def trips():
    return [
        make_trip(date(2024, 1, 15), 1000, 1050, "work"),
        make_trip(date(2024, 1, 15), 1050, 1080, "leisure"),
        make_trip(date(2024, 1, 14), 900, 1000, "work"),
        make_trip(date(2024, 1, 31), 1080, 1100, "work"),
        make_trip(date(2024, 2, 1), 1100, 1300, "business"),
        make_trip(date(2024, 1, 15), 1300, 1300, "work", notes=IN_PROGRESS),
    ]


# ============================================
# PERIODS / FILTERS
# ============================================

def test_month_range_covers_last_day():
    start, end = agg.month_range(2024, 2)
    assert start == datetime(2024, 2, 1)
    assert end == datetime(2024, 2, 29, 23, 59, 59)


def test_filter_by_month_includes_last_day(trips):
    january = agg.filter_by_month(trips, 2024, 1)
    assert len(january) == 5
    assert all(t.trip_date.month == 1 for t in january)


def test_filter_by_period_accepts_dates(trips):
    kept = agg.filter_by_period(trips, date(2024, 1, 15), date(2024, 1, 15))
    assert len(kept) == 3


def test_filter_by_type(trips):
    assert len(agg.filter_by_type(trips, "work")) == 4
    assert len(agg.filter_by_type(trips, "all")) == len(trips)
    assert agg.filter_by_type(trips, "service") == []


def test_period_range_week_is_monday_to_sunday():
    start, end = agg.period_range("week", 0, date(2024, 1, 17))
    assert start == datetime(2024, 1, 15)
    assert end == datetime(2024, 1, 21, 23, 59, 59)


def test_period_range_previous_month_crosses_year():
    start, end = agg.period_range("month", -1, date(2024, 1, 10))
    assert start == datetime(2023, 12, 1)
    assert end == datetime(2023, 12, 31, 23, 59, 59)


def test_period_range_previous_quarter():
    start, end = agg.period_range("quarter", -1, date(2024, 2, 10))
    assert start == datetime(2023, 10, 1)
    assert end == datetime(2023, 12, 31, 23, 59, 59)


def test_period_range_unknown():
    with pytest.raises(ValueError):
        agg.period_range("decade", 0, date(2024, 1, 1))


# ============================================
# GROUPING
# ============================================

def test_group_by_date_newest_first(trips):
    groups = agg.group_by_date(trips)
    assert list(groups) == ["2024-02-01", "2024-01-31", "2024-01-15", "2024-01-14"]
    assert len(groups["2024-01-15"]) == 3


def test_relative_day_label():
    today = date(2024, 1, 15)
    assert agg.relative_day_label("2024-01-15", today) == "Today"
    assert agg.relative_day_label("2024-01-14", today) == "Yesterday"
    assert agg.relative_day_label("2024-01-08", today) == "Monday, 08/01/2024"
    assert agg.relative_day_label("not-a-date", today) == "not-a-date"


# ============================================
# STATISTICS
# ============================================

def test_aggregate_counts_in_progress_without_distance(trips):
    totals = agg.aggregate(trips)
    assert totals.count == 6
    assert totals.total_distance_km == 50 + 30 + 100 + 20 + 200


def test_aggregate_ignores_odometer_of_in_progress_trip():
    trip = make_trip(date(2024, 1, 15), 1000, 1200, notes=IN_PROGRESS)
    assert agg.aggregate([trip]).total_distance_km == 0


def test_aggregate_prefers_stored_distance():
    trip = make_trip(date(2024, 1, 15), 1000, 1200, distance_km=150)
    assert agg.aggregate([trip]).total_distance_km == 150


def test_aggregate_empty():
    totals = agg.aggregate([])
    assert totals.count == 0
    assert totals.total_distance_km == 0


def test_trip_type_breakdown(trips):
    shares = agg.trip_type_breakdown(trips)
    assert [(s.trip_type, s.count, s.percent) for s in shares] == [
        ("work", 3, 60),
        ("leisure", 1, 20),
        ("business", 1, 20),
    ]


def test_trip_type_breakdown_rounds_percent():
    thirds = [make_trip(date(2024, 1, 1), 0, 1, t) for t in ("work", "leisure", "other")]
    assert [s.percent for s in agg.trip_type_breakdown(thirds)] == [33, 33, 33]


def test_top_trips_skips_in_progress(trips):
    top = agg.top_trips(trips, limit=2)
    assert [agg.trip_distance(t) for t in top] == [200, 100]


def test_monthly_summary_fills_empty_months(trips):
    summary = agg.monthly_summary(trips, months=3, today=date(2024, 2, 10))
    assert [s.month for s in summary] == ["2023-12", "2024-01", "2024-02"]
    assert [s.count for s in summary] == [0, 4, 1]
    assert summary[1].total_distance_km == 200
    assert summary[2].total_distance_km == 200


def test_months_window_spans_whole_months():
    start, end = agg.months_window(3, date(2024, 2, 10))
    assert start == datetime(2023, 12, 1)
    assert end == datetime(2024, 2, 29, 23, 59, 59)
