# src/Controller/Routes/trips.py

"""
Vehicle Trip Log REST API

Endpoints:
- POST   /trips/start                 Start a trip now (in progress)
- POST   /trips/{trip_id}/complete    Complete a started trip
- POST   /trips/                      Log a finished trip in one step
- GET    /trips/                      List a vehicle's trips grouped by day
- GET    /trips/stats                 Statistics for a vehicle and period
- GET    /trips/monthly               Completed trips per month
- GET    /trips/{trip_id}             Trip details (decoded notes)
- PATCH  /trips/{trip_id}             Edit date/type/places/free text
- DELETE /trips/{trip_id}             Delete a trip

Error mapping:
- TripValidationError -> 422 (odometer rules, metadata lines in free text)
- TripStateError      -> 409 (strict completion of a trip not in progress)
- Unknown trip        -> 404

Usage:
    # In main.py
    from src.Controller.Routes import trips
    app.include_router(trips.router, prefix="/trips", tags=["trips"])
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from src.Controller.deps import get_DB, get_lifecycle
from src.Core.exceptions import TripValidationError, TripStateError
from src.Repositories import trip as trip_repo
from src.Schemas import trip as trip_schema
from src.Services import trip_aggregator
from src.Services.trip_lifecycle import TripLifecycle
from src.Services.trip_serialization import serialize_trip, group_for_display, summarize

router = APIRouter()


def _rejected(error: TripValidationError) -> HTTPException:
    status_code = 409 if isinstance(error, TripStateError) else 422
    return HTTPException(
        status_code=status_code,
        detail={"message": str(error), "field": error.field}
    )


def _get_or_404(db: Session, trip_id: str):
    trip = trip_repo.get_trip_by_id(db, trip_id)
    if trip is None:
        raise HTTPException(status_code=404, detail=f"Trip '{trip_id}' not found")
    return trip


# ==========================================================
# 📌 Lifecycle
# ==========================================================

@router.post("/start", response_model=trip_schema.Trip_view, status_code=201)
def start_trip(
    payload: trip_schema.Trip_start,
    db: Session = Depends(get_DB),
    lifecycle: TripLifecycle = Depends(get_lifecycle)
):
    """
    Start a trip now. The trip is stored with end_km = start_km and
    status in_progress until it is completed.

    Example Request:
        POST /trips/start
        {"vehicle_id": "car-01", "start_km": 1000, "trip_type": "work",
         "start_gps": {"lat": 10.762622, "lng": 106.660172}}
    """
    try:
        trip = lifecycle.start_trip(
            db,
            vehicle_id=payload.vehicle_id,
            start_km=payload.start_km,
            start_location=payload.start_location,
            start_gps=payload.start_gps,
            trip_type=payload.trip_type,
            notes=payload.notes,
        )
    except TripValidationError as e:
        raise _rejected(e)
    return serialize_trip(trip)


@router.post("/{trip_id}/complete", response_model=trip_schema.Trip_view)
def complete_trip(
    trip_id: str,
    payload: trip_schema.Trip_complete,
    db: Session = Depends(get_DB),
    lifecycle: TripLifecycle = Depends(get_lifecycle)
):
    """
    Complete a started trip with the arrival odometer (must be greater than
    the departure odometer), place and GPS point.
    """
    trip = _get_or_404(db, trip_id)
    try:
        updated = lifecycle.complete_trip(
            db,
            trip,
            end_km=payload.end_km,
            end_location=payload.end_location,
            end_gps=payload.end_gps,
        )
    except TripValidationError as e:
        raise _rejected(e)
    if updated is None:
        raise HTTPException(status_code=404, detail=f"Trip '{trip_id}' not found")
    return serialize_trip(updated)


@router.post("/", response_model=trip_schema.Trip_view, status_code=201)
def create_trip(
    payload: trip_schema.Trip_direct_create,
    db: Session = Depends(get_DB),
    lifecycle: TripLifecycle = Depends(get_lifecycle)
):
    """Log a finished trip with both odometer readings."""
    try:
        trip = lifecycle.direct_create(db, payload)
    except TripValidationError as e:
        raise _rejected(e)
    return serialize_trip(trip)


# ==========================================================
# 📌 Lists and statistics
# ==========================================================

@router.get("/", response_model=list[trip_schema.TripDayGroup])
def list_trips(
    vehicle_id: str = Query(..., description="Vehicle whose trips are listed"),
    trip_type: str = Query("all", description="Trip type or 'all'"),
    period: str = Query("month", pattern="^(day|week|month|quarter|all)$"),
    offset: int = Query(0, le=0, description="0 = current period, -1 = previous, ..."),
    db: Session = Depends(get_DB),
    lifecycle: TripLifecycle = Depends(get_lifecycle)
):
    """
    Trips of a vehicle in a period, grouped by day (newest day first).

    Example Requests:
        GET /trips/?vehicle_id=car-01                      # this month
        GET /trips/?vehicle_id=car-01&period=month&offset=-1
        GET /trips/?vehicle_id=car-01&trip_type=work&period=all
    """
    today = lifecycle.today()
    start, end = trip_aggregator.period_range(period, offset, today)
    trips = trip_repo.get_trips_by_vehicle(
        db,
        vehicle_id,
        trip_type=trip_type,
        start_date=None if period == "all" else start.date(),
        end_date=None if period == "all" else end.date(),
    )
    return group_for_display(trips, today=today)


@router.get("/stats", response_model=trip_schema.TripStatistics)
def trip_statistics(
    vehicle_id: str = Query(...),
    period: str = Query("month", pattern="^(day|week|month|quarter|all)$"),
    offset: int = Query(0, le=0),
    top: int = Query(5, ge=1, le=50),
    db: Session = Depends(get_DB),
    lifecycle: TripLifecycle = Depends(get_lifecycle)
):
    """Count, distance, status split, type breakdown and longest trips."""
    start, end = trip_aggregator.period_range(period, offset, lifecycle.today())
    trips = trip_repo.get_trips_in_range_by_vehicle(
        db,
        vehicle_id,
        start_date=None if period == "all" else start.date(),
        end_date=None if period == "all" else end.date(),
    )
    return summarize(trips, top=top)


@router.get("/monthly", response_model=list[trip_schema.MonthlyTripSummary])
def monthly_statistics(
    vehicle_id: str = Query(...),
    months: int = Query(6, ge=1, le=24),
    trip_type: Optional[str] = Query(None),
    db: Session = Depends(get_DB),
    lifecycle: TripLifecycle = Depends(get_lifecycle)
):
    """Completed trips and distance for each of the last `months` months."""
    today = lifecycle.today()
    start, end = trip_aggregator.months_window(months, today)
    trips = trip_repo.get_trips_in_range_by_vehicle(
        db,
        vehicle_id,
        start_date=start.date(),
        end_date=end.date(),
        trip_type=trip_type,
    )
    return trip_aggregator.monthly_summary(trips, months=months, today=today)


# ==========================================================
# 📌 Single trip
# ==========================================================

@router.get("/{trip_id}", response_model=trip_schema.Trip_view)
def get_trip(trip_id: str, db: Session = Depends(get_DB)):
    """Trip details with status, waypoints, duration and clean notes."""
    return serialize_trip(_get_or_404(db, trip_id))


@router.patch("/{trip_id}", response_model=trip_schema.Trip_view)
def edit_trip(
    trip_id: str,
    payload: trip_schema.Trip_edit,
    db: Session = Depends(get_DB),
    lifecycle: TripLifecycle = Depends(get_lifecycle)
):
    """
    Edit a trip from the trip form. Odometer readings are changed through
    the lifecycle endpoints only.
    """
    trip = _get_or_404(db, trip_id)
    try:
        updated = lifecycle.update_trip_fields(db, trip, payload)
    except TripValidationError as e:
        raise _rejected(e)
    if updated is None:
        raise HTTPException(status_code=404, detail=f"Trip '{trip_id}' not found")
    return serialize_trip(updated)


@router.delete("/{trip_id}", status_code=204)
def delete_trip(trip_id: str, db: Session = Depends(get_DB)):
    """
    Delete a trip.

    Raises:
        404: Trip not found
    """
    if not trip_repo.delete_trip(db, trip_id):
        raise HTTPException(status_code=404, detail=f"Trip '{trip_id}' not found")
    return Response(status_code=204)
