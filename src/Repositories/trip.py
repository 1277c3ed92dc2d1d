"""
Trip Repository - Database operations for the vehicle trip log.

Responsibilities:
- CRUD operations for the vehicle_trips table
- Keep distance_km in sync with the odometer readings
- Historical trip queries with vehicle/type/date filters

This is the persistence boundary of the trip core: lifecycle services call
exactly one write function per operation. Database errors are rolled back
and re-raised unchanged; nothing here retries.

Usage:
    from src.Repositories.trip import create_trip, get_trips_by_vehicle

    trip = create_trip(db, trip_data)
    trips = get_trips_by_vehicle(db, "car-01", trip_type="work")
"""

from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from datetime import date
from typing import Optional

from src.Core.config import settings
from src.Core.exceptions import TripStateError
from src.Models.trip import Trip
from src.Schemas.trip import Trip_create, Trip_update
from src.Services.trip_notes import TripNotes


def _commit(DB: Session, action: str) -> None:
    try:
        DB.commit()
    except SQLAlchemyError as e:
        DB.rollback()
        print(f"[REPO] ❌ Trip {action} failed: {e.__class__.__name__}: {e}")
        raise


# ==========================================================
# CREATE OPERATIONS
# ==========================================================

def create_trip(DB: Session, trip_data: Trip_create) -> Trip:
    """
    Create a new trip record in the database.

    Args:
        DB: SQLAlchemy session
        trip_data: Trip_create schema with validated data

    Returns:
        Trip: Created trip ORM object with generated id and audit fields

    Example:
        >>> trip = Trip_create(
        ...     vehicle_id="car-01",
        ...     trip_date=date(2024, 1, 1),
        ...     trip_type="work",
        ...     start_km=1000,
        ...     end_km=1050,
        ... )
        >>> created = create_trip(db, trip)
        >>> created.distance_km
        50
    """
    data = trip_data.model_dump(include=set(Trip_create.model_fields))
    new_trip = Trip(**data)
    new_trip.distance_km = new_trip.end_km - new_trip.start_km

    DB.add(new_trip)
    _commit(DB, "create")
    DB.refresh(new_trip)

    print(f"[REPO] Trip created: {new_trip.id} (vehicle: {new_trip.vehicle_id}, type: {new_trip.trip_type})")

    return new_trip


# ==========================================================
# READ OPERATIONS
# ==========================================================

def get_trip_by_id(DB: Session, trip_id: str) -> Optional[Trip]:
    """
    Retrieve a trip by its unique identifier.

    Returns:
        Trip or None: Trip object if found, None otherwise
    """
    return DB.query(Trip).filter(Trip.id == trip_id).first()


def get_trips_by_vehicle(
    DB: Session,
    vehicle_id: str,
    trip_type: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    limit: Optional[int] = None
) -> list[Trip]:
    """
    Get historical trips for a vehicle with optional filters.

    Args:
        DB: SQLAlchemy session
        vehicle_id: Vehicle identifier
        trip_type: Filter by type, None or 'all' for every type
        start_date: Keep trips dated on or after this date
        end_date: Keep trips dated on or before this date
        limit: Maximum number of trips (default settings.TRIP_LIST_LIMIT)

    Returns:
        list[Trip]: Trips ordered by trip_date DESC, then trip_time DESC
    """
    query = DB.query(Trip).filter(Trip.vehicle_id == vehicle_id)

    if trip_type and trip_type != 'all':
        query = query.filter(Trip.trip_type == trip_type)

    if start_date:
        query = query.filter(Trip.trip_date >= start_date)

    if end_date:
        query = query.filter(Trip.trip_date <= end_date)

    query = query.order_by(Trip.trip_date.desc(), Trip.trip_time.desc(), Trip.created_at.desc())

    return query.limit(limit or settings.TRIP_LIST_LIMIT).all()


def get_trips_in_range_by_vehicle(
    DB: Session,
    vehicle_id: str,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    trip_type: Optional[str] = None
) -> list[Trip]:
    """
    Every trip of a vehicle between two dates (inclusive), for statistics.

    Unlike get_trips_by_vehicle() there is no row limit: totals must cover
    the whole period. Bounds are optional; None leaves that side open.

    Returns:
        list[Trip]: Trips ordered by trip_date DESC, then trip_time DESC
    """
    query = DB.query(Trip).filter(Trip.vehicle_id == vehicle_id)

    if trip_type and trip_type != 'all':
        query = query.filter(Trip.trip_type == trip_type)

    if start_date:
        query = query.filter(Trip.trip_date >= start_date)

    if end_date:
        query = query.filter(Trip.trip_date <= end_date)

    return query.order_by(Trip.trip_date.desc(), Trip.trip_time.desc()).all()


# ==========================================================
# UPDATE OPERATIONS
# ==========================================================

def update_trip(
    DB: Session,
    trip_id: str,
    trip_update: Trip_update,
    expected_status: Optional[str] = None
) -> Optional[Trip]:
    """
    Update an existing trip with new data.

    Args:
        DB: SQLAlchemy session
        trip_id: Trip identifier
        trip_update: Trip_update schema with fields to update
        expected_status: If set, the stored notes must currently decode to
            this status or TripStateError is raised (nothing is written)

    Returns:
        Trip or None: Updated trip if found, None otherwise

    Notes:
        - Only updates fields present in trip_update (exclude_unset)
        - distance_km is recomputed from the resulting odometer readings
        - The row is locked (SELECT ... FOR UPDATE) when expected_status is
          given, so two completions of the same trip cannot both pass
    """
    query = DB.query(Trip).filter(Trip.id == trip_id)
    if expected_status is not None:
        query = query.with_for_update()
    db_trip = query.first()

    if not db_trip:
        print(f"[REPO] Trip not found: {trip_id}")
        return None

    if expected_status is not None:
        current = TripNotes.parse(db_trip.notes).status
        if current != expected_status:
            DB.rollback()
            raise TripStateError(
                f"Trip {trip_id} is '{current}', expected '{expected_status}'",
                field="status"
            )

    update_data = trip_update.model_dump(exclude_unset=True)
    for key, value in update_data.items():
        setattr(db_trip, key, value)
    db_trip.distance_km = db_trip.end_km - db_trip.start_km

    _commit(DB, "update")
    DB.refresh(db_trip)

    print(f"[REPO] Trip updated: {trip_id} ({len(update_data)} fields)")

    return db_trip


# ==========================================================
# DELETE OPERATIONS
# ==========================================================

def delete_trip(DB: Session, trip_id: str) -> bool:
    """
    Delete a trip from the database.

    Returns:
        bool: True if deleted, False if not found
    """
    db_trip = DB.query(Trip).filter(Trip.id == trip_id).first()

    if not db_trip:
        print(f"[REPO] Cannot delete - trip not found: {trip_id}")
        return False

    DB.delete(db_trip)
    _commit(DB, "delete")

    print(f"[REPO] Trip deleted: {trip_id}")

    return True
