# src/Models/trip.py
import uuid

from sqlalchemy import Column, String, Integer, Date, Time, Text, DateTime, CheckConstraint, Index
from sqlalchemy.sql import func
from sqlalchemy.orm import declared_attr
from src.DB.base_class import Base


TRIP_TYPES = ('work', 'business', 'service', 'leisure', 'hometown', 'other')


def _new_trip_id() -> str:
    return str(uuid.uuid4())


class Trip(Base):
    """
    SQLAlchemy model for a vehicle trip log entry.

    Responsibilities:
    - Stores one vehicle movement (date, type, odometer readings, places)
    - Keeps lifecycle state, GPS waypoints and user notes in the `notes` column
    - Maintains the derived `distance_km` (end_km - start_km)

    The trip status is NOT a column. It is decoded from the metadata prefix of
    `notes` (see src/Services/trip_notes). A trip without a prefix is completed.

    Related models:
    - Vehicle (external) - referenced by vehicle_id only
    """

    @declared_attr.directive
    def __tablename__(cls) -> str:
        return "vehicle_trips"

    # ========================================
    # PRIMARY KEY
    # ========================================
    id = Column(
        String(36),
        primary_key=True,
        default=_new_trip_id,
        doc="Trip identifier (UUID4 text), assigned on insert"
    )

    # ========================================
    # OWNER REFERENCE
    # ========================================
    vehicle_id = Column(
        String(100),
        nullable=False,
        index=True,
        doc="Vehicle this trip belongs to (owned by the vehicles service)"
    )

    # ========================================
    # WHEN / WHAT
    # ========================================
    trip_date = Column(
        Date,
        nullable=False,
        doc="Local calendar date of the trip"
    )

    trip_time = Column(
        Time,
        nullable=True,
        doc="Local time of day the trip started"
    )

    trip_type = Column(
        String(20),
        nullable=False,
        server_default='other',
        doc="Purpose: work, business, service, leisure, hometown or other"
    )

    # ========================================
    # ODOMETER
    # ========================================
    start_km = Column(
        Integer,
        nullable=False,
        doc="Odometer reading at departure"
    )

    end_km = Column(
        Integer,
        nullable=False,
        doc="Odometer reading at arrival (equals start_km while in progress)"
    )

    distance_km = Column(
        Integer,
        nullable=False,
        server_default='0',
        doc="end_km - start_km, written by the repository on every change"
    )

    # ========================================
    # PLACES AND NOTES
    # ========================================
    start_location = Column(
        String(300),
        nullable=True,
        doc="Free-text departure place"
    )

    end_location = Column(
        String(300),
        nullable=True,
        doc="Free-text arrival place"
    )

    notes = Column(
        Text,
        nullable=True,
        doc="Metadata prefix line, GPS waypoint line pairs, then free text"
    )

    # ========================================
    # AUDIT FIELDS
    # ========================================
    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        doc="Timestamp when trip record was created"
    )

    updated_at = Column(
        DateTime(timezone=True),
        onupdate=func.now(),
        nullable=True,
        doc="Timestamp of last update"
    )

    # ========================================
    # TABLE CONSTRAINTS
    # ========================================
    __table_args__ = (
        Index('idx_vehicle_trips_vehicle_date', 'vehicle_id', 'trip_date'),

        CheckConstraint(
            "trip_type IN ('work', 'business', 'service', 'leisure', 'hometown', 'other')",
            name='check_trip_type'
        ),
        CheckConstraint(
            "start_km >= 0",
            name='check_start_km'
        ),
        CheckConstraint(
            "end_km >= start_km",
            name='valid_km_range'
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<Trip(id={self.id!r}, vehicle_id={self.vehicle_id!r}, "
            f"date={self.trip_date!s}, km={self.start_km}->{self.end_km})>"
        )
