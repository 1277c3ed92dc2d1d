# src/Schemas/trip.py
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from datetime import date, time, datetime
from typing import Optional


TRIP_TYPE_PATTERN = '^(work|business|service|leisure|hometown|other)$'


# ============================================
# GPS VALUE OBJECTS
# ============================================
class GpsPoint(BaseModel):
    """
    Coordinate pair supplied by the client when starting/finishing a trip.
    """
    lat: float = Field(..., ge=-90, le=90, description="Latitude (decimal degrees)")
    lng: float = Field(..., ge=-180, le=180, description="Longitude (decimal degrees)")


class Waypoint(BaseModel):
    """
    GPS waypoint decoded from a trip's notes (label line + map link line).
    """
    model_config = ConfigDict(frozen=True)

    role: str = Field(..., pattern='^(start|end)$')
    lat: float
    lng: float
    map_url: str


# ============================================
# BASE SCHEMA
# ============================================
class Trip_base(BaseModel):
    """
    Base schema for Trip with common attributes and validations.
    Used as foundation for Create and Get schemas.
    """
    model_config = ConfigDict(from_attributes=True)

    vehicle_id: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Vehicle this trip belongs to"
    )

    trip_date: date = Field(..., description="Local calendar date of the trip")

    trip_time: Optional[time] = Field(None, description="Local time the trip started")

    trip_type: str = Field(
        default='other',
        pattern=TRIP_TYPE_PATTERN,
        description="work, business, service, leisure, hometown or other"
    )

    start_km: int = Field(..., ge=0, description="Odometer at departure")

    end_km: int = Field(..., ge=0, description="Odometer at arrival")

    start_location: Optional[str] = Field(None, max_length=300)

    end_location: Optional[str] = Field(None, max_length=300)

    notes: Optional[str] = Field(
        None,
        description="Encoded notes: metadata prefix, waypoint pairs, free text"
    )


# ============================================
# CREATE SCHEMA
# ============================================
class Trip_create(Trip_base):
    """
    Schema for inserting a trip row.

    Used by:
    - TripLifecycle.start_trip() (end_km == start_km placeholder)
    - TripLifecycle.direct_create()
    - Repository create_trip()
    """

    @model_validator(mode='after')
    def check_km_range(self):
        if self.end_km < self.start_km:
            raise ValueError("end_km must be greater than or equal to start_km")
        return self


# ============================================
# UPDATE SCHEMA
# ============================================
class Trip_update(BaseModel):
    """
    Schema for updating existing trips.
    All fields are optional to support partial updates.

    Common use cases:
    - Completing a trip: end_km, end_location, rewritten notes
    - Editing date/type/places from the trip form
    """
    model_config = ConfigDict(from_attributes=True)

    trip_date: Optional[date] = None
    trip_time: Optional[time] = None
    trip_type: Optional[str] = Field(None, pattern=TRIP_TYPE_PATTERN)
    start_km: Optional[int] = Field(None, ge=0)
    end_km: Optional[int] = Field(None, ge=0)
    start_location: Optional[str] = Field(None, max_length=300)
    end_location: Optional[str] = Field(None, max_length=300)
    notes: Optional[str] = None


# ============================================
# GET SCHEMA
# ============================================
class Trip_get(Trip_base):
    """
    Schema for retrieving trip data from database.
    Includes all base fields plus derived distance and audit fields.
    """
    model_config = ConfigDict(from_attributes=True)

    id: str

    distance_km: Optional[int] = Field(
        None,
        description="end_km - start_km (0 while in progress)"
    )

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ============================================
# LIFECYCLE REQUEST SCHEMAS
# ============================================
class Trip_start(BaseModel):
    """
    Request body for starting a trip now.

    start_km is validated by the lifecycle (TripValidationError), not here,
    so that the rejection carries the same message everywhere.
    """
    vehicle_id: str = Field(..., min_length=1, max_length=100)
    start_km: int
    trip_type: str = Field(default='other', pattern=TRIP_TYPE_PATTERN)
    start_location: Optional[str] = Field(None, max_length=300)
    start_gps: Optional[GpsPoint] = None
    notes: Optional[str] = None


class Trip_complete(BaseModel):
    """
    Request body for finishing an in-progress trip.
    """
    end_km: int
    end_location: Optional[str] = Field(None, max_length=300)
    end_gps: Optional[GpsPoint] = None


class Trip_direct_create(Trip_create):
    """
    Request body for logging a finished trip in one step.

    `notes` here is plain user text; waypoints are appended from the GPS fields.
    """
    start_gps: Optional[GpsPoint] = None
    end_gps: Optional[GpsPoint] = None


class Trip_edit(BaseModel):
    """
    Request body for editing a trip from the trip form.

    `notes` is the user's free text only. Metadata and waypoints already
    stored in the notes field are kept.
    """
    trip_date: Optional[date] = None
    trip_time: Optional[time] = None
    trip_type: Optional[str] = Field(None, pattern=TRIP_TYPE_PATTERN)
    start_location: Optional[str] = Field(None, max_length=300)
    end_location: Optional[str] = Field(None, max_length=300)
    notes: Optional[str] = None

    @field_validator('trip_date', 'trip_type')
    @classmethod
    def reject_null(cls, value, info):
        # Omit the field to leave it unchanged; the columns are NOT NULL
        if value is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return value


# ============================================
# DERIVED / READ-SIDE SCHEMAS
# ============================================
class TripDuration(BaseModel):
    """
    Lifecycle timestamps decoded from the metadata prefix.

    minutes is None when either timestamp is missing. It may be negative when
    completedAt precedes startedAt (hand-edited notes); it is not clamped.
    """
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    minutes: Optional[int] = None


class Trip_view(Trip_get):
    """
    Trip as shown in lists and detail screens.

    The raw notes are decoded: status, waypoints, duration and the user's
    free text are exposed as separate typed fields.
    """
    status: str
    waypoints: list[Waypoint] = Field(default_factory=list)
    duration: TripDuration = Field(default_factory=TripDuration)
    clean_notes: str = ""


class TripDayGroup(BaseModel):
    """Trips sharing one trip_date, with a human label for the day."""
    trip_date: date
    label: str
    trips: list[Trip_view]
    total_distance_km: int


class TripAggregate(BaseModel):
    count: int = 0
    total_distance_km: int = 0


class TripTypeShare(BaseModel):
    trip_type: str
    count: int
    percent: int


class MonthlyTripSummary(BaseModel):
    month: str = Field(..., description="YYYY-MM")
    count: int
    total_distance_km: int


class TripStatistics(BaseModel):
    """
    Read-side statistics for a set of trips (usually one vehicle and period).

    count / total_distance_km follow aggregate(): every trip is counted and
    in-progress trips contribute 0 km.
    """
    count: int
    total_distance_km: int
    completed_count: int
    in_progress_count: int
    by_type: list[TripTypeShare] = Field(default_factory=list)
    top_trips: list[Trip_view] = Field(default_factory=list)
