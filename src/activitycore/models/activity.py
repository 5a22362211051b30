"""Activity data models: activity summaries and their GPS samples."""
from datetime import datetime
from typing import List, Optional

from sqlmodel import Field, Relationship, SQLModel


class Activity(SQLModel, table=True):
    """One row per uploaded or imported activity."""

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(default=1, index=True)
    name: str
    description: Optional[str] = None
    sport_type: str  # "run", "ride", "swim"
    source: str = "upload"  # "upload", "third_party", "manual"
    # "<provider>:<id>" for imported activities, e.g. "strava:123456"
    external_id: Optional[str] = Field(default=None, unique=True, index=True)

    started_at: datetime
    elapsed_time_seconds: int
    moving_time_seconds: Optional[int] = None
    distance_meters: float

    elevation_gain_meters: Optional[float] = None
    elevation_loss_meters: Optional[float] = None
    avg_heart_rate: Optional[int] = None
    max_heart_rate: Optional[int] = None
    avg_pace_seconds_per_km: Optional[int] = None
    avg_speed_kmh: Optional[float] = None
    calories: Optional[int] = None

    # Geometry (degrees)
    start_lat: Optional[float] = None
    start_lng: Optional[float] = None
    end_lat: Optional[float] = None
    end_lng: Optional[float] = None
    bounds_sw_lat: Optional[float] = None
    bounds_sw_lng: Optional[float] = None
    bounds_ne_lat: Optional[float] = None
    bounds_ne_lng: Optional[float] = None
    polyline: Optional[str] = None

    # Derived metrics
    best_1km_seconds: Optional[int] = None
    best_5km_seconds: Optional[int] = None
    best_10km_seconds: Optional[int] = None
    relative_effort: Optional[float] = None

    created_at: datetime = Field(default_factory=datetime.utcnow)

    # Relationships
    gps_points: List["GpsPoint"] = Relationship(back_populates="activity")


class GpsPoint(SQLModel, table=True):
    """
    One row per recorded GPS sample (~1 per second on most devices).
    Inserted in batches after the owning Activity row exists.
    """

    id: Optional[int] = Field(default=None, primary_key=True)
    activity_id: int = Field(foreign_key="activity.id", index=True)

    sequence: int  # recording order within the activity
    timestamp: Optional[datetime] = None
    lat: float
    lng: float

    # Per-sample sensors, nullable (devices don't record every field every sample)
    altitude_meters: Optional[float] = None
    heart_rate: Optional[int] = None
    cadence: Optional[int] = None
    speed_ms: Optional[float] = None
    power_watts: Optional[int] = None
    temperature_c: Optional[float] = None

    # Relationship
    activity: Optional[Activity] = Relationship(back_populates="gps_points")
