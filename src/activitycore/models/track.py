"""
In-memory track and summary types shared by the decoders and analysis modules.

These are plain frozen dataclasses with no SQLModel or DB dependencies: the
decoders produce them, the analysis functions consume them, and the ingest
layer maps them onto table rows.
"""
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional, Tuple

from activitycore.geo.geometry import Bounds, Coordinate


class SportType(str, Enum):
    RUN = "run"
    RIDE = "ride"
    SWIM = "swim"


@dataclass(frozen=True)
class TrackSample:
    """
    One recorded GPS sample.
    `sequence` is the recording order (zero-based, monotonic, may have gaps
    where invalid samples were dropped).
    """

    sequence: int
    timestamp: Optional[datetime]
    lat: float
    lng: float
    altitude_meters: Optional[float] = None
    heart_rate: Optional[int] = None      # bpm
    cadence: Optional[int] = None         # spm (run) / rpm (ride)
    speed_ms: Optional[float] = None      # m/s
    power_watts: Optional[int] = None
    temperature_c: Optional[float] = None

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(self.lat, self.lng)


@dataclass(frozen=True)
class ParsedActivity:
    """Normalized result of decoding one activity file."""

    sport_type: SportType
    started_at: datetime
    elapsed_time_seconds: int
    distance_meters: float
    elevation_gain_meters: float = 0.0
    elevation_loss_meters: float = 0.0
    moving_time_seconds: Optional[int] = None
    avg_heart_rate: Optional[int] = None
    max_heart_rate: Optional[int] = None
    calories: Optional[int] = None
    polyline: Optional[str] = None        # None when the track has no valid points
    start_point: Optional[Coordinate] = None
    end_point: Optional[Coordinate] = None
    bounds: Optional[Bounds] = None
    samples: Tuple[TrackSample, ...] = field(default_factory=tuple)

    @property
    def duration_seconds(self) -> int:
        """Moving time when known, otherwise elapsed time."""
        if self.moving_time_seconds:
            return self.moving_time_seconds
        return self.elapsed_time_seconds


@dataclass(frozen=True)
class BestEffort:
    target_distance_meters: int
    time_seconds: Optional[int]  # None: no contiguous span covered the distance


@dataclass(frozen=True)
class DailyLoad:
    date: date
    load: float


@dataclass(frozen=True)
class FitnessPoint:
    """One day of the fitness (CTL) / fatigue (ATL) / form (TSB) series."""

    date: date
    load: float
    ctl: float
    atl: float
    tsb: float
