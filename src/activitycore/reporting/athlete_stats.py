"""Lifetime totals and season best efforts for an athlete."""
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from sqlmodel import Session, select

from activitycore.models.activity import Activity

# label → Activity column
SEASON_PR_COLUMNS = (
    ("1km", "best_1km_seconds"),
    ("5km", "best_5km_seconds"),
    ("10km", "best_10km_seconds"),
)


@dataclass
class AthleteStats:
    total_activities: int = 0
    total_distance_meters: float = 0.0
    total_duration_seconds: int = 0
    total_elevation_gain_meters: float = 0.0


@dataclass
class SeasonPR:
    distance: str  # "1km", "5km", "10km"
    time_seconds: int
    activity_id: int
    activity_name: str
    achieved_at: datetime


def get_athlete_stats(engine, user_id: int) -> AthleteStats:
    with Session(engine) as s:
        activities = s.exec(select(Activity).where(Activity.user_id == user_id)).all()

    return AthleteStats(
        total_activities=len(activities),
        total_distance_meters=sum(a.distance_meters for a in activities),
        total_duration_seconds=sum(a.elapsed_time_seconds for a in activities),
        total_elevation_gain_meters=sum(a.elevation_gain_meters or 0.0 for a in activities),
    )


def get_season_prs(engine, user_id: int, year_start: Optional[datetime] = None) -> List[SeasonPR]:
    """
    Fastest stored best effort per distance since `year_start` (Jan 1st of the
    current year by default). Distances never achieved are omitted.
    """
    if year_start is None:
        year_start = datetime(datetime.utcnow().year, 1, 1)

    prs: List[SeasonPR] = []
    with Session(engine) as s:
        for label, column_name in SEASON_PR_COLUMNS:
            column = getattr(Activity, column_name)
            best = s.exec(
                select(Activity)
                .where(Activity.user_id == user_id)
                .where(Activity.started_at >= year_start)
                .where(column.is_not(None))
                .order_by(column.asc(), Activity.started_at.asc())
            ).first()
            if best is None:
                continue
            prs.append(SeasonPR(
                distance=label,
                time_seconds=getattr(best, column_name),
                activity_id=best.id,
                activity_name=best.name,
                achieved_at=best.started_at,
            ))
    return prs
