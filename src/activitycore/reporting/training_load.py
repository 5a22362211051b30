"""Fitness/fatigue series for an athlete, read from stored relative efforts."""
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import List, Optional

from sqlmodel import Session, select

from activitycore.analysis.training_load import compute_ctl_atl_tsb, sum_daily_loads
from activitycore.models.activity import Activity
from activitycore.models.track import FitnessPoint

logger = logging.getLogger(__name__)


@dataclass
class TrainingLoadReport:
    data: List[FitnessPoint] = field(default_factory=list)
    latest: Optional[FitnessPoint] = None


def get_training_load(
    engine,
    user_id: int,
    days: int = 90,
    today: Optional[date] = None,
) -> TrainingLoadReport:
    """
    CTL/ATL/TSB over the last `days` days (plus today), one point per day.

    Activities without a relative effort contribute nothing. Loads are
    bucketed by the UTC calendar day of `started_at`.
    """
    end_date = today or datetime.utcnow().date()
    start_date = end_date - timedelta(days=days)

    with Session(engine) as s:
        rows = s.exec(
            select(Activity.started_at, Activity.relative_effort)
            .where(Activity.user_id == user_id)
            .where(Activity.relative_effort.is_not(None))
            .where(Activity.started_at >= datetime.combine(start_date, time.min))
            .where(Activity.started_at <= datetime.combine(end_date, time.max))
        ).all()

    daily = sum_daily_loads((started_at, effort) for started_at, effort in rows)
    data = compute_ctl_atl_tsb(daily, start_date, end_date)
    logger.debug("Training load for user %s: %d activities, %d days", user_id, len(rows), len(data))
    return TrainingLoadReport(data=data, latest=data[-1] if data else None)
