"""Per-athlete reporting routes: training load, totals, season PRs."""
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from activitycore.analysis.training_load import describe_form
from activitycore.config import get_settings
from activitycore.db.engine import get_session
from activitycore.reporting.athlete_stats import get_athlete_stats, get_season_prs
from activitycore.reporting.training_load import get_training_load

router = APIRouter()


@router.get("/{user_id}/training-load")
def training_load(
    user_id: int,
    days: Optional[int] = Query(None, ge=1, le=3650),
    today: Optional[date] = None,
    session: Session = Depends(get_session),
):
    """Daily CTL/ATL/TSB series, with the latest point and its form label."""
    report = get_training_load(
        session.get_bind(),
        user_id,
        days=days or get_settings().training_load_days,
        today=today,
    )
    return {
        "data": report.data,
        "latest": report.latest,
        "form": describe_form(report.latest.tsb) if report.latest else None,
    }


@router.get("/{user_id}/stats")
def athlete_stats(user_id: int, session: Session = Depends(get_session)):
    """Lifetime totals and this season's best efforts."""
    engine = session.get_bind()
    return {
        "stats": get_athlete_stats(engine, user_id),
        "season_prs": get_season_prs(engine, user_id),
    }
