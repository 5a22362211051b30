"""
Fitness / fatigue / form from daily training load (the CTL/ATL/TSB model).

Two exponentially weighted moving averages of daily load:
  CTL (chronic training load, "fitness")  time constant 42 days
  ATL (acute training load, "fatigue")    time constant 7 days
  TSB (training stress balance, "form")   CTL - ATL

With factor = 1 - exp(-1/tau), applied once per calendar day from zero:
  ctl_t = ctl_{t-1} + (load_t - ctl_{t-1}) * ctl_factor
  atl_t = atl_{t-1} + (load_t - atl_{t-1}) * atl_factor

Positive TSB means fresher than fit, negative means carrying fatigue.
"""
import math
from collections import defaultdict
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Tuple, Union

from activitycore.models.track import DailyLoad, FitnessPoint

CTL_TIME_CONSTANT = 42
ATL_TIME_CONSTANT = 7

DateLike = Union[date, datetime]


def smoothing_factor(time_constant: float) -> float:
    """EWMA factor for a time constant in days: 1 - exp(-1/tau)."""
    return 1.0 - math.exp(-1.0 / time_constant)


CTL_FACTOR = smoothing_factor(CTL_TIME_CONSTANT)
ATL_FACTOR = smoothing_factor(ATL_TIME_CONSTANT)


def _as_date(value: DateLike) -> date:
    return value.date() if isinstance(value, datetime) else value


def sum_daily_loads(items: Iterable[Tuple[DateLike, float]]) -> List[DailyLoad]:
    """Group (timestamp, load) pairs per calendar day, summing same-day loads. Sorted by date."""
    totals: Dict[date, float] = defaultdict(float)
    for when, load in items:
        totals[_as_date(when)] += float(load)
    return [DailyLoad(date=d, load=totals[d]) for d in sorted(totals)]


def compute_ctl_atl_tsb(
    daily_loads: Iterable[DailyLoad],
    start_date: DateLike,
    end_date: DateLike,
) -> List[FitnessPoint]:
    """
    Build a dense daily CTL/ATL/TSB series.

    Args:
        daily_loads: sparse per-day loads. Days absent from the input count as
            zero load; repeated days are summed.
        start_date: first day of the series (inclusive).
        end_date: last day of the series (inclusive).

    Returns:
        One FitnessPoint per calendar day, ascending, values rounded to 2
        decimals. Empty when start_date is after end_date.
    """
    load_by_date: Dict[date, float] = defaultdict(float)
    for point in daily_loads:
        load_by_date[_as_date(point.date)] += point.load

    current = _as_date(start_date)
    last = _as_date(end_date)
    ctl = 0.0
    atl = 0.0
    series: List[FitnessPoint] = []

    while current <= last:
        load = load_by_date.get(current, 0.0)
        ctl += (load - ctl) * CTL_FACTOR
        atl += (load - atl) * ATL_FACTOR
        ctl_out = round(ctl, 2)
        atl_out = round(atl, 2)
        # tsb derived from the published values so tsb == ctl - atl holds exactly
        series.append(FitnessPoint(
            date=current,
            load=round(load, 2),
            ctl=ctl_out,
            atl=atl_out,
            tsb=round(ctl_out - atl_out, 2),
        ))
        current += timedelta(days=1)

    return series


def describe_form(tsb: float) -> str:
    """Display band for a TSB value."""
    if tsb > 15:
        return "Very fresh"
    if tsb > 5:
        return "Fresh"
    if tsb >= -5:
        return "Neutral"
    if tsb >= -15:
        return "Tired"
    return "Very fatigued"
