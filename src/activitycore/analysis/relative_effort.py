"""
Relative effort: a TRIMP-style heart-rate training load for a single activity.

  reserve   = max_hr - rest_hr
  intensity = clamp((avg_hr - rest_hr) / reserve, 0, 1)
  score     = duration_hours * intensity ** 1.92

The 1.92 exponent is the usual TRIMP weighting that makes hard efforts count
disproportionately. The score is dimensionless: its only contract is that
longer or more intense sessions never score lower.
"""
from typing import Optional

DEFAULT_MAX_HR = 190
DEFAULT_REST_HR = 60
TRIMP_EXPONENT = 1.92


def compute_relative_effort(
    duration_seconds: float,
    avg_heart_rate: float,
    max_heart_rate: Optional[float] = None,
    rest_heart_rate: Optional[float] = None,
) -> float:
    """
    Score one activity.

    Args:
        duration_seconds: activity duration.
        avg_heart_rate: average HR in bpm.
        max_heart_rate: athlete max HR; DEFAULT_MAX_HR when None.
        rest_heart_rate: athlete resting HR; DEFAULT_REST_HR when None.

    Returns:
        Score rounded to 2 decimals. 0.0 for a non-positive duration or HR
        reserve, which only come from bad or missing instrument data.
    """
    max_hr = DEFAULT_MAX_HR if max_heart_rate is None else max_heart_rate
    rest_hr = DEFAULT_REST_HR if rest_heart_rate is None else rest_heart_rate
    reserve = max_hr - rest_hr
    if reserve <= 0 or duration_seconds <= 0:
        return 0.0

    intensity = max(0.0, min(1.0, (avg_heart_rate - rest_hr) / reserve))
    hours = duration_seconds / 3600.0
    return round(hours * intensity ** TRIMP_EXPONENT, 2)


def relative_effort_for_activity(
    duration_seconds: float,
    avg_heart_rate: Optional[float],
    activity_max_hr: Optional[float] = None,
    profile_max_hr: Optional[float] = None,
    profile_rest_hr: Optional[float] = None,
) -> Optional[float]:
    """
    Score an activity using the best heart-rate bounds available.

    Max HR resolves activity → athlete profile → default; rest HR resolves
    athlete profile → default. Returns None when the activity has no heart
    rate at all (no load can be attributed to it).
    """
    if not avg_heart_rate or avg_heart_rate <= 0:
        return None
    max_hr = activity_max_hr if activity_max_hr is not None else profile_max_hr
    return compute_relative_effort(
        duration_seconds,
        avg_heart_rate,
        max_heart_rate=max_hr,
        rest_heart_rate=profile_rest_hr,
    )
