"""
Pace / speed derivations stored alongside an activity, plus display formatting.
"""
from typing import Optional

# 1 mile in kilometers
_KM_PER_MILE = 1.60934


def calculate_pace(distance_meters: float, duration_seconds: float) -> float:
    """Pace in seconds per kilometer; 0.0 when either input is non-positive."""
    if distance_meters <= 0 or duration_seconds <= 0:
        return 0.0
    return duration_seconds / distance_meters * 1000.0


def average_pace_seconds_per_km(distance_meters: float, duration_seconds: float) -> Optional[int]:
    """Rounded average pace for storage, or None when it can't be derived."""
    pace = calculate_pace(distance_meters, duration_seconds)
    return int(round(pace)) if pace > 0 else None


def average_speed_kmh(distance_meters: float, duration_seconds: float) -> Optional[float]:
    """Average speed in km/h, or None when it can't be derived."""
    if distance_meters <= 0 or duration_seconds <= 0:
        return None
    return (distance_meters / 1000.0) / (duration_seconds / 3600.0)


def format_pace(pace_s_per_km: Optional[float], unit: str = "km") -> str:
    """
    Format a pace (seconds/km) as a human-readable string.

    Args:
        pace_s_per_km: pace in seconds per kilometer
        unit: "km" for per-kilometer (default), "mi" for per-mile

    Returns:
        Formatted string like "5:17/km" or "8:30/mi"; "--:--" for a missing pace
    """
    if not pace_s_per_km or pace_s_per_km <= 0:
        return "--:--"
    if unit == "mi":
        pace_s = pace_s_per_km * _KM_PER_MILE
        unit_label = "mi"
    else:
        pace_s = pace_s_per_km
        unit_label = "km"

    total = int(round(pace_s))
    return f"{total // 60}:{total % 60:02d}/{unit_label}"


def format_duration(seconds: Optional[float]) -> str:
    """'h:mm:ss' above an hour, 'm:ss' otherwise."""
    if not seconds or seconds <= 0:
        return "0:00"
    total = int(round(seconds))
    hours, rem = divmod(total, 3600)
    minutes, secs = divmod(rem, 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def format_distance(meters: Optional[float]) -> str:
    """'850m' below a kilometer, '5.25km' below ten, '21.1km' above."""
    if not meters or meters <= 0:
        return "0"
    if meters < 1000:
        return f"{round(meters)}m"
    km = meters / 1000.0
    if km < 10:
        return f"{km:.2f}km"
    return f"{km:.1f}km"
