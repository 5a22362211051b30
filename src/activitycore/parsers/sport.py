"""
Sport-type classification rules.

These are business heuristics, not ground truth, kept apart from the parsers
so the thresholds can be revisited without touching decoding:

  FIT   - free-text session sport, substring match
  GPX   - average speed only (GPX has no sport field worth trusting)
  Third-party records - explicit type name lookup

Known limitation of the speed rule: slow cycling (steep climbs) reads as a
run, and fast open-water swimming reads as a run too.
"""
from typing import Optional

from activitycore.models.track import SportType

RIDE_MIN_SPEED_KMH = 25.0
SWIM_MAX_SPEED_KMH = 2.0

_RIDE_KEYWORDS = ("cycling", "biking", "ride")

_THIRD_PARTY_TYPES = {
    "Run": SportType.RUN,
    "VirtualRun": SportType.RUN,
    "TrailRun": SportType.RUN,
    "Ride": SportType.RIDE,
    "VirtualRide": SportType.RIDE,
    "EBikeRide": SportType.RIDE,
    "GravelRide": SportType.RIDE,
    "MountainBikeRide": SportType.RIDE,
    "Swim": SportType.SWIM,
}


def sport_from_fit_name(sport: Optional[str]) -> SportType:
    """Map a FIT session sport string ("running", "cycling", ...) to a sport type."""
    if not sport:
        return SportType.RUN
    name = str(sport).lower()
    if any(keyword in name for keyword in _RIDE_KEYWORDS):
        return SportType.RIDE
    if "swim" in name:
        return SportType.SWIM
    return SportType.RUN


def sport_from_average_speed(avg_speed_kmh: float) -> SportType:
    """Guess the sport from average speed: > 25 km/h ride, < 2 km/h swim, else run."""
    if avg_speed_kmh > RIDE_MIN_SPEED_KMH:
        return SportType.RIDE
    if avg_speed_kmh < SWIM_MAX_SPEED_KMH:
        return SportType.SWIM
    return SportType.RUN


def sport_from_third_party_type(type_name: Optional[str]) -> Optional[SportType]:
    """Map a third-party activity type ("TrailRun", "GravelRide", ...). None = unsupported."""
    if not type_name:
        return None
    return _THIRD_PARTY_TYPES.get(type_name)
