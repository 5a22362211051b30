"""Great-circle distance on a spherical earth."""
import math
from typing import List, Sequence

from activitycore.geo.geometry import Coordinate

EARTH_RADIUS_METERS = 6_371_000.0


def haversine_distance(a: Coordinate, b: Coordinate) -> float:
    """
    Haversine distance in meters between two points.

    Accurate to a few meters for the sub-kilometer spacing of GPS samples,
    which is all the track integrators need.
    """
    phi1, phi2 = math.radians(a.lat), math.radians(b.lat)
    dphi = math.radians(b.lat - a.lat)
    dlambda = math.radians(b.lng - a.lng)
    h = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    return EARTH_RADIUS_METERS * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def cumulative_distances(coords: Sequence[Coordinate]) -> List[float]:
    """Running haversine distance along a track; element 0 is always 0.0."""
    if not coords:
        return []
    result = [0.0]
    for prev, curr in zip(coords, coords[1:]):
        result.append(result[-1] + haversine_distance(prev, curr))
    return result
