"""
Best efforts (PRs): the fastest contiguous span of a track covering a target distance.

Algorithm, per target distance:
  1. Sort samples by sequence and build cumulative haversine distance (cum[0] = 0)
  2. Move a right pointer over every sample
  3. Advance the left pointer while dropping it would still leave a window
     covering the target (cum[right] - cum[left + 1] >= target)
  4. If the window covers the target, its wall-clock time is a candidate
  5. Keep the smallest strictly positive candidate

Both pointers only move forward, so each target costs O(n). After step 3 the
window is the shortest one ending at `right` that still reaches the target.
"""
import logging
from typing import Dict, Iterable, List, Optional, Sequence

from activitycore.geo.distance import cumulative_distances
from activitycore.models.track import BestEffort, TrackSample

logger = logging.getLogger(__name__)

DEFAULT_TARGET_DISTANCES = (1000, 5000, 10000)

# Summed haversine legs can land a hair under a distance the track really covers
DISTANCE_TOLERANCE_METERS = 1e-6


def _best_time_for_target(
    samples: Sequence[TrackSample],
    cumulative: Sequence[float],
    target: float,
) -> Optional[int]:
    best: Optional[float] = None
    reach = target - DISTANCE_TOLERANCE_METERS
    left = 0

    for right in range(1, len(samples)):
        while left + 1 < right and cumulative[right] - cumulative[left + 1] >= reach:
            left += 1

        if cumulative[right] - cumulative[left] < reach:
            continue

        start = samples[left].timestamp
        end = samples[right].timestamp
        if start is None or end is None:
            continue
        elapsed = (end - start).total_seconds()
        if elapsed > 0 and (best is None or elapsed < best):
            best = elapsed

    return int(round(best)) if best is not None else None


def calculate_best_efforts(
    samples: Iterable[TrackSample],
    target_distances: Iterable[int] = DEFAULT_TARGET_DISTANCES,
) -> Dict[int, Optional[int]]:
    """
    Find the best time (seconds) for each target distance (meters).

    Args:
        samples: track samples in any order; ordered by `sequence` here.
        target_distances: distances in meters, e.g. (1000, 5000, 10000).

    Returns:
        {target: seconds or None}. None when fewer than 2 samples exist, the
        track is shorter than the target, or no window has a positive duration.
    """
    targets = list(target_distances)
    ordered = sorted(samples, key=lambda s: s.sequence)
    if len(ordered) < 2:
        return {target: None for target in targets}

    cumulative = cumulative_distances([s.coordinate for s in ordered])
    total = cumulative[-1]

    results: Dict[int, Optional[int]] = {}
    for target in targets:
        if total < target - DISTANCE_TOLERANCE_METERS:
            results[target] = None
            continue
        results[target] = _best_time_for_target(ordered, cumulative, target)

    logger.debug("Best efforts over %.0fm track: %s", total, results)
    return results


def calculate_activity_prs(
    samples: Iterable[TrackSample],
    target_distances: Iterable[int] = DEFAULT_TARGET_DISTANCES,
) -> List[BestEffort]:
    """Best efforts as a list of BestEffort records, in target order."""
    targets = list(target_distances)
    efforts = calculate_best_efforts(samples, targets)
    return [BestEffort(target_distance_meters=t, time_seconds=efforts[t]) for t in targets]
