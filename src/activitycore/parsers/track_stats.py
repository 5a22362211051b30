"""Aggregates shared by the FIT and GPX decoders."""
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Sequence, Tuple

from activitycore.geo.geometry import Bounds, Coordinate, compute_bounds, encode_polyline
from activitycore.models.track import TrackSample


def to_utc_naive(value: Optional[datetime]) -> Optional[datetime]:
    """Store every timestamp as naive UTC so tracks from any source compare cleanly."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def elevation_gain_loss(
    altitudes: Iterable[Optional[float]],
    bridge_gaps: bool = True,
) -> Tuple[float, float]:
    """
    Sum positive and negative altitude deltas separately.

    A climb followed by a descent counts towards both totals; nothing nets out.

    Args:
        altitudes: per-sample altitude in meters, None where missing.
        bridge_gaps: when True, a missing value is skipped and the next present
            value is compared with the last present one (FIT). When False, a
            missing value breaks the chain and only adjacent present pairs
            contribute (GPX).

    Returns:
        (gain, loss), both non-negative.
    """
    gain = 0.0
    loss = 0.0
    prev: Optional[float] = None

    for alt in altitudes:
        if alt is None:
            if not bridge_gaps:
                prev = None
            continue
        if prev is not None:
            diff = alt - prev
            if diff > 0:
                gain += diff
            else:
                loss += -diff
        prev = alt

    return gain, loss


def heart_rate_summary(samples: Iterable[TrackSample]) -> Tuple[Optional[int], Optional[int]]:
    """Mean (rounded) and max heart rate over samples carrying one; (None, None) if none do."""
    rates = [s.heart_rate for s in samples if s.heart_rate]
    if not rates:
        return None, None
    return int(round(sum(rates) / len(rates))), max(rates)


def track_geometry(
    samples: Sequence[TrackSample],
) -> Tuple[Optional[str], Optional[Coordinate], Optional[Coordinate], Optional[Bounds]]:
    """Polyline, start, end and bounds of a track; all None for an empty track."""
    if not samples:
        return None, None, None, None
    coords: List[Coordinate] = [s.coordinate for s in samples]
    return encode_polyline(coords), coords[0], coords[-1], compute_bounds(coords)
