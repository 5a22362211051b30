"""
Persistence helpers shared by the upload and third-party import flows.

GPS samples are written after their Activity row exists (the rows need its
id), in fixed-size batches. Each batch commits on its own; a failing batch is
logged and skipped so earlier batches stay persisted and the activity itself
is never rolled back.
"""
import logging
from typing import Iterable, List, Optional, Sequence, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from activitycore.models.activity import Activity, GpsPoint
from activitycore.models.athlete import AthleteProfile
from activitycore.models.track import BestEffort, ParsedActivity, TrackSample

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 1000


def gps_point_from_sample(activity_id: int, sample: TrackSample) -> GpsPoint:
    return GpsPoint(
        activity_id=activity_id,
        sequence=sample.sequence,
        timestamp=sample.timestamp,
        lat=sample.lat,
        lng=sample.lng,
        altitude_meters=sample.altitude_meters,
        heart_rate=sample.heart_rate,
        cadence=sample.cadence,
        speed_ms=sample.speed_ms,
        power_watts=sample.power_watts,
        temperature_c=sample.temperature_c,
    )


def sample_from_gps_point(point: GpsPoint) -> TrackSample:
    """Rebuild an analysis sample from a stored row (e.g. to recompute best efforts)."""
    return TrackSample(
        sequence=point.sequence,
        timestamp=point.timestamp,
        lat=point.lat,
        lng=point.lng,
        altitude_meters=point.altitude_meters,
        heart_rate=point.heart_rate,
        cadence=point.cadence,
        speed_ms=point.speed_ms,
        power_watts=point.power_watts,
        temperature_c=point.temperature_c,
    )


def insert_gps_points(
    engine,
    activity_id: int,
    samples: Sequence[TrackSample],
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> int:
    """
    Insert samples for an existing activity in batches.

    Args:
        engine: SQLAlchemy engine.
        activity_id: id of the already-committed Activity row.
        samples: samples to store.
        batch_size: rows per insert transaction.

    Returns:
        Number of rows persisted. Less than len(samples) when a batch failed.
    """
    persisted = 0
    for offset in range(0, len(samples), batch_size):
        batch = samples[offset:offset + batch_size]
        try:
            with Session(engine) as s:
                s.add_all(gps_point_from_sample(activity_id, sample) for sample in batch)
                s.commit()
            persisted += len(batch)
        except SQLAlchemyError as exc:
            logger.error(
                "Error inserting GPS points batch %d-%d for activity %s: %s",
                offset, offset + len(batch) - 1, activity_id, exc,
            )
    return persisted


def resolve_heart_rate_profile(engine, user_id: int) -> Tuple[Optional[int], Optional[int]]:
    """(max_hr, rest_hr) from the athlete profile; None where unknown."""
    with Session(engine) as s:
        profile = s.get(AthleteProfile, user_id)
    if profile is None:
        return None, None
    return profile.max_heart_rate, profile.rest_heart_rate


def best_effort_columns(efforts: Iterable[BestEffort]) -> dict:
    """Map best efforts onto the Activity best_* columns (other distances are not stored)."""
    columns = {1000: "best_1km_seconds", 5000: "best_5km_seconds", 10000: "best_10km_seconds"}
    return {
        columns[e.target_distance_meters]: e.time_seconds
        for e in efforts
        if e.target_distance_meters in columns
    }


def geometry_columns(parsed: ParsedActivity) -> dict:
    """Start/end/bounds columns of an Activity row, None for an empty track."""
    fields: dict = {}
    if parsed.start_point is not None:
        fields.update(start_lat=parsed.start_point.lat, start_lng=parsed.start_point.lng)
    if parsed.end_point is not None:
        fields.update(end_lat=parsed.end_point.lat, end_lng=parsed.end_point.lng)
    if parsed.bounds is not None:
        fields.update(
            bounds_sw_lat=parsed.bounds.sw.lat,
            bounds_sw_lng=parsed.bounds.sw.lng,
            bounds_ne_lat=parsed.bounds.ne.lat,
            bounds_ne_lng=parsed.bounds.ne.lng,
        )
    return fields


def load_samples(engine, activity_id: int) -> List[TrackSample]:
    """Stored samples of an activity, ordered by sequence."""
    with Session(engine) as s:
        points = s.exec(
            select(GpsPoint)
            .where(GpsPoint.activity_id == activity_id)
            .order_by(GpsPoint.sequence)
        ).all()
        return [sample_from_gps_point(p) for p in points]


def save_activity(engine, activity: Activity) -> Activity:
    """Insert one Activity row and return it with its id."""
    with Session(engine) as s:
        s.add(activity)
        s.commit()
        s.refresh(activity)
    return activity
