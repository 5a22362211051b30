"""
Third-party activity import (Strava-shaped records).

The network side (OAuth, API calls, webhooks) lives outside this package: the
caller hands over an already-fetched activity record and, optionally, its
streams. This module normalizes them and runs the same derived metrics as
file uploads.

Record fields used:
  id, name, type, start_date (ISO 8601), elapsed_time, moving_time, distance,
  total_elevation_gain, average_heartrate, max_heartrate, calories,
  start_latlng, end_latlng, map.summary_polyline

Streams (each {"data": [...]}, index-aligned):
  latlng ([lat, lng] pairs), time (seconds from start), altitude, heartrate, cadence
"""
import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from sqlmodel import Session, select

from activitycore.analysis.best_efforts import calculate_activity_prs
from activitycore.analysis.pace import average_pace_seconds_per_km, average_speed_kmh
from activitycore.analysis.relative_effort import relative_effort_for_activity
from activitycore.config import get_settings
from activitycore.geo.geometry import is_valid_coordinate
from activitycore.ingest.storage import (
    best_effort_columns,
    insert_gps_points,
    resolve_heart_rate_profile,
)
from activitycore.models.activity import Activity
from activitycore.models.track import TrackSample
from activitycore.parsers.sport import sport_from_third_party_type
from activitycore.parsers.track_stats import to_utc_naive

logger = logging.getLogger(__name__)


def _parse_iso_datetime(value: str) -> datetime:
    """Parse '2025-01-15T07:30:00Z' style timestamps into naive UTC."""
    return to_utc_naive(datetime.fromisoformat(value.strip().replace("Z", "+00:00")))


def _round_or_none(value: Optional[float]) -> Optional[int]:
    return int(round(value)) if value else None


def _latlng(pair: Any) -> Optional[tuple]:
    if not pair or len(pair) != 2:
        return None
    lat, lng = float(pair[0]), float(pair[1])
    return (lat, lng) if is_valid_coordinate(lat, lng) else None


def normalize_third_party_activity(raw: Dict[str, Any], provider: str = "strava") -> Dict[str, Any]:
    """
    Normalize a third-party activity record into Activity column values.

    Relative effort and best efforts are not included: they need the athlete
    profile and the streams, which the import service supplies.

    Raises:
        KeyError: if the record has no id or start_date.
    """
    distance = float(raw.get("distance") or 0.0)
    elapsed = int(raw.get("elapsed_time") or 0)
    moving = raw.get("moving_time")
    moving = int(moving) if moving is not None else None
    pace_basis = moving or elapsed

    sport = sport_from_third_party_type(raw.get("type"))
    start = _latlng(raw.get("start_latlng"))
    end = _latlng(raw.get("end_latlng"))
    summary_polyline = (raw.get("map") or {}).get("summary_polyline") or None

    return {
        "external_id": f"{provider}:{raw['id']}",
        "name": raw.get("name") or "Untitled Activity",
        "sport_type": sport.value if sport else None,
        "source": "third_party",
        "started_at": _parse_iso_datetime(raw["start_date"]),
        "elapsed_time_seconds": elapsed,
        "moving_time_seconds": moving,
        "distance_meters": distance,
        "elevation_gain_meters": raw.get("total_elevation_gain"),
        "avg_heart_rate": _round_or_none(raw.get("average_heartrate")),
        "max_heart_rate": _round_or_none(raw.get("max_heartrate")),
        "avg_pace_seconds_per_km": average_pace_seconds_per_km(distance, pace_basis),
        "avg_speed_kmh": average_speed_kmh(distance, pace_basis),
        "calories": _round_or_none(raw.get("calories")),
        "start_lat": start[0] if start else None,
        "start_lng": start[1] if start else None,
        "end_lat": end[0] if end else None,
        "end_lng": end[1] if end else None,
        "polyline": summary_polyline,
    }


def _stream(streams: Dict[str, Any], key: str) -> List[Any]:
    stream = streams.get(key) or {}
    return list(stream.get("data") or [])


def samples_from_streams(streams: Optional[Dict[str, Any]], started_at: datetime) -> List[TrackSample]:
    """
    Build track samples from index-aligned streams.

    Requires both `latlng` and `time`; returns [] otherwise. Invalid positions
    are skipped but keep their index as the sample sequence.
    """
    if not streams:
        return []
    latlngs = _stream(streams, "latlng")
    times = _stream(streams, "time")
    if not latlngs or not times:
        return []

    altitude = _stream(streams, "altitude")
    heartrate = _stream(streams, "heartrate")
    cadence = _stream(streams, "cadence")

    def at(values: List[Any], idx: int) -> Optional[Any]:
        return values[idx] if idx < len(values) else None

    samples: List[TrackSample] = []
    for idx, pair in enumerate(latlngs):
        position = _latlng(pair)
        if position is None:
            continue
        offset = at(times, idx)
        hr = at(heartrate, idx)
        cad = at(cadence, idx)
        samples.append(TrackSample(
            sequence=idx,
            timestamp=started_at + timedelta(seconds=offset) if offset is not None else None,
            lat=position[0],
            lng=position[1],
            altitude_meters=at(altitude, idx),
            heart_rate=int(hr) if hr else None,
            cadence=int(cad) if cad is not None else None,
        ))
    return samples


class ThirdPartyImportService:
    """Upserts third-party activities, keyed on external_id."""

    def __init__(self, engine, provider: Optional[str] = None):
        settings = get_settings()
        self.engine = engine
        self.provider = provider or settings.third_party_provider
        self.target_distances = list(settings.best_effort_distances)
        self.batch_size = settings.gps_batch_size
        self.default_max_hr = settings.default_max_hr
        self.default_rest_hr = settings.default_rest_hr

    def import_activity(
        self,
        raw: Dict[str, Any],
        streams: Optional[Dict[str, Any]] = None,
        user_id: Optional[int] = None,
    ) -> Optional[Activity]:
        """
        Import one record.

        Returns:
            The stored Activity, or None when its type isn't supported.
            Existing activities (same external_id) are updated in place; GPS
            samples are only written for newly created ones.
        """
        user_id = user_id if user_id is not None else get_settings().user_id
        fields = normalize_third_party_activity(raw, provider=self.provider)
        if fields["sport_type"] is None:
            logger.info("Skipping unsupported activity type: %s", raw.get("type"))
            return None

        samples = samples_from_streams(streams, fields["started_at"])
        if samples:
            fields.update(best_effort_columns(
                calculate_activity_prs(samples, self.target_distances)
            ))

        max_hr, rest_hr = resolve_heart_rate_profile(self.engine, user_id)
        fields["relative_effort"] = relative_effort_for_activity(
            fields["elapsed_time_seconds"],
            raw.get("average_heartrate"),
            activity_max_hr=raw.get("max_heartrate"),
            profile_max_hr=max_hr if max_hr is not None else self.default_max_hr,
            profile_rest_hr=rest_hr if rest_hr is not None else self.default_rest_hr,
        )

        with Session(self.engine) as s:
            existing = s.exec(
                select(Activity).where(Activity.external_id == fields["external_id"])
            ).first()

            if existing:
                for k, v in fields.items():
                    setattr(existing, k, v)
                s.add(existing)
                s.commit()
                s.refresh(existing)
                logger.info("Updated %s -> activity %s", fields["external_id"], existing.id)
                return existing

            activity = Activity(user_id=user_id, **fields)
            s.add(activity)
            s.commit()
            s.refresh(activity)

        logger.info("Imported %s -> activity %s", fields["external_id"], activity.id)
        if samples:
            insert_gps_points(self.engine, activity.id, samples, self.batch_size)
        return activity
