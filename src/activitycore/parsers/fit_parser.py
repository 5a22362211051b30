"""
FIT file decoder: converts an uploaded .fit buffer into a ParsedActivity.

Binary framing is handled by fitparse; this module only interprets the
messages. The first 'session' message is the summary, every 'record' message
is one sample (typically ~1 per second on a watch).

Field mapping from FIT to TrackSample:
  FIT field                      → our field
  timestamp                      → timestamp (naive UTC)
  position_lat / position_long   → lat / lng (degrees, see semicircles_to_degrees)
  enhanced_altitude / altitude   → altitude_meters
  heart_rate                     → heart_rate (bpm, int)
  cadence                        → cadence
  enhanced_speed / speed         → speed_ms
  power                          → power_watts
  temperature                    → temperature_c
"""
import io
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

import fitparse

from activitycore.geo.geometry import is_valid_coordinate
from activitycore.models.track import ParsedActivity, TrackSample
from activitycore.parsers.errors import ActivityFileError
from activitycore.parsers.sport import sport_from_fit_name
from activitycore.parsers.track_stats import (
    elevation_gain_loss,
    heart_rate_summary,
    to_utc_naive,
    track_geometry,
)

logger = logging.getLogger(__name__)

# Garmin stores lat/lon as 32-bit signed integers in "semicircles"
# Degrees = semicircles * (180 / 2^31)
_SEMICIRCLE_TO_DEGREES = 180.0 / (2**31)


class FitParseError(ActivityFileError):
    """Raised when a FIT file cannot be parsed."""


def semicircles_to_degrees(value: float) -> float:
    """
    Convert a FIT position to degrees.

    Some toolchains hand us degrees already. Anything with magnitude <= 180 is
    taken as degrees, larger values as semicircles. Ambiguous for genuinely
    tiny semicircle values near (0, 0); accepted.
    """
    if abs(value) <= 180:
        return float(value)
    return value * _SEMICIRCLE_TO_DEGREES


def _first(values: Dict[str, Any], *keys: str) -> Optional[Any]:
    for key in keys:
        if values.get(key) is not None:
            return values[key]
    return None


def _optional_int(value: Any) -> Optional[int]:
    return int(value) if value is not None else None


def _optional_float(value: Any) -> Optional[float]:
    return float(value) if value is not None else None


def _read_messages(content: bytes):
    try:
        fit = fitparse.FitFile(io.BytesIO(content))
        sessions = [m.get_values() for m in fit.get_messages("session")]
        records = [m.get_values() for m in fit.get_messages("record")]
    except Exception as exc:
        raise FitParseError(f"Failed to parse FIT file: {exc}") from exc
    return sessions, records


def parse_fit_file(content: bytes) -> ParsedActivity:
    """
    Decode a FIT activity file.

    Args:
        content: raw bytes of the uploaded .fit file.

    Returns:
        ParsedActivity with one TrackSample per record that carries a valid
        position. A file with a session but no usable GPS gives an activity
        with an empty track and no polyline.

    Raises:
        FitParseError: if the bytes are not a FIT file or contain no session.
    """
    sessions, records = _read_messages(content)
    if not sessions:
        raise FitParseError("No session data found in FIT file")
    session = sessions[0]

    started_at = to_utc_naive(session.get("start_time")) or datetime.utcnow()
    samples: List[TrackSample] = []
    last_timestamp: datetime = started_at

    for index, values in enumerate(records):
        timestamp = to_utc_naive(values.get("timestamp"))
        if timestamp is None:
            timestamp = last_timestamp
        last_timestamp = timestamp

        raw_lat = values.get("position_lat")
        raw_lng = values.get("position_long")
        if raw_lat is None or raw_lng is None:
            continue

        lat = semicircles_to_degrees(raw_lat)
        lng = semicircles_to_degrees(raw_lng)
        if not is_valid_coordinate(lat, lng):
            logger.debug("Skipping FIT record %d with out-of-range position (%s, %s)", index, lat, lng)
            continue

        heart_rate = _optional_int(values.get("heart_rate"))
        samples.append(TrackSample(
            sequence=index,
            timestamp=timestamp,
            lat=lat,
            lng=lng,
            altitude_meters=_optional_float(_first(values, "enhanced_altitude", "altitude")),
            heart_rate=heart_rate if heart_rate else None,
            cadence=_optional_int(values.get("cadence")),
            speed_ms=_optional_float(_first(values, "enhanced_speed", "speed")),
            power_watts=_optional_int(values.get("power")),
            temperature_c=_optional_float(values.get("temperature")),
        ))

    derived_gain, derived_loss = elevation_gain_loss(s.altitude_meters for s in samples)
    derived_avg_hr, derived_max_hr = heart_rate_summary(samples)
    polyline, start_point, end_point, bounds = track_geometry(samples)

    total_ascent = session.get("total_ascent")
    total_descent = session.get("total_descent")
    timer_time = session.get("total_timer_time")
    avg_hr = session.get("avg_heart_rate")
    max_hr = session.get("max_heart_rate")
    calories = session.get("total_calories")

    logger.info(
        "Decoded FIT file: %d records, %d GPS samples kept, sport=%s",
        len(records), len(samples), session.get("sport"),
    )

    return ParsedActivity(
        sport_type=sport_from_fit_name(session.get("sport")),
        started_at=started_at,
        elapsed_time_seconds=int(round(session.get("total_elapsed_time") or 0)),
        moving_time_seconds=int(round(timer_time)) if timer_time else None,
        distance_meters=float(session.get("total_distance") or 0.0),
        elevation_gain_meters=float(total_ascent) if total_ascent is not None else derived_gain,
        elevation_loss_meters=float(total_descent) if total_descent is not None else derived_loss,
        avg_heart_rate=int(round(avg_hr)) if avg_hr else derived_avg_hr,
        max_heart_rate=int(max_hr) if max_hr else derived_max_hr,
        calories=_optional_int(calories),
        polyline=polyline,
        start_point=start_point,
        end_point=end_point,
        bounds=bounds,
        samples=tuple(samples),
    )
