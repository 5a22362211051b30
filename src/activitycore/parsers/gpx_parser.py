"""
GPX file decoder: converts uploaded GPX XML into a ParsedActivity.

GPX carries positions, optional elevation/time and (from Garmin and most
watches) a TrackPointExtension with heart rate and cadence. There is no
session summary, so every aggregate is integrated from consecutive points.
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

import gpxpy
import gpxpy.gpx

from activitycore.geo.distance import cumulative_distances
from activitycore.geo.geometry import is_valid_coordinate
from activitycore.models.track import ParsedActivity, TrackSample
from activitycore.parsers.errors import ActivityFileError
from activitycore.parsers.sport import sport_from_average_speed
from activitycore.parsers.track_stats import (
    elevation_gain_loss,
    heart_rate_summary,
    to_utc_naive,
    track_geometry,
)

logger = logging.getLogger(__name__)

# Extension tag (namespace stripped, lowercased) → sensor key
_EXTENSION_TAGS = {
    "hr": "heart_rate",
    "cad": "cadence",
    "power": "power_watts",
    "atemp": "temperature_c",
    "temp": "temperature_c",
}


class GpxParseError(ActivityFileError):
    """Raised when a GPX file has no usable track."""


def _extension_values(point: gpxpy.gpx.GPXTrackPoint) -> Dict[str, float]:
    """Read sensor values from a point's extensions, ignoring namespaces."""
    found: Dict[str, float] = {}
    for ext in point.extensions or []:
        for child in ext.iter():
            if not isinstance(child.tag, str) or not child.text or not child.text.strip():
                continue
            tag = child.tag.split("}", 1)[-1].split(":")[-1].lower()
            key = _EXTENSION_TAGS.get(tag)
            if key is None or key in found:
                continue
            try:
                found[key] = float(child.text.strip())
            except ValueError:
                logger.debug("Ignoring non-numeric GPX extension %s=%r", tag, child.text)
    return found


def _as_int(value: Optional[float]) -> Optional[int]:
    return int(value) if value is not None else None


def _load(content: Union[str, bytes]) -> gpxpy.gpx.GPX:
    try:
        if isinstance(content, bytes):
            content = content.decode("utf-8-sig")
        return gpxpy.parse(content)
    except Exception as exc:
        raise GpxParseError(f"Invalid GPX file format: {exc}") from exc


def parse_gpx_file(content: Union[str, bytes]) -> ParsedActivity:
    """
    Decode a GPX track.

    All segments of all tracks are flattened into one ordered track. Points at
    exactly (0, 0) are GPS "no fix" placeholders and are dropped, as are points
    outside the valid lat/lng range. Distance and elevation are accumulated only
    between consecutive kept points.

    Raises:
        GpxParseError: if the XML is invalid, has no track segments, or no
            valid track point survives filtering.
    """
    gpx = _load(content)

    segments = [seg for track in gpx.tracks for seg in track.segments]
    if not segments:
        raise GpxParseError("Invalid GPX file format: no track segments found")

    samples: List[TrackSample] = []
    for segment in segments:
        for point in segment.points:
            lat, lng = point.latitude, point.longitude
            if lat == 0 and lng == 0:
                continue
            if not is_valid_coordinate(lat, lng):
                logger.debug("Skipping GPX point outside valid range (%s, %s)", lat, lng)
                continue

            sensors: Dict[str, Any] = _extension_values(point)
            heart_rate = _as_int(sensors.get("heart_rate"))
            samples.append(TrackSample(
                sequence=len(samples),
                timestamp=to_utc_naive(point.time),
                lat=lat,
                lng=lng,
                altitude_meters=point.elevation,
                heart_rate=heart_rate if heart_rate else None,
                cadence=_as_int(sensors.get("cadence")),
                power_watts=_as_int(sensors.get("power_watts")),
                temperature_c=sensors.get("temperature_c"),
            ))

    if not samples:
        raise GpxParseError("No valid track points found in GPX file")

    distance = cumulative_distances([s.coordinate for s in samples])[-1]
    gain, loss = elevation_gain_loss((s.altitude_meters for s in samples), bridge_gaps=False)
    avg_hr, max_hr = heart_rate_summary(samples)
    polyline, start_point, end_point, bounds = track_geometry(samples)

    start_time = samples[0].timestamp
    end_time = samples[-1].timestamp
    elapsed = 0
    if start_time is not None and end_time is not None:
        elapsed = int(round((end_time - start_time).total_seconds()))

    avg_speed_kmh = 0.0
    if distance > 0 and elapsed > 0:
        avg_speed_kmh = (distance / 1000.0) / (elapsed / 3600.0)

    logger.info(
        "Decoded GPX file: %d points kept, %.0fm in %ds (%.1f km/h)",
        len(samples), distance, elapsed, avg_speed_kmh,
    )

    return ParsedActivity(
        sport_type=sport_from_average_speed(avg_speed_kmh),
        started_at=start_time or datetime.utcnow(),
        elapsed_time_seconds=elapsed,
        moving_time_seconds=elapsed,
        distance_meters=distance,
        elevation_gain_meters=gain,
        elevation_loss_meters=loss,
        avg_heart_rate=avg_hr,
        max_heart_rate=max_hr,
        polyline=polyline,
        start_point=start_point,
        end_point=end_point,
        bounds=bounds,
        samples=tuple(samples),
    )
