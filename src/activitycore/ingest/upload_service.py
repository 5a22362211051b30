"""
ActivityUploadService — turns an uploaded FIT/GPX file into stored rows.

Flow for a single upload:
  1. Pick the decoder from the file extension (.fit / .gpx) and decode
  2. Compute best efforts over the decoded track
  3. Derive pace/speed (moving time, falling back to elapsed time)
  4. Score relative effort from the activity HR and the athlete profile
  5. Insert the Activity row
  6. Insert its GPS samples in batches (failures logged, never fatal)

A decode failure returns UploadResult(success=False) with one readable
message; the activity counts as created as soon as step 5 commits.
"""
import logging
from dataclasses import dataclass
from pathlib import PurePath
from typing import Iterable, Optional, Union

from activitycore.analysis.best_efforts import calculate_activity_prs
from activitycore.analysis.pace import average_pace_seconds_per_km, average_speed_kmh
from activitycore.analysis.relative_effort import relative_effort_for_activity
from activitycore.config import get_settings
from activitycore.ingest.storage import (
    best_effort_columns,
    geometry_columns,
    insert_gps_points,
    resolve_heart_rate_profile,
    save_activity,
)
from activitycore.models.activity import Activity
from activitycore.models.track import ParsedActivity, SportType
from activitycore.parsers.errors import ActivityFileError, UnsupportedFileFormatError
from activitycore.parsers.fit_parser import parse_fit_file
from activitycore.parsers.gpx_parser import parse_gpx_file

logger = logging.getLogger(__name__)


@dataclass
class UploadResult:
    success: bool
    activity_id: Optional[int] = None
    gps_points_saved: int = 0
    error: Optional[str] = None


def decode_activity_file(filename: str, content: Union[bytes, str]) -> ParsedActivity:
    """
    Decode an uploaded file, dispatching on its extension.

    Raises:
        UnsupportedFileFormatError: for anything but .fit / .gpx.
        FitParseError, GpxParseError: when the chosen decoder rejects the file.
    """
    suffix = PurePath(filename).suffix.lower()
    if suffix == ".fit":
        if isinstance(content, str):
            raise UnsupportedFileFormatError("FIT files must be uploaded as binary data.")
        return parse_fit_file(content)
    if suffix == ".gpx":
        return parse_gpx_file(content)
    raise UnsupportedFileFormatError("Unsupported file format. Please use .FIT or .GPX files.")


def build_activity(
    parsed: ParsedActivity,
    *,
    user_id: int,
    name: str,
    description: Optional[str] = None,
    sport_type: Optional[SportType] = None,
    target_distances: Iterable[int] = (1000, 5000, 10000),
    profile_max_hr: Optional[int] = None,
    profile_rest_hr: Optional[int] = None,
) -> Activity:
    """Derive the stored metrics for a decoded file and build its (unsaved) Activity row."""
    duration = parsed.duration_seconds
    efforts = calculate_activity_prs(parsed.samples, target_distances)

    return Activity(
        user_id=user_id,
        name=name,
        description=description,
        sport_type=(sport_type or parsed.sport_type).value,
        source="upload",
        started_at=parsed.started_at,
        elapsed_time_seconds=parsed.elapsed_time_seconds,
        moving_time_seconds=parsed.moving_time_seconds,
        distance_meters=parsed.distance_meters,
        elevation_gain_meters=parsed.elevation_gain_meters,
        elevation_loss_meters=parsed.elevation_loss_meters,
        avg_heart_rate=parsed.avg_heart_rate,
        max_heart_rate=parsed.max_heart_rate,
        avg_pace_seconds_per_km=average_pace_seconds_per_km(parsed.distance_meters, duration),
        avg_speed_kmh=average_speed_kmh(parsed.distance_meters, duration),
        calories=parsed.calories,
        polyline=parsed.polyline,
        relative_effort=relative_effort_for_activity(
            duration,
            parsed.avg_heart_rate,
            activity_max_hr=parsed.max_heart_rate,
            profile_max_hr=profile_max_hr,
            profile_rest_hr=profile_rest_hr,
        ),
        **geometry_columns(parsed),
        **best_effort_columns(efforts),
    )


class ActivityUploadService:
    """Decodes uploaded activity files and persists them."""

    def __init__(self, engine, batch_size: Optional[int] = None):
        """
        Args:
            engine: SQLAlchemy engine (SQLModel create_engine result).
            batch_size: GPS rows per insert; defaults to settings.gps_batch_size.
        """
        settings = get_settings()
        self.engine = engine
        self.batch_size = batch_size or settings.gps_batch_size
        self.target_distances = list(settings.best_effort_distances)
        self.default_max_hr = settings.default_max_hr
        self.default_rest_hr = settings.default_rest_hr

    def upload(
        self,
        filename: str,
        content: Union[bytes, str],
        *,
        name: Optional[str] = None,
        description: Optional[str] = None,
        sport_type: Optional[SportType] = None,
        user_id: Optional[int] = None,
    ) -> UploadResult:
        """
        Decode and store one file.

        Args:
            filename: original file name; only the extension is used.
            content: raw upload.
            name: activity title, "Untitled Activity" when blank.
            sport_type: overrides the decoder's classification.
            user_id: owner; defaults to settings.user_id.

        Returns:
            UploadResult. Decode errors are reported in `error`, not raised.
        """
        user_id = user_id if user_id is not None else get_settings().user_id

        try:
            parsed = decode_activity_file(filename, content)
        except ActivityFileError as exc:
            logger.warning("Rejected upload %r: %s", filename, exc)
            return UploadResult(success=False, error=str(exc))

        max_hr, rest_hr = resolve_heart_rate_profile(self.engine, user_id)
        activity = build_activity(
            parsed,
            user_id=user_id,
            name=name or "Untitled Activity",
            description=description,
            sport_type=sport_type,
            target_distances=self.target_distances,
            profile_max_hr=max_hr if max_hr is not None else self.default_max_hr,
            profile_rest_hr=rest_hr if rest_hr is not None else self.default_rest_hr,
        )
        activity = save_activity(self.engine, activity)
        logger.info(
            "Created activity %s (%s, %.0fm, %d samples)",
            activity.id, activity.sport_type, activity.distance_meters, len(parsed.samples),
        )

        saved = 0
        if parsed.samples:
            saved = insert_gps_points(self.engine, activity.id, parsed.samples, self.batch_size)
            if saved < len(parsed.samples):
                logger.warning(
                    "Activity %s: stored %d of %d GPS points", activity.id, saved, len(parsed.samples),
                )

        return UploadResult(success=True, activity_id=activity.id, gps_points_saved=saved)
