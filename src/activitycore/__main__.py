"""
Command-line entrypoint.

Usage:
    python -m activitycore parse ride.fit          # print summary, best efforts and display strings as JSON
    python -m activitycore import run.gpx --name "Morning Run"   # decode and store
    uvicorn activitycore.api.main:app --host 0.0.0.0 --port 8000  # starts API
"""
import argparse
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(name)s %(levelname)s %(message)s",
)
logger = logging.getLogger(__name__)

# ~11m at the equator; enough to thin a GPS track for a preview map
PREVIEW_TOLERANCE_DEGREES = 0.0001


def _run_parse(path: Path) -> int:
    from activitycore.analysis.best_efforts import calculate_activity_prs
    from activitycore.config import get_settings
    from activitycore.parsers.errors import ActivityFileError
    from activitycore.ingest.upload_service import decode_activity_file

    try:
        parsed = decode_activity_file(path.name, path.read_bytes())
    except ActivityFileError as exc:
        logger.error("%s: %s", path, exc)
        return 1

    summary = asdict(parsed)
    summary.pop("samples")
    summary["sample_count"] = len(parsed.samples)
    summary["best_efforts"] = [
        asdict(e) for e in calculate_activity_prs(parsed.samples, get_settings().best_effort_distances)
    ]
    summary["display"] = _display_summary(parsed)
    print(json.dumps(summary, indent=2, default=str))
    return 0


def _display_summary(parsed) -> dict:
    """Human-readable distance, duration and pace, plus a thinned polyline for previews."""
    from activitycore.analysis.pace import calculate_pace, format_distance, format_duration, format_pace
    from activitycore.geo.geometry import decode_polyline, encode_polyline, simplify_polyline

    preview = None
    if parsed.polyline:
        preview = encode_polyline(simplify_polyline(decode_polyline(parsed.polyline), PREVIEW_TOLERANCE_DEGREES))
    return {
        "distance": format_distance(parsed.distance_meters),
        "duration": format_duration(parsed.elapsed_time_seconds),
        "pace": format_pace(calculate_pace(parsed.distance_meters, parsed.duration_seconds)),
        "preview_polyline": preview,
    }


def _run_import(path: Path, name: str) -> int:
    from activitycore.db.engine import get_engine
    from activitycore.ingest.upload_service import ActivityUploadService

    result = ActivityUploadService(get_engine()).upload(path.name, path.read_bytes(), name=name)
    if not result.success:
        logger.error("%s: %s", path, result.error)
        return 1
    logger.info("Stored activity %s with %d GPS points", result.activity_id, result.gps_points_saved)
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(prog="activitycore")
    sub = parser.add_subparsers(dest="command", required=True)

    parse_cmd = sub.add_parser("parse", help="decode a .fit/.gpx file and print its summary")
    parse_cmd.add_argument("file", type=Path)

    import_cmd = sub.add_parser("import", help="decode a .fit/.gpx file and store it")
    import_cmd.add_argument("file", type=Path)
    import_cmd.add_argument("--name", default=None)

    args = parser.parse_args()
    if not args.file.exists():
        logger.error("File not found: %s", args.file)
        sys.exit(1)

    if args.command == "parse":
        sys.exit(_run_parse(args.file))
    sys.exit(_run_import(args.file, args.name))


if __name__ == "__main__":
    main()
