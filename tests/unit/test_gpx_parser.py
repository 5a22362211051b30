"""Tests for the GPX decoder.

The triangle fixture is three points roughly 1km apart, recorded over 10 minutes
with Garmin TrackPointExtension heart rate and cadence.
"""
from datetime import datetime
from pathlib import Path

import pytest

from activitycore.models.track import SportType
from activitycore.parsers.errors import ActivityFileError
from activitycore.parsers.gpx_parser import GpxParseError, parse_gpx_file

FIXTURES_DIR = Path(__file__).parent.parent / "fixtures"
TRIANGLE_GPX = FIXTURES_DIR / "triangle.gpx"

GPX_HEADER = (
    '<?xml version="1.0" encoding="UTF-8"?>'
    '<gpx version="1.1" creator="test" xmlns="http://www.topografix.com/GPX/1/1">'
)


def _gpx(points: str) -> str:
    return f"{GPX_HEADER}<trk><trkseg>{points}</trkseg></trk></gpx>"


@pytest.fixture(scope="module")
def triangle():
    return parse_gpx_file(TRIANGLE_GPX.read_bytes())


class TestTriangleTrack:
    def test_distance_about_two_km(self, triangle):
        assert triangle.distance_meters == pytest.approx(2000, abs=50)

    def test_elapsed_ten_minutes(self, triangle):
        assert triangle.elapsed_time_seconds == 600
        assert triangle.moving_time_seconds == 600

    def test_classified_as_run(self, triangle):
        """~12 km/h average is below the ride threshold."""
        assert triangle.sport_type == SportType.RUN

    def test_started_at_is_naive_utc(self, triangle):
        assert triangle.started_at == datetime(2025, 3, 1, 7, 0, 0)
        assert triangle.started_at.tzinfo is None

    def test_heart_rate_from_extensions(self, triangle):
        assert triangle.avg_heart_rate == 150
        assert triangle.max_heart_rate == 161
        assert [s.heart_rate for s in triangle.samples] == [140, 150, 161]
        assert [s.cadence for s in triangle.samples] == [84, 86, 88]

    def test_elevation_gain_and_loss(self, triangle):
        assert triangle.elevation_gain_meters == pytest.approx(12.0)
        assert triangle.elevation_loss_meters == pytest.approx(8.0)

    def test_geometry(self, triangle):
        assert triangle.polyline
        assert triangle.start_point.lat == pytest.approx(45.0)
        assert triangle.end_point.lng == pytest.approx(6.011015)
        assert triangle.bounds.sw.lat == pytest.approx(45.0)
        assert triangle.bounds.ne.lat == pytest.approx(45.0089932)

    def test_sequences_are_contiguous(self, triangle):
        assert [s.sequence for s in triangle.samples] == [0, 1, 2]


class TestGpxEdgeCases:
    def test_accepts_str_input(self):
        parsed = parse_gpx_file(_gpx(
            '<trkpt lat="45.0" lon="6.0"><time>2025-03-01T07:00:00Z</time></trkpt>'
            '<trkpt lat="45.001" lon="6.0"><time>2025-03-01T07:01:00Z</time></trkpt>'
        ))
        assert len(parsed.samples) == 2
        assert parsed.elapsed_time_seconds == 60

    def test_no_fix_points_are_dropped(self):
        parsed = parse_gpx_file(_gpx(
            '<trkpt lat="45.0" lon="6.0"><time>2025-03-01T07:00:00Z</time></trkpt>'
            '<trkpt lat="0" lon="0"><time>2025-03-01T07:00:30Z</time></trkpt>'
            '<trkpt lat="45.001" lon="6.0"><time>2025-03-01T07:01:00Z</time></trkpt>'
        ))
        assert len(parsed.samples) == 2
        # no leg to or from the equator
        assert parsed.distance_meters < 200

    def test_missing_times_give_zero_elapsed(self):
        """Zero elapsed time means zero average speed, which the speed heuristic reads as swim."""
        parsed = parse_gpx_file(_gpx(
            '<trkpt lat="45.0" lon="6.0"></trkpt>'
            '<trkpt lat="45.001" lon="6.0"></trkpt>'
        ))
        assert parsed.elapsed_time_seconds == 0
        assert parsed.sport_type == SportType.SWIM

    def test_missing_elevation_breaks_the_chain(self):
        parsed = parse_gpx_file(_gpx(
            '<trkpt lat="45.0" lon="6.0"><ele>100</ele></trkpt>'
            '<trkpt lat="45.001" lon="6.0"></trkpt>'
            '<trkpt lat="45.002" lon="6.0"><ele>150</ele></trkpt>'
            '<trkpt lat="45.003" lon="6.0"><ele>155</ele></trkpt>'
        ))
        assert parsed.elevation_gain_meters == pytest.approx(5.0)
        assert parsed.elevation_loss_meters == 0.0

    def test_fast_track_is_ride(self):
        # ~1.1km in 2 minutes is ~33 km/h
        parsed = parse_gpx_file(_gpx(
            '<trkpt lat="45.0" lon="6.0"><time>2025-03-01T07:00:00Z</time></trkpt>'
            '<trkpt lat="45.01" lon="6.0"><time>2025-03-01T07:02:00Z</time></trkpt>'
        ))
        assert parsed.sport_type == SportType.RIDE

    def test_no_heart_rate_gives_none(self):
        parsed = parse_gpx_file(_gpx('<trkpt lat="45.0" lon="6.0"></trkpt>'))
        assert parsed.avg_heart_rate is None
        assert parsed.max_heart_rate is None

    def test_no_track_segments(self):
        with pytest.raises(GpxParseError, match="no track segments"):
            parse_gpx_file(f"{GPX_HEADER}<wpt lat=\"45.0\" lon=\"6.0\"></wpt></gpx>")

    def test_only_invalid_points(self):
        with pytest.raises(GpxParseError, match="No valid track points"):
            parse_gpx_file(_gpx('<trkpt lat="0" lon="0"></trkpt>'))

    def test_malformed_xml(self):
        with pytest.raises(ActivityFileError):
            parse_gpx_file(b"<gpx><trk><trkseg>")

    def test_bytes_that_are_not_utf8(self):
        with pytest.raises(GpxParseError, match="Invalid GPX file format"):
            parse_gpx_file(b"\xff\xfe<gpx>\x80\x81")
