"""Tests for the aggregates shared by both decoders."""
from datetime import datetime, timedelta, timezone

import pytest

from activitycore.models.track import TrackSample
from activitycore.parsers.track_stats import (
    elevation_gain_loss,
    heart_rate_summary,
    to_utc_naive,
    track_geometry,
)


def _sample(i, hr=None):
    return TrackSample(sequence=i, timestamp=None, lat=45.0 + i * 0.001, lng=6.0, heart_rate=hr)


class TestToUtcNaive:
    def test_aware_is_converted(self):
        aware = datetime(2025, 3, 1, 9, 0, tzinfo=timezone(timedelta(hours=2)))
        assert to_utc_naive(aware) == datetime(2025, 3, 1, 7, 0)

    def test_naive_and_none_pass_through(self):
        naive = datetime(2025, 3, 1, 7, 0)
        assert to_utc_naive(naive) is naive
        assert to_utc_naive(None) is None


class TestElevationGainLoss:
    def test_climb_and_descent_both_count(self):
        assert elevation_gain_loss([100, 120, 110, 130]) == (40.0, 10.0)

    def test_no_altitudes(self):
        assert elevation_gain_loss([]) == (0.0, 0.0)
        assert elevation_gain_loss([None, None]) == (0.0, 0.0)

    def test_gaps_bridged(self):
        gain, loss = elevation_gain_loss([100, None, 150], bridge_gaps=True)
        assert gain == pytest.approx(50.0)
        assert loss == 0.0

    def test_gaps_break_chain(self):
        assert elevation_gain_loss([100, None, 150], bridge_gaps=False) == (0.0, 0.0)


class TestHeartRateSummary:
    def test_mean_and_max(self):
        samples = [_sample(0, 140), _sample(1, 151), _sample(2, None), _sample(3, 160)]
        assert heart_rate_summary(samples) == (150, 160)

    def test_no_heart_rate(self):
        assert heart_rate_summary([_sample(0), _sample(1)]) == (None, None)


class TestTrackGeometry:
    def test_empty(self):
        assert track_geometry([]) == (None, None, None, None)

    def test_start_end_bounds(self):
        samples = [_sample(i) for i in range(3)]
        polyline, start, end, bounds = track_geometry(samples)
        assert polyline
        assert start == samples[0].coordinate
        assert end == samples[-1].coordinate
        assert bounds.sw == start
        assert bounds.ne == end
