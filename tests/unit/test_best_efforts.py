"""Tests for the best-effort (PR) sliding window."""
import math
import random
from dataclasses import replace
from datetime import datetime, timedelta

from activitycore.analysis.best_efforts import calculate_activity_prs, calculate_best_efforts
from activitycore.models.track import BestEffort, TrackSample

METERS_PER_DEGREE = 6_371_000.0 * math.pi / 180.0


def _extend(samples, n_points, seconds_per_step):
    """Continue a straight northbound track with n_points more samples at the same spacing."""
    last, before = samples[-1], samples[-2]
    step_deg = last.lat - before.lat
    return list(samples) + [
        replace(
            last,
            sequence=last.sequence + i,
            timestamp=last.timestamp + timedelta(seconds=i * seconds_per_step),
            lat=last.lat + i * step_deg,
        )
        for i in range(1, n_points + 1)
    ]


class TestCalculateBestEfforts:
    def test_constant_pace_just_over_one_km(self, straight_track):
        """A 1000.05m track run in 240s: the 1km PR is the whole track, 5km is unreachable."""
        samples = straight_track(1000.05, 240)
        result = calculate_best_efforts(samples, (1000, 5000))
        assert result == {1000: 240, 5000: None}

    def test_exactly_one_km_along_the_equator(self):
        """1000m due east at lat 0 in 240s; the summed legs may fall a hair short of 1000."""
        step_deg = 1000.0 / METERS_PER_DEGREE / 10
        t0 = datetime(2025, 3, 1, 7, 0)
        samples = [
            TrackSample(sequence=i, timestamp=t0 + timedelta(seconds=24 * i), lat=0.0, lng=i * step_deg)
            for i in range(11)
        ]
        assert calculate_best_efforts(samples, (1000, 5000)) == {1000: 240, 5000: None}

    def test_exactly_one_km_heading_north(self, straight_track):
        assert calculate_best_efforts(straight_track(1000, 240), (1000,)) == {1000: 240}

    def test_fewer_than_two_samples(self, straight_track):
        samples = straight_track(1000.05, 240)[:1]
        assert calculate_best_efforts(samples, (1000,)) == {1000: None}
        assert calculate_best_efforts([], (1000,)) == {1000: None}

    def test_track_shorter_than_target(self, straight_track):
        samples = straight_track(950, 240)
        assert calculate_best_efforts(samples, (1000,)) == {1000: None}

    def test_longer_targets_never_faster(self, straight_track):
        samples = straight_track(10000.5, 3000, n_points=101)
        result = calculate_best_efforts(samples, (1000, 5000, 10000))
        assert result == {1000: 300, 5000: 1500, 10000: 3000}
        assert result[1000] <= result[5000] <= result[10000]

    def test_appending_samples_never_worsens_a_time(self, straight_track):
        targets = (1000, 2000)
        prefix = straight_track(2000.1, 800, n_points=21)
        before = calculate_best_efforts(prefix, targets)

        for seconds_per_step in (20, 60):
            after = calculate_best_efforts(_extend(prefix, 15, seconds_per_step), targets)
            for target in targets:
                assert after[target] <= before[target]

        faster = calculate_best_efforts(_extend(prefix, 15, 20), targets)
        assert faster[1000] == 200

    def test_finds_the_fast_half(self, straight_track):
        """Slow first kilometer (40s per 100m) then fast second (20s per 100m)."""
        base = straight_track(2000.1, 0, n_points=21)
        start = base[0].timestamp
        offsets = [i * 40 if i <= 10 else 400 + (i - 10) * 20 for i in range(21)]
        samples = [replace(s, timestamp=start + timedelta(seconds=o)) for s, o in zip(base, offsets)]

        result = calculate_best_efforts(samples, (1000, 2000))
        assert result[1000] == 200
        assert result[2000] == 600

    def test_zero_interval_windows_are_ignored(self, straight_track):
        """Every sample shares one timestamp: no window has a positive duration."""
        samples = straight_track(1000.05, 0)
        assert calculate_best_efforts(samples, (1000,)) == {1000: None}

    def test_samples_without_timestamp_are_skipped(self, straight_track):
        samples = [replace(s, timestamp=None) for s in straight_track(1000.05, 240)]
        assert calculate_best_efforts(samples, (1000,)) == {1000: None}

    def test_input_order_does_not_matter(self, straight_track):
        samples = straight_track(5000.25, 1500, n_points=51)
        shuffled = list(samples)
        random.Random(3).shuffle(shuffled)
        assert calculate_best_efforts(shuffled, (1000, 5000)) == calculate_best_efforts(samples, (1000, 5000))

    def test_stationary_track(self):
        t0 = datetime(2025, 3, 1, 7, 0)
        samples = [
            TrackSample(sequence=i, timestamp=t0 + timedelta(seconds=i), lat=45.0, lng=6.0)
            for i in range(30)
        ]
        assert calculate_best_efforts(samples, (1000,)) == {1000: None}


class TestCalculateActivityPrs:
    def test_returns_records_in_target_order(self, straight_track):
        samples = straight_track(1000.05, 240)
        prs = calculate_activity_prs(samples, (5000, 1000))
        assert prs == [
            BestEffort(target_distance_meters=5000, time_seconds=None),
            BestEffort(target_distance_meters=1000, time_seconds=240),
        ]

    def test_default_targets(self, straight_track):
        prs = calculate_activity_prs(straight_track(1000.05, 240))
        assert [p.target_distance_meters for p in prs] == [1000, 5000, 10000]
