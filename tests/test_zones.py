"""Tests for zone boundaries, classification and time-in-zone distributions."""

import pytest

from training_analytics.metrics.zones import (
    HrZone,
    PaceZone,
    PowerZone,
    ZoneDistribution,
    ZoneKind,
    calculate_hr_zone_distribution,
    calculate_pace_zone_distribution,
    calculate_power_zone_distribution,
    classify_hr_zone,
    classify_pace_zone,
    classify_power_zone,
    get_hr_zone_boundaries,
    get_pace_zone_boundaries,
    get_power_zone_boundaries,
)


class TestZoneBoundaries:
    """Tests for boundary derivation from a single threshold."""

    def test_hr_boundaries(self):
        """HR zones split at 60/70/80/90% of max HR."""
        assert get_hr_zone_boundaries(190) == [114, 133, 152, 171]

    def test_power_boundaries(self):
        """Power zones split at 55/75/90/105/120% of FTP."""
        assert get_power_zone_boundaries(200) == [110, 150, 180, 210, 240]

    def test_pace_boundaries_descend(self):
        """Pace boundaries are inverted: slower paces have larger values."""
        assert get_pace_zone_boundaries(300) == [345, 300, 264, 246]


class TestClassification:
    """Tests for single-sample zone classification."""

    def test_hr_boundary_belongs_to_upper_zone(self):
        bounds = get_hr_zone_boundaries(190)
        assert classify_hr_zone(113, bounds) == HrZone.Z1
        assert classify_hr_zone(114, bounds) == HrZone.Z2
        assert classify_hr_zone(171, bounds) == HrZone.Z5

    def test_power_zone_six(self):
        """Anything at or above 120% FTP is anaerobic."""
        bounds = get_power_zone_boundaries(200)
        assert classify_power_zone(239, bounds) == PowerZone.Z5
        assert classify_power_zone(240, bounds) == PowerZone.Z6
        assert classify_power_zone(0, bounds) == PowerZone.Z1

    def test_pace_zones(self):
        """Slower than easy pace is a low zone, much faster is intervals."""
        bounds = get_pace_zone_boundaries(300)
        assert classify_pace_zone(360, bounds) == PaceZone.RECOVERY
        assert classify_pace_zone(320, bounds) == PaceZone.EASY
        assert classify_pace_zone(240, bounds) == PaceZone.INTERVAL


class TestDistributions:
    """Tests for time-weighted zone distributions."""

    def test_hr_split_evenly(self):
        """Time is attributed to the zone of each sample."""
        heartrate = [100] * 31 + [160] * 30
        time = list(range(61))
        dist = calculate_hr_zone_distribution(heartrate, time, max_hr=190)

        assert dist[HrZone.Z1] == 50.0
        assert dist[HrZone.Z4] == 50.0
        assert dist.total == 100.0

    def test_recording_gaps_are_skipped(self):
        """A gap longer than 30 s contributes no time."""
        heartrate = [100, 100, 160, 160]
        time = [0, 1, 100, 101]
        dist = calculate_hr_zone_distribution(heartrate, time, max_hr=190)

        assert dist[HrZone.Z1] == 50.0
        assert dist[HrZone.Z4] == 50.0

    def test_empty_distribution_sums_to_zero(self):
        """No valid samples gives all-zero percentages."""
        dist = calculate_hr_zone_distribution([0, 0, 0], [0, 1, 2], max_hr=190)
        assert dist.total == 0
        assert dist.percentages == (0.0, 0.0, 0.0, 0.0, 0.0)

    def test_coasting_counts_as_zone_one(self):
        """Zero watts is valid power data."""
        dist = calculate_power_zone_distribution([0] * 11, list(range(11)), ftp=200)
        assert dist[PowerZone.Z1] == 100.0
        assert len(dist.percentages) == 6

    def test_standing_still_excluded_from_pace(self):
        """Velocity at or below 0.5 m/s carries no pace."""
        velocity = [0.4] * 10
        dist = calculate_pace_zone_distribution(velocity, list(range(10)), easy_pace=300)
        assert dist.total == 0

    def test_pace_distribution(self):
        """3 m/s is 333 s/km, which is easy for a 300 s/km easy pace."""
        dist = calculate_pace_zone_distribution([3.0] * 11, list(range(11)), easy_pace=300)
        assert dist[PaceZone.EASY] == 100.0

    def test_totals_are_near_100(self):
        heartrate = [110, 125, 140, 155, 175, 185, 120]
        dist = calculate_hr_zone_distribution(heartrate, list(range(7)), max_hr=190)
        assert dist.total == pytest.approx(100.0, abs=0.01)

    def test_six_equal_power_shares_sum_to_100(self):
        """Equal shares across all six power zones still total exactly 100."""
        cycle = [50, 60, 80, 100, 110, 130]
        watts = [cycle[(i - 1) % 6] for i in range(61)]
        dist = calculate_power_zone_distribution(watts, list(range(61)), ftp=100)

        assert dist.total == 100.0
        assert max(dist.percentages) - min(dist.percentages) <= 0.01
        assert all(pct in (16.66, 16.67) for pct in dist.percentages)

    def test_three_way_split_sums_to_100(self):
        heartrate = [0, 100, 140, 180]
        dist = calculate_hr_zone_distribution(heartrate, list(range(4)), max_hr=190)
        assert sorted(p for p in dist.percentages if p) == [33.33, 33.33, 33.34]
        assert dist.total == 100.0


class TestZoneDistribution:
    """Tests for the distribution record."""

    def test_pace_keys(self):
        dist = ZoneDistribution.empty(ZoneKind.PACE)
        assert list(dist.to_dict()) == [
            "z1_recovery", "z2_easy", "z3_tempo", "z4_threshold", "z5_interval",
        ]

    def test_power_zone_six_folds_into_bucket_five(self):
        """Compliance compares five buckets; anaerobic time joins zone 5."""
        dist = ZoneDistribution(ZoneKind.POWER, (10.0, 10.0, 10.0, 10.0, 10.0, 50.0))
        assert dist.to_compliance_buckets() == (10.0, 10.0, 10.0, 10.0, 60.0)

    def test_from_dict(self):
        dist = ZoneDistribution.from_dict(ZoneKind.HR, {"z2": 80.0, "z3": 20.0})
        assert dist.percentages == (0.0, 80.0, 20.0, 0.0, 0.0)
