"""Tests for zone breakthrough detection and corroboration."""

import logging
from datetime import date, timedelta
from unittest.mock import MagicMock

import pytest

from conftest import ride_stream, run_stream
from training_analytics.exceptions import DatabaseError
from training_analytics.models.activity import ActivitySummary
from training_analytics.models.athlete import AthleteProfile
from training_analytics.models.breakthroughs import BreakthroughType, Confidence
from training_analytics.models.plan_config import PlanZoneConfig
from training_analytics.services.breakthroughs import ZoneBreakthroughDetector


DAY = date(2026, 3, 2)


@pytest.fixture
def detector(temp_db, settings):
    return ZoneBreakthroughDetector(temp_db, temp_db, settings)


def strong_ride():
    """25 minutes at 300 W: best 20 min x 0.95 gives 285 W."""
    return ride_stream(seconds=1500, watts=300)


class TestFtpBreakthrough:
    """Tests for FTP detection from the best 20-minute power."""

    def test_first_detection_is_low_confidence(self, detector, temp_db):
        """A single detection informs but does not change zones."""
        temp_db.save_profile(AthleteProfile(user_id="athlete", bike_ftp=220))

        results = detector.detect_zone_breakthroughs(
            "athlete", "ride-1", DAY, "bike", strong_ride(), ActivitySummary(moving_time=1500)
        )

        assert len(results) == 1
        result = results[0]
        assert result.type == BreakthroughType.FTP
        assert result.current_value == 220
        assert result.detected_value == 285
        assert result.change_percent == 29.55
        assert result.confidence == Confidence.LOW
        assert result.confirming_workouts == 1
        assert not result.auto_updated
        assert temp_db.get_profile("athlete").bike_ftp == 220

    def test_second_detection_commits(self, detector, temp_db):
        """Two corroborating workouts in the window update profile and plan zones."""
        temp_db.save_profile(AthleteProfile(user_id="athlete", bike_ftp=220))
        temp_db.save_plan_zone_config("athlete", PlanZoneConfig().with_ftp(220))

        detector.detect_zone_breakthroughs(
            "athlete", "ride-1", DAY, "bike", strong_ride(), {}
        )
        results = detector.detect_zone_breakthroughs(
            "athlete", "ride-2", DAY + timedelta(days=3), "bike", strong_ride(), {}
        )

        assert results[0].confidence == Confidence.MEDIUM
        assert results[0].confirming_workouts == 2
        assert results[0].auto_updated
        assert "220W to 285W" in results[0].message
        assert temp_db.get_profile("athlete").bike_ftp == 285

        config = temp_db.get_plan_zone_config("athlete")
        assert config.ftp_watts == 285
        assert config.power_zones["z4"].max == round(285 * 1.05)

    def test_three_detections_high_confidence(self, detector, temp_db):
        temp_db.save_profile(AthleteProfile(user_id="athlete", bike_ftp=200))
        for i in range(2):
            detector.detect_zone_breakthroughs(
                "athlete", f"ride-{i}", DAY + timedelta(days=i), "bike", strong_ride(), {}
            )
        # Profile moved to 285 after the second; a fresh profile keeps the check open
        results = detector.detect_zone_breakthroughs(
            "athlete", "ride-3", DAY + timedelta(days=5), "bike", strong_ride(), {},
            profile=AthleteProfile(user_id="athlete", bike_ftp=200),
        )
        assert results[0].confidence == Confidence.HIGH

    def test_reprocessing_same_workout_does_not_corroborate(self, detector, temp_db):
        temp_db.save_profile(AthleteProfile(user_id="athlete", bike_ftp=220))
        for _ in range(2):
            results = detector.detect_zone_breakthroughs(
                "athlete", "ride-1", DAY, "bike", strong_ride(), {}
            )
        assert results[0].confidence == Confidence.LOW
        assert len(temp_db.get_breakthrough_candidates("athlete")) == 1

    def test_old_candidates_fall_out_of_window(self, detector, temp_db):
        temp_db.save_profile(AthleteProfile(user_id="athlete", bike_ftp=220))
        detector.detect_zone_breakthroughs("athlete", "ride-1", DAY, "bike", strong_ride(), {})
        results = detector.detect_zone_breakthroughs(
            "athlete", "ride-2", DAY + timedelta(days=45), "bike", strong_ride(), {}
        )
        assert results[0].confidence == Confidence.LOW

    def test_small_increase_ignored(self, detector, temp_db):
        temp_db.save_profile(AthleteProfile(user_id="athlete", bike_ftp=280))
        results = detector.detect_zone_breakthroughs(
            "athlete", "ride-1", DAY, "bike", strong_ride(), {}
        )
        assert results == []
        assert temp_db.get_breakthrough_candidates("athlete") == []

    def test_no_power_no_check(self, detector):
        results = detector.detect_zone_breakthroughs(
            "athlete", "ride-1", DAY, "bike", ride_stream(watts=0), {}
        )
        assert results == []

    def test_default_ftp_from_experience(self, detector):
        """Without a stored FTP the experience-level default is the baseline."""
        results = detector.detect_zone_breakthroughs(
            "athlete", "ride-1", DAY, "bike", strong_ride(), {}
        )
        assert results[0].current_value == 220


class TestRunningBreakthrough:
    """Tests for easy-pace detection from hard runs."""

    def test_fast_5k(self, detector, temp_db):
        temp_db.save_profile(AthleteProfile(user_id="athlete", run_pace_per_km=330))
        summary = ActivitySummary(distance=5000, moving_time=1250)

        results = detector.detect_zone_breakthroughs(
            "athlete", "run-1", DAY, "run", run_stream(), summary
        )

        assert len(results) == 1
        assert results[0].type == BreakthroughType.RUN_THRESHOLD
        assert results[0].current_value == 330
        assert results[0].detected_value == 305
        assert results[0].change_percent == 7.58

    def test_easy_run_ignored(self, detector, temp_db):
        temp_db.save_profile(AthleteProfile(user_id="athlete", run_pace_per_km=330))
        summary = ActivitySummary(distance=8000, moving_time=8 * 330)
        results = detector.detect_zone_breakthroughs(
            "athlete", "run-1", DAY, "run", run_stream(), summary
        )
        assert results == []

    def test_short_run_ignored(self, detector):
        summary = ActivitySummary(distance=2500, moving_time=600)
        assert detector.detect_zone_breakthroughs(
            "athlete", "run-1", DAY, "run", run_stream(), summary
        ) == []

    def test_requires_stream(self, detector):
        summary = ActivitySummary(distance=5000, moving_time=1250)
        assert detector.detect_zone_breakthroughs(
            "athlete", "run-1", DAY, "run", None, summary
        ) == []

    def test_commit_updates_pace_zones(self, detector, temp_db):
        temp_db.save_profile(AthleteProfile(user_id="athlete", run_pace_per_km=330))
        temp_db.save_plan_zone_config("athlete", PlanZoneConfig().with_easy_pace(330))
        summary = ActivitySummary(distance=5000, moving_time=1250)

        detector.detect_zone_breakthroughs("athlete", "run-1", DAY, "run", run_stream(), summary)
        results = detector.detect_zone_breakthroughs(
            "athlete", "run-2", DAY + timedelta(days=4), "run", run_stream(), summary
        )

        assert results[0].auto_updated
        assert temp_db.get_profile("athlete").run_pace_per_km == 305
        assert temp_db.get_plan_zone_config("athlete").pace_zones["easy"].min == 305


class TestSwimBreakthrough:
    """Tests for CSS detection."""

    def test_faster_swim(self, detector, temp_db):
        temp_db.save_profile(AthleteProfile(user_id="athlete", swim_pace_per_100m=100))
        summary = ActivitySummary(distance=1000, moving_time=900)

        results = detector.detect_zone_breakthroughs(
            "athlete", "swim-1", DAY, "swim", None, summary
        )

        assert results[0].type == BreakthroughType.SWIM_CSS
        assert results[0].detected_value == 90.0
        assert results[0].change_percent == 10.0

    def test_css_from_plan_config(self, detector, temp_db):
        temp_db.save_plan_zone_config("athlete", PlanZoneConfig(swim_css_sec_per_100m=100))
        summary = ActivitySummary(distance=1000, moving_time=900)
        results = detector.detect_zone_breakthroughs(
            "athlete", "swim-1", DAY, "swim", None, summary
        )
        assert results[0].current_value == 100

    def test_no_current_css(self, detector):
        summary = ActivitySummary(distance=1000, moving_time=900)
        assert detector.detect_zone_breakthroughs(
            "athlete", "swim-1", DAY, "swim", None, summary
        ) == []

    def test_short_swim_ignored(self, detector, temp_db):
        temp_db.save_profile(AthleteProfile(user_id="athlete", swim_pace_per_100m=100))
        summary = ActivitySummary(distance=300, moving_time=240)
        assert detector.detect_zone_breakthroughs(
            "athlete", "swim-1", DAY, "swim", None, summary
        ) == []

    def test_commit_rounds_css(self, detector, temp_db):
        temp_db.save_profile(AthleteProfile(user_id="athlete", swim_pace_per_100m=100))
        summary = ActivitySummary(distance=1000, moving_time=905)
        detector.detect_zone_breakthroughs("athlete", "swim-1", DAY, "swim", None, summary)
        detector.detect_zone_breakthroughs("athlete", "swim-2", DAY, "swim", None, summary)
        assert temp_db.get_profile("athlete").swim_pace_per_100m == 90


class TestFailures:
    """Tests for storage failures during detection."""

    def test_storage_failure_reports_nothing(self, settings):
        """A failing candidate store is logged and yields no breakthrough."""
        profiles = MagicMock()
        profiles.get_profile.return_value = AthleteProfile(user_id="athlete", bike_ftp=220)
        candidates = MagicMock()
        candidates.count_breakthrough_candidates.side_effect = DatabaseError("disk full")

        detector = ZoneBreakthroughDetector(profiles, candidates, settings)
        results = detector.detect_zone_breakthroughs(
            "athlete", "ride-1", DAY, "bike", strong_ride(), {}
        )

        assert results == []
        profiles.save_profile.assert_not_called()

    def test_other_disciplines_ignored(self, detector):
        assert detector.detect_zone_breakthroughs(
            "athlete", "b-1", DAY, "brick", strong_ride(), {}
        ) == []

    def test_storage_failure_is_logged(self, settings, caplog):
        profiles = MagicMock()
        profiles.get_profile.return_value = AthleteProfile(user_id="athlete", bike_ftp=220)
        candidates = MagicMock()
        candidates.count_breakthrough_candidates.side_effect = DatabaseError("disk full")

        detector = ZoneBreakthroughDetector(profiles, candidates, settings)
        with caplog.at_level(logging.ERROR):
            detector.detect_zone_breakthroughs("athlete", "ride-1", DAY, "bike", strong_ride(), {})

        record = caplog.records[-1]
        assert "ride-1" in record.getMessage()
        assert record.exc_info is not None

    def test_failed_zone_write_keeps_profile(self, detector, temp_db):
        """Profile and plan zones are committed together or not at all."""
        temp_db.save_profile(AthleteProfile(user_id="athlete", bike_ftp=220))
        temp_db.save_plan_zone_config("athlete", PlanZoneConfig().with_ftp(220))
        detector.detect_zone_breakthroughs("athlete", "ride-1", DAY, "bike", strong_ride(), {})
        with temp_db._get_connection() as conn:
            conn.execute(
                """
                CREATE TRIGGER reject_zones BEFORE INSERT ON plan_zone_config
                BEGIN SELECT RAISE(ABORT, 'disk full'); END
                """
            )

        results = detector.detect_zone_breakthroughs(
            "athlete", "ride-2", DAY + timedelta(days=3), "bike", strong_ride(), {}
        )

        assert results == []
        assert temp_db.get_profile("athlete").bike_ftp == 220
        assert temp_db.get_plan_zone_config("athlete").ftp_watts == 220


class TestCommits:
    """Tests for committing new thresholds."""

    def test_caller_profile_is_not_modified(self, detector, temp_db):
        current = AthleteProfile(user_id="athlete", bike_ftp=220)
        temp_db.save_profile(current)
        detector.detect_zone_breakthroughs("athlete", "ride-1", DAY, "bike", strong_ride(), {})

        results = detector.detect_zone_breakthroughs(
            "athlete", "ride-2", DAY + timedelta(days=3), "bike", strong_ride(), {},
            profile=current,
        )

        assert results[0].auto_updated
        assert current.bike_ftp == 220
        assert temp_db.get_profile("athlete").bike_ftp == 285

    def test_commit_returns_updated_profile(self, detector, temp_db):
        current = AthleteProfile(user_id="athlete", swim_pace_per_100m=100)

        updated = detector.commit_swim_css("athlete", current, 92)

        assert updated.swim_pace_per_100m == 92
        assert updated.updated_at is not None
        assert current.swim_pace_per_100m == 100
        assert temp_db.get_profile("athlete").swim_pace_per_100m == 92
