"""Tests for the workout enrichment pipeline."""

from datetime import date, timedelta
from unittest.mock import patch

import pytest

from conftest import ride_stream, run_stream
from training_analytics.exceptions import DatabaseError
from training_analytics.metrics.fitness import compute_load_snapshot
from training_analytics.models.athlete import AthleteProfile
from training_analytics.services.enrichment import WorkoutEnrichmentService


DAY = date(2026, 3, 2)


@pytest.fixture
def service(temp_db, settings):
    return WorkoutEnrichmentService(training_db=temp_db, settings=settings)


class TestProcessWorkout:
    """Tests for the full post-workout pipeline."""

    def test_ride_is_stored_and_loaded(self, service, temp_db):
        temp_db.save_profile(AthleteProfile(user_id="athlete", bike_ftp=250))

        result = service.process_workout(
            "athlete", "ride-1", DAY, "bike", ride_stream(), {"moving_time": 3600}
        )

        assert result.analytics.training_stress_score == 100.0
        assert temp_db.get_analytics("ride-1").normalized_power == 250.0
        assert result.training_load == compute_load_snapshot(DAY, 0.0, 0.0, 100.0)
        assert temp_db.get_training_load("athlete", DAY) == result.training_load

    def test_raw_stream_mapping(self, service):
        """Raw channel mappings are normalized before analysis."""
        raw = ride_stream(seconds=120).to_dict()
        result = service.process_workout("athlete", "ride-1", DAY, "bike", raw, {"moving_time": 120})
        assert result.analytics.normalized_power == 250.0

    def test_unknown_discipline_stores_nothing(self, service, temp_db):
        result = service.process_workout(
            "athlete", "row-1", DAY, "rowing", None, {"moving_time": 3600}
        )

        assert result.analytics.discipline is None
        assert result.training_load is None
        assert temp_db.get_analytics("row-1") is None

    def test_no_tss_skips_load(self, service, temp_db):
        """A swim without a known CSS has no TSS to add."""
        result = service.process_workout(
            "athlete", "swim-1", DAY, "swim", None, {"distance": 1000, "moving_time": 1200}
        )
        assert result.training_load is None
        assert temp_db.get_analytics("swim-1") is not None

    def test_breakthroughs_reported(self, service, temp_db):
        temp_db.save_profile(AthleteProfile(user_id="athlete", bike_ftp=220))
        result = service.process_workout(
            "athlete", "ride-1", DAY, "bike", ride_stream(seconds=1500, watts=300), {"moving_time": 1500}
        )
        assert len(result.breakthroughs) == 1
        assert result.breakthroughs[0].detected_value == 285

    def test_compliance(self, service):
        result = service.process_workout(
            "athlete", "run-1", DAY, "run", run_stream(hr=120), {"moving_time": 599},
            prescribed_intensity="easy",
        )
        assert result.analytics.zone_compliance_score is not None

    def test_to_dict(self, service):
        result = service.process_workout(
            "athlete", "ride-1", DAY, "bike", ride_stream(), {"moving_time": 3600}
        )
        data = result.to_dict()
        assert data["analytics"]["workout_id"] == "ride-1"
        assert data["training_load"]["date"] == "2026-03-02"


class TestPowerRecords:
    """Tests for power PR detection during enrichment."""

    def test_first_ride_sets_records(self, service):
        result = service.process_workout(
            "athlete", "ride-1", DAY, "bike", ride_stream(seconds=1500, watts=300), {"moving_time": 1500}
        )
        assert [r.type for r in result.power_records] == ["best_5min_power", "best_20min_power"]
        assert all(r.previous_best is None for r in result.power_records)

    def test_weaker_ride_sets_no_records(self, service):
        service.process_workout(
            "athlete", "ride-1", DAY, "bike", ride_stream(seconds=1500, watts=300), {"moving_time": 1500}
        )
        result = service.process_workout(
            "athlete", "ride-2", DAY + timedelta(days=1), "bike",
            ride_stream(seconds=1500, watts=250), {"moving_time": 1500},
        )
        assert result.power_records == []

    def test_runs_have_no_power_records(self, service):
        result = service.process_workout(
            "athlete", "run-1", DAY, "run", run_stream(), {"moving_time": 599}
        )
        assert result.power_records == []


class TestLoadRetries:
    """Tests for retrying the load update."""

    def test_transient_failure_is_retried(self, service):
        snapshot = compute_load_snapshot(DAY, 0.0, 0.0, 100.0)
        with patch.object(
            service.load_service,
            "update_training_load",
            side_effect=[DatabaseError("locked"), snapshot],
        ) as update:
            result = service.process_workout(
                "athlete", "ride-1", DAY, "bike", ride_stream(), {"moving_time": 3600}
            )

        assert update.call_count == 2
        assert result.training_load == snapshot

    def test_persistent_failure_raises(self, service):
        with patch.object(
            service.load_service,
            "update_training_load",
            side_effect=DatabaseError("locked"),
        ) as update:
            with pytest.raises(DatabaseError):
                service.process_workout(
                    "athlete", "ride-1", DAY, "bike", ride_stream(), {"moving_time": 3600}
                )
        assert update.call_count == 3


class TestUserZones:
    """Tests for zone lookup."""

    def test_invalid_plan_config_ignored(self, service, temp_db):
        with temp_db._get_connection() as conn:
            conn.execute(
                "INSERT INTO plan_zone_config (user_id, version, config_json) VALUES (?, ?, ?)",
                ("athlete", 1, '{"version": 42}'),
            )
        zones = service.get_user_zones("athlete")
        assert zones.ftp_watts == 220

    def test_default_profile_gender(self, temp_db, settings):
        settings = settings.model_copy(update={"default_gender": "female"})
        service = WorkoutEnrichmentService(training_db=temp_db, settings=settings)
        assert service.get_profile("new").gender == "female"
