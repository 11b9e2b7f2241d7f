"""Tests for the training load service."""

import threading
from datetime import date, timedelta

import pytest

from training_analytics.exceptions import DatabaseError
from training_analytics.metrics.fitness import compute_load_snapshot
from training_analytics.services.training_load import TrainingLoadService


@pytest.fixture
def service(temp_db):
    return TrainingLoadService(temp_db)


DAY = date(2026, 3, 2)


class TestUpdateTrainingLoad:
    """Tests for adding a workout's TSS to the chain."""

    def test_first_workout(self, service, temp_db):
        """The first day starts from zero loads and is stored."""
        snapshot = service.update_training_load("athlete", DAY, 100)

        assert snapshot.atl == 13.31
        assert snapshot.ctl == 2.35
        assert temp_db.get_training_load("athlete", DAY) == snapshot

    def test_two_workouts_same_day(self, service):
        """Two workouts on one day equal one workout with the summed TSS."""
        service.update_training_load("athlete", DAY, 50)
        combined = service.update_training_load("athlete", DAY, 50)

        assert combined.daily_tss == 100
        assert combined == compute_load_snapshot(DAY, 0.0, 0.0, 100)

    def test_next_day_builds_on_previous(self, service):
        first = service.update_training_load("athlete", DAY, 100)
        second = service.update_training_load("athlete", DAY + timedelta(days=1), 60)

        assert second == compute_load_snapshot(DAY + timedelta(days=1), first.atl, first.ctl, 60)

    def test_none_tss_counts_as_zero(self, service):
        snapshot = service.update_training_load("athlete", DAY, None)
        assert snapshot.daily_tss == 0

    def test_users_are_independent(self, service):
        service.update_training_load("a", DAY, 100)
        other = service.update_training_load("b", DAY, 40)
        assert other.daily_tss == 40

    def test_concurrent_updates_are_not_lost(self, service, temp_db):
        """Parallel updates for one user on one day all land in the total."""

        def add():
            for _ in range(5):
                service.update_training_load("athlete", DAY, 10)

        threads = [threading.Thread(target=add) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert temp_db.get_training_load("athlete", DAY).daily_tss == 200


class TestHistory:
    """Tests for reading the chain back."""

    def test_history_window(self, service):
        for i in range(10):
            service.update_training_load("athlete", DAY + timedelta(days=i), 50)

        history = service.get_training_load_history("athlete", days=5, end_date=DAY + timedelta(days=9))

        assert len(history) == 5
        assert history[0].date == DAY + timedelta(days=5)
        assert history[-1].date == DAY + timedelta(days=9)

    def test_fitness_trend_short_history(self, service):
        service.update_training_load("athlete", DAY, 50)
        trend = service.get_fitness_trend("athlete", end_date=DAY)
        assert trend.form == "neutral"
        assert trend.ctl_trend == "stable"


class TestReplay:
    """Tests for rebuilding the chain from history."""

    def test_replay_fills_gaps(self, service):
        snapshots = service.replay_training_load(
            "athlete", [(DAY, 100), (DAY + timedelta(days=3), 80)]
        )
        assert len(snapshots) == 4
        history = service.get_training_load_history("athlete", days=4, end_date=DAY + timedelta(days=3))
        assert [s.daily_tss for s in history] == [100, 0, 0, 80]

    def test_replay_replaces_later_days(self, service, temp_db):
        """Stale snapshots after the replayed range are removed."""
        for i in range(5):
            service.update_training_load("athlete", DAY + timedelta(days=i), 70)

        service.replay_training_load("athlete", [(DAY + timedelta(days=1), 20)])

        assert temp_db.get_training_load("athlete", DAY).daily_tss == 70
        assert temp_db.get_training_load("athlete", DAY + timedelta(days=1)).daily_tss == 20
        assert temp_db.get_training_load("athlete", DAY + timedelta(days=2)) is None

    def test_replay_starts_from_prior_day(self, service):
        first = service.update_training_load("athlete", DAY, 100)
        replayed = service.replay_training_load("athlete", [(DAY + timedelta(days=1), 50)])
        assert replayed[0] == compute_load_snapshot(DAY + timedelta(days=1), first.atl, first.ctl, 50)

    def test_replay_empty(self, service):
        assert service.replay_training_load("athlete", []) == []

    def test_replay_is_deterministic(self, service, temp_db):
        """Replaying the same daily TSS twice stores the same chain."""
        entries = [(DAY + timedelta(days=i), tss) for i, tss in enumerate([90, 0, 120, 45, 60])]
        first = service.replay_training_load("athlete", entries)
        second = service.replay_training_load("athlete", list(reversed(entries)))

        assert first == second
        stored = temp_db.get_training_load_range("athlete", DAY, DAY + timedelta(days=4))
        assert stored == first

    def test_failed_replay_keeps_existing_chain(self, service, temp_db):
        """A storage failure midway leaves the previous chain in place."""
        for i in range(3):
            service.update_training_load("athlete", DAY + timedelta(days=i), 70)
        before = temp_db.get_training_load_range("athlete", DAY, DAY + timedelta(days=2))
        with temp_db._get_connection() as conn:
            conn.execute(
                f"""
                CREATE TRIGGER reject_day BEFORE INSERT ON training_load
                WHEN NEW.date = '{(DAY + timedelta(days=2)).isoformat()}'
                BEGIN SELECT RAISE(ABORT, 'disk full'); END
                """
            )

        with pytest.raises(DatabaseError):
            service.replay_training_load(
                "athlete", [(DAY + timedelta(days=1), 10), (DAY + timedelta(days=2), 10)]
            )

        assert temp_db.get_training_load_range("athlete", DAY, DAY + timedelta(days=2)) == before
