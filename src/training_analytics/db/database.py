"""SQLite storage for workout analytics, training load and breakthroughs."""

import json
import logging
import os
import sqlite3
from contextlib import contextmanager
from dataclasses import replace
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from ..exceptions import DatabaseError
from ..metrics.fitness import TrainingLoadSnapshot
from ..models.analytics import WorkoutAnalytics
from ..models.athlete import AthleteProfile
from ..models.breakthroughs import BreakthroughCandidate, BreakthroughType
from ..models.plan_config import PlanZoneConfig, parse_plan_zone_config
from .repositories.base import (
    AnalyticsRepository,
    BreakthroughRepository,
    ProfileRepository,
    TrainingLoadRepository,
)
from .schema import SCHEMA

logger = logging.getLogger(__name__)


def get_default_db_path() -> Path:
    """Get the default database path."""
    # Check environment variable first
    env_path = os.environ.get("TRAINING_ANALYTICS_DB_PATH")
    if env_path:
        return Path(env_path)

    from ..config import get_settings
    return Path(get_settings().db_path)


def _iso(day: date) -> str:
    return day.isoformat()


def _row_to_snapshot(row: sqlite3.Row) -> TrainingLoadSnapshot:
    return TrainingLoadSnapshot(
        date=date.fromisoformat(row["date"]),
        daily_tss=float(row["daily_tss"] or 0),
        atl=float(row["atl"] or 0),
        ctl=float(row["ctl"] or 0),
        tsb=float(row["tsb"] or 0),
    )


def _row_to_candidate(row: sqlite3.Row) -> BreakthroughCandidate:
    return BreakthroughCandidate(
        id=row["id"],
        user_id=row["user_id"],
        type=BreakthroughType(row["type"]),
        detected_value=row["detected_value"],
        detected_at=date.fromisoformat(row["detected_at"]),
        workout_id=row["workout_id"],
    )


class TrainingDatabase(
    ProfileRepository,
    AnalyticsRepository,
    TrainingLoadRepository,
    BreakthroughRepository,
):
    """SQLite database manager for training analytics."""

    def __init__(self, db_path: Optional[str] = None):
        """
        Initialize the training database.

        Args:
            db_path: Path to SQLite database file. If not provided,
                     uses TRAINING_ANALYTICS_DB_PATH or the configured path.
        """
        if db_path:
            self.db_path = Path(db_path)
        else:
            self.db_path = get_default_db_path()

        self._init_db()

    def _init_db(self):
        """Initialize database tables."""
        with self._get_connection() as conn:
            conn.executescript(SCHEMA)

    @contextmanager
    def _get_connection(self):
        """Get database connection with context manager."""
        try:
            conn = sqlite3.connect(self.db_path)
        except sqlite3.Error as e:
            raise DatabaseError(f"Cannot open database: {e}", operation="connect") from e
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            logger.error(f"Database error on {self.db_path}: {e}")
            raise DatabaseError(str(e)) from e
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    # === Profile Methods ===

    def get_profile(self, user_id: str) -> Optional[AthleteProfile]:
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT * FROM athlete_profile WHERE user_id = ?", (user_id,)
            ).fetchone()
        return AthleteProfile(**dict(row)) if row else None

    def save_profile(self, profile: AthleteProfile) -> AthleteProfile:
        profile.touch()
        with self._get_connection() as conn:
            self._write_profile(conn, profile)
        return profile

    def save_profile_and_zone_config(
        self,
        profile: AthleteProfile,
        config: Optional[PlanZoneConfig],
    ) -> AthleteProfile:
        """Write the profile and, when given, the plan zone config in one transaction."""
        profile.touch()
        with self._get_connection() as conn:
            self._write_profile(conn, profile)
            if config is not None:
                self._write_plan_zone_config(conn, profile.user_id, config)
        return profile

    def get_plan_zone_config(self, user_id: str) -> Optional[PlanZoneConfig]:
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT config_json FROM plan_zone_config WHERE user_id = ?", (user_id,)
            ).fetchone()
        return parse_plan_zone_config(row["config_json"]) if row else None

    def save_plan_zone_config(self, user_id: str, config: PlanZoneConfig) -> None:
        with self._get_connection() as conn:
            self._write_plan_zone_config(conn, user_id, config)

    @staticmethod
    def _write_profile(conn: sqlite3.Connection, profile: AthleteProfile) -> None:
        conn.execute(
            """
            INSERT OR REPLACE INTO athlete_profile (
                user_id, experience_level, max_hr, resting_hr,
                lactate_threshold_hr, gender, bike_ftp, run_pace_per_km,
                swim_pace_per_100m, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                profile.user_id,
                profile.experience_level,
                profile.max_hr,
                profile.resting_hr,
                profile.lactate_threshold_hr,
                profile.gender,
                profile.bike_ftp,
                profile.run_pace_per_km,
                profile.swim_pace_per_100m,
                profile.updated_at,
            ),
        )

    @staticmethod
    def _write_plan_zone_config(conn: sqlite3.Connection, user_id: str, config: PlanZoneConfig) -> None:
        conn.execute(
            """
            INSERT OR REPLACE INTO plan_zone_config (user_id, version, config_json, updated_at)
            VALUES (?, ?, ?, CURRENT_TIMESTAMP)
            """,
            (user_id, config.version, config.to_json()),
        )

    # === Workout Analytics Methods ===

    def save_analytics(
        self,
        user_id: str,
        workout_date: date,
        analytics: WorkoutAnalytics,
        moving_time: Optional[float] = None,
        distance: Optional[float] = None,
    ) -> None:
        if not analytics.workout_id:
            raise DatabaseError("Analytics must have a workout_id", operation="save_analytics")

        payload = analytics.to_dict()
        payload.pop("breakthrough_candidates", None)

        with self._get_connection() as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO workout_analytics (
                    workout_id, user_id, workout_date, discipline,
                    moving_time, distance, training_stress_score,
                    intensity_factor, normalized_power, efficiency_factor,
                    payload_json
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    analytics.workout_id,
                    user_id,
                    _iso(workout_date),
                    analytics.discipline,
                    moving_time,
                    distance,
                    analytics.training_stress_score,
                    analytics.intensity_factor,
                    analytics.normalized_power,
                    analytics.efficiency_factor,
                    json.dumps(payload),
                ),
            )

    def get_analytics(self, workout_id: str) -> Optional[WorkoutAnalytics]:
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT payload_json FROM workout_analytics WHERE workout_id = ?",
                (workout_id,),
            ).fetchone()
            if not row:
                return None
            candidate_rows = conn.execute(
                """
                SELECT * FROM breakthrough_candidates
                WHERE workout_id = ?
                ORDER BY id
                """,
                (workout_id,),
            ).fetchall()

        analytics = WorkoutAnalytics.from_dict(json.loads(row["payload_json"]))
        candidates = tuple(_row_to_candidate(r) for r in candidate_rows)
        if not candidates:
            return analytics
        return replace(analytics, breakthrough_candidates=candidates)

    def get_analytics_range(
        self,
        user_id: str,
        start_date: date,
        end_date: date,
        discipline: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        query = """
            SELECT workout_id, workout_date, discipline, moving_time, distance,
                   training_stress_score, intensity_factor, normalized_power,
                   efficiency_factor
            FROM workout_analytics
            WHERE user_id = ? AND workout_date BETWEEN ? AND ?
        """
        params: List[Any] = [user_id, _iso(start_date), _iso(end_date)]
        if discipline:
            query += " AND discipline = ?"
            params.append(discipline)
        query += " ORDER BY workout_date, workout_id"

        with self._get_connection() as conn:
            rows = conn.execute(query, params).fetchall()
        return [dict(row) for row in rows]

    # === Training Load Methods ===

    def get_training_load(self, user_id: str, day: date) -> Optional[TrainingLoadSnapshot]:
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT * FROM training_load WHERE user_id = ? AND date = ?",
                (user_id, _iso(day)),
            ).fetchone()
        return _row_to_snapshot(row) if row else None

    def upsert_training_load(self, user_id: str, snapshot: TrainingLoadSnapshot) -> None:
        with self._get_connection() as conn:
            self._write_snapshot(conn, user_id, snapshot)

    def get_training_load_range(
        self,
        user_id: str,
        start_date: date,
        end_date: date,
    ) -> List[TrainingLoadSnapshot]:
        with self._get_connection() as conn:
            rows = conn.execute(
                """
                SELECT * FROM training_load
                WHERE user_id = ? AND date BETWEEN ? AND ?
                ORDER BY date ASC
                """,
                (user_id, _iso(start_date), _iso(end_date)),
            ).fetchall()
        return [_row_to_snapshot(row) for row in rows]

    def replace_training_load(
        self,
        user_id: str,
        start_date: date,
        snapshots: Sequence[TrainingLoadSnapshot],
    ) -> int:
        """
        Delete snapshots on or after ``start_date`` and write ``snapshots``.

        Runs in a single transaction: on failure the previous chain is kept.

        Returns:
            Number of rows removed
        """
        with self._get_connection() as conn:
            cursor = conn.execute(
                "DELETE FROM training_load WHERE user_id = ? AND date >= ?",
                (user_id, _iso(start_date)),
            )
            removed = cursor.rowcount
            for snapshot in snapshots:
                self._write_snapshot(conn, user_id, snapshot)
        return removed

    @staticmethod
    def _write_snapshot(conn: sqlite3.Connection, user_id: str, snapshot: TrainingLoadSnapshot) -> None:
        conn.execute(
            """
            INSERT INTO training_load (user_id, date, daily_tss, atl, ctl, tsb)
            VALUES (?, ?, ?, ?, ?, ?)
            ON CONFLICT(user_id, date) DO UPDATE SET
                daily_tss = excluded.daily_tss,
                atl = excluded.atl,
                ctl = excluded.ctl,
                tsb = excluded.tsb,
                updated_at = CURRENT_TIMESTAMP
            """,
            (
                user_id,
                _iso(snapshot.date),
                snapshot.daily_tss,
                snapshot.atl,
                snapshot.ctl,
                snapshot.tsb,
            ),
        )

    # === Breakthrough Candidate Methods ===

    def count_breakthrough_candidates(
        self,
        user_id: str,
        breakthrough_type: BreakthroughType,
        start_date: date,
        end_date: date,
        exclude_workout_id: Optional[str] = None,
    ) -> int:
        query = """
            SELECT COUNT(*) AS n FROM breakthrough_candidates
            WHERE user_id = ? AND type = ? AND detected_at BETWEEN ? AND ?
        """
        params: List[Any] = [user_id, breakthrough_type.value, _iso(start_date), _iso(end_date)]
        if exclude_workout_id:
            query += " AND workout_id != ?"
            params.append(exclude_workout_id)

        with self._get_connection() as conn:
            row = conn.execute(query, params).fetchone()
        return int(row["n"])

    def save_breakthrough_candidate(self, candidate: BreakthroughCandidate) -> BreakthroughCandidate:
        with self._get_connection() as conn:
            cursor = conn.execute(
                """
                INSERT INTO breakthrough_candidates (
                    user_id, type, detected_value, detected_at, workout_id
                ) VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(user_id, type, workout_id) DO UPDATE SET
                    detected_value = excluded.detected_value,
                    detected_at = excluded.detected_at
                """,
                (
                    candidate.user_id,
                    candidate.type.value,
                    candidate.detected_value,
                    _iso(candidate.detected_at),
                    candidate.workout_id,
                ),
            )
            row = conn.execute(
                """
                SELECT id FROM breakthrough_candidates
                WHERE user_id = ? AND type = ? AND workout_id = ?
                """,
                (candidate.user_id, candidate.type.value, candidate.workout_id),
            ).fetchone()

        return BreakthroughCandidate(
            id=row["id"] if row else cursor.lastrowid,
            user_id=candidate.user_id,
            type=candidate.type,
            detected_value=candidate.detected_value,
            detected_at=candidate.detected_at,
            workout_id=candidate.workout_id,
        )

    def get_breakthrough_candidates(
        self,
        user_id: str,
        breakthrough_type: Optional[BreakthroughType] = None,
    ) -> List[BreakthroughCandidate]:
        query = "SELECT * FROM breakthrough_candidates WHERE user_id = ?"
        params: List[Any] = [user_id]
        if breakthrough_type is not None:
            query += " AND type = ?"
            params.append(breakthrough_type.value)
        query += " ORDER BY detected_at, id"

        with self._get_connection() as conn:
            rows = conn.execute(query, params).fetchall()
        return [_row_to_candidate(row) for row in rows]

    # === Recovery Methods ===

    def save_recovery(
        self,
        user_id: str,
        day: date,
        hrv_ms: Optional[float] = None,
        resting_hr: Optional[float] = None,
    ) -> None:
        with self._get_connection() as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO recovery_data (user_id, date, hrv_ms, resting_hr)
                VALUES (?, ?, ?, ?)
                """,
                (user_id, _iso(day), hrv_ms, resting_hr),
            )

    def get_recovery_range(
        self,
        user_id: str,
        start_date: date,
        end_date: date,
    ) -> List[Dict[str, Any]]:
        """Recovery rows, newest first."""
        with self._get_connection() as conn:
            rows = conn.execute(
                """
                SELECT date, hrv_ms, resting_hr FROM recovery_data
                WHERE user_id = ? AND date BETWEEN ? AND ?
                ORDER BY date DESC
                """,
                (user_id, _iso(start_date), _iso(end_date)),
            ).fetchall()
        return [dict(row) for row in rows]

    def get_stats(self) -> dict:
        """Get database statistics."""
        with self._get_connection() as conn:
            return {
                table: conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]
                for table in (
                    "athlete_profile",
                    "workout_analytics",
                    "training_load",
                    "breakthrough_candidates",
                    "recovery_data",
                )
            }
