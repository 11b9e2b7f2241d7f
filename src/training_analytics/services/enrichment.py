"""Workout enrichment service.

Runs the post-workout pipeline for a completed workout: analyze the
stream, store the analytics, add the TSS to the load chain, check for
zone breakthroughs and power records.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Dict, List, Mapping, Optional, Union

from ..analysis.trends import PersonalRecord, best_efforts_from_stream, detect_power_records
from ..config import Settings, get_settings
from ..db.database import TrainingDatabase
from ..exceptions import DatabaseError, ZoneConfigError
from ..metrics.fitness import TrainingLoadSnapshot
from ..models.activity import ActivitySummary, Discipline
from ..models.analytics import WorkoutAnalytics
from ..models.athlete import AthleteProfile, UserZones, user_zones_from_profile
from ..models.breakthroughs import ZoneBreakthrough
from ..streams import StreamRecord, normalize_stream
from .analyzer import analyze_workout
from .breakthroughs import ZoneBreakthroughDetector
from .training_load import TrainingLoadService

logger = logging.getLogger(__name__)


LOAD_UPDATE_ATTEMPTS = 3
PR_HISTORY_DAYS = 365


@dataclass
class EnrichmentResult:
    """Everything produced for one completed workout."""

    analytics: WorkoutAnalytics
    training_load: Optional[TrainingLoadSnapshot] = None
    breakthroughs: List[ZoneBreakthrough] = field(default_factory=list)
    power_records: List[PersonalRecord] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "analytics": self.analytics.to_dict(),
            "training_load": self.training_load.to_dict() if self.training_load else None,
            "breakthroughs": [b.to_dict() for b in self.breakthroughs],
            "power_records": [r.to_dict() for r in self.power_records],
        }


class WorkoutEnrichmentService:
    """
    Service to enrich completed workouts with analytics.

    Owns a TrainingLoadService and a ZoneBreakthroughDetector over the same
    database so their per-user locks are shared by every caller.
    """

    def __init__(
        self,
        training_db: Optional[TrainingDatabase] = None,
        settings: Optional[Settings] = None,
    ):
        """
        Initialize the enrichment service.

        Args:
            training_db: TrainingDatabase instance (created if not provided)
            settings: Application settings (cached settings if not provided)
        """
        self.settings = settings or get_settings()
        self.training_db = training_db or TrainingDatabase()
        self.load_service = TrainingLoadService(self.training_db)
        self.detector = ZoneBreakthroughDetector(
            self.training_db, self.training_db, settings=self.settings
        )

    def get_profile(self, user_id: str) -> AthleteProfile:
        """Stored profile, or a default one carrying the configured gender."""
        profile = self.training_db.get_profile(user_id)
        if profile is None:
            profile = AthleteProfile(user_id=user_id, gender=self.settings.default_gender)
        return profile

    def get_user_zones(self, user_id: str, profile: Optional[AthleteProfile] = None) -> UserZones:
        """
        Current zones for a user.

        An invalid stored plan configuration is logged and ignored; the
        profile and experience defaults still apply.
        """
        profile = profile or self.get_profile(user_id)
        try:
            plan_config = self.training_db.get_plan_zone_config(user_id)
        except ZoneConfigError as e:
            logger.warning(f"Ignoring invalid plan zone config for {user_id}: {e.details}")
            plan_config = None
        return user_zones_from_profile(
            profile,
            plan_config=plan_config,
            default_resting_hr=self.settings.default_resting_hr,
        )

    def process_workout(
        self,
        user_id: str,
        workout_id: str,
        workout_date: date,
        discipline: Union[str, Discipline],
        stream: Union[StreamRecord, Mapping[str, Any], None],
        summary: Union[ActivitySummary, Mapping[str, Any], None],
        prescribed_intensity: Optional[str] = None,
    ) -> EnrichmentResult:
        """
        Analyze a completed workout and update everything that depends on it.

        Args:
            user_id: Athlete identifier
            workout_id: Workout identifier
            workout_date: Date the workout was performed
            discipline: run, bike, swim or brick
            stream: Normalized stream, raw channel mapping, or None
            summary: Aggregate activity fields
            prescribed_intensity: Planned intensity for compliance scoring

        Returns:
            EnrichmentResult

        Raises:
            DatabaseError: If storing analytics or the load update keeps failing
        """
        record = stream if isinstance(stream, StreamRecord) or stream is None else normalize_stream(stream)
        activity = summary if isinstance(summary, ActivitySummary) else ActivitySummary.from_dict(summary)

        profile = self.get_profile(user_id)
        zones = self.get_user_zones(user_id, profile)

        analytics = analyze_workout(
            discipline,
            record,
            activity,
            zones,
            prescribed_intensity=prescribed_intensity,
            workout_id=workout_id,
        )
        if analytics.discipline is None:
            logger.info(f"Workout {workout_id} has no analyzable discipline, nothing stored")
            return EnrichmentResult(analytics=analytics)

        self.training_db.save_analytics(
            user_id,
            workout_date,
            analytics,
            moving_time=activity.moving_time,
            distance=activity.distance,
        )

        result = EnrichmentResult(analytics=analytics)
        if analytics.training_stress_score is not None:
            result.training_load = self._update_load(
                user_id, workout_date, analytics.training_stress_score
            )

        result.breakthroughs = self.detector.detect_zone_breakthroughs(
            user_id,
            workout_id,
            workout_date,
            analytics.discipline,
            record,
            activity,
            profile=profile,
        )

        if analytics.discipline == Discipline.BIKE.value:
            result.power_records = self._power_records(user_id, workout_id, workout_date, record)

        logger.info(
            f"Enriched workout {workout_id} ({analytics.discipline}): "
            f"TSS {analytics.training_stress_score}, "
            f"{len(result.breakthroughs)} breakthrough(s), {len(result.power_records)} PR(s)"
        )
        return result

    def _update_load(self, user_id: str, day: date, tss: float) -> TrainingLoadSnapshot:
        attempt = 1
        while True:
            try:
                return self.load_service.update_training_load(user_id, day, tss)
            except DatabaseError as e:
                if attempt >= LOAD_UPDATE_ATTEMPTS:
                    raise
                logger.warning(f"Training load update failed (attempt {attempt}): {e}")
                attempt += 1

    def _power_records(
        self,
        user_id: str,
        workout_id: str,
        workout_date: date,
        stream: Optional[StreamRecord],
    ) -> List[PersonalRecord]:
        efforts = best_efforts_from_stream(stream)
        if not efforts:
            return []

        history = self.training_db.get_analytics_range(
            user_id,
            workout_date - timedelta(days=PR_HISTORY_DAYS),
            workout_date,
            discipline=Discipline.BIKE.value,
        )
        previous = [
            row["normalized_power"]
            for row in history
            if row["workout_id"] != workout_id and row["normalized_power"]
        ]
        return detect_power_records(workout_date, efforts, max(previous) if previous else None)
