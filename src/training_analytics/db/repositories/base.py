"""Repository interfaces consumed by the analytics services.

Services receive one of these through their constructor instead of
reaching for a global database handle. ``TrainingDatabase`` implements all
of them on SQLite.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import List, Optional, Sequence

from ...metrics.fitness import TrainingLoadSnapshot
from ...models.analytics import WorkoutAnalytics
from ...models.athlete import AthleteProfile
from ...models.breakthroughs import BreakthroughCandidate, BreakthroughType
from ...models.plan_config import PlanZoneConfig


class ProfileRepository(ABC):
    """Athlete profile and active-plan zone configuration."""

    @abstractmethod
    def get_profile(self, user_id: str) -> Optional[AthleteProfile]:
        """
        Retrieve a profile by user ID.

        Returns:
            The profile if found, None otherwise
        """
        pass

    @abstractmethod
    def save_profile(self, profile: AthleteProfile) -> AthleteProfile:
        """Insert or replace a profile."""
        pass

    @abstractmethod
    def get_plan_zone_config(self, user_id: str) -> Optional[PlanZoneConfig]:
        """
        Retrieve the validated zone configuration of the active plan.

        Raises:
            ZoneConfigError: If the stored configuration is invalid
        """
        pass

    @abstractmethod
    def save_plan_zone_config(self, user_id: str, config: PlanZoneConfig) -> None:
        pass

    @abstractmethod
    def save_profile_and_zone_config(
        self,
        profile: AthleteProfile,
        config: Optional[PlanZoneConfig],
    ) -> AthleteProfile:
        """Save the profile and (when not None) the plan zone config together or not at all."""
        pass


class AnalyticsRepository(ABC):
    """Per-workout analytics records."""

    @abstractmethod
    def save_analytics(
        self,
        user_id: str,
        workout_date: date,
        analytics: WorkoutAnalytics,
        moving_time: Optional[float] = None,
        distance: Optional[float] = None,
    ) -> None:
        """Insert or replace the analytics of ``analytics.workout_id``."""
        pass

    @abstractmethod
    def get_analytics(self, workout_id: str) -> Optional[WorkoutAnalytics]:
        """Analytics with their breakthrough candidates attached, or None."""
        pass

    @abstractmethod
    def get_analytics_range(
        self,
        user_id: str,
        start_date: date,
        end_date: date,
        discipline: Optional[str] = None,
    ) -> List[dict]:
        """Summary rows (date, discipline, TSS, IF, EF, NP, duration, distance)."""
        pass


class TrainingLoadRepository(ABC):
    """Per-user daily load chain."""

    @abstractmethod
    def get_training_load(self, user_id: str, day: date) -> Optional[TrainingLoadSnapshot]:
        pass

    @abstractmethod
    def upsert_training_load(self, user_id: str, snapshot: TrainingLoadSnapshot) -> None:
        """Insert or update the snapshot keyed by (user_id, snapshot.date)."""
        pass

    @abstractmethod
    def get_training_load_range(
        self,
        user_id: str,
        start_date: date,
        end_date: date,
    ) -> List[TrainingLoadSnapshot]:
        """Snapshots in chronological order, bounds inclusive."""
        pass

    @abstractmethod
    def replace_training_load(
        self,
        user_id: str,
        start_date: date,
        snapshots: Sequence[TrainingLoadSnapshot],
    ) -> int:
        """
        Atomically delete snapshots on or after start_date and write ``snapshots``.

        Returns:
            Number of snapshots removed
        """
        pass


class BreakthroughRepository(ABC):
    """Breakthrough candidates keyed by (user, type, detected_at)."""

    @abstractmethod
    def count_breakthrough_candidates(
        self,
        user_id: str,
        breakthrough_type: BreakthroughType,
        start_date: date,
        end_date: date,
        exclude_workout_id: Optional[str] = None,
    ) -> int:
        """Count candidates detected within [start_date, end_date]."""
        pass

    @abstractmethod
    def save_breakthrough_candidate(self, candidate: BreakthroughCandidate) -> BreakthroughCandidate:
        """Store a candidate; storing the same workout and type twice replaces it."""
        pass

    @abstractmethod
    def get_breakthrough_candidates(
        self,
        user_id: str,
        breakthrough_type: Optional[BreakthroughType] = None,
    ) -> List[BreakthroughCandidate]:
        pass
