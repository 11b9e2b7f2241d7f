"""Training load tracking service.

Maintains the per-user daily ATL/CTL/TSB chain. Each update reads the
prior day's loads and the day's accumulated TSS, recomputes the day from
the prior-day baseline and upserts it. Updates for one user are
serialized; different users proceed in parallel.
"""

import logging
import threading
from collections import defaultdict
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Tuple

from ..db.repositories import TrainingLoadRepository
from ..metrics.fitness import (
    FitnessTrend,
    TrainingLoadSnapshot,
    analyze_fitness_trend,
    compute_load_snapshot,
    replay_load_chain,
)

logger = logging.getLogger(__name__)


class TrainingLoadService:
    """Service for updating and reading the training load chain."""

    def __init__(self, repository: TrainingLoadRepository):
        """
        Initialize the training load service.

        Args:
            repository: Storage for daily load snapshots
        """
        self.repository = repository
        self._locks: Dict[str, threading.Lock] = defaultdict(threading.Lock)
        self._locks_guard = threading.Lock()

    def _user_lock(self, user_id: str) -> threading.Lock:
        with self._locks_guard:
            return self._locks[user_id]

    def update_training_load(self, user_id: str, day: date, tss: float) -> TrainingLoadSnapshot:
        """
        Add a workout's TSS to a day and recompute that day's loads.

        Args:
            user_id: Athlete identifier
            day: Calendar date of the workout
            tss: Training Stress Score to add (None counts as 0)

        Returns:
            The stored snapshot for ``day``

        Raises:
            DatabaseError: If the read or write fails; the caller may retry
        """
        with self._user_lock(user_id):
            previous = self.repository.get_training_load(user_id, day - timedelta(days=1))
            prev_atl = previous.atl if previous else 0.0
            prev_ctl = previous.ctl if previous else 0.0

            existing = self.repository.get_training_load(user_id, day)
            daily_tss = (existing.daily_tss if existing else 0.0) + (tss or 0.0)

            snapshot = compute_load_snapshot(day, prev_atl, prev_ctl, daily_tss)
            self.repository.upsert_training_load(user_id, snapshot)

        logger.info(
            f"Training load for {user_id} on {day}: TSS {snapshot.daily_tss}, "
            f"ATL {snapshot.atl}, CTL {snapshot.ctl}, TSB {snapshot.tsb}"
        )
        return snapshot

    def get_training_load_history(
        self,
        user_id: str,
        days: int = 42,
        end_date: Optional[date] = None,
    ) -> List[TrainingLoadSnapshot]:
        """Snapshots for the ``days`` days ending at ``end_date`` (today by default), oldest first."""
        end = end_date or date.today()
        start = end - timedelta(days=max(days, 1) - 1)
        return self.repository.get_training_load_range(user_id, start, end)

    def get_fitness_trend(
        self,
        user_id: str,
        days: int = 42,
        end_date: Optional[date] = None,
    ) -> FitnessTrend:
        history = self.get_training_load_history(user_id, days=days, end_date=end_date)
        return analyze_fitness_trend(history)

    def replay_training_load(
        self,
        user_id: str,
        daily_tss: Iterable[Tuple[date, float]],
    ) -> List[TrainingLoadSnapshot]:
        """
        Rebuild the chain from historical (date, TSS) pairs.

        Stored snapshots from the first replayed date onward are replaced.
        The chain starts from the stored loads of the day before the first
        entry, or zero. Gap days are written with zero TSS.

        Returns:
            The replayed snapshots, oldest first
        """
        entries = sorted(daily_tss, key=lambda item: item[0])
        if not entries:
            return []

        first_day = entries[0][0]
        with self._user_lock(user_id):
            baseline = self.repository.get_training_load(user_id, first_day - timedelta(days=1))
            snapshots = replay_load_chain(
                entries,
                initial_atl=baseline.atl if baseline else 0.0,
                initial_ctl=baseline.ctl if baseline else 0.0,
            )

            self.repository.replace_training_load(user_id, first_day, snapshots)

        logger.info(f"Replayed {len(snapshots)} training load days for {user_id} from {first_day}")
        return snapshots
