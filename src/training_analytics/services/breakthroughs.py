"""Zone breakthrough detection.

After each qualifying workout a candidate threshold is estimated (FTP,
running easy pace, swim CSS) and stored. Candidates of the same type
inside the lookback window corroborate each other:

- 1 detection: low confidence, the athlete is told, nothing changes
- 2 detections: medium confidence, zones are committed
- 3+ detections: high confidence, zones are committed

Committing updates the profile value and recomputes the dependent zone
table of the active plan configuration.
"""

import logging
import sqlite3
import threading
from collections import defaultdict
from dataclasses import replace
from datetime import date, timedelta
from typing import Callable, Dict, List, Mapping, Optional, Tuple, Union

from ..config import Settings, get_settings
from ..exceptions import DatabaseError, ZoneConfigError
from ..metrics.pace import (
    easy_pace_from_threshold,
    estimate_threshold_pace,
    format_pace,
    threshold_pace_from_easy,
)
from ..metrics.power import estimate_ftp_from_best_20min
from ..metrics.swim import calculate_pace_per_100m, detect_swim_intervals, estimate_css
from ..db.repositories import BreakthroughRepository, ProfileRepository
from ..models.activity import ActivitySummary, Discipline
from ..models.athlete import AthleteProfile, default_easy_pace, default_ftp
from ..models.breakthroughs import (
    BreakthroughCandidate,
    BreakthroughType,
    Confidence,
    ZoneBreakthrough,
)
from ..models.plan_config import PlanZoneConfig
from ..streams import StreamRecord, has_power_data

logger = logging.getLogger(__name__)


MIN_RUN_DISTANCE_M = 3000
MIN_SWIM_DISTANCE_M = 400
# Runs slower than this multiple of threshold pace are not hard enough to tell anything
HARD_EFFORT_PACE_TOLERANCE = 1.05


def _change_percent(current: float, detected: float) -> float:
    return (detected - current) / current * 100


class ZoneBreakthroughDetector:
    """Detects, corroborates and commits threshold breakthroughs."""

    def __init__(
        self,
        profiles: ProfileRepository,
        candidates: BreakthroughRepository,
        settings: Optional[Settings] = None,
    ):
        """
        Initialize the detector.

        Args:
            profiles: Profile and plan zone configuration store
            candidates: Breakthrough candidate store
            settings: Thresholds and lookback window (cached settings by default)
        """
        self.profiles = profiles
        self.candidates = candidates
        self.settings = settings or get_settings()
        self._locks: Dict[str, threading.Lock] = defaultdict(threading.Lock)
        self._locks_guard = threading.Lock()

    def _user_lock(self, user_id: str) -> threading.Lock:
        with self._locks_guard:
            return self._locks[user_id]

    # =========================================================================
    # Entry point
    # =========================================================================

    def detect_zone_breakthroughs(
        self,
        user_id: str,
        workout_id: str,
        workout_date: date,
        discipline: Union[str, Discipline],
        stream: Optional[StreamRecord],
        summary: Union[ActivitySummary, Mapping, None],
        profile: Optional[AthleteProfile] = None,
    ) -> List[ZoneBreakthrough]:
        """
        Run every breakthrough check that applies to a completed workout.

        Storage failures are logged and reported as no breakthrough; they
        never propagate to the caller.

        Args:
            user_id: Athlete identifier
            workout_id: Completed workout identifier
            workout_date: Date the workout was performed; anchors the lookback window
            discipline: run, bike or swim (other values are ignored)
            stream: Normalized stream, or None
            summary: Aggregate activity fields
            profile: Current profile; loaded from storage when omitted

        Returns:
            Detected breakthroughs, possibly empty
        """
        activity = summary if isinstance(summary, ActivitySummary) else ActivitySummary.from_dict(summary)
        kind = discipline.value if isinstance(discipline, Discipline) else str(discipline).lower()
        breakthroughs: List[ZoneBreakthrough] = []

        try:
            with self._user_lock(user_id):
                current = profile or self.profiles.get_profile(user_id) or AthleteProfile(user_id=user_id)

                if kind == Discipline.BIKE.value and has_power_data(stream):
                    result = self.check_ftp_breakthrough(
                        user_id, workout_id, workout_date, stream, current
                    )
                    if result:
                        breakthroughs.append(result)

                elif kind == Discipline.RUN.value and stream is not None:
                    result = self.check_running_threshold_breakthrough(
                        user_id, workout_id, workout_date, activity, current
                    )
                    if result:
                        breakthroughs.append(result)

                elif kind == Discipline.SWIM.value:
                    result = self.check_swim_css_breakthrough(
                        user_id, workout_id, workout_date, activity, current, stream
                    )
                    if result:
                        breakthroughs.append(result)
        except (DatabaseError, ZoneConfigError, sqlite3.Error):
            logger.exception(f"Zone breakthrough detection failed for workout {workout_id}")
            return []

        return breakthroughs

    # =========================================================================
    # Checks
    # =========================================================================

    def check_ftp_breakthrough(
        self,
        user_id: str,
        workout_id: str,
        workout_date: date,
        stream: StreamRecord,
        profile: AthleteProfile,
    ) -> Optional[ZoneBreakthrough]:
        """Estimate FTP from the best 20-minute power (x 0.95)."""
        estimated_ftp = estimate_ftp_from_best_20min(stream.power, stream.time)
        if not estimated_ftp:
            return None

        current_ftp = profile.bike_ftp or default_ftp(profile.experience_level)
        change = _change_percent(current_ftp, estimated_ftp)
        if change < self.settings.min_ftp_increase_pct:
            return None

        total, confidence = self._record_candidate(
            user_id, BreakthroughType.FTP, estimated_ftp, workout_date, workout_id
        )
        if confidence.commits:
            self.commit_ftp(user_id, profile, estimated_ftp)
            message = (
                f"FTP breakthrough detected! Your estimated FTP has increased from "
                f"{current_ftp}W to {estimated_ftp}W (+{round(change, 2)}%). Power zones "
                f"have been updated and your next cycling workouts will reflect the new targets."
            )
        else:
            message = (
                f"Strong cycling effort! Your best 20-minute power suggests an FTP of "
                f"~{estimated_ftp}W (current: {current_ftp}W). One more confirming workout "
                f"and your zones will be updated automatically."
            )

        return ZoneBreakthrough(
            type=BreakthroughType.FTP,
            current_value=current_ftp,
            detected_value=estimated_ftp,
            change_percent=round(change, 2),
            confidence=confidence,
            confirming_workouts=total,
            message=message,
            auto_updated=confidence.commits,
        )

    def check_running_threshold_breakthrough(
        self,
        user_id: str,
        workout_id: str,
        workout_date: date,
        summary: ActivitySummary,
        profile: AthleteProfile,
    ) -> Optional[ZoneBreakthrough]:
        """
        Estimate easy pace from a hard run.

        Only runs longer than 3 km whose average pace is at or within 5% of
        threshold pace are considered.
        """
        if summary.distance <= MIN_RUN_DISTANCE_M or summary.moving_time <= 0:
            return None

        current_easy = profile.run_pace_per_km or default_easy_pace(profile.experience_level)
        avg_pace = summary.moving_time / (summary.distance / 1000)
        if avg_pace > current_easy * 0.82 * HARD_EFFORT_PACE_TOLERANCE:
            return None

        threshold = estimate_threshold_pace(summary.distance, summary.moving_time)
        if threshold is None:
            return None
        estimated_easy = easy_pace_from_threshold(threshold)

        # Faster pace is a lower number
        improvement = -_change_percent(current_easy, estimated_easy)
        if improvement < self.settings.min_pace_improvement_pct:
            return None

        total, confidence = self._record_candidate(
            user_id, BreakthroughType.RUN_THRESHOLD, estimated_easy, workout_date, workout_id
        )
        if confidence.commits:
            self.commit_easy_pace(user_id, profile, estimated_easy)
            message = (
                f"Running zones updated! Based on your recent performances, your easy pace "
                f"has been adjusted from {format_pace(current_easy)} to "
                f"{format_pace(estimated_easy)}. All pace-based workouts will reflect the new targets."
            )
        else:
            message = (
                "Nice running effort! Your performance suggests your fitness may be improving. "
                "One more confirming workout and your pace zones will be updated."
            )

        return ZoneBreakthrough(
            type=BreakthroughType.RUN_THRESHOLD,
            current_value=current_easy,
            detected_value=estimated_easy,
            change_percent=round(improvement, 2),
            confidence=confidence,
            confirming_workouts=total,
            message=message,
            auto_updated=confidence.commits,
        )

    def check_swim_css_breakthrough(
        self,
        user_id: str,
        workout_id: str,
        workout_date: date,
        summary: ActivitySummary,
        profile: AthleteProfile,
        stream: Optional[StreamRecord] = None,
    ) -> Optional[ZoneBreakthrough]:
        """
        Estimate CSS from a structured swim of at least 400 m.

        Uses the interval-based CSS estimate when the stream yields one,
        otherwise the workout's average pace per 100 m. Needs a current CSS
        to compare against.
        """
        current_css = profile.swim_pace_per_100m
        if not current_css:
            config = self.profiles.get_plan_zone_config(user_id)
            current_css = config.swim_css_sec_per_100m if config else None
        if not current_css or summary.distance < MIN_SWIM_DISTANCE_M:
            return None

        estimated_css = None
        if stream is not None:
            estimated_css = estimate_css(detect_swim_intervals(stream))
        if estimated_css is None:
            estimated_css = calculate_pace_per_100m(summary.distance, summary.moving_time)
        if not estimated_css:
            return None

        improvement = -_change_percent(current_css, estimated_css)
        if improvement < self.settings.min_pace_improvement_pct:
            return None

        detected = round(estimated_css, 2)
        total, confidence = self._record_candidate(
            user_id, BreakthroughType.SWIM_CSS, detected, workout_date, workout_id
        )
        if confidence.commits:
            self.commit_swim_css(user_id, profile, round(estimated_css))
            message = (
                f"Swim zones updated! Your CSS has improved from "
                f"{format_pace(current_css, '/100m')} to {format_pace(estimated_css, '/100m')}. "
                f"Swim workouts will be adjusted."
            )
        else:
            message = (
                "Strong swim! Your pace suggests an improving CSS. One more confirming "
                "workout and your swim zones will be updated."
            )

        return ZoneBreakthrough(
            type=BreakthroughType.SWIM_CSS,
            current_value=current_css,
            detected_value=detected,
            change_percent=round(improvement, 2),
            confidence=confidence,
            confirming_workouts=total,
            message=message,
            auto_updated=confidence.commits,
        )

    # =========================================================================
    # Corroboration
    # =========================================================================

    def _record_candidate(
        self,
        user_id: str,
        breakthrough_type: BreakthroughType,
        detected_value: float,
        workout_date: date,
        workout_id: str,
    ) -> Tuple[int, Confidence]:
        """Count corroborating candidates, store this one and grade the total."""
        window_start = workout_date - timedelta(days=self.settings.breakthrough_lookback_days)
        prior = self.candidates.count_breakthrough_candidates(
            user_id,
            breakthrough_type,
            window_start,
            workout_date,
            exclude_workout_id=workout_id,
        )
        self.candidates.save_breakthrough_candidate(BreakthroughCandidate(
            user_id=user_id,
            type=breakthrough_type,
            detected_value=detected_value,
            detected_at=workout_date,
            workout_id=workout_id,
        ))

        total = prior + 1
        confidence = Confidence.from_count(total)
        logger.info(
            f"{breakthrough_type.value} candidate {detected_value} for {user_id} "
            f"({total} in window, {confidence.value} confidence)"
        )
        return total, confidence

    # =========================================================================
    # Commits
    # =========================================================================

    def commit_ftp(self, user_id: str, profile: AthleteProfile, ftp: int) -> AthleteProfile:
        updated = self._commit(
            replace(profile, bike_ftp=ftp), lambda config: config.with_ftp(ftp)
        )
        logger.info(f"Updated FTP to {ftp}W for user {user_id}")
        return updated

    def commit_easy_pace(self, user_id: str, profile: AthleteProfile, easy_pace: int) -> AthleteProfile:
        updated = self._commit(
            replace(profile, run_pace_per_km=easy_pace),
            lambda config: config.with_easy_pace(easy_pace),
        )
        logger.info(
            f"Updated run easy pace to {easy_pace}s/km "
            f"(threshold {threshold_pace_from_easy(easy_pace)}s/km) for user {user_id}"
        )
        return updated

    def commit_swim_css(self, user_id: str, profile: AthleteProfile, css: int) -> AthleteProfile:
        updated = self._commit(
            replace(profile, swim_pace_per_100m=css), lambda config: config.with_swim_css(css)
        )
        logger.info(f"Updated swim CSS to {css}s/100m for user {user_id}")
        return updated

    def _commit(
        self,
        profile: AthleteProfile,
        update_config: Callable[[PlanZoneConfig], PlanZoneConfig],
    ) -> AthleteProfile:
        """Store the new profile and the matching plan zones in one write."""
        config = self.profiles.get_plan_zone_config(profile.user_id)
        return self.profiles.save_profile_and_zone_config(
            profile, update_config(config) if config is not None else None
        )
