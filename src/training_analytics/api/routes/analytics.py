"""Workout analytics API routes."""

import logging
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query

from ..deps import get_enrichment_service, get_training_db
from ..schemas import AnalyzeWorkoutRequest
from ...analysis.trends import calculate_weekly_stats, efficiency_factor_trend
from ...db.database import TrainingDatabase
from ...exceptions import AnalyticsNotFoundError
from ...models.activity import Discipline
from ...services.enrichment import WorkoutEnrichmentService
from ...streams import require_stream

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/workouts/{workout_id}")
def analyze_completed_workout(
    workout_id: str,
    request: AnalyzeWorkoutRequest,
    service: WorkoutEnrichmentService = Depends(get_enrichment_service),
) -> Dict[str, Any]:
    """
    Analyze a completed workout, store its analytics and update load and zones.

    The stream is optional; without one the analysis falls back to the
    summary fields.
    """
    discipline = Discipline.parse(request.discipline)
    stream = require_stream(request.stream) if request.stream is not None else None

    result = service.process_workout(
        user_id=request.user_id,
        workout_id=workout_id,
        workout_date=request.workout_date,
        discipline=discipline,
        stream=stream,
        summary=request.summary.to_summary(),
        prescribed_intensity=request.prescribed_intensity,
    )
    return result.to_dict()


@router.get("/workouts/{workout_id}")
def get_workout_analytics(
    workout_id: str,
    db: TrainingDatabase = Depends(get_training_db),
) -> Dict[str, Any]:
    """Stored analytics of a workout, with any breakthrough candidates it produced."""
    analytics = db.get_analytics(workout_id)
    if analytics is None:
        raise AnalyticsNotFoundError(workout_id)
    return analytics.to_dict()


@router.get("/weekly/{user_id}")
def get_weekly_stats(
    user_id: str,
    weeks: int = Query(4, ge=1, le=52),
    end_date: Optional[date] = None,
    db: TrainingDatabase = Depends(get_training_db),
) -> List[Dict[str, Any]]:
    """Weekly TSS, duration, distance and average EF/IF."""
    end = end_date or date.today()
    rows = db.get_analytics_range(user_id, end - timedelta(weeks=weeks), end)
    return [week.to_dict() for week in calculate_weekly_stats(rows)]


@router.get("/efficiency/{user_id}")
def get_efficiency_trend(
    user_id: str,
    discipline: str = Query("run"),
    weeks: int = Query(8, ge=1, le=52),
    end_date: Optional[date] = None,
    db: TrainingDatabase = Depends(get_training_db),
) -> List[Dict[str, Any]]:
    """Efficiency factor per workout for one discipline, oldest first."""
    kind = Discipline.parse(discipline).value
    end = end_date or date.today()
    rows = db.get_analytics_range(user_id, end - timedelta(weeks=weeks), end, discipline=kind)
    return [
        {"date": entry["date"].isoformat(), "ef": entry["ef"]}
        for entry in efficiency_factor_trend(rows, discipline=kind)
    ]
