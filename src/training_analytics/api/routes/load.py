"""Training load (ATL / CTL / TSB) API routes."""

import logging
from datetime import date
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query

from ..deps import get_training_load_service
from ..schemas import TrainingLoadReplayRequest, TrainingLoadUpdateRequest
from ...services.training_load import TrainingLoadService

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/{user_id}")
def add_training_load(
    user_id: str,
    request: TrainingLoadUpdateRequest,
    service: TrainingLoadService = Depends(get_training_load_service),
) -> Dict[str, Any]:
    """Add TSS to a day and return that day's recomputed loads."""
    snapshot = service.update_training_load(user_id, request.date, request.tss)
    return snapshot.to_dict()


@router.post("/{user_id}/replay")
def replay_training_load(
    user_id: str,
    request: TrainingLoadReplayRequest,
    service: TrainingLoadService = Depends(get_training_load_service),
) -> List[Dict[str, Any]]:
    """Rebuild the load chain from historical daily TSS."""
    snapshots = service.replay_training_load(
        user_id, [(entry.date, entry.tss) for entry in request.entries]
    )
    return [s.to_dict() for s in snapshots]


@router.get("/{user_id}/history")
def get_training_load_history(
    user_id: str,
    days: int = Query(42, ge=1, le=365),
    end_date: Optional[date] = None,
    service: TrainingLoadService = Depends(get_training_load_service),
) -> List[Dict[str, Any]]:
    history = service.get_training_load_history(user_id, days=days, end_date=end_date)
    return [s.to_dict() for s in history]


@router.get("/{user_id}/trend")
def get_fitness_trend(
    user_id: str,
    days: int = Query(42, ge=7, le=365),
    end_date: Optional[date] = None,
    service: TrainingLoadService = Depends(get_training_load_service),
) -> Dict[str, Any]:
    """Fitness, fatigue, form and weekly volume trend."""
    return service.get_fitness_trend(user_id, days=days, end_date=end_date).to_dict()
