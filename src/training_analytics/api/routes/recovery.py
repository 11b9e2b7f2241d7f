"""Recovery readings and HRV / resting HR trend routes."""

import logging
from datetime import date, timedelta
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends

from ..deps import get_training_db
from ..schemas import RecoveryReadingRequest
from ...analysis.trends import analyze_recovery_trend
from ...db.database import TrainingDatabase

router = APIRouter()
logger = logging.getLogger(__name__)

RECOVERY_WINDOW_DAYS = 30


@router.post("/{user_id}")
def add_recovery_reading(
    user_id: str,
    request: RecoveryReadingRequest,
    db: TrainingDatabase = Depends(get_training_db),
) -> Dict[str, Any]:
    db.save_recovery(user_id, request.date, hrv_ms=request.hrv_ms, resting_hr=request.resting_hr)
    return {"user_id": user_id, "date": request.date.isoformat(), "stored": True}


@router.get("/{user_id}/trend")
def get_recovery_trend(
    user_id: str,
    end_date: Optional[date] = None,
    db: TrainingDatabase = Depends(get_training_db),
) -> Dict[str, Any]:
    """Last seven readings against the 30-day baseline."""
    end = end_date or date.today()
    readings = db.get_recovery_range(user_id, end - timedelta(days=RECOVERY_WINDOW_DAYS), end)
    return analyze_recovery_trend(readings).to_dict()
