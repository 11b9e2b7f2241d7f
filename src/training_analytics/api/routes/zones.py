"""Athlete zones and breakthrough API routes."""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query

from ..deps import get_breakthrough_detector, get_enrichment_service
from ..schemas import BreakthroughCheckRequest, ProfileUpdateRequest
from ...models.activity import Discipline
from ...models.breakthroughs import BreakthroughType
from ...services.breakthroughs import ZoneBreakthroughDetector
from ...services.enrichment import WorkoutEnrichmentService
from ...streams import require_stream

logger = logging.getLogger(__name__)
router = APIRouter()


def _zones_response(service: WorkoutEnrichmentService, user_id: str) -> Dict[str, Any]:
    profile = service.get_profile(user_id)
    return {
        "profile": profile.to_dict(),
        "zones": service.get_user_zones(user_id, profile).to_dict(),
    }


@router.get("/{user_id}")
def get_zones(
    user_id: str,
    service: WorkoutEnrichmentService = Depends(get_enrichment_service),
) -> Dict[str, Any]:
    """Profile and the zones derived from it."""
    return _zones_response(service, user_id)


@router.put("/{user_id}/profile")
def update_profile(
    user_id: str,
    request: ProfileUpdateRequest,
    service: WorkoutEnrichmentService = Depends(get_enrichment_service),
) -> Dict[str, Any]:
    """Set profile thresholds; omitted fields keep their stored values."""
    profile = service.get_profile(user_id)
    for name, value in request.model_dump(exclude_none=True).items():
        setattr(profile, name, value)
    service.training_db.save_profile(profile)
    logger.info(f"Updated profile for {user_id}")
    return _zones_response(service, user_id)


@router.post("/{user_id}/breakthroughs")
def check_breakthroughs(
    user_id: str,
    request: BreakthroughCheckRequest,
    detector: ZoneBreakthroughDetector = Depends(get_breakthrough_detector),
) -> List[Dict[str, Any]]:
    """Run breakthrough detection for one workout."""
    discipline = Discipline.parse(request.discipline)
    stream = require_stream(request.stream) if request.stream is not None else None
    breakthroughs = detector.detect_zone_breakthroughs(
        user_id,
        request.workout_id,
        request.workout_date,
        discipline,
        stream,
        request.summary.to_summary(),
    )
    return [b.to_dict() for b in breakthroughs]


@router.get("/{user_id}/breakthroughs/candidates")
def list_breakthrough_candidates(
    user_id: str,
    breakthrough_type: Optional[BreakthroughType] = Query(None, alias="type"),
    detector: ZoneBreakthroughDetector = Depends(get_breakthrough_detector),
) -> List[Dict[str, Any]]:
    candidates = detector.candidates.get_breakthrough_candidates(user_id, breakthrough_type)
    return [c.to_dict() for c in candidates]
