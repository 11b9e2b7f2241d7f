"""Dependency injection for API routes."""

from functools import lru_cache

from fastapi import Depends

from ..config import get_settings
from ..db.database import TrainingDatabase
from ..services.breakthroughs import ZoneBreakthroughDetector
from ..services.enrichment import WorkoutEnrichmentService
from ..services.training_load import TrainingLoadService


@lru_cache
def get_training_db() -> TrainingDatabase:
    """Get the training database instance."""
    settings = get_settings()
    return TrainingDatabase(str(settings.db_path))


@lru_cache
def get_enrichment_service() -> WorkoutEnrichmentService:
    """Get the workout enrichment service instance."""
    return WorkoutEnrichmentService(training_db=get_training_db(), settings=get_settings())


def get_training_load_service(
    service: WorkoutEnrichmentService = Depends(get_enrichment_service),
) -> TrainingLoadService:
    """Load service shared with enrichment, so per-user locks are shared too."""
    return service.load_service


def get_breakthrough_detector(
    service: WorkoutEnrichmentService = Depends(get_enrichment_service),
) -> ZoneBreakthroughDetector:
    return service.detector
