"""Services for workout analysis, training load and zone breakthroughs."""

from .analyzer import (
    analyze_cycling,
    analyze_running,
    analyze_swimming,
    analyze_workout,
)
from .breakthroughs import ZoneBreakthroughDetector
from .enrichment import EnrichmentResult, WorkoutEnrichmentService
from .training_load import TrainingLoadService

__all__ = [
    "analyze_cycling",
    "analyze_running",
    "analyze_swimming",
    "analyze_workout",
    "ZoneBreakthroughDetector",
    "EnrichmentResult",
    "WorkoutEnrichmentService",
    "TrainingLoadService",
]
