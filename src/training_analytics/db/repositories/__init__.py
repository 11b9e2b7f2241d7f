"""Repository interfaces for analytics storage."""

from .base import (
    AnalyticsRepository,
    BreakthroughRepository,
    ProfileRepository,
    TrainingLoadRepository,
)

__all__ = [
    "AnalyticsRepository",
    "BreakthroughRepository",
    "ProfileRepository",
    "TrainingLoadRepository",
]
