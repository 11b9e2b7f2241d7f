"""Domain records for workout analytics."""

from .activity import ActivitySummary, Discipline
from .analytics import WorkoutAnalytics
from .athlete import AthleteProfile, UserZones, user_zones_from_profile
from .breakthroughs import (
    BreakthroughCandidate,
    BreakthroughType,
    Confidence,
    ZoneBreakthrough,
)
from .plan_config import PlanZoneConfig, ZoneRange, parse_plan_zone_config

__all__ = [
    "ActivitySummary",
    "Discipline",
    "WorkoutAnalytics",
    "AthleteProfile",
    "UserZones",
    "user_zones_from_profile",
    "BreakthroughCandidate",
    "BreakthroughType",
    "Confidence",
    "ZoneBreakthrough",
    "PlanZoneConfig",
    "ZoneRange",
    "parse_plan_zone_config",
]
