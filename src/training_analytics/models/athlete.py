"""Athlete profile and the zones derived from it."""

from dataclasses import dataclass, asdict
from datetime import datetime
from typing import Dict, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .plan_config import PlanZoneConfig


DEFAULT_EXPERIENCE_LEVEL = "intermediate"

# Fallbacks by experience level when the profile has no measured value
DEFAULT_MAX_HR: Dict[str, int] = {
    "beginner": 190,
    "intermediate": 185,
    "advanced": 182,
    "elite": 180,
}
DEFAULT_FTP: Dict[str, int] = {
    "beginner": 150,
    "intermediate": 220,
    "advanced": 280,
    "elite": 340,
}
DEFAULT_EASY_PACE: Dict[str, int] = {
    "beginner": 373,
    "intermediate": 317,
    "advanced": 280,
    "elite": 255,
}

LTHR_FRACTION_OF_MAX = 0.85


@dataclass
class AthleteProfile:
    """Stored athlete profile. Threshold fields may be unset."""

    user_id: str
    experience_level: str = DEFAULT_EXPERIENCE_LEVEL
    max_hr: Optional[int] = None
    resting_hr: Optional[int] = None
    lactate_threshold_hr: Optional[int] = None
    gender: str = "male"
    bike_ftp: Optional[int] = None
    run_pace_per_km: Optional[int] = None  # easy pace, sec/km
    swim_pace_per_100m: Optional[int] = None  # CSS, sec/100m
    updated_at: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return asdict(self)

    def touch(self) -> None:
        self.updated_at = datetime.now().isoformat()


def default_ftp(experience_level: Optional[str]) -> int:
    return DEFAULT_FTP.get(experience_level or DEFAULT_EXPERIENCE_LEVEL, 220)


def default_easy_pace(experience_level: Optional[str]) -> int:
    return DEFAULT_EASY_PACE.get(experience_level or DEFAULT_EXPERIENCE_LEVEL, 317)


def default_max_hr(experience_level: Optional[str]) -> int:
    return DEFAULT_MAX_HR.get(experience_level or DEFAULT_EXPERIENCE_LEVEL, 185)


@dataclass(frozen=True)
class UserZones:
    """Current physiological thresholds used by the analyzer."""

    max_hr: Optional[float] = None
    lactate_threshold_hr: Optional[float] = None
    ftp_watts: Optional[float] = None
    easy_pace_sec_per_km: Optional[float] = None
    threshold_pace_sec_per_km: Optional[float] = None
    swim_css_sec_per_100m: Optional[float] = None
    resting_hr: float = 50
    gender: str = "male"

    def to_dict(self) -> dict:
        return asdict(self)


def user_zones_from_profile(
    profile: AthleteProfile,
    plan_config: Optional["PlanZoneConfig"] = None,
    default_resting_hr: int = 50,
) -> UserZones:
    """
    Derive zones from a profile, filling gaps from experience-level defaults.

    Threshold pace is always derived as round(easy_pace * 0.82) and LTHR
    as round(max_hr * 0.85) unless the profile records one. CSS comes from
    the profile, then the plan configuration.
    """
    level = profile.experience_level or DEFAULT_EXPERIENCE_LEVEL
    max_hr = profile.max_hr or default_max_hr(level)
    easy_pace = profile.run_pace_per_km or default_easy_pace(level)
    swim_css = profile.swim_pace_per_100m
    if not swim_css and plan_config is not None:
        swim_css = plan_config.swim_css_sec_per_100m

    return UserZones(
        max_hr=max_hr,
        lactate_threshold_hr=profile.lactate_threshold_hr or round(max_hr * LTHR_FRACTION_OF_MAX),
        ftp_watts=profile.bike_ftp or default_ftp(level),
        easy_pace_sec_per_km=easy_pace,
        threshold_pace_sec_per_km=round(easy_pace * 0.82),
        swim_css_sec_per_100m=swim_css or None,
        resting_hr=profile.resting_hr or default_resting_hr,
        gender=profile.gender or "male",
    )
