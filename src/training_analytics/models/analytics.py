"""The per-workout analytics record."""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple

from ..metrics.pace import SplitData
from ..metrics.swim import SwimInterval
from ..metrics.zones import ZoneDistribution, ZoneKind, zone_distribution_from_storage
from .breakthroughs import BreakthroughCandidate


@dataclass(frozen=True)
class WorkoutAnalytics:
    """
    Structured metrics for one completed workout.

    Every metric is optional: absent data leaves the field as None rather
    than failing the analysis. For swims, ``normalized_graded_pace`` holds
    pace per 100 m.
    """

    workout_id: Optional[str] = None
    discipline: Optional[str] = None

    hr_zones: Optional[ZoneDistribution] = None
    pace_zones: Optional[ZoneDistribution] = None
    power_zones: Optional[ZoneDistribution] = None

    training_stress_score: Optional[float] = None
    intensity_factor: Optional[float] = None
    normalized_power: Optional[float] = None
    normalized_graded_pace: Optional[float] = None
    variability_index: Optional[float] = None
    efficiency_factor: Optional[float] = None
    aerobic_decoupling: Optional[float] = None
    grade_adjusted_pace: Optional[float] = None
    trimp: Optional[float] = None

    splits: Tuple[SplitData, ...] = ()

    zone_compliance_score: Optional[float] = None
    zone_compliance_details: Dict[str, Any] = field(default_factory=dict)

    avg_cadence: Optional[float] = None
    cadence_variability: Optional[float] = None
    total_ascent: Optional[float] = None
    total_descent: Optional[float] = None

    # Swim extras
    swim_intervals: Tuple[SwimInterval, ...] = ()
    estimated_css: Optional[float] = None
    swolf_score: Optional[float] = None

    # Filled when read back from storage
    breakthrough_candidates: Tuple[BreakthroughCandidate, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "workout_id": self.workout_id,
            "discipline": self.discipline,
            "hr_zones": self.hr_zones.to_dict() if self.hr_zones else None,
            "pace_zones": self.pace_zones.to_dict() if self.pace_zones else None,
            "power_zones": self.power_zones.to_dict() if self.power_zones else None,
            "training_stress_score": self.training_stress_score,
            "intensity_factor": self.intensity_factor,
            "normalized_power": self.normalized_power,
            "normalized_graded_pace": self.normalized_graded_pace,
            "variability_index": self.variability_index,
            "efficiency_factor": self.efficiency_factor,
            "aerobic_decoupling": self.aerobic_decoupling,
            "grade_adjusted_pace": self.grade_adjusted_pace,
            "trimp": self.trimp,
            "splits": [s.to_dict() for s in self.splits],
            "zone_compliance_score": self.zone_compliance_score,
            "zone_compliance_details": self.zone_compliance_details,
            "avg_cadence": self.avg_cadence,
            "cadence_variability": self.cadence_variability,
            "total_ascent": self.total_ascent,
            "total_descent": self.total_descent,
            "swim_intervals": [i.to_dict() for i in self.swim_intervals],
            "estimated_css": self.estimated_css,
            "swolf_score": self.swolf_score,
            "breakthrough_candidates": [c.to_dict() for c in self.breakthrough_candidates],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "WorkoutAnalytics":
        """Create from a dictionary produced by ``to_dict`` (candidates excluded)."""
        return cls(
            workout_id=data.get("workout_id"),
            discipline=data.get("discipline"),
            hr_zones=zone_distribution_from_storage(ZoneKind.HR, data.get("hr_zones")),
            pace_zones=zone_distribution_from_storage(ZoneKind.PACE, data.get("pace_zones")),
            power_zones=zone_distribution_from_storage(ZoneKind.POWER, data.get("power_zones")),
            training_stress_score=data.get("training_stress_score"),
            intensity_factor=data.get("intensity_factor"),
            normalized_power=data.get("normalized_power"),
            normalized_graded_pace=data.get("normalized_graded_pace"),
            variability_index=data.get("variability_index"),
            efficiency_factor=data.get("efficiency_factor"),
            aerobic_decoupling=data.get("aerobic_decoupling"),
            grade_adjusted_pace=data.get("grade_adjusted_pace"),
            trimp=data.get("trimp"),
            splits=tuple(SplitData(**s) for s in data.get("splits") or []),
            zone_compliance_score=data.get("zone_compliance_score"),
            zone_compliance_details=dict(data.get("zone_compliance_details") or {}),
            avg_cadence=data.get("avg_cadence"),
            cadence_variability=data.get("cadence_variability"),
            total_ascent=data.get("total_ascent"),
            total_descent=data.get("total_descent"),
            swim_intervals=tuple(SwimInterval(**i) for i in data.get("swim_intervals") or []),
            estimated_css=data.get("estimated_css"),
            swolf_score=data.get("swolf_score"),
        )
