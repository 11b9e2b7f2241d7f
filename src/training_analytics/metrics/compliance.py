"""Zone compliance scoring against a prescribed intensity."""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from .zones import ZoneDistribution


# Expected time-in-zone percentages per prescribed intensity, zones 1-5
EXPECTED_DISTRIBUTIONS: Dict[str, Tuple[float, float, float, float, float]] = {
    "easy": (20, 60, 15, 5, 0),
    "moderate": (5, 30, 45, 15, 5),
    "hard": (5, 15, 25, 35, 20),
    "max": (0, 10, 15, 30, 45),
}
DEFAULT_INTENSITY = "moderate"
NO_DATA_SCORE = 50.0


@dataclass(frozen=True)
class ComplianceResult:
    score: float
    details: Dict[str, Any] = field(default_factory=dict)


def calculate_zone_compliance(
    actual: Optional[ZoneDistribution],
    prescribed_intensity: str,
) -> ComplianceResult:
    """
    Score how closely a workout matched its prescribed intensity.

    The actual distribution is collapsed to five buckets and compared to
    the expected profile:
        score = clamp(100 - sum(|actual - expected|) / 2, 0, 100)

    The maximum total deviation is 200 points, so halving it maps onto a
    0-100 scale. Unknown intensity labels use the moderate profile.

    Returns:
        ComplianceResult with per-zone expected/actual/diff details
    """
    if actual is None:
        return ComplianceResult(score=NO_DATA_SCORE, details={"reason": "no zone data available"})

    expected = EXPECTED_DISTRIBUTIONS.get(
        (prescribed_intensity or "").lower(),
        EXPECTED_DISTRIBUTIONS[DEFAULT_INTENSITY],
    )
    buckets = actual.to_compliance_buckets()

    total_deviation = 0.0
    details: Dict[str, Any] = {}
    for zone_num, (exp, act) in enumerate(zip(expected, buckets), start=1):
        diff = abs(act - exp)
        total_deviation += diff
        details[f"z{zone_num}"] = {
            "expected": exp,
            "actual": round(act, 2),
            "diff": round(diff, 2),
        }

    score = max(0.0, min(100.0, round(100 - total_deviation / 2, 2)))
    return ComplianceResult(score=score, details=details)
