"""Zone breakthrough detection results and stored candidates."""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional


class BreakthroughType(str, Enum):
    """Which threshold a breakthrough concerns."""
    FTP = "ftp"
    LTHR = "lthr"
    RUN_THRESHOLD = "run_threshold"
    SWIM_CSS = "swim_css"


class Confidence(str, Enum):
    """
    Corroboration level of a breakthrough.

    - LOW: first detection in the lookback window, informational only
    - MEDIUM: two detections, zones are committed
    - HIGH: three or more detections, zones are committed
    """
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @classmethod
    def from_count(cls, confirming_workouts: int) -> "Confidence":
        if confirming_workouts >= 3:
            return cls.HIGH
        if confirming_workouts >= 2:
            return cls.MEDIUM
        return cls.LOW

    @property
    def commits(self) -> bool:
        return self is not Confidence.LOW


@dataclass(frozen=True)
class BreakthroughCandidate:
    """One detection of a possible new threshold, stored for corroboration."""

    user_id: str
    type: BreakthroughType
    detected_value: float
    detected_at: date
    workout_id: str
    id: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "type": self.type.value,
            "detected_value": self.detected_value,
            "detected_at": self.detected_at.isoformat(),
            "workout_id": self.workout_id,
        }


@dataclass(frozen=True)
class ZoneBreakthrough:
    """Outcome of one breakthrough check, relayed to the athlete."""

    type: BreakthroughType
    current_value: float
    detected_value: float
    change_percent: float
    confidence: Confidence
    confirming_workouts: int
    message: str
    auto_updated: bool

    def to_dict(self) -> dict:
        return {
            "type": self.type.value,
            "current_value": self.current_value,
            "detected_value": self.detected_value,
            "change_percent": self.change_percent,
            "confidence": self.confidence.value,
            "confirming_workouts": self.confirming_workouts,
            "message": self.message,
            "auto_updated": self.auto_updated,
        }
