"""Activity summary and discipline types."""

from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Mapping, Optional

from ..exceptions import UnknownDisciplineError


class Discipline(str, Enum):
    """Workout disciplines the analyzer understands."""
    RUN = "run"
    BIKE = "bike"
    SWIM = "swim"
    BRICK = "brick"

    @classmethod
    def parse(cls, value: "str | Discipline") -> "Discipline":
        """Parse a discipline label, raising UnknownDisciplineError."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise UnknownDisciplineError(str(value)) from None


def _number(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    return float(value)


@dataclass(frozen=True)
class ActivitySummary:
    """
    Aggregate fields of a recorded activity.

    Used for summary-only analysis when no stream is available, and for
    the duration that scales TSS.
    """

    distance: float = 0.0  # meters
    moving_time: float = 0.0  # seconds
    elapsed_time: float = 0.0  # seconds
    average_heartrate: Optional[float] = None
    max_heartrate: Optional[float] = None
    total_elevation_gain: Optional[float] = None
    average_speed: Optional[float] = None  # m/s
    average_watts: Optional[float] = None
    weighted_average_watts: Optional[float] = None

    @property
    def pace_per_km(self) -> Optional[float]:
        """Average pace in sec/km from distance and moving time."""
        if self.distance <= 0 or self.moving_time <= 0:
            return None
        return self.moving_time / (self.distance / 1000)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "ActivitySummary":
        """Create from a loosely-typed activity record; unknown keys are ignored."""
        data = data or {}
        return cls(
            distance=_number(data.get("distance")) or 0.0,
            moving_time=_number(data.get("moving_time")) or 0.0,
            elapsed_time=_number(data.get("elapsed_time")) or 0.0,
            average_heartrate=_number(data.get("average_heartrate")),
            max_heartrate=_number(data.get("max_heartrate")),
            total_elevation_gain=_number(data.get("total_elevation_gain")),
            average_speed=_number(data.get("average_speed")),
            average_watts=_number(data.get("average_watts")),
            weighted_average_watts=_number(data.get("weighted_average_watts")),
        )
