"""Zone classification and zone-time distributions (HR, power, pace).

Boundaries are derived from a single threshold value and a fixed ratio
table, rounded to the nearest integer:

- HR (5 zones) relative to max HR: 60/70/80/90%
- Power (6 zones) relative to FTP: 55/75/90/105/120%
- Pace (5 zones) relative to easy pace, inverted: 115/100/88/82%

Pace is inverted because a slower pace has more seconds per km, so the
lowest-intensity zone sits above the highest boundary.
"""

import math
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Type


# Samples further apart than this are treated as a recording gap
MAX_SAMPLE_GAP_SECONDS = 30

# Below this speed the athlete is standing still and pace is meaningless
MIN_MOVING_VELOCITY = 0.5

HR_ZONE_RATIOS = (0.60, 0.70, 0.80, 0.90)
POWER_ZONE_RATIOS = (0.55, 0.75, 0.90, 1.05, 1.20)
PACE_ZONE_RATIOS = (1.15, 1.00, 0.88, 0.82)


class HrZone(IntEnum):
    """Heart rate zones relative to max HR."""
    Z1 = 1
    Z2 = 2
    Z3 = 3
    Z4 = 4
    Z5 = 5

    @property
    def key(self) -> str:
        return f"z{self.value}"


class PowerZone(IntEnum):
    """Power zones relative to FTP (zone 6 is anaerobic, above 120%)."""
    Z1 = 1
    Z2 = 2
    Z3 = 3
    Z4 = 4
    Z5 = 5
    Z6 = 6

    @property
    def key(self) -> str:
        return f"z{self.value}"


class PaceZone(IntEnum):
    """Running pace zones relative to easy pace."""
    RECOVERY = 1
    EASY = 2
    TEMPO = 3
    THRESHOLD = 4
    INTERVAL = 5

    @property
    def key(self) -> str:
        return f"z{self.value}_{self.name.lower()}"


class ZoneKind(str, Enum):
    """Which physiological channel a distribution was computed from."""
    HR = "hr"
    POWER = "power"
    PACE = "pace"

    @property
    def zone_type(self) -> Type[IntEnum]:
        return {
            ZoneKind.HR: HrZone,
            ZoneKind.POWER: PowerZone,
            ZoneKind.PACE: PaceZone,
        }[self]


@dataclass(frozen=True)
class ZoneDistribution:
    """
    Percentage of valid time spent in each zone of one discipline.

    ``percentages`` is indexed by zone number minus one.
    """

    kind: ZoneKind
    percentages: Tuple[float, ...]

    def __getitem__(self, zone: int) -> float:
        return self.percentages[int(zone) - 1]

    @property
    def zones(self) -> List[IntEnum]:
        return list(self.kind.zone_type)

    @property
    def total(self) -> float:
        return round(sum(self.percentages), 2)

    def to_dict(self) -> Dict[str, float]:
        """Convert to dictionary keyed by zone label."""
        return {zone.key: pct for zone, pct in zip(self.zones, self.percentages)}

    def to_compliance_buckets(self) -> Tuple[float, float, float, float, float]:
        """
        Collapse into the five generic intensity buckets used for compliance.

        HR and pace map one-to-one. Power zone 6 is added to bucket 5.
        """
        buckets = list(self.percentages[:5])
        if len(self.percentages) > 5:
            buckets[4] += sum(self.percentages[5:])
        return tuple(round(b, 2) for b in buckets)  # type: ignore[return-value]

    @classmethod
    def empty(cls, kind: ZoneKind) -> "ZoneDistribution":
        return cls(kind=kind, percentages=tuple(0.0 for _ in kind.zone_type))

    @classmethod
    def from_dict(cls, kind: ZoneKind, data: Mapping[str, float]) -> "ZoneDistribution":
        """Create from a dictionary produced by ``to_dict``."""
        return cls(
            kind=kind,
            percentages=tuple(float(data.get(zone.key, 0.0)) for zone in kind.zone_type),
        )


# ============================================================================
# Boundaries
# ============================================================================

def _boundaries(threshold: float, ratios: Sequence[float]) -> List[int]:
    return [round(threshold * ratio) for ratio in ratios]


def get_hr_zone_boundaries(max_hr: float) -> List[int]:
    """Upper bounds (exclusive) of HR zones 1-4; zone 5 is above the last."""
    return _boundaries(max_hr, HR_ZONE_RATIOS)


def get_power_zone_boundaries(ftp: float) -> List[int]:
    """Upper bounds (exclusive) of power zones 1-5; zone 6 is above the last."""
    return _boundaries(ftp, POWER_ZONE_RATIOS)


def get_pace_zone_boundaries(easy_pace: float) -> List[int]:
    """Fast ends of pace zones 1-4 in sec/km, descending."""
    return _boundaries(easy_pace, PACE_ZONE_RATIOS)


# ============================================================================
# Classification
# ============================================================================

def classify_hr_zone(hr: float, boundaries: Sequence[float]) -> HrZone:
    for i, bound in enumerate(boundaries):
        if hr < bound:
            return HrZone(i + 1)
    return HrZone.Z5


def classify_power_zone(watts: float, boundaries: Sequence[float]) -> PowerZone:
    for i, bound in enumerate(boundaries):
        if watts < bound:
            return PowerZone(i + 1)
    return PowerZone.Z6


def classify_pace_zone(pace_sec_per_km: float, boundaries: Sequence[float]) -> PaceZone:
    # Slower pace (more seconds) means a lower zone
    for i, bound in enumerate(boundaries):
        if pace_sec_per_km > bound:
            return PaceZone(i + 1)
    return PaceZone.INTERVAL


# ============================================================================
# Distributions
# ============================================================================

def _rounded_percentages(zone_times: Sequence[float], total_time: float) -> Tuple[float, ...]:
    """
    Percentages to two decimals that still sum to exactly 100.

    Largest-remainder rounding on hundredths of a percent: every share is
    floored, then the leftover hundredths go to the largest remainders
    (earlier zones first on ties).
    """
    raw = [t / total_time * 10000 for t in zone_times]
    units = [math.floor(r) for r in raw]
    leftover = 10000 - sum(units)
    by_remainder = sorted(range(len(raw)), key=lambda i: raw[i] - units[i], reverse=True)
    for i in by_remainder[:leftover]:
        units[i] += 1
    return tuple(u / 100 for u in units)


def _zone_time_distribution(
    kind: ZoneKind,
    values: Sequence[float],
    time: Sequence[float],
    is_valid: Callable[[float], bool],
    classify: Callable[[float], IntEnum],
) -> ZoneDistribution:
    zone_count = len(kind.zone_type)
    zone_times = [0.0] * zone_count
    total_time = 0.0

    n = min(len(values), len(time))
    for i in range(1, n):
        value = values[i]
        if not is_valid(value):
            continue
        dt = time[i] - time[i - 1]
        if dt <= 0 or dt > MAX_SAMPLE_GAP_SECONDS:
            continue
        zone = classify(value)
        zone_times[int(zone) - 1] += dt
        total_time += dt

    if total_time == 0:
        return ZoneDistribution.empty(kind)

    return ZoneDistribution(
        kind=kind,
        percentages=_rounded_percentages(zone_times, total_time),
    )


def calculate_hr_zone_distribution(
    heartrate: Sequence[float],
    time: Sequence[float],
    max_hr: float,
) -> ZoneDistribution:
    """
    Time-in-zone percentages from a heart rate stream.

    Args:
        heartrate: HR samples in bpm
        time: Sample timestamps in seconds
        max_hr: Athlete max heart rate

    Returns:
        ZoneDistribution over HrZone; all zeros when no valid time
    """
    boundaries = get_hr_zone_boundaries(max_hr)
    return _zone_time_distribution(
        ZoneKind.HR,
        heartrate,
        time,
        is_valid=lambda hr: hr > 0,
        classify=lambda hr: classify_hr_zone(hr, boundaries),
    )


def calculate_power_zone_distribution(
    watts: Sequence[float],
    time: Sequence[float],
    ftp: float,
) -> ZoneDistribution:
    """
    Time-in-zone percentages from a power stream.

    Zero watts (coasting) is valid and counts toward zone 1.
    """
    boundaries = get_power_zone_boundaries(ftp)
    return _zone_time_distribution(
        ZoneKind.POWER,
        watts,
        time,
        is_valid=lambda w: w >= 0,
        classify=lambda w: classify_power_zone(w, boundaries),
    )


def calculate_pace_zone_distribution(
    velocity: Sequence[float],
    time: Sequence[float],
    easy_pace: float,
) -> ZoneDistribution:
    """
    Time-in-zone percentages from a velocity stream.

    Velocity is converted to pace (sec/km) per sample; samples at or below
    0.5 m/s are treated as standing still.
    """
    boundaries = get_pace_zone_boundaries(easy_pace)
    return _zone_time_distribution(
        ZoneKind.PACE,
        velocity,
        time,
        is_valid=lambda v: v > MIN_MOVING_VELOCITY,
        classify=lambda v: classify_pace_zone(1000 / v, boundaries),
    )


def zone_distribution_from_storage(
    kind: ZoneKind,
    data: Optional[Mapping[str, float]],
) -> Optional[ZoneDistribution]:
    """Rebuild a stored distribution, passing through missing values."""
    if data is None:
        return None
    return ZoneDistribution.from_dict(kind, data)
