"""Running pace metrics: grade-adjusted pace, rTSS, splits, threshold estimates."""

from dataclasses import dataclass, asdict
from typing import Dict, List, Optional, Sequence, Tuple

from .zones import MAX_SAMPLE_GAP_SECONDS, MIN_MOVING_VELOCITY


MIN_GAP_SAMPLES = 10
MIN_GAP_DISTANCE_M = 100

# Minetti-style metabolic cost per unit grade, floored to avoid blowups
# on steep descents
GRADE_COST_COEFFICIENT = 3.5
MIN_COST_FACTOR = 0.3

THRESHOLD_TO_EASY_RATIO = 0.82

# Race distance (km, inclusive upper bound) -> threshold pace multiplier
RACE_DISTANCE_THRESHOLD_FACTORS: Tuple[Tuple[float, float], ...] = (
    (6.0, 1.0),     # ~5K race pace is threshold pace
    (12.0, 0.97),   # 10K
    (25.0, 0.93),   # half marathon
)
LONG_RACE_THRESHOLD_FACTOR = 0.88

# Plan pace-zone table: (min, max) fraction of easy pace in sec/km
PLAN_PACE_ZONE_RATIOS: Dict[str, Tuple[float, float]] = {
    "easy": (1.0, 1.15),
    "moderate": (0.9, 1.0),
    "tempo": (0.82, 0.88),
    "threshold": (0.78, 0.82),
    "interval": (0.72, 0.78),
    "longRun": (1.0, 1.1),
}


@dataclass(frozen=True)
class SplitData:
    """One kilometer split."""

    km: int
    pace: float  # sec/km
    hr: Optional[int] = None
    elevation: Optional[float] = None  # net change in meters
    cadence: Optional[float] = None

    def to_dict(self) -> dict:
        return asdict(self)


def format_pace(seconds: float, unit: str = "/km") -> str:
    """Format seconds as m:ss with a unit suffix."""
    minutes = int(seconds // 60)
    secs = round(seconds % 60)
    if secs == 60:
        minutes += 1
        secs = 0
    return f"{minutes}:{secs:02d}{unit}"


def calculate_grade_adjusted_pace(
    velocity: Sequence[float],
    altitude: Sequence[float],
    distance: Sequence[float],
    time: Sequence[float],
) -> Optional[float]:
    """
    Calculate grade-adjusted pace (GAP) in sec/km.

    For each moving sample pair with a sane time delta and positive
    distance delta:
        grade = d_altitude / d_distance
        cost = max(0.3, 1 + 3.5 * grade)
        adjusted_time = d_distance / (velocity / cost)

    Args:
        velocity: Speed samples in m/s
        altitude: Altitude samples in meters
        distance: Cumulative distance in meters
        time: Timestamps in seconds

    Returns:
        GAP in sec/km, or None with fewer than 10 samples or under 100 m
    """
    if len(velocity) < MIN_GAP_SAMPLES or len(altitude) < MIN_GAP_SAMPLES:
        return None

    n = min(len(velocity), len(altitude), len(distance), len(time))
    total_gap_time = 0.0
    total_distance = 0.0

    for i in range(1, n):
        if velocity[i] <= MIN_MOVING_VELOCITY:
            continue
        dt = time[i] - time[i - 1]
        if dt <= 0 or dt > MAX_SAMPLE_GAP_SECONDS:
            continue
        d_dist = distance[i] - distance[i - 1]
        if d_dist <= 0:
            continue

        grade = (altitude[i] - altitude[i - 1]) / d_dist
        cost_factor = max(MIN_COST_FACTOR, 1 + GRADE_COST_COEFFICIENT * grade)
        adjusted_speed = velocity[i] / cost_factor
        total_gap_time += d_dist / adjusted_speed
        total_distance += d_dist

    if total_distance < MIN_GAP_DISTANCE_M:
        return None

    return round(total_gap_time / total_distance * 1000, 2)


def calculate_pace_intensity_factor(
    normalized_graded_pace: Optional[float],
    threshold_pace: float,
) -> Optional[float]:
    """Running IF = threshold pace / NGP; a faster pace gives a higher IF."""
    if not normalized_graded_pace or threshold_pace <= 0:
        return None
    return round(threshold_pace / normalized_graded_pace, 2)


def calculate_running_tss(
    duration_seconds: float,
    normalized_graded_pace: Optional[float],
    threshold_pace: float,
) -> Optional[float]:
    """
    Calculate running Training Stress Score (rTSS).

    Formula: rTSS = duration_s * IF^2 / (threshold_pace * 3600) * 100

    Args:
        duration_seconds: Moving time
        normalized_graded_pace: NGP in sec/km
        threshold_pace: Threshold pace in sec/km

    Returns:
        rTSS (never negative), or None without NGP or threshold
    """
    if not normalized_graded_pace or threshold_pace <= 0:
        return None

    intensity_factor = threshold_pace / normalized_graded_pace
    tss = (duration_seconds * intensity_factor ** 2) / (threshold_pace * 3600) * 100
    return round(max(0.0, tss), 2)


def _mean_positive(values: Sequence[float], start: int, end: int) -> Optional[float]:
    window = [v for v in values[start:end + 1] if v > 0]
    if not window:
        return None
    return sum(window) / len(window)


def calculate_splits(
    distance: Sequence[float],
    time: Sequence[float],
    heartrate: Sequence[float] = (),
    altitude: Sequence[float] = (),
    cadence: Sequence[float] = (),
) -> List[SplitData]:
    """
    Per-kilometer splits.

    A split closes at the first sample whose cumulative distance reaches
    the next whole kilometer. HR and cadence are averaged over positive
    samples in the split window (both ends inclusive).

    Returns:
        List of SplitData; empty with fewer than 10 distance samples
    """
    if len(distance) < 10:
        return []

    splits: List[SplitData] = []
    current_km = 1
    start = 0
    n = min(len(distance), len(time))

    for i in range(1, n):
        if distance[i] / 1000 < current_km:
            continue

        split_time = time[i] - time[start]
        split_dist = distance[i] - distance[start]
        pace = split_time / split_dist * 1000 if split_dist > 0 else 0.0

        avg_hr = _mean_positive(heartrate, start, i)
        avg_cadence = _mean_positive(cadence, start, i)
        elevation = round(altitude[i] - altitude[start], 2) if len(altitude) > i else None

        splits.append(SplitData(
            km=current_km,
            pace=round(pace, 2),
            hr=round(avg_hr) if avg_hr is not None else None,
            elevation=elevation,
            cadence=round(avg_cadence, 1) if avg_cadence is not None else None,
        ))

        current_km += 1
        start = i

    return splits


def estimate_threshold_pace(distance_m: float, moving_time_s: float) -> Optional[float]:
    """
    Estimate threshold pace (sec/km) from a hard effort's average pace.

    Longer efforts run slower than threshold, so their pace is scaled down:
    up to 6 km x1.0, up to 12 km x0.97, up to 25 km x0.93, beyond x0.88.
    """
    if distance_m <= 0 or moving_time_s <= 0:
        return None

    avg_pace = moving_time_s / (distance_m / 1000)
    distance_km = distance_m / 1000
    for max_km, factor in RACE_DISTANCE_THRESHOLD_FACTORS:
        if distance_km <= max_km:
            return avg_pace * factor
    return avg_pace * LONG_RACE_THRESHOLD_FACTOR


def easy_pace_from_threshold(threshold_pace: float) -> int:
    return round(threshold_pace / THRESHOLD_TO_EASY_RATIO)


def threshold_pace_from_easy(easy_pace: float) -> int:
    return round(easy_pace * THRESHOLD_TO_EASY_RATIO)


def calculate_plan_pace_zones(easy_pace: float) -> Dict[str, Tuple[int, int]]:
    """Plan pace-zone ranges in sec/km for a given easy pace."""
    return {
        zone: (round(easy_pace * low), round(easy_pace * high))
        for zone, (low, high) in PLAN_PACE_ZONE_RATIOS.items()
    }
