"""Swimming metrics: interval segmentation, CSS estimate, swim TSS, SWOLF."""

from dataclasses import dataclass, asdict
from typing import List, Optional, Sequence

from ..streams import StreamRecord


MIN_SWIM_SAMPLES = 10
MOVING_VELOCITY = 0.3  # m/s; below this the swimmer is resting at the wall
MIN_INTERVAL_SECONDS = 20
MIN_CSS_INTERVAL_DISTANCE = 100
CSS_FASTEST_INTERVALS = 3
SWOLF_POOL_LENGTH_M = 25


@dataclass(frozen=True)
class SwimInterval:
    """A continuous swimming effort between rests."""

    interval_num: int
    distance: float  # meters
    pace: float  # sec/100m
    rest: float  # seconds of rest before the next interval

    def to_dict(self) -> dict:
        return asdict(self)


def calculate_pace_per_100m(distance_m: float, moving_time_s: float) -> Optional[float]:
    """Average pace per 100 m from summary fields."""
    if distance_m <= 0 or moving_time_s <= 0:
        return None
    return round(moving_time_s / distance_m * 100, 2)


def detect_swim_intervals(stream: StreamRecord) -> List[SwimInterval]:
    """
    Segment a swim into intervals separated by rest.

    A sample is moving when velocity exceeds 0.3 m/s. A moving run
    counts as an interval only when it lasts more than 20 seconds; a run
    still open at the end of the recording is closed at the last sample.

    Returns:
        Intervals in order; empty with fewer than 10 velocity samples
    """
    velocity = stream.velocity
    time = stream.time
    if len(velocity) < MIN_SWIM_SAMPLES:
        return []

    spans = []
    in_interval = False
    interval_start = 0

    for i, v in enumerate(velocity):
        moving = v > MOVING_VELOCITY
        if moving and not in_interval:
            in_interval = True
            interval_start = i
        elif not moving and in_interval:
            in_interval = False
            if time[i] - time[interval_start] > MIN_INTERVAL_SECONDS:
                spans.append((interval_start, i))

    if in_interval:
        last = len(velocity) - 1
        if time[last] - time[interval_start] > MIN_INTERVAL_SECONDS:
            spans.append((interval_start, last))

    distance = stream.distance
    intervals = []
    for n, (start, end) in enumerate(spans):
        swum = distance[end] - distance[start] if distance else 0.0
        elapsed = time[end] - time[start]
        pace = elapsed / swum * 100 if swum > 0 else 0.0

        rest = 0.0
        if n < len(spans) - 1:
            rest = time[spans[n + 1][0]] - time[end]

        intervals.append(SwimInterval(
            interval_num=n + 1,
            distance=round(swum, 2),
            pace=round(pace, 2),
            rest=round(rest, 2),
        ))

    return intervals


def estimate_css(intervals: Sequence[SwimInterval]) -> Optional[float]:
    """
    Estimate Critical Swim Speed (sec/100m) from interval paces.

    Averages the fastest (up to three) intervals of at least 100 m.
    Requires two intervals overall and two that qualify.
    """
    if len(intervals) < 2:
        return None

    qualifying = sorted(
        (i for i in intervals if i.distance >= MIN_CSS_INTERVAL_DISTANCE),
        key=lambda i: i.pace,
    )
    if len(qualifying) < 2:
        return None

    fastest = qualifying[:CSS_FASTEST_INTERVALS]
    return round(sum(i.pace for i in fastest) / len(fastest), 2)


def calculate_swim_tss(
    duration_seconds: float,
    pace_per_100m: Optional[float],
    css: Optional[float],
) -> Optional[float]:
    """
    Swim TSS based on pace relative to CSS.

    Formula:
        IF = CSS / pace_per_100m
        TSS = duration_s * IF^2 / 3600 * 100
    """
    if not pace_per_100m or not css or css <= 0:
        return None
    intensity_factor = css / pace_per_100m
    return round(duration_seconds * intensity_factor ** 2 / 3600 * 100, 2)


def calculate_swim_intensity_factor(
    pace_per_100m: Optional[float],
    css: Optional[float],
) -> Optional[float]:
    if not pace_per_100m or not css or css <= 0:
        return None
    return round(css / pace_per_100m, 2)


def estimate_swolf(
    cadence: Sequence[float],
    pace_per_100m: Optional[float],
) -> Optional[float]:
    """
    SWOLF estimate for a 25 m length.

    SWOLF = seconds per length + strokes per length, with strokes derived
    from the mean stroke rate (strokes/min) over the time per length.
    """
    if not pace_per_100m:
        return None
    strokes = [c for c in cadence if c > 0]
    if not strokes:
        return None

    stroke_rate = sum(strokes) / len(strokes)
    time_per_length = pace_per_100m / 100 * SWOLF_POOL_LENGTH_M
    strokes_per_length = stroke_rate / 60 * time_per_length
    return round(time_per_length + strokes_per_length, 2)
