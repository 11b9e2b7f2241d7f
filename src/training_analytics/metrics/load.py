"""Heart-rate based load and efficiency metrics (TRIMP, EF, decoupling)."""

import math
from typing import Optional, Sequence

from .zones import MIN_MOVING_VELOCITY


TRIMP_K_MALE = 1.92
TRIMP_K_FEMALE = 1.67
TRIMP_WEIGHTING = 0.64

# Per-sample time deltas above this (in minutes) are recording gaps
MAX_TRIMP_SAMPLE_MINUTES = 0.5

MIN_HR_SAMPLES = 10
MIN_DECOUPLING_SAMPLES = 20
MIN_SAMPLES_PER_HALF = 10


def calculate_trimp(
    heartrate: Sequence[float],
    time: Sequence[float],
    max_hr: float,
    resting_hr: float = 50,
    gender: str = "male",
) -> Optional[float]:
    """
    Training Impulse using Banister's exponential formula, per sample.

    For every sample pair with a positive HR and a time delta in
    (0, 0.5] minutes:
        hrr = clamp((hr - rest) / (max - rest), 0, 1)
        trimp += dt_min * hrr * 0.64 * e^(k * hrr)

    Args:
        heartrate: HR samples in bpm
        time: Timestamps in seconds
        max_hr: Maximum heart rate
        resting_hr: Resting heart rate
        gender: 'male' (k=1.92) or 'female' (k=1.67)

    Returns:
        TRIMP, or None with fewer than 10 HR samples or no HR reserve
    """
    if len(heartrate) < MIN_HR_SAMPLES:
        return None

    hr_reserve = max_hr - resting_hr
    if hr_reserve <= 0:
        return None

    k = TRIMP_K_FEMALE if gender == "female" else TRIMP_K_MALE
    trimp = 0.0

    n = min(len(heartrate), len(time))
    for i in range(1, n):
        if heartrate[i] <= 0:
            continue
        dt_min = (time[i] - time[i - 1]) / 60
        if dt_min <= 0 or dt_min > MAX_TRIMP_SAMPLE_MINUTES:
            continue

        hrr = (heartrate[i] - resting_hr) / hr_reserve
        hrr = max(0.0, min(1.0, hrr))
        trimp += dt_min * hrr * TRIMP_WEIGHTING * math.exp(k * hrr)

    return round(trimp, 2)


def calculate_efficiency_factor(
    output: Optional[float],
    avg_hr: Optional[float],
) -> Optional[float]:
    """
    Efficiency Factor = output / average HR.

    Output is normalized power for cycling and NGP-derived speed
    (m per 100 s) for running. Rising EF at the same effort means
    improving aerobic fitness.
    """
    if not avg_hr or avg_hr <= 0 or not output or output <= 0:
        return None
    return round(output / avg_hr, 2)


def average_heart_rate(heartrate: Sequence[float]) -> Optional[float]:
    """Mean of positive HR samples."""
    positive = [hr for hr in heartrate if hr > 0]
    if not positive:
        return None
    return sum(positive) / len(positive)


def calculate_aerobic_decoupling(
    heartrate: Sequence[float],
    time: Sequence[float],
    velocity: Sequence[float] = (),
    watts: Sequence[float] = (),
    discipline: str = "run",
) -> Optional[float]:
    """
    Aerobic decoupling (Pa:HR or Pw:HR drift) in percent.

    Splits the workout at its time midpoint and compares the output/HR
    ratio of each half:
        decoupling = (first_ratio - second_ratio) / first_ratio * 100

    Output is power for bike (when the sample has positive watts), else
    velocity above 0.5 m/s. Positive values mean HR drifted upward
    relative to output.

    Returns:
        Decoupling percentage, or None with too few samples per half
    """
    if len(heartrate) < MIN_DECOUPLING_SAMPLES or not time:
        return None

    n = min(len(heartrate), len(time))
    midpoint = time[0] + (time[n - 1] - time[0]) / 2

    first_output = first_hr = 0.0
    second_output = second_hr = 0.0
    first_count = second_count = 0

    for i in range(n):
        hr = heartrate[i]
        if hr <= 0:
            continue

        output = 0.0
        if discipline == "bike" and i < len(watts) and watts[i] > 0:
            output = watts[i]
        elif i < len(velocity) and velocity[i] > MIN_MOVING_VELOCITY:
            output = velocity[i]
        if output <= 0:
            continue

        if time[i] < midpoint:
            first_output += output
            first_hr += hr
            first_count += 1
        else:
            second_output += output
            second_hr += hr
            second_count += 1

    if first_count < MIN_SAMPLES_PER_HALF or second_count < MIN_SAMPLES_PER_HALF:
        return None

    # Count cancels within each half: mean(output) / mean(hr)
    first_ratio = first_output / first_hr
    second_ratio = second_output / second_hr
    if first_ratio == 0:
        return None

    return round((first_ratio - second_ratio) / first_ratio * 100, 2)
