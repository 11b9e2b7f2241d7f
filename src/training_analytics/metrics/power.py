"""Cycling power metrics calculations (NP, IF, TSS, VI, best efforts)."""

from typing import Dict, Optional, Sequence, Tuple


NP_WINDOW_SAMPLES = 30
FTP_FROM_20MIN_FACTOR = 0.95

# Plan power-zone table: (min, max) fraction of FTP per zone
PLAN_POWER_ZONE_RATIOS: Dict[str, Tuple[float, float]] = {
    "z1": (0.0, 0.55),
    "z2": (0.56, 0.75),
    "z3": (0.76, 0.90),
    "z4": (0.91, 1.05),
    "z5": (1.06, 1.20),
}


def calculate_normalized_power(watts: Sequence[float]) -> Optional[float]:
    """
    Calculate Normalized Power (NP).

    Steps:
    1. 30-sample rolling average of power
    2. Raise each rolling value to the 4th power
    3. Mean of those values
    4. 4th root of the mean

    The quartic mean weights surges more heavily than steady output, so
    NP >= average power for any variable effort and NP == average power
    for a constant one.

    Args:
        watts: Power samples in watts (1 Hz)

    Returns:
        Normalized power in watts, or None with fewer than 30 samples
    """
    if len(watts) < NP_WINDOW_SAMPLES:
        return None

    window_sum = 0.0
    sum_4th = 0.0
    count = 0
    for i, w in enumerate(watts):
        window_sum += w
        if i >= NP_WINDOW_SAMPLES:
            window_sum -= watts[i - NP_WINDOW_SAMPLES]
        if i >= NP_WINDOW_SAMPLES - 1:
            rolling = window_sum / NP_WINDOW_SAMPLES
            sum_4th += rolling ** 4
            count += 1

    if count == 0:
        return None

    return round((sum_4th / count) ** 0.25, 2)


def calculate_average_power(watts: Sequence[float]) -> Optional[float]:
    """Mean of positive power samples (coasting excluded)."""
    positive = [w for w in watts if w > 0]
    if not positive:
        return None
    return sum(positive) / len(positive)


def calculate_variability_index(
    normalized_power: Optional[float],
    average_power: Optional[float],
) -> Optional[float]:
    """
    Variability Index = NP / average power.

    Near 1.0 for steady efforts, higher for surge-heavy riding.
    """
    if not normalized_power or not average_power or average_power <= 0:
        return None
    return round(normalized_power / average_power, 2)


def calculate_power_intensity_factor(
    normalized_power: Optional[float],
    ftp: float,
) -> Optional[float]:
    """Intensity Factor = NP / FTP."""
    if not normalized_power or ftp <= 0:
        return None
    return round(normalized_power / ftp, 2)


def calculate_cycling_tss(
    duration_seconds: float,
    normalized_power: Optional[float],
    ftp: float,
) -> Optional[float]:
    """
    Calculate cycling Training Stress Score.

    Formula: TSS = (duration_s * NP * IF) / (FTP * 3600) * 100
    where IF = NP / FTP. One hour at FTP scores 100.

    Args:
        duration_seconds: Moving time
        normalized_power: NP in watts
        ftp: Functional threshold power in watts

    Returns:
        TSS, or None when NP or FTP is not positive
    """
    if ftp <= 0 or not normalized_power or normalized_power <= 0:
        return None

    intensity_factor = normalized_power / ftp
    tss = (duration_seconds * normalized_power * intensity_factor) / (ftp * 3600) * 100
    return round(tss, 2)


def best_power_for_duration(
    watts: Sequence[float],
    time: Sequence[float],
    duration_seconds: float,
) -> Optional[float]:
    """
    Best average power over any window spanning ``duration_seconds``.

    The window starting at sample ``i`` ends at the first sample at least
    ``duration_seconds`` later (exclusive). Windows that would run past the
    end of the stream are not considered. Only positive samples contribute
    to each window's average.

    Args:
        watts: Power samples in watts
        time: Sample timestamps in seconds
        duration_seconds: Window length

    Returns:
        Best window average in watts, or None
    """
    n = min(len(watts), len(time))
    if n < duration_seconds:
        return None

    best_avg = 0.0
    end = 0
    window_sum = 0.0
    window_count = 0

    for start in range(n):
        if end < start:
            end = start
            window_sum = 0.0
            window_count = 0
        while end < n and time[end] - time[start] < duration_seconds:
            if watts[end] > 0:
                window_sum += watts[end]
                window_count += 1
            end += 1
        if end >= n:
            break

        if window_count > 0:
            best_avg = max(best_avg, window_sum / window_count)

        # Slide: drop the start sample before moving on
        if watts[start] > 0:
            window_sum -= watts[start]
            window_count -= 1

    return round(best_avg, 2) if best_avg > 0 else None


def estimate_ftp_from_best_20min(
    watts: Sequence[float],
    time: Sequence[float],
) -> Optional[int]:
    """FTP estimate: best 20-minute power x 0.95, rounded to whole watts."""
    best_20min = best_power_for_duration(watts, time, 20 * 60)
    if not best_20min:
        return None
    return round(best_20min * FTP_FROM_20MIN_FACTOR)


def calculate_plan_power_zones(ftp: float) -> Dict[str, Tuple[int, int]]:
    """Plan power-zone ranges in watts for a given FTP."""
    return {
        zone: (round(ftp * low), round(ftp * high))
        for zone, (low, high) in PLAN_POWER_ZONE_RATIOS.items()
    }
