"""Elevation gain/loss from a noisy altitude stream."""

from dataclasses import dataclass
from typing import List, Optional, Sequence


MIN_ALTITUDE_SAMPLES = 10
SMOOTHING_HALF_WINDOW = 2  # 5-point centered moving average
NOISE_THRESHOLD_M = 1.0


@dataclass(frozen=True)
class ElevationStats:
    ascent: float
    descent: float


def smooth_altitude(altitude: Sequence[float]) -> List[float]:
    """Centered 5-point moving average, window truncated at the edges."""
    n = len(altitude)
    smoothed = []
    for i in range(n):
        start = max(0, i - SMOOTHING_HALF_WINDOW)
        end = min(n - 1, i + SMOOTHING_HALF_WINDOW)
        window = altitude[start:end + 1]
        smoothed.append(sum(window) / len(window))
    return smoothed


def calculate_elevation(altitude: Sequence[float]) -> Optional[ElevationStats]:
    """
    Total ascent and descent in meters.

    Only smoothed deltas larger than 1 m count, which filters barometric
    and GPS jitter. Returns None with fewer than 10 samples.
    """
    if len(altitude) < MIN_ALTITUDE_SAMPLES:
        return None

    smoothed = smooth_altitude(altitude)
    ascent = 0.0
    descent = 0.0
    for prev, curr in zip(smoothed, smoothed[1:]):
        diff = curr - prev
        if diff > NOISE_THRESHOLD_M:
            ascent += diff
        elif diff < -NOISE_THRESHOLD_M:
            descent += -diff

    return ElevationStats(ascent=round(ascent, 2), descent=round(descent, 2))
