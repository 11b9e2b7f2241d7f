"""Cadence statistics."""

import math
from dataclasses import dataclass
from typing import Optional, Sequence


MIN_CADENCE_SAMPLES = 10


@dataclass(frozen=True)
class CadenceStats:
    avg: float
    variability: float  # coefficient of variation, percent


def calculate_cadence_stats(cadence: Sequence[float]) -> Optional[CadenceStats]:
    """
    Mean cadence and coefficient of variation over positive samples.

    CV uses the population standard deviation: stddev / mean * 100.
    Returns None with fewer than 10 positive samples.
    """
    valid = [c for c in cadence if c > 0]
    if len(valid) < MIN_CADENCE_SAMPLES:
        return None

    avg = sum(valid) / len(valid)
    variance = sum((c - avg) ** 2 for c in valid) / len(valid)
    cv = math.sqrt(variance) / avg * 100

    return CadenceStats(avg=round(avg, 2), variability=round(cv, 2))
