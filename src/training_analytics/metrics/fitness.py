"""Fitness-Fatigue model calculations (ATL, CTL, TSB) and trend classification."""

import math
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, List, Optional, Sequence, Tuple


ATL_TIME_CONSTANT = 7
CTL_TIME_CONSTANT = 42

CTL_TREND_THRESHOLD = 2.0
ATL_TREND_THRESHOLD = 3.0
VOLUME_TREND_THRESHOLD_PCT = 10.0
MIN_TREND_HISTORY = 7


@dataclass(frozen=True)
class TrainingLoadSnapshot:
    """Load state for one user on one calendar day."""

    date: date
    daily_tss: float  # cumulative TSS for the day
    atl: float  # Acute Training Load (fatigue) - 7 day EWMA
    ctl: float  # Chronic Training Load (fitness) - 42 day EWMA
    tsb: float  # Training Stress Balance (form) = CTL - ATL

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "date": self.date.isoformat(),
            "daily_tss": self.daily_tss,
            "atl": self.atl,
            "ctl": self.ctl,
            "tsb": self.tsb,
        }


@dataclass(frozen=True)
class FitnessTrend:
    """Week-over-week classification of the load chain."""

    ctl_trend: str = "stable"  # increasing | stable | decreasing
    atl_trend: str = "stable"
    form: str = "neutral"  # fresh | neutral | fatigued | very_fatigued
    tsb_value: float = 0.0
    ctl_value: float = 0.0
    atl_value: float = 0.0
    weekly_volume_trend: str = "stable"

    def to_dict(self) -> dict:
        return {
            "ctl_trend": self.ctl_trend,
            "atl_trend": self.atl_trend,
            "form": self.form,
            "tsb_value": self.tsb_value,
            "ctl_value": self.ctl_value,
            "atl_value": self.atl_value,
            "weekly_volume_trend": self.weekly_volume_trend,
        }


def calculate_ewma(
    current_value: float,
    previous_ewma: float,
    time_constant: int,
) -> float:
    """
    Exponentially Weighted Moving Average.

    Uses the formula: EWMA_n = EWMA_{n-1} * decay + value * (1 - decay)
    where decay = e^(-1/time_constant)

    Args:
        current_value: Today's training load
        previous_ewma: Yesterday's EWMA value
        time_constant: Time constant in days (42 for CTL, 7 for ATL)

    Returns:
        New EWMA value
    """
    decay = math.exp(-1 / time_constant)
    return previous_ewma * decay + current_value * (1 - decay)


def compute_load_snapshot(
    day: date,
    previous_atl: float,
    previous_ctl: float,
    daily_tss: float,
) -> TrainingLoadSnapshot:
    """
    Derive a day's snapshot from the prior day's loads and the day's TSS.

    ``daily_tss`` must be the cumulative TSS for the day. Applying the
    recurrence once per workout on the same day would discount the prior
    baseline twice.
    """
    atl = round(calculate_ewma(daily_tss, previous_atl, ATL_TIME_CONSTANT), 2)
    ctl = round(calculate_ewma(daily_tss, previous_ctl, CTL_TIME_CONSTANT), 2)
    return TrainingLoadSnapshot(
        date=day,
        daily_tss=round(daily_tss, 2),
        atl=atl,
        ctl=ctl,
        tsb=round(ctl - atl, 2),
    )


def replay_load_chain(
    daily_loads: Iterable[Tuple[date, float]],
    initial_atl: float = 0.0,
    initial_ctl: float = 0.0,
    fill_gaps: bool = True,
) -> List[TrainingLoadSnapshot]:
    """
    Rebuild the daily load chain from (date, tss) pairs.

    Days are processed in chronological order; several entries on the
    same date are summed first. Missing days between entries are filled
    with zero-TSS snapshots so every day's loads derive from the day
    before.

    Args:
        daily_loads: (date, TSS) pairs, any order
        initial_atl: ATL on the day before the first entry
        initial_ctl: CTL on the day before the first entry
        fill_gaps: Emit zero-TSS snapshots for days without entries

    Returns:
        Snapshots in chronological order
    """
    totals: dict = {}
    for day, tss in daily_loads:
        totals[day] = totals.get(day, 0.0) + (tss or 0.0)
    if not totals:
        return []

    results: List[TrainingLoadSnapshot] = []
    atl, ctl = initial_atl, initial_ctl
    prev_day: Optional[date] = None

    for day in sorted(totals):
        if prev_day is not None and fill_gaps:
            gap_day = prev_day + timedelta(days=1)
            while gap_day < day:
                snapshot = compute_load_snapshot(gap_day, atl, ctl, 0.0)
                results.append(snapshot)
                atl, ctl = snapshot.atl, snapshot.ctl
                gap_day += timedelta(days=1)

        snapshot = compute_load_snapshot(day, atl, ctl, totals[day])
        results.append(snapshot)
        atl, ctl = snapshot.atl, snapshot.ctl
        prev_day = day

    return results


def _trend(change: float, threshold: float) -> str:
    if change > threshold:
        return "increasing"
    if change < -threshold:
        return "decreasing"
    return "stable"


def classify_form(tsb: float) -> str:
    """
    Bucket Training Stress Balance into a form label.

    - > 15: fresh
    - > -10: neutral
    - > -30: fatigued
    - otherwise: very_fatigued
    """
    if tsb > 15:
        return "fresh"
    elif tsb > -10:
        return "neutral"
    elif tsb > -30:
        return "fatigued"
    else:
        return "very_fatigued"


def weekly_volume_change_pct(history: Sequence[TrainingLoadSnapshot]) -> float:
    """TSS of the trailing 7 entries vs the 7 before, in percent (0 without a baseline)."""
    recent = sum(s.daily_tss for s in history[-7:])
    prior = sum(s.daily_tss for s in history[-14:-7])
    if prior <= 0:
        return 0.0
    return (recent - prior) / prior * 100


def analyze_fitness_trend(history: Sequence[TrainingLoadSnapshot]) -> FitnessTrend:
    """
    Classify fitness, fatigue, form and volume trends.

    Compares the latest snapshot to the one seven entries earlier (or the
    first, when history is shorter than eight entries). Returns the neutral
    default with fewer than seven entries.

    Args:
        history: Snapshots in chronological order

    Returns:
        FitnessTrend
    """
    if len(history) < MIN_TREND_HISTORY:
        return FitnessTrend()

    latest = history[-1]
    week_ago = history[-8] if len(history) >= 8 else history[0]

    return FitnessTrend(
        ctl_trend=_trend(latest.ctl - week_ago.ctl, CTL_TREND_THRESHOLD),
        atl_trend=_trend(latest.atl - week_ago.atl, ATL_TREND_THRESHOLD),
        form=classify_form(latest.tsb),
        tsb_value=latest.tsb,
        ctl_value=latest.ctl,
        atl_value=latest.atl,
        weekly_volume_trend=_trend(
            weekly_volume_change_pct(history), VOLUME_TREND_THRESHOLD_PCT
        ),
    )
