"""
Longitudinal Trend Reports

Weekly training totals, efficiency-factor progression, power personal
records and recovery (HRV / resting HR) trends, computed from stored
analytics rows and daily recovery readings.
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from ..metrics.power import best_power_for_duration
from ..streams import StreamRecord, has_power_data


# Durations (seconds) checked for power personal records
PR_DURATIONS = (5 * 60, 20 * 60, 60 * 60)

HRV_TREND_THRESHOLD_PCT = 5.0
RESTING_HR_TREND_THRESHOLD_PCT = 3.0
RECENT_RECOVERY_READINGS = 7


@dataclass
class WeeklyStats:
    """Training totals for one Monday-to-Sunday week."""

    week_start: date
    total_tss: float = 0.0
    total_duration: float = 0.0  # minutes
    total_distance: float = 0.0  # meters
    workout_count: int = 0
    avg_efficiency_factor: Optional[float] = None
    avg_intensity_factor: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "week_start": self.week_start.isoformat(),
            "total_tss": round(self.total_tss, 2),
            "total_duration": round(self.total_duration, 1),
            "total_distance": round(self.total_distance, 1),
            "workout_count": self.workout_count,
            "avg_efficiency_factor": self.avg_efficiency_factor,
            "avg_intensity_factor": self.avg_intensity_factor,
        }


@dataclass
class PersonalRecord:
    """A best-effort power record."""

    type: str  # "best_20min_power", "best_1h_power", ...
    value: float
    date: date
    is_pr: bool
    previous_best: Optional[float]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "value": self.value,
            "date": self.date.isoformat(),
            "is_pr": self.is_pr,
            "previous_best": self.previous_best,
        }


@dataclass
class RecoveryTrend:
    """Recent vs baseline HRV and resting heart rate."""

    avg_hrv_7d: Optional[float] = None
    avg_hrv_30d: Optional[float] = None
    hrv_trend: str = "stable"  # improving | stable | declining
    avg_resting_hr_7d: Optional[float] = None
    avg_resting_hr_30d: Optional[float] = None
    resting_hr_trend: str = "stable"  # improving | stable | worsening

    def to_dict(self) -> Dict[str, Any]:
        return {
            "avg_hrv_7d": self.avg_hrv_7d,
            "avg_hrv_30d": self.avg_hrv_30d,
            "hrv_trend": self.hrv_trend,
            "avg_resting_hr_7d": self.avg_resting_hr_7d,
            "avg_resting_hr_30d": self.avg_resting_hr_30d,
            "resting_hr_trend": self.resting_hr_trend,
        }


def _parse_date(date_value: Any) -> Optional[date]:
    """Parse date from string or date object."""
    if date_value is None:
        return None
    if isinstance(date_value, datetime):
        return date_value.date()
    if isinstance(date_value, date):
        return date_value
    if isinstance(date_value, str):
        try:
            return datetime.strptime(date_value[:10], "%Y-%m-%d").date()
        except ValueError:
            return None
    return None


def week_start(day: date) -> date:
    """Monday of the ISO week containing ``day``."""
    return day - timedelta(days=day.weekday())


def _mean(values: Sequence[float]) -> Optional[float]:
    if not values:
        return None
    return round(sum(values) / len(values), 2)


# =============================================================================
# Weekly stats
# =============================================================================

def calculate_weekly_stats(rows: Iterable[Mapping[str, Any]]) -> List[WeeklyStats]:
    """
    Group analytics rows by week.

    Args:
        rows: Dicts with 'workout_date', 'moving_time' (seconds), 'distance'
            (meters), 'training_stress_score', 'efficiency_factor' and
            'intensity_factor', as returned by ``get_analytics_range``

    Returns:
        WeeklyStats sorted by week start
    """
    weeks: Dict[date, WeeklyStats] = {}
    ef_values: Dict[date, List[float]] = {}
    if_values: Dict[date, List[float]] = {}

    for row in rows:
        day = _parse_date(row.get("workout_date"))
        if day is None:
            continue
        monday = week_start(day)
        stats = weeks.setdefault(monday, WeeklyStats(week_start=monday))

        stats.total_tss += row.get("training_stress_score") or 0.0
        stats.total_duration += (row.get("moving_time") or 0.0) / 60
        stats.total_distance += row.get("distance") or 0.0
        stats.workout_count += 1

        if row.get("efficiency_factor"):
            ef_values.setdefault(monday, []).append(row["efficiency_factor"])
        if row.get("intensity_factor"):
            if_values.setdefault(monday, []).append(row["intensity_factor"])

    for monday, stats in weeks.items():
        stats.avg_efficiency_factor = _mean(ef_values.get(monday, []))
        stats.avg_intensity_factor = _mean(if_values.get(monday, []))

    return [weeks[monday] for monday in sorted(weeks)]


# =============================================================================
# Efficiency factor trend
# =============================================================================

def efficiency_factor_trend(
    rows: Iterable[Mapping[str, Any]],
    discipline: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """
    Dated efficiency-factor series, oldest first.

    A rising EF at comparable effort means the athlete is getting fitter.
    Rows without an EF are skipped.
    """
    series = []
    for row in rows:
        if discipline and row.get("discipline") != discipline:
            continue
        ef = row.get("efficiency_factor")
        day = _parse_date(row.get("workout_date"))
        if ef is None or day is None:
            continue
        series.append({"date": day, "ef": float(ef)})

    series.sort(key=lambda entry: entry["date"])
    return series


# =============================================================================
# Power personal records
# =============================================================================

def duration_label(seconds: int) -> str:
    """Human label for a best-effort duration: 30s, 20min, 1h."""
    if seconds >= 3600:
        return f"{round(seconds / 3600)}h"
    if seconds >= 60:
        return f"{round(seconds / 60)}min"
    return f"{seconds}s"


def best_efforts_from_stream(
    stream: Optional[StreamRecord],
    durations: Sequence[int] = PR_DURATIONS,
) -> List[Tuple[int, float]]:
    """Best average power for each duration the stream is long enough to cover."""
    if not has_power_data(stream):
        return []
    efforts = []
    for seconds in durations:
        best = best_power_for_duration(stream.power, stream.time, seconds)
        if best:
            efforts.append((seconds, best))
    return efforts


def detect_power_records(
    workout_date: date,
    best_efforts: Iterable[Tuple[int, float]],
    previous_best: Optional[float],
) -> List[PersonalRecord]:
    """
    Power PRs among a workout's best efforts.

    Each effort is compared to the athlete's best stored normalized power;
    with no history every effort counts as a record.

    Args:
        workout_date: Date of the workout
        best_efforts: (duration seconds, watts) pairs
        previous_best: Best normalized power seen before this workout

    Returns:
        Only the efforts that are records
    """
    records = []
    for seconds, power in best_efforts:
        is_pr = not previous_best or power > previous_best
        if is_pr:
            records.append(PersonalRecord(
                type=f"best_{duration_label(seconds)}_power",
                value=power,
                date=workout_date,
                is_pr=True,
                previous_best=previous_best,
            ))
    return records


# =============================================================================
# Recovery trend
# =============================================================================

def _change_pct(recent: Optional[float], baseline: Optional[float]) -> Optional[float]:
    if not recent or not baseline:
        return None
    return (recent - baseline) / baseline * 100


def analyze_recovery_trend(readings: Sequence[Mapping[str, Any]]) -> RecoveryTrend:
    """
    Compare the last seven recovery readings to the full 30-day window.

    HRV rising more than 5% is improving, falling more than 5% declining.
    Resting HR is better when lower: falling more than 3% is improving,
    rising more than 3% worsening.

    Args:
        readings: Dicts with 'date', 'hrv_ms' and 'resting_hr', newest first

    Returns:
        RecoveryTrend (stable with empty averages when there are no readings)
    """
    result = RecoveryTrend()
    if not readings:
        return result

    recent = readings[:RECENT_RECOVERY_READINGS]

    result.avg_hrv_7d = _mean([float(r["hrv_ms"]) for r in recent if r.get("hrv_ms") is not None])
    result.avg_hrv_30d = _mean([float(r["hrv_ms"]) for r in readings if r.get("hrv_ms") is not None])
    hrv_change = _change_pct(result.avg_hrv_7d, result.avg_hrv_30d)
    if hrv_change is not None:
        if hrv_change > HRV_TREND_THRESHOLD_PCT:
            result.hrv_trend = "improving"
        elif hrv_change < -HRV_TREND_THRESHOLD_PCT:
            result.hrv_trend = "declining"

    result.avg_resting_hr_7d = _mean(
        [float(r["resting_hr"]) for r in recent if r.get("resting_hr") is not None]
    )
    result.avg_resting_hr_30d = _mean(
        [float(r["resting_hr"]) for r in readings if r.get("resting_hr") is not None]
    )
    rhr_change = _change_pct(result.avg_resting_hr_7d, result.avg_resting_hr_30d)
    if rhr_change is not None:
        if rhr_change < -RESTING_HR_TREND_THRESHOLD_PCT:
            result.resting_hr_trend = "improving"
        elif rhr_change > RESTING_HR_TREND_THRESHOLD_PCT:
            result.resting_hr_trend = "worsening"

    return result
