"""Tests for weekly stats, EF trend, power records and recovery trend."""

from datetime import date, timedelta

import pytest

from conftest import ride_stream
from training_analytics.analysis.trends import (
    analyze_recovery_trend,
    best_efforts_from_stream,
    calculate_weekly_stats,
    detect_power_records,
    duration_label,
    efficiency_factor_trend,
    week_start,
)


class TestWeeklyStats:
    """Tests for grouping analytics by week."""

    def test_groups_by_monday(self):
        rows = [
            {"workout_date": "2026-03-01", "moving_time": 3600, "distance": 10000,
             "training_stress_score": 60, "efficiency_factor": 1.5, "intensity_factor": 0.8},
            {"workout_date": "2026-03-02", "moving_time": 1800, "distance": 5000,
             "training_stress_score": 40, "efficiency_factor": 1.7, "intensity_factor": 0.9},
            {"workout_date": "2026-03-04", "moving_time": 1800, "distance": 5000,
             "training_stress_score": 30, "efficiency_factor": None, "intensity_factor": 0.7},
        ]
        weeks = calculate_weekly_stats(rows)

        assert [w.week_start for w in weeks] == [date(2026, 2, 23), date(2026, 3, 2)]
        second = weeks[1]
        assert second.workout_count == 2
        assert second.total_tss == 70
        assert second.total_duration == 60
        assert second.total_distance == 10000
        assert second.avg_efficiency_factor == 1.7
        assert second.avg_intensity_factor == 0.8

    def test_missing_values(self):
        weeks = calculate_weekly_stats([{"workout_date": "2026-03-02"}])
        assert weeks[0].total_tss == 0
        assert weeks[0].avg_efficiency_factor is None

    def test_week_start(self):
        assert week_start(date(2026, 3, 8)) == date(2026, 3, 2)

    def test_to_dict(self):
        weeks = calculate_weekly_stats([{"workout_date": "2026-03-02", "training_stress_score": 10}])
        assert weeks[0].to_dict()["week_start"] == "2026-03-02"


class TestEfficiencyTrend:
    """Tests for the EF series."""

    def test_sorted_and_filtered(self):
        rows = [
            {"workout_date": "2026-03-05", "discipline": "run", "efficiency_factor": 1.6},
            {"workout_date": "2026-03-01", "discipline": "run", "efficiency_factor": 1.5},
            {"workout_date": "2026-03-03", "discipline": "bike", "efficiency_factor": 1.9},
            {"workout_date": "2026-03-04", "discipline": "run", "efficiency_factor": None},
        ]
        series = efficiency_factor_trend(rows, discipline="run")
        assert series == [
            {"date": date(2026, 3, 1), "ef": 1.5},
            {"date": date(2026, 3, 5), "ef": 1.6},
        ]


class TestPowerRecords:
    """Tests for best-effort power records."""

    def test_duration_labels(self):
        assert duration_label(300) == "5min"
        assert duration_label(3600) == "1h"
        assert duration_label(30) == "30s"

    def test_best_efforts(self):
        efforts = best_efforts_from_stream(ride_stream(seconds=1500, watts=300))
        assert efforts == [(300, 300.0), (1200, 300.0)]

    def test_no_power(self):
        assert best_efforts_from_stream(None) == []

    def test_first_ride_is_a_record(self):
        records = detect_power_records(date(2026, 3, 2), [(1200, 280.0)], None)
        assert len(records) == 1
        assert records[0].type == "best_20min_power"
        assert records[0].is_pr

    def test_only_improvements(self):
        records = detect_power_records(date(2026, 3, 2), [(300, 320.0), (1200, 260.0)], 280.0)
        assert [r.type for r in records] == ["best_5min_power"]
        assert records[0].previous_best == 280.0


class TestRecoveryTrend:
    """Tests for HRV and resting HR trends."""

    def _readings(self, recent_hrv, older_hrv, recent_rhr, older_rhr):
        today = date(2026, 3, 30)
        readings = []
        for i in range(30):
            recent = i < 7
            readings.append({
                "date": (today - timedelta(days=i)).isoformat(),
                "hrv_ms": recent_hrv if recent else older_hrv,
                "resting_hr": recent_rhr if recent else older_rhr,
            })
        return readings

    def test_improving(self):
        trend = analyze_recovery_trend(self._readings(70, 60, 45, 50))
        assert trend.avg_hrv_7d == 70
        assert trend.avg_hrv_30d == pytest.approx(62.33, abs=0.01)
        assert trend.hrv_trend == "improving"
        assert trend.resting_hr_trend == "improving"

    def test_worsening(self):
        trend = analyze_recovery_trend(self._readings(50, 60, 56, 50))
        assert trend.hrv_trend == "declining"
        assert trend.resting_hr_trend == "worsening"

    def test_stable(self):
        trend = analyze_recovery_trend(self._readings(60, 60, 50, 50))
        assert trend.hrv_trend == "stable"
        assert trend.resting_hr_trend == "stable"

    def test_no_readings(self):
        trend = analyze_recovery_trend([])
        assert trend.avg_hrv_7d is None
        assert trend.hrv_trend == "stable"

    def test_missing_hrv(self):
        readings = [{"date": "2026-03-01", "hrv_ms": None, "resting_hr": 50}]
        trend = analyze_recovery_trend(readings)
        assert trend.avg_hrv_7d is None
        assert trend.avg_resting_hr_7d == 50
