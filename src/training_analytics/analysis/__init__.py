"""
Analysis module for longitudinal training reports.

Provides weekly summaries, efficiency-factor trends, power personal
records and recovery trends.
"""

from .trends import (
    PersonalRecord,
    RecoveryTrend,
    WeeklyStats,
    analyze_recovery_trend,
    best_efforts_from_stream,
    calculate_weekly_stats,
    detect_power_records,
    efficiency_factor_trend,
)

__all__ = [
    "PersonalRecord",
    "RecoveryTrend",
    "WeeklyStats",
    "analyze_recovery_trend",
    "best_efforts_from_stream",
    "calculate_weekly_stats",
    "detect_power_records",
    "efficiency_factor_trend",
]
