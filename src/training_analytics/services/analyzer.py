"""Workout analysis: per-discipline orchestration of the metric calculators."""

import logging
from dataclasses import replace
from typing import Any, Dict, Mapping, Optional, Union

from ..exceptions import UnknownDisciplineError
from ..metrics.cadence import calculate_cadence_stats
from ..metrics.compliance import calculate_zone_compliance
from ..metrics.elevation import calculate_elevation
from ..metrics.load import (
    average_heart_rate,
    calculate_aerobic_decoupling,
    calculate_efficiency_factor,
    calculate_trimp,
)
from ..metrics.pace import (
    calculate_grade_adjusted_pace,
    calculate_pace_intensity_factor,
    calculate_running_tss,
    calculate_splits,
    threshold_pace_from_easy,
)
from ..metrics.power import (
    calculate_average_power,
    calculate_cycling_tss,
    calculate_normalized_power,
    calculate_power_intensity_factor,
    calculate_variability_index,
)
from ..metrics.swim import (
    calculate_pace_per_100m,
    calculate_swim_intensity_factor,
    calculate_swim_tss,
    detect_swim_intervals,
    estimate_css,
    estimate_swolf,
)
from ..metrics.zones import (
    calculate_hr_zone_distribution,
    calculate_pace_zone_distribution,
    calculate_power_zone_distribution,
)
from ..models.activity import ActivitySummary, Discipline
from ..models.analytics import WorkoutAnalytics
from ..models.athlete import UserZones
from ..streams import (
    StreamRecord,
    has_altitude_data,
    has_cadence_data,
    has_distance_data,
    has_heart_rate_data,
    has_power_data,
)

logger = logging.getLogger(__name__)


# Fallbacks when the athlete's zones are unknown
DEFAULT_MAX_HR = 190
DEFAULT_EASY_PACE = 320  # sec/km
DEFAULT_FTP = 200  # watts

SummaryLike = Union[ActivitySummary, Mapping[str, Any], None]


def _as_summary(summary: SummaryLike) -> ActivitySummary:
    if isinstance(summary, ActivitySummary):
        return summary
    return ActivitySummary.from_dict(summary)


def _add_cadence_and_elevation(result: Dict[str, Any], stream: StreamRecord) -> None:
    if has_cadence_data(stream):
        cadence = calculate_cadence_stats(stream.cadence)
        if cadence:
            result["avg_cadence"] = cadence.avg
            result["cadence_variability"] = cadence.variability

    if has_altitude_data(stream):
        elevation = calculate_elevation(stream.altitude)
        if elevation:
            result["total_ascent"] = elevation.ascent
            result["total_descent"] = elevation.descent


def _add_heart_rate(result: Dict[str, Any], stream: StreamRecord, zones: UserZones, max_hr: float) -> None:
    result["hr_zones"] = calculate_hr_zone_distribution(stream.heartrate, stream.time, max_hr)
    result["trimp"] = calculate_trimp(
        stream.heartrate,
        stream.time,
        max_hr,
        resting_hr=zones.resting_hr,
        gender=zones.gender,
    )


def analyze_running(
    stream: Optional[StreamRecord],
    summary: ActivitySummary,
    zones: UserZones,
) -> WorkoutAnalytics:
    """
    Analyze a running workout.

    With a stream: HR zones, TRIMP and decoupling (when HR is present),
    pace zones, grade-adjusted pace as NGP (falling back to average
    pace without altitude), EF, rTSS/IF, splits, cadence and elevation.
    Without one: NGP, IF, rTSS and EF from the summary averages.
    """
    max_hr = zones.max_hr or DEFAULT_MAX_HR
    easy_pace = zones.easy_pace_sec_per_km or DEFAULT_EASY_PACE
    threshold_pace = zones.threshold_pace_sec_per_km or threshold_pace_from_easy(easy_pace)

    result: Dict[str, Any] = {"discipline": Discipline.RUN.value}
    fallback_ngp = (
        round(1000 / summary.average_speed, 2)
        if summary.average_speed and summary.average_speed > 0
        else None
    )

    if stream is None:
        result["normalized_graded_pace"] = fallback_ngp
        if fallback_ngp and summary.average_heartrate:
            result["efficiency_factor"] = calculate_efficiency_factor(
                1000 / fallback_ngp * 100, summary.average_heartrate
            )
        result["intensity_factor"] = calculate_pace_intensity_factor(fallback_ngp, threshold_pace)
        result["training_stress_score"] = calculate_running_tss(
            summary.moving_time, fallback_ngp, threshold_pace
        )
        result["total_ascent"] = summary.total_elevation_gain or None
        return WorkoutAnalytics(**result)

    has_hr = has_heart_rate_data(stream)

    if has_hr:
        _add_heart_rate(result, stream, zones, max_hr)
        result["aerobic_decoupling"] = calculate_aerobic_decoupling(
            stream.heartrate,
            stream.time,
            velocity=stream.velocity,
            discipline=Discipline.RUN.value,
        )

    if stream.velocity:
        result["pace_zones"] = calculate_pace_zone_distribution(
            stream.velocity, stream.time, easy_pace
        )

    ngp = None
    if has_altitude_data(stream) and has_distance_data(stream):
        gap = calculate_grade_adjusted_pace(
            stream.velocity, stream.altitude, stream.distance, stream.time
        )
        result["grade_adjusted_pace"] = gap
        ngp = gap
    else:
        ngp = fallback_ngp
    result["normalized_graded_pace"] = ngp

    avg_hr = average_heart_rate(stream.heartrate) if has_hr else summary.average_heartrate
    if ngp and avg_hr:
        # Speed in meters per 100 s keeps running EF on a scale near cycling's
        result["efficiency_factor"] = calculate_efficiency_factor(1000 / ngp * 100, avg_hr)

    result["training_stress_score"] = calculate_running_tss(summary.moving_time, ngp, threshold_pace)
    result["intensity_factor"] = calculate_pace_intensity_factor(ngp, threshold_pace)

    result["splits"] = tuple(calculate_splits(
        stream.distance,
        stream.time,
        heartrate=stream.heartrate,
        altitude=stream.altitude,
        cadence=stream.cadence,
    ))

    _add_cadence_and_elevation(result, stream)
    return WorkoutAnalytics(**result)


def analyze_cycling(
    stream: Optional[StreamRecord],
    summary: ActivitySummary,
    zones: UserZones,
    discipline: Discipline = Discipline.BIKE,
) -> WorkoutAnalytics:
    """
    Analyze a cycling workout.

    With a stream: power zones, NP, IF, TSS and VI (when power is
    present); HR zones, TRIMP, EF (NP / avg HR) and Pw:HR decoupling
    (when HR is present); cadence and elevation. Without one: weighted
    average watts (or average watts) stands in for NP.
    """
    max_hr = zones.max_hr or DEFAULT_MAX_HR
    ftp = zones.ftp_watts or DEFAULT_FTP

    result: Dict[str, Any] = {"discipline": discipline.value}

    if stream is None:
        np_watts = summary.weighted_average_watts or summary.average_watts
        if np_watts:
            result["normalized_power"] = np_watts
            result["intensity_factor"] = calculate_power_intensity_factor(np_watts, ftp)
            result["training_stress_score"] = calculate_cycling_tss(summary.moving_time, np_watts, ftp)
            result["variability_index"] = calculate_variability_index(np_watts, summary.average_watts)
            if summary.average_heartrate:
                result["efficiency_factor"] = calculate_efficiency_factor(
                    np_watts, summary.average_heartrate
                )
        result["total_ascent"] = summary.total_elevation_gain or None
        return WorkoutAnalytics(**result)

    has_power = has_power_data(stream)
    normalized_power = None

    if has_power:
        result["power_zones"] = calculate_power_zone_distribution(stream.power, stream.time, ftp)
        normalized_power = calculate_normalized_power(stream.power)
        if normalized_power:
            result["normalized_power"] = normalized_power
            result["intensity_factor"] = calculate_power_intensity_factor(normalized_power, ftp)
            result["training_stress_score"] = calculate_cycling_tss(
                summary.moving_time, normalized_power, ftp
            )
            result["variability_index"] = calculate_variability_index(
                normalized_power, calculate_average_power(stream.power)
            )

    if has_heart_rate_data(stream):
        _add_heart_rate(result, stream, zones, max_hr)
        result["efficiency_factor"] = calculate_efficiency_factor(
            normalized_power, average_heart_rate(stream.heartrate)
        )
        if has_power:
            result["aerobic_decoupling"] = calculate_aerobic_decoupling(
                stream.heartrate,
                stream.time,
                velocity=stream.velocity,
                watts=stream.power,
                discipline=Discipline.BIKE.value,
            )

    _add_cadence_and_elevation(result, stream)
    return WorkoutAnalytics(**result)


def analyze_swimming(
    stream: Optional[StreamRecord],
    summary: ActivitySummary,
    zones: UserZones,
) -> WorkoutAnalytics:
    """
    Analyze a swimming workout.

    Pace per 100 m comes from the summary and is stored in the NGP field.
    Streams add interval segmentation, a CSS estimate, SWOLF, HR zones and
    TRIMP. TSS and IF need a known CSS.
    """
    max_hr = zones.max_hr or DEFAULT_MAX_HR
    result: Dict[str, Any] = {"discipline": Discipline.SWIM.value}

    pace_per_100m = calculate_pace_per_100m(summary.distance, summary.moving_time)
    result["normalized_graded_pace"] = pace_per_100m

    if stream is not None:
        intervals = detect_swim_intervals(stream)
        result["swim_intervals"] = tuple(intervals)
        result["estimated_css"] = estimate_css(intervals)
        if has_cadence_data(stream):
            result["swolf_score"] = estimate_swolf(stream.cadence, pace_per_100m)
        if has_heart_rate_data(stream):
            _add_heart_rate(result, stream, zones, max_hr)

    css = zones.swim_css_sec_per_100m
    if pace_per_100m and css:
        result["intensity_factor"] = calculate_swim_intensity_factor(pace_per_100m, css)
        result["training_stress_score"] = calculate_swim_tss(summary.moving_time, pace_per_100m, css)

    return WorkoutAnalytics(**result)


def analyze_workout(
    discipline: Union[str, Discipline],
    stream: Optional[StreamRecord],
    summary: SummaryLike,
    zones: UserZones,
    prescribed_intensity: Optional[str] = None,
    workout_id: Optional[str] = None,
) -> WorkoutAnalytics:
    """
    Analyze one workout.

    Args:
        discipline: run, bike, swim or brick (bricks are analyzed as cycling)
        stream: Normalized stream, or None for summary-only analysis
        summary: Aggregate activity fields
        zones: Athlete zones
        prescribed_intensity: easy, moderate, hard or max; enables
            compliance scoring against HR, then pace, then power zones
        workout_id: Identifier stored on the result

    Returns:
        WorkoutAnalytics; empty for unknown disciplines
    """
    activity = _as_summary(summary)

    try:
        kind = Discipline.parse(discipline)
    except UnknownDisciplineError:
        logger.warning(f"Skipping analysis of unknown discipline {discipline!r}")
        return WorkoutAnalytics(workout_id=workout_id)

    if kind is Discipline.RUN:
        analytics = analyze_running(stream, activity, zones)
    elif kind is Discipline.SWIM:
        analytics = analyze_swimming(stream, activity, zones)
    else:
        # Bricks have no phase split; the combined record is analyzed as a ride
        analytics = analyze_cycling(stream, activity, zones, discipline=kind)

    updates: Dict[str, Any] = {"workout_id": workout_id}
    if prescribed_intensity:
        distribution = analytics.hr_zones or analytics.pace_zones or analytics.power_zones
        compliance = calculate_zone_compliance(distribution, prescribed_intensity)
        updates["zone_compliance_score"] = compliance.score
        updates["zone_compliance_details"] = compliance.details

    return replace(analytics, **updates)
