"""Pure metric calculators over activity streams."""

from .zones import (
    HrZone,
    PowerZone,
    PaceZone,
    ZoneDistribution,
    get_hr_zone_boundaries,
    get_power_zone_boundaries,
    get_pace_zone_boundaries,
    classify_hr_zone,
    classify_power_zone,
    classify_pace_zone,
    calculate_hr_zone_distribution,
    calculate_power_zone_distribution,
    calculate_pace_zone_distribution,
)
from .power import (
    calculate_normalized_power,
    calculate_average_power,
    calculate_variability_index,
    calculate_cycling_tss,
    calculate_power_intensity_factor,
    best_power_for_duration,
    estimate_ftp_from_best_20min,
)
from .pace import (
    calculate_grade_adjusted_pace,
    calculate_running_tss,
    calculate_pace_intensity_factor,
    calculate_splits,
    format_pace,
)
from .load import (
    calculate_trimp,
    calculate_efficiency_factor,
    calculate_aerobic_decoupling,
)
from .cadence import calculate_cadence_stats
from .elevation import calculate_elevation
from .swim import (
    detect_swim_intervals,
    estimate_css,
    calculate_swim_tss,
    estimate_swolf,
)
from .compliance import calculate_zone_compliance
from .fitness import (
    calculate_ewma,
    compute_load_snapshot,
    analyze_fitness_trend,
)

__all__ = [
    "HrZone",
    "PowerZone",
    "PaceZone",
    "ZoneDistribution",
    "get_hr_zone_boundaries",
    "get_power_zone_boundaries",
    "get_pace_zone_boundaries",
    "classify_hr_zone",
    "classify_power_zone",
    "classify_pace_zone",
    "calculate_hr_zone_distribution",
    "calculate_power_zone_distribution",
    "calculate_pace_zone_distribution",
    "calculate_normalized_power",
    "calculate_average_power",
    "calculate_variability_index",
    "calculate_cycling_tss",
    "calculate_power_intensity_factor",
    "best_power_for_duration",
    "estimate_ftp_from_best_20min",
    "calculate_grade_adjusted_pace",
    "calculate_running_tss",
    "calculate_pace_intensity_factor",
    "calculate_splits",
    "format_pace",
    "calculate_trimp",
    "calculate_efficiency_factor",
    "calculate_aerobic_decoupling",
    "calculate_cadence_stats",
    "calculate_elevation",
    "detect_swim_intervals",
    "estimate_css",
    "calculate_swim_tss",
    "estimate_swolf",
    "calculate_zone_compliance",
    "calculate_ewma",
    "compute_load_snapshot",
    "analyze_fitness_trend",
]
