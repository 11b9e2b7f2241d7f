#!/usr/bin/env python3
"""
Training analytics CLI.

Workout analysis, training load and zone tracking from the terminal.

Usage:
    training-analytics analyze ride.json --discipline bike
    training-analytics analyze run.json --discipline run --save --date 2026-03-01
    training-analytics load add --date 2026-03-01 --tss 85
    training-analytics load trend
    training-analytics load history --days 14
    training-analytics profile show
    training-analytics profile set --ftp 250 --max-hr 186
    training-analytics weekly --weeks 4
    training-analytics recovery add --date 2026-03-01 --hrv 62 --rhr 48
    training-analytics recovery trend
    training-analytics stats
"""

import argparse
import json
import sys
from datetime import date, timedelta
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.text import Text
from rich import box

from .analysis.trends import analyze_recovery_trend, calculate_weekly_stats
from .config import get_settings
from .db.database import TrainingDatabase
from .exceptions import AnalyticsError, ValidationError
from .logging_config import setup_logging
from .metrics.pace import format_pace
from .metrics.zones import (
    get_hr_zone_boundaries,
    get_pace_zone_boundaries,
    get_power_zone_boundaries,
)
from .models.activity import ActivitySummary, Discipline
from .models.analytics import WorkoutAnalytics
from .services.analyzer import analyze_workout
from .services.enrichment import WorkoutEnrichmentService
from .streams import require_stream

console = Console()


def get_form_color(form: str) -> str:
    """Get color for a form label."""
    colors = {
        "fresh": "green",
        "neutral": "cyan",
        "fatigued": "yellow",
        "very_fatigued": "red",
    }
    return colors.get(form, "white")


def format_tsb_rich(tsb: float) -> Text:
    """Format TSB with rich colors."""
    color = "green" if tsb > 0 else "yellow" if tsb > -10 else "red"
    return Text(f"{tsb:+.1f}", style=color)


def _fmt(value: Optional[float], spec: str = ".1f", suffix: str = "") -> str:
    if value is None:
        return "-"
    return f"{value:{spec}}{suffix}"


def load_workout_file(path: Path) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    """
    Read a workout JSON file.

    The file is either a channel mapping (``{"time": [...], "heartrate": [...]}``)
    or an object with ``stream`` and ``summary`` keys.
    """
    try:
        data = json.loads(path.read_text())
    except (OSError, json.JSONDecodeError) as e:
        raise ValidationError(f"Cannot read workout file {path}: {e}", field="path") from e

    if not isinstance(data, dict):
        raise ValidationError("Workout file must contain a JSON object", field="path")
    if "stream" in data or "summary" in data:
        return data.get("stream") or {}, data.get("summary") or {}
    return data, {}


def summary_from_stream(raw_summary: Dict[str, Any], duration: float, distance: float) -> ActivitySummary:
    """Fill moving time and distance from the stream when the summary lacks them."""
    summary = ActivitySummary.from_dict(raw_summary)
    if summary.moving_time and summary.distance:
        return summary
    fields = summary.to_dict()
    fields["moving_time"] = summary.moving_time or duration
    fields["distance"] = summary.distance or distance
    return ActivitySummary(**fields)


# =============================================================================
# Rendering
# =============================================================================

def print_analytics(analytics: WorkoutAnalytics) -> None:
    """Render a workout's analytics."""
    table = Table(title="Workout Metrics", box=box.ROUNDED)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    is_swim = analytics.discipline == Discipline.SWIM.value
    table.add_row("Discipline", analytics.discipline or "-")
    table.add_row("TSS", _fmt(analytics.training_stress_score))
    table.add_row("Intensity Factor", _fmt(analytics.intensity_factor, ".2f"))
    if analytics.normalized_power is not None:
        table.add_row("Normalized Power", _fmt(analytics.normalized_power, ".0f", " W"))
        table.add_row("Variability Index", _fmt(analytics.variability_index, ".2f"))
    if analytics.normalized_graded_pace:
        label = "Pace /100m" if is_swim else "Normalized Graded Pace"
        unit = "/100m" if is_swim else "/km"
        table.add_row(label, format_pace(analytics.normalized_graded_pace, unit))
    table.add_row("Efficiency Factor", _fmt(analytics.efficiency_factor, ".2f"))
    table.add_row("Aerobic Decoupling", _fmt(analytics.aerobic_decoupling, ".1f", "%"))
    table.add_row("TRIMP", _fmt(analytics.trimp))
    if analytics.avg_cadence is not None:
        table.add_row("Cadence", _fmt(analytics.avg_cadence, ".0f"))
    if analytics.total_ascent is not None:
        table.add_row("Ascent / Descent", f"{analytics.total_ascent:.0f} / {analytics.total_descent or 0:.0f} m")
    if analytics.estimated_css is not None:
        table.add_row("Estimated CSS", format_pace(analytics.estimated_css, "/100m"))
    if analytics.swolf_score is not None:
        table.add_row("SWOLF", _fmt(analytics.swolf_score))
    if analytics.zone_compliance_score is not None:
        table.add_row("Zone Compliance", _fmt(analytics.zone_compliance_score, ".0f", "/100"))

    console.print(table)
    console.print()

    for title, distribution in (
        ("Heart Rate Zones", analytics.hr_zones),
        ("Pace Zones", analytics.pace_zones),
        ("Power Zones", analytics.power_zones),
    ):
        if distribution is None or distribution.total == 0:
            continue
        zone_table = Table(title=title, box=box.ROUNDED)
        zone_table.add_column("Zone", style="cyan")
        zone_table.add_column("Time %", justify="right")
        for key, pct in distribution.to_dict().items():
            zone_table.add_row(key, f"{pct:.1f}%")
        console.print(zone_table)
        console.print()

    if analytics.splits:
        split_table = Table(title="Splits", box=box.ROUNDED)
        split_table.add_column("Km", style="cyan")
        split_table.add_column("Pace", justify="right")
        split_table.add_column("HR", justify="right")
        split_table.add_column("Elev", justify="right")
        for split in analytics.splits:
            split_table.add_row(
                str(split.km),
                format_pace(split.pace),
                _fmt(split.hr, ".0f"),
                _fmt(split.elevation, "+.0f", " m"),
            )
        console.print(split_table)
        console.print()


# =============================================================================
# Commands
# =============================================================================

def cmd_analyze(args, db: TrainingDatabase):
    """Analyze a workout file; with --save, store it and update load and zones."""
    raw_stream, raw_summary = load_workout_file(Path(args.path))
    stream = require_stream(raw_stream)
    summary = summary_from_stream(
        raw_summary,
        duration=stream.duration,
        distance=stream.distance[-1] if stream.distance else 0.0,
    )
    discipline = Discipline.parse(args.discipline)
    workout_id = args.workout_id or Path(args.path).stem

    console.print()
    console.print(Panel(f"[bold]Workout Analysis - {workout_id}[/bold]"))
    console.print()

    service = WorkoutEnrichmentService(training_db=db)
    if not args.save:
        analytics = analyze_workout(
            discipline,
            stream,
            summary,
            service.get_user_zones(args.user),
            prescribed_intensity=args.intensity,
            workout_id=workout_id,
        )
        print_analytics(analytics)
        return

    result = service.process_workout(
        user_id=args.user,
        workout_id=workout_id,
        workout_date=args.date,
        discipline=discipline,
        stream=stream,
        summary=summary,
        prescribed_intensity=args.intensity,
    )
    print_analytics(result.analytics)

    if result.training_load:
        load = result.training_load
        console.print(
            f"Training load on {load.date.isoformat()}: "
            f"CTL {load.ctl:.1f}  ATL {load.atl:.1f}  TSB ", format_tsb_rich(load.tsb)
        )
    for breakthrough in result.breakthroughs:
        style = "bold green" if breakthrough.auto_updated else "yellow"
        console.print(f"[{style}]{breakthrough.message}[/{style}]")
    for record in result.power_records:
        console.print(f"[bold magenta]New PR: {record.type} {record.value:.0f} W[/bold magenta]")
    console.print()


def cmd_load(args, db: TrainingDatabase):
    """Add TSS, or show load history and trend."""
    service = WorkoutEnrichmentService(training_db=db).load_service

    if args.load_command == "add":
        snapshot = service.update_training_load(args.user, args.date, args.tss)
        console.print()
        console.print(f"[green]Added {args.tss:.1f} TSS on {snapshot.date.isoformat()}[/green]")
        console.print(
            f"Day total {snapshot.daily_tss:.1f}  CTL {snapshot.ctl:.1f}  ATL {snapshot.atl:.1f}  TSB ",
            format_tsb_rich(snapshot.tsb),
        )
        console.print()
        return

    if args.load_command == "history":
        history = service.get_training_load_history(args.user, days=args.days)
        console.print()
        if not history:
            console.print("No training load recorded.")
            console.print("Use 'training-analytics load add' or 'analyze --save' first.")
            console.print()
            return

        table = Table(title=f"Training Load (Last {args.days} Days)", box=box.ROUNDED)
        table.add_column("Date", style="cyan")
        table.add_column("TSS", justify="right")
        table.add_column("CTL", justify="right")
        table.add_column("ATL", justify="right")
        table.add_column("TSB", justify="right")
        for s in history:
            table.add_row(
                s.date.isoformat(),
                f"{s.daily_tss:.1f}",
                f"{s.ctl:.1f}",
                f"{s.atl:.1f}",
                format_tsb_rich(s.tsb),
            )
        console.print(table)
        console.print()
        return

    trend = service.get_fitness_trend(args.user, days=args.days)
    console.print()
    console.print(Panel("[bold]Fitness Trend[/bold]"))

    table = Table(box=box.ROUNDED, show_header=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Value")
    table.add_row("Fitness (CTL)", f"{trend.ctl_value:.1f} ({trend.ctl_trend})")
    table.add_row("Fatigue (ATL)", f"{trend.atl_value:.1f} ({trend.atl_trend})")
    table.add_row("Form (TSB)", Text(f"{trend.tsb_value:+.1f} ({trend.form})", style=get_form_color(trend.form)))
    table.add_row("Weekly volume", trend.weekly_volume_trend)
    console.print(table)
    console.print()


def cmd_profile(args, db: TrainingDatabase):
    """Show or update the athlete profile and derived zones."""
    service = WorkoutEnrichmentService(training_db=db)
    profile = service.get_profile(args.user)

    if args.profile_command == "set":
        updates = {
            "experience_level": args.experience,
            "max_hr": args.max_hr,
            "resting_hr": args.rest_hr,
            "lactate_threshold_hr": args.threshold_hr,
            "gender": args.gender,
            "bike_ftp": args.ftp,
            "run_pace_per_km": args.easy_pace,
            "swim_pace_per_100m": args.css,
        }
        for name, value in updates.items():
            if value is not None:
                setattr(profile, name, value)
        db.save_profile(profile)
        console.print()
        console.print("[green]Profile updated![/green]")

    zones = service.get_user_zones(args.user, profile)

    console.print()
    table = Table(title=f"Profile - {args.user}", box=box.ROUNDED)
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="white")
    table.add_row("Experience", profile.experience_level)
    table.add_row("Max HR", f"{zones.max_hr:.0f}" + ("" if profile.max_hr else " (default)"))
    table.add_row("Resting HR", f"{zones.resting_hr:.0f}")
    table.add_row("LTHR", f"{zones.lactate_threshold_hr:.0f}")
    table.add_row("FTP", f"{zones.ftp_watts:.0f} W" + ("" if profile.bike_ftp else " (default)"))
    table.add_row("Easy pace", format_pace(zones.easy_pace_sec_per_km))
    table.add_row("Threshold pace", format_pace(zones.threshold_pace_sec_per_km))
    table.add_row(
        "Swim CSS",
        format_pace(zones.swim_css_sec_per_100m, "/100m") if zones.swim_css_sec_per_100m else "-",
    )
    console.print(table)
    console.print()

    zone_table = Table(title="Zone Boundaries", box=box.ROUNDED)
    zone_table.add_column("Kind", style="cyan")
    zone_table.add_column("Boundaries")
    zone_table.add_row("HR (bpm)", " | ".join(str(b) for b in get_hr_zone_boundaries(zones.max_hr)))
    zone_table.add_row("Power (W)", " | ".join(str(b) for b in get_power_zone_boundaries(zones.ftp_watts)))
    zone_table.add_row(
        "Pace",
        " | ".join(format_pace(b) for b in get_pace_zone_boundaries(zones.easy_pace_sec_per_km)),
    )
    console.print(zone_table)
    console.print()


def cmd_weekly(args, db: TrainingDatabase):
    """Show weekly training totals."""
    end = date.today()
    rows = db.get_analytics_range(args.user, end - timedelta(weeks=args.weeks), end)
    weeks = calculate_weekly_stats(rows)

    console.print()
    if not weeks:
        console.print("No analyzed workouts in this period.")
        console.print()
        return

    table = Table(title=f"Weekly Stats (Last {args.weeks} Weeks)", box=box.ROUNDED)
    table.add_column("Week", style="cyan")
    table.add_column("Workouts", justify="right")
    table.add_column("TSS", justify="right")
    table.add_column("Duration", justify="right")
    table.add_column("Distance", justify="right")
    table.add_column("Avg EF", justify="right")
    table.add_column("Avg IF", justify="right")
    for week in weeks:
        table.add_row(
            week.week_start.isoformat(),
            str(week.workout_count),
            f"{week.total_tss:.0f}",
            f"{week.total_duration:.0f} min",
            f"{week.total_distance / 1000:.1f} km",
            _fmt(week.avg_efficiency_factor, ".2f"),
            _fmt(week.avg_intensity_factor, ".2f"),
        )
    console.print(table)
    console.print()


def cmd_recovery(args, db: TrainingDatabase):
    """Record a recovery reading or show the recovery trend."""
    if args.recovery_command == "add":
        db.save_recovery(args.user, args.date, hrv_ms=args.hrv, resting_hr=args.rhr)
        console.print(f"[green]Recovery reading stored for {args.date.isoformat()}[/green]")
        return

    end = date.today()
    readings = db.get_recovery_range(args.user, end - timedelta(days=30), end)
    trend = analyze_recovery_trend(readings)

    console.print()
    table = Table(title="Recovery Trend", box=box.ROUNDED)
    table.add_column("Metric", style="cyan")
    table.add_column("7 days", justify="right")
    table.add_column("30 days", justify="right")
    table.add_column("Trend")
    table.add_row("HRV (ms)", _fmt(trend.avg_hrv_7d), _fmt(trend.avg_hrv_30d), trend.hrv_trend)
    table.add_row(
        "Resting HR",
        _fmt(trend.avg_resting_hr_7d),
        _fmt(trend.avg_resting_hr_30d),
        trend.resting_hr_trend,
    )
    console.print(table)
    console.print()


def cmd_stats(args, db: TrainingDatabase):
    """Show database statistics."""
    stats = db.get_stats()

    console.print()
    console.print(Panel("[bold]Training Analytics - Database Stats[/bold]"))
    console.print()

    table = Table(box=box.ROUNDED)
    table.add_column("Table", style="cyan")
    table.add_column("Rows", justify="right")

    table.add_row("Database", str(db.db_path))
    for name, count in stats.items():
        table.add_row(name, str(count))

    console.print(table)
    console.print()


# =============================================================================
# Entry point
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="training-analytics",
        description="Workout analytics, training load and zone tracking",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  training-analytics analyze ride.json --discipline bike
  training-analytics analyze run.json --discipline run --save --date 2026-03-01
  training-analytics load add --date 2026-03-01 --tss 85
  training-analytics load trend
  training-analytics profile set --ftp 250 --easy-pace 320
        """,
    )
    parser.add_argument("--db", type=str, help="Database path (defaults to settings)")
    parser.add_argument("--user", "-u", default="default", help="Athlete user ID")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Analyze command
    analyze_p = subparsers.add_parser("analyze", help="Analyze a workout stream file")
    analyze_p.add_argument("path", help="JSON file with stream channels (and optional summary)")
    analyze_p.add_argument(
        "--discipline", "-d",
        choices=[d.value for d in Discipline],
        default=Discipline.RUN.value,
    )
    analyze_p.add_argument("--workout-id", help="Workout ID (defaults to the file name)")
    analyze_p.add_argument(
        "--date", type=date.fromisoformat, default=date.today(), help="Workout date (YYYY-MM-DD)"
    )
    analyze_p.add_argument(
        "--intensity",
        choices=["easy", "moderate", "hard", "max"],
        help="Prescribed intensity for zone compliance",
    )
    analyze_p.add_argument(
        "--save", action="store_true", help="Store analytics and update load and zones"
    )

    # Load command
    load_p = subparsers.add_parser("load", help="Training load (CTL/ATL/TSB)")
    load_sub = load_p.add_subparsers(dest="load_command")
    add_p = load_sub.add_parser("add", help="Add TSS to a day")
    add_p.add_argument("--date", type=date.fromisoformat, default=date.today())
    add_p.add_argument("--tss", type=float, required=True)
    for name, help_text in (("history", "Show daily load"), ("trend", "Show fitness trend")):
        sub = load_sub.add_parser(name, help=help_text)
        sub.add_argument("--days", type=int, default=42)

    # Profile command
    profile_p = subparsers.add_parser("profile", help="Athlete profile and zones")
    profile_sub = profile_p.add_subparsers(dest="profile_command")
    profile_sub.add_parser("show", help="Show profile and zones")
    set_p = profile_sub.add_parser("set", help="Update profile values")
    set_p.add_argument("--experience", choices=["beginner", "intermediate", "advanced", "elite"])
    set_p.add_argument("--max-hr", type=int)
    set_p.add_argument("--rest-hr", type=int)
    set_p.add_argument("--threshold-hr", type=int)
    set_p.add_argument("--gender", choices=["male", "female"])
    set_p.add_argument("--ftp", type=int, help="FTP in watts")
    set_p.add_argument("--easy-pace", type=int, help="Easy pace in sec/km")
    set_p.add_argument("--css", type=int, help="Swim CSS in sec/100m")

    # Weekly command
    weekly_p = subparsers.add_parser("weekly", help="Show weekly training totals")
    weekly_p.add_argument("--weeks", "-w", type=int, default=4)

    # Recovery command
    recovery_p = subparsers.add_parser("recovery", help="HRV and resting HR")
    recovery_sub = recovery_p.add_subparsers(dest="recovery_command")
    rec_add = recovery_sub.add_parser("add", help="Record a recovery reading")
    rec_add.add_argument("--date", type=date.fromisoformat, default=date.today())
    rec_add.add_argument("--hrv", type=float, help="HRV in ms")
    rec_add.add_argument("--rhr", type=float, help="Resting heart rate")
    recovery_sub.add_parser("trend", help="Show recovery trend")

    # Stats command
    subparsers.add_parser("stats", help="Show database statistics")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = get_settings()
    setup_logging("DEBUG" if args.verbose else settings.log_level, rich_output=True)

    db = TrainingDatabase(args.db) if args.db else TrainingDatabase(str(settings.db_path))

    try:
        if args.command == "analyze":
            cmd_analyze(args, db)
        elif args.command == "load" and args.load_command:
            cmd_load(args, db)
        elif args.command == "profile":
            if args.profile_command is None:
                args.profile_command = "show"
            cmd_profile(args, db)
        elif args.command == "weekly":
            cmd_weekly(args, db)
        elif args.command == "recovery" and args.recovery_command:
            cmd_recovery(args, db)
        elif args.command == "stats":
            cmd_stats(args, db)
        else:
            parser.print_help()
    except AnalyticsError as e:
        console.print(f"[red]Error:[/red] {e.message}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
