# devtimer/reporting_service/logic/aggregation.py
"""
Activity aggregation module for the DevTimer reporting service.
Turns a flat list of activity records into the nested summaries returned by
the reports endpoints: totals by language, and platform -> project -> branch
trees with debug time accounted separately.

Every output list keeps the order in which its keys were first seen in the
input. Callers pass records already filtered to the window; nothing here
reads the clock or does I/O.
"""

import logging
from datetime import date
from typing import Dict, List, Sequence, Tuple, Union

import polars as pl

from devtimer.reporting_service.models import (
    NO_BRANCH,
    UNKNOWN_MACHINE,
    UNKNOWN_PLATFORM,
    ActivityRecord,
    BranchSummary,
    DailyDuration,
    DailySummary,
    LanguageSummary,
    PlatformSummary,
    ProjectSummary,
    ReportWindow,
    WeeklySummary,
)
from devtimer.shared.utils import local_date

log = logging.getLogger(__name__)

FRAME_SCHEMA = {
    "language": pl.Utf8,
    "platform": pl.Utf8,
    "machine": pl.Utf8,
    "project": pl.Utf8,
    "branch": pl.Utf8,
    "debug": pl.Boolean,
    "day": pl.Date,
    "duration": pl.Float64,
}

DURATION_SUMS = [
    pl.col("duration").sum().alias("duration"),
    pl.col("duration").filter(pl.col("debug")).sum().alias("debug_duration"),
]


def build_frame(records: Sequence[ActivityRecord], window: ReportWindow) -> pl.DataFrame:
    """
    Builds a Polars DataFrame with one row per record, substituting the
    placeholder values for missing platform, machine and branch.
    """
    rows = [
        {
            "language": record.language,
            "platform": record.platform or UNKNOWN_PLATFORM,
            "machine": record.machine or UNKNOWN_MACHINE,
            "project": record.project,
            "branch": record.branch or NO_BRANCH,
            "debug": bool(record.debug),
            "day": local_date(record.start_time, window.tz),
            "duration": float(record.duration),
        }
        for record in records
    ]
    return pl.DataFrame(rows, schema=FRAME_SCHEMA)


def summarize_languages(df: pl.DataFrame) -> List[LanguageSummary]:
    by_language = df.group_by("language", maintain_order=True).agg(pl.col("duration").sum())
    return [
        LanguageSummary(language=row["language"], duration=row["duration"])
        for row in by_language.iter_rows(named=True)
    ]


def summarize_platforms(df: pl.DataFrame) -> List[PlatformSummary]:
    """
    Groups records by platform, then project, then branch.

    The machine reported for a platform is the one on the first record seen
    for it; later records from other machines on the same platform only add
    their duration.
    """
    platforms = df.group_by("platform", maintain_order=True).agg(
        pl.col("machine").first(),
        pl.col("duration").sum(),
    )
    projects = df.group_by(["platform", "project"], maintain_order=True).agg(DURATION_SUMS)
    branches = df.group_by(["platform", "project", "branch"], maintain_order=True).agg(DURATION_SUMS)

    platform_nodes: Dict[str, PlatformSummary] = {}
    for row in platforms.iter_rows(named=True):
        platform_nodes[row["platform"]] = PlatformSummary(
            platform=row["platform"],
            machine=row["machine"],
            duration=row["duration"],
        )

    # Group-by order within a parent matches first-seen order within that parent
    project_nodes: Dict[Tuple[str, str], ProjectSummary] = {}
    for row in projects.iter_rows(named=True):
        node = ProjectSummary(
            project=row["project"],
            duration=row["duration"],
            debug_duration=row["debug_duration"],
        )
        project_nodes[(row["platform"], row["project"])] = node
        platform_nodes[row["platform"]].projects.append(node)

    for row in branches.iter_rows(named=True):
        project_nodes[(row["platform"], row["project"])].branches.append(
            BranchSummary(
                branch=row["branch"],
                duration=row["duration"],
                debug_duration=row["debug_duration"],
            )
        )

    return list(platform_nodes.values())


def summarize_days(df: pl.DataFrame, window: ReportWindow) -> List[DailyDuration]:
    """
    One entry per calendar day of the window, zero-filled. Days outside the
    window are left out so the list always has exactly `window.days` entries.
    """
    totals: Dict[date, float] = {day: 0.0 for day in window.dates}
    by_day = df.group_by("day", maintain_order=True).agg(pl.col("duration").sum())
    for row in by_day.iter_rows(named=True):
        if row["day"] in totals:
            totals[row["day"]] += row["duration"]
        else:
            log.debug(f"Skipping {row['duration']}s on {row['day']}: outside window starting {window.start.isoformat()}")
    return [DailyDuration(date=day, duration=duration) for day, duration in totals.items()]


def aggregate(records: Sequence[ActivityRecord], window: ReportWindow) -> Union[DailySummary, WeeklySummary]:
    """
    Aggregates activity records into a summary for the given window.

    Args:
        records: Activity records already filtered to the window.
        window: The reporting window. A seven-day window additionally gets the
            per-day breakdown.

    Returns:
        A DailySummary for one-day windows, a WeeklySummary otherwise.
    """
    df = build_frame(records, window)
    total_duration = float(df["duration"].sum()) if df.height else 0.0
    by_language = summarize_languages(df)
    by_platform = summarize_platforms(df)

    log.debug(f"Aggregated {df.height} activities into {len(by_language)} languages and {len(by_platform)} platforms.")

    if window.days == 1:
        return DailySummary(
            total_duration=total_duration,
            by_language=by_language,
            by_platform=by_platform,
        )
    return WeeklySummary(
        total_duration=total_duration,
        by_language=by_language,
        by_platform=by_platform,
        daily_duration=summarize_days(df, window),
    )
