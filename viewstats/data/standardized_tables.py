"""
Standardized Tables Builder

Creates the aggregated tables that the summary report, the figures and the
hypothesis tests all read from, so every consumer sees the same numbers.

Primary Data Products:
    1. session_frame: One row per cleaned playback event

    2. daily_frame: One row per active day (total minutes > 0)
       - Sole input to diagnostics, Kruskal-Wallis and active-day counts

    3. hourly_frame: One row per (weekday, hour) observed in the sessions
       - Averages normalized by active days of that weekday

All builders are pure: they return new frames and never modify their inputs.
"""

import datetime as dt
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

import pandas as pd

from viewstats.configs import RuntimeConfig
from viewstats.constants import MONTHS, WEEKDAYS
from viewstats.data import ViewingActivityLoader
from viewstats.data.records import ContentType


DAILY_COLUMNS = ["date", "total_minutes", "day_of_week", "month"]
HOURLY_COLUMNS = ["day_of_week", "hour", "total_minutes", "active_day_count", "average_minutes"]


def weekday_categorical(values) -> pd.Categorical:
    """Ordered Monday..Sunday categorical, independent of locale."""
    return pd.Categorical(list(values), categories=list(WEEKDAYS), ordered=True)


# =============================================================================
# Daily Aggregation
# =============================================================================

def build_daily_frame(session_frame: pd.DataFrame) -> pd.DataFrame:
    """
    Collapse sessions into one row per active calendar day.

    Columns:
        - date: Calendar date
        - total_minutes: Sum of session minutes on that date
        - day_of_week: Ordered categorical Monday..Sunday
        - month: English month name

    Days whose sessions sum to zero minutes are not active days and are dropped.
    """
    if session_frame.empty:
        daily = pd.DataFrame({
            "date": pd.Series([], dtype=object),
            "total_minutes": pd.Series([], dtype=float),
        })
    else:
        daily = (
            session_frame.groupby("date", sort=True)["duration_minutes"]
            .sum()
            .reset_index(name="total_minutes")
        )
        daily = daily[daily["total_minutes"] > 0].reset_index(drop=True)

    daily["day_of_week"] = weekday_categorical(WEEKDAYS[d.isoweekday() - 1] for d in daily["date"])
    daily["month"] = [MONTHS[d.month - 1] for d in daily["date"]]
    return daily[DAILY_COLUMNS]


@dataclass(frozen=True)
class RecordDay:
    """The single day with the most viewing."""
    date: dt.date
    total_minutes: float
    total_hours: float
    day_of_week: str
    month: str


def select_record_day(daily_frame: pd.DataFrame) -> Optional[RecordDay]:
    """Day with maximum total_minutes; ties go to the earliest date."""
    if daily_frame.empty:
        return None

    ordered = daily_frame.sort_values("date", kind="mergesort").reset_index(drop=True)
    row = ordered.loc[ordered["total_minutes"].idxmax()]
    return RecordDay(
        date=row["date"],
        total_minutes=float(row["total_minutes"]),
        total_hours=float(row["total_minutes"]) / 60,
        day_of_week=str(row["day_of_week"]),
        month=str(row["month"]),
    )


# =============================================================================
# Active-Day Normalization
# =============================================================================

def count_active_days(daily_frame: pd.DataFrame) -> pd.DataFrame:
    """
    Number of active days per weekday.

    Only weekdays with at least one active day appear.
    """
    counts = (
        daily_frame.groupby("day_of_week", observed=True)
        .size()
        .reset_index(name="active_day_count")
    )
    counts["day_of_week"] = weekday_categorical(counts["day_of_week"].astype(str))
    return counts.sort_values("day_of_week").reset_index(drop=True)


def build_hourly_frame(session_frame: pd.DataFrame, daily_frame: pd.DataFrame) -> pd.DataFrame:
    """
    Average minutes per (weekday, hour) slot over active days.

    average_minutes = total_minutes in the slot / active days for that weekday.
    The active-day count comes from daily_frame, so it counts every day the
    weekday had any viewing, not only days with viewing in that hour.

    Columns:
        - day_of_week: Ordered categorical Monday..Sunday
        - hour: 0-23, taken from the naive start timestamp
        - total_minutes: Sum of session minutes in the slot
        - active_day_count: Active days for the weekday (>= 1)
        - average_minutes: total_minutes / active_day_count
    """
    if session_frame.empty:
        hourly = pd.DataFrame({
            "day_of_week": weekday_categorical([]),
            "hour": pd.Series([], dtype=int),
            "total_minutes": pd.Series([], dtype=float),
            "active_day_count": pd.Series([], dtype=int),
            "average_minutes": pd.Series([], dtype=float),
        })
        return hourly[HOURLY_COLUMNS]

    starts = session_frame["start_datetime"]
    slots = pd.DataFrame({
        "day_of_week": starts.dt.dayofweek.map(lambda i: WEEKDAYS[i]),
        "hour": starts.dt.hour.astype(int),
        "duration_minutes": session_frame["duration_minutes"],
    })

    totals = (
        slots.groupby(["day_of_week", "hour"], sort=False)["duration_minutes"]
        .sum()
        .reset_index(name="total_minutes")
    )

    counts = count_active_days(daily_frame)
    counts["day_of_week"] = counts["day_of_week"].astype(str)

    # Weekdays without an active day only carry zero-minute sessions
    hourly = totals.merge(counts, on="day_of_week", how="inner")
    hourly["average_minutes"] = hourly["total_minutes"] / hourly["active_day_count"]
    hourly["day_of_week"] = weekday_categorical(hourly["day_of_week"])

    hourly = hourly.sort_values(["day_of_week", "hour"]).reset_index(drop=True)
    return hourly[HOURLY_COLUMNS]


def heatmap_pivot(hourly_frame: pd.DataFrame) -> pd.DataFrame:
    """
    Weekday x hour grid of average_minutes for the heatmap.

    Rows run Sunday..Monday (top to bottom reads Monday last), columns 0..23.
    Slots without viewing are NaN.
    """
    grid = hourly_frame.assign(day_of_week=hourly_frame["day_of_week"].astype(str)).pivot(
        index="day_of_week", columns="hour", values="average_minutes"
    )
    return grid.reindex(index=list(reversed(WEEKDAYS)), columns=range(24))


# =============================================================================
# Descriptive Summaries
# =============================================================================

@dataclass(frozen=True)
class DateRange:
    start: dt.date
    end: dt.date

    @property
    def span_days(self) -> int:
        return (self.end - self.start).days


def total_watch_time(session_frame: pd.DataFrame) -> Dict[str, float]:
    total_minutes = float(session_frame["duration_minutes"].sum())
    return {
        "total_minutes": total_minutes,
        "total_hours": total_minutes / 60,
        "total_days": total_minutes / 60 / 24,
    }


def top_shows(session_frame: pd.DataFrame, n: int = 5) -> pd.DataFrame:
    """
    Top-n TV shows by hours watched.

    Ties keep alphabetical order of show_name.
    """
    tv = session_frame[session_frame["content_type"] == ContentType.TV_SHOW.value]
    shows = (
        tv.groupby("show_name")["duration_minutes"]
        .sum()
        .div(60)
        .reset_index(name="hours_watched")
    )
    shows = shows.sort_values("hours_watched", ascending=False, kind="mergesort")
    return shows.head(n).reset_index(drop=True)


def content_split(session_frame: pd.DataFrame) -> pd.DataFrame:
    """Minutes and percentage share per content type."""
    split = (
        session_frame.groupby("content_type")["duration_minutes"]
        .sum()
        .reset_index(name="total_minutes")
    )
    grand_total = split["total_minutes"].sum()
    if grand_total > 0:
        split["percentage"] = (split["total_minutes"] / grand_total * 100).round(1)
    else:
        split["percentage"] = 0.0
    return split


def date_range(daily_frame: pd.DataFrame) -> Optional[DateRange]:
    if daily_frame.empty:
        return None
    return DateRange(start=min(daily_frame["date"]), end=max(daily_frame["date"]))


def monthly_activity(session_frame: pd.DataFrame) -> pd.DataFrame:
    """Items watched and hours per calendar month (YYYY-MM)."""
    if session_frame.empty:
        return pd.DataFrame(columns=["month_year", "items_watched", "total_hours"])

    monthly = (
        session_frame.assign(month_year=session_frame["start_datetime"].dt.strftime("%Y-%m"))
        .groupby("month_year", sort=True)
        .agg(
            items_watched=("duration_minutes", "size"),
            total_minutes=("duration_minutes", "sum"),
        )
        .reset_index()
    )
    monthly["total_hours"] = monthly["total_minutes"] / 60
    return monthly[["month_year", "items_watched", "total_hours"]]


@dataclass
class ViewingSummary:
    """Descriptive statistics consumed by the report."""
    n_sessions: int
    n_active_days: int
    total_minutes: float
    total_hours: float
    total_days: float
    top_shows: pd.DataFrame
    content_split: pd.DataFrame
    monthly_activity: pd.DataFrame
    active_day_counts: pd.DataFrame
    date_range: Optional[DateRange] = None
    record_day: Optional[RecordDay] = None


def summarize_viewing(tables: Dict[str, pd.DataFrame], top_n: int = 5) -> ViewingSummary:
    """Build the descriptive summary from the standardized tables."""
    sessions = tables["session_frame"]
    daily = tables["daily_frame"]
    totals = total_watch_time(sessions)

    return ViewingSummary(
        n_sessions=len(sessions),
        n_active_days=len(daily),
        total_minutes=totals["total_minutes"],
        total_hours=totals["total_hours"],
        total_days=totals["total_days"],
        top_shows=top_shows(sessions, n=top_n),
        content_split=content_split(sessions),
        monthly_activity=monthly_activity(sessions),
        active_day_counts=tables.get("active_day_counts", count_active_days(daily)),
        date_range=date_range(daily),
        record_day=select_record_day(daily),
    )


# =============================================================================
# Orchestration
# =============================================================================

def build_all_standardized_tables(
    config: RuntimeConfig,
    loader: Optional[ViewingActivityLoader] = None
) -> Dict[str, pd.DataFrame]:
    """
    Build every standardized table from the configured export.

    Returns:
        Dict with 'session_frame', 'daily_frame', 'active_day_counts',
        'hourly_frame'
    """
    loader = loader or ViewingActivityLoader(
        config.paths.input_path,
        columns=config.columns,
        excluded_types=frozenset(config.analysis.excluded_video_types),
        verbose=config.verbose,
        progress_bars=config.progress_bars,
    )

    session_frame = loader.load_session_frame()
    daily_frame = build_daily_frame(session_frame)
    active_day_counts = count_active_days(daily_frame)
    hourly_frame = build_hourly_frame(session_frame, daily_frame)

    if config.verbose:
        print(f"Built daily_frame: {daily_frame.shape}")
        print(f"Built hourly_frame: {hourly_frame.shape}")

    return {
        "session_frame": session_frame,
        "daily_frame": daily_frame,
        "active_day_counts": active_day_counts,
        "hourly_frame": hourly_frame,
    }


def save_tables(tables: Dict[str, pd.DataFrame], output_dir: str) -> List[Path]:
    """Write each table to <output_dir>/<name>.csv."""
    out = Path(output_dir)
    out.mkdir(parents=True, exist_ok=True)

    paths = []
    for name, frame in tables.items():
        path = out / f"{name}.csv"
        frame.to_csv(path, index=False)
        print(f"Saved: {path}")
        paths.append(path)
    return paths
