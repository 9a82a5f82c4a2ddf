"""
Row parsing and session filtering.

Turns raw export rows into typed Session records. Every function here is
pure: no I/O, no shared state, one row in and at most one Session out.
"""

import datetime as dt
from dataclasses import dataclass
from enum import Enum
from typing import AbstractSet, Iterable, List, Optional

import pandas as pd

from viewstats.constants import (
    EXCLUDED_SUPPLEMENTAL_TYPES,
    TIMESTAMP_FORMAT,
    TV_SHOW_MIN_COLONS,
)


class ContentType(str, Enum):
    MOVIE = "Movie"
    TV_SHOW = "TV Show"


@dataclass(frozen=True)
class RawRow:
    """One logged playback event as it appears in the export."""
    title: str
    supplemental_video_type: str
    start_time: str
    duration: str


@dataclass(frozen=True)
class Session:
    """A cleaned playback event."""
    start_datetime: dt.datetime
    date: dt.date
    duration_minutes: float
    content_type: ContentType
    show_name: str


SESSION_COLUMNS = ["start_datetime", "date", "duration_minutes", "content_type", "show_name"]


# =============================================================================
# Field Parsers
# =============================================================================

def parse_timestamp(value) -> Optional[dt.datetime]:
    """Parse a naive 'YYYY-MM-DD HH:MM:SS' timestamp, or None if malformed."""
    if not isinstance(value, str):
        return None
    try:
        return dt.datetime.strptime(value.strip(), TIMESTAMP_FORMAT)
    except ValueError:
        return None


def parse_duration(value) -> Optional[float]:
    """
    Parse an 'H:M:S' duration into minutes.

    Examples:
        "01:30:00" -> 90.0
        "00:00:45" -> 0.75
    """
    if not isinstance(value, str):
        return None
    parts = value.strip().split(":")
    if len(parts) != 3:
        return None
    try:
        hours, minutes, seconds = (int(p) for p in parts)
    except ValueError:
        return None
    if hours < 0 or minutes < 0 or seconds < 0:
        return None
    return hours * 60 + minutes + seconds / 60


def infer_content_type(title: str) -> ContentType:
    """Two or more colons ("Show: Season: Episode") means a series."""
    if title.count(":") >= TV_SHOW_MIN_COLONS:
        return ContentType.TV_SHOW
    return ContentType.MOVIE


def extract_show_name(title: str) -> str:
    """Everything before the first colon (the whole title if there is none)."""
    return title.split(":", 1)[0]


# =============================================================================
# Row -> Session
# =============================================================================

def is_content_row(
    row: RawRow,
    excluded_types: AbstractSet[str] = EXCLUDED_SUPPLEMENTAL_TYPES,
) -> bool:
    """False for previews, recaps and other supplemental playback."""
    return row.supplemental_video_type not in excluded_types


def parse_record(row: RawRow) -> Optional[Session]:
    """
    Convert one raw row to a Session.

    Returns None when the start time or duration cannot be parsed.
    """
    start = parse_timestamp(row.start_time)
    if start is None:
        return None

    minutes = parse_duration(row.duration)
    if minutes is None:
        return None

    title = row.title if isinstance(row.title, str) else ""

    return Session(
        start_datetime=start,
        date=start.date(),
        duration_minutes=minutes,
        content_type=infer_content_type(title),
        show_name=extract_show_name(title),
    )


def filter_sessions(
    rows: Iterable[RawRow],
    excluded_types: AbstractSet[str] = EXCLUDED_SUPPLEMENTAL_TYPES,
) -> List[Session]:
    """
    Drop supplemental rows and rows that fail to parse.

    Input order is preserved.
    """
    sessions = []
    for row in rows:
        if not is_content_row(row, excluded_types):
            continue
        session = parse_record(row)
        if session is not None:
            sessions.append(session)
    return sessions


def sessions_to_frame(sessions: Iterable[Session]) -> pd.DataFrame:
    """
    Tabulate sessions into the session_frame.

    Columns:
        - start_datetime: datetime64 start of playback
        - date: calendar date (datetime.date)
        - duration_minutes: float minutes watched
        - content_type: "Movie" or "TV Show"
        - show_name: title prefix before the first colon
    """
    records = [
        {
            "start_datetime": s.start_datetime,
            "date": s.date,
            "duration_minutes": s.duration_minutes,
            "content_type": s.content_type.value,
            "show_name": s.show_name,
        }
        for s in sessions
    ]
    frame = pd.DataFrame(records, columns=SESSION_COLUMNS)
    frame["start_datetime"] = pd.to_datetime(frame["start_datetime"])
    frame["duration_minutes"] = frame["duration_minutes"].astype(float)
    return frame
