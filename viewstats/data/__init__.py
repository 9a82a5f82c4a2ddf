"""
Data loading utilities for the viewing activity export.

Resolves the export's column headers through an explicit schema and turns
its rows into Session records.
"""

import re
import warnings
from pathlib import Path
from typing import AbstractSet, Dict, Iterator, List, Optional

import pandas as pd
from tqdm import tqdm

from viewstats.configs import ColumnSchema
from viewstats.constants import EXCLUDED_SUPPLEMENTAL_TYPES
from viewstats.data.records import (
    RawRow,
    Session,
    filter_sessions,
    sessions_to_frame,
)


class SchemaError(ValueError):
    """Raised when the export is missing required columns."""

    def __init__(self, missing: Dict[str, str], available: List[str]):
        self.missing = missing
        self.available = available
        details = ", ".join(f"{field} (expected '{header}')" for field, header in missing.items())
        super().__init__(f"Missing required columns: {details}. Available: {available}")


def normalize_header(name: str) -> str:
    """Collapse spaces and other separators so 'Start Time' == 'Start.Time'."""
    return re.sub(r"[^0-9A-Za-z]+", ".", name.strip()).strip(".").lower()


def resolve_columns(headers: List[str], schema: ColumnSchema) -> Dict[str, str]:
    """
    Map logical field names to the actual headers present in the export.

    Args:
        headers: Column headers as read from the file
        schema: Expected header per logical field

    Returns:
        Dict of logical field -> actual header

    Raises:
        SchemaError: If any required field has no matching header
    """
    by_normalized = {}
    for header in headers:
        by_normalized.setdefault(normalize_header(header), header)

    resolved = {}
    missing = {}
    for field_name, expected in schema.as_dict().items():
        actual = by_normalized.get(normalize_header(expected))
        if actual is None:
            missing[field_name] = expected
        else:
            resolved[field_name] = actual

    if missing:
        raise SchemaError(missing, list(headers))
    return resolved


class ViewingActivityLoader:
    """
    Loader for a viewing activity CSV export.

    Reads every cell as a string so that parsing decisions (timestamps,
    durations, missing tags) stay with the record parser.
    """

    def __init__(
        self,
        path: str,
        columns: Optional[ColumnSchema] = None,
        excluded_types: AbstractSet[str] = EXCLUDED_SUPPLEMENTAL_TYPES,
        verbose: bool = True,
        progress_bars: bool = True
    ):
        """
        Initialize loader.

        Args:
            path: Path to the CSV export
            columns: Header mapping (defaults to the standard export headers)
            excluded_types: Supplemental video types to drop
            verbose: Print status lines
            progress_bars: Show a progress bar while parsing rows
        """
        self.path = Path(path)
        self.columns = columns or ColumnSchema()
        self.excluded_types = frozenset(excluded_types)
        self.verbose = verbose
        self.progress_bars = progress_bars

        if not self.path.exists():
            raise FileNotFoundError(f"Input not found: {self.path}")

        self._raw: Optional[pd.DataFrame] = None

    def _log(self, msg: str):
        if self.verbose:
            print(msg)

    def load_raw_frame(self) -> pd.DataFrame:
        """
        Read the export and rename its columns to logical field names.

        Columns:
            - title, supplemental_video_type, start_time, duration (all str)
        """
        if self._raw is None:
            df = pd.read_csv(
                self.path,
                dtype=str,
                keep_default_na=False,
                encoding="utf-8-sig",
            )
            mapping = resolve_columns(list(df.columns), self.columns)
            df = df[list(mapping.values())].rename(columns={v: k for k, v in mapping.items()})
            self._raw = df
            self._log(f"Loaded viewing activity: {df.shape[0]:,} rows from {self.path}")
        return self._raw

    def iter_raw_rows(self) -> Iterator[RawRow]:
        raw = self.load_raw_frame()
        rows = raw[["title", "supplemental_video_type", "start_time", "duration"]].itertuples(
            index=False, name=None
        )
        if self.progress_bars:
            rows = tqdm(rows, total=len(raw), desc=f"Parsing {self.path.name}")
        for title, video_type, start_time, duration in rows:
            yield RawRow(
                title=title,
                supplemental_video_type=video_type,
                start_time=start_time,
                duration=duration,
            )

    def load_sessions(self) -> List[Session]:
        """Parse and filter every row of the export."""
        sessions = filter_sessions(self.iter_raw_rows(), self.excluded_types)
        n_raw = len(self.load_raw_frame())
        dropped = n_raw - len(sessions)
        self._log(f"Kept {len(sessions):,} sessions ({dropped:,} rows dropped)")
        if n_raw and not sessions:
            warnings.warn(f"No valid sessions in {self.path}")
        return sessions

    def load_session_frame(self) -> pd.DataFrame:
        return sessions_to_frame(self.load_sessions())
