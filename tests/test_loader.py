"""Tests for the export loader and column schema."""

import pytest

from viewstats.configs import ColumnSchema
from viewstats.data import SchemaError, ViewingActivityLoader, normalize_header, resolve_columns

from conftest import SAMPLE_ROWS, write_export


def test_missing_input_is_fatal(tmp_path):
    with pytest.raises(FileNotFoundError, match="Input not found"):
        ViewingActivityLoader(str(tmp_path / "nope.csv"))


def test_normalize_header():
    assert normalize_header("Start Time") == normalize_header("Start.Time")
    assert normalize_header(" Supplemental Video Type ") == "supplemental.video.type"


def test_resolve_columns_accepts_dotted_headers():
    headers = ["Title", "Supplemental.Video.Type", "Start.Time", "Duration", "Country"]

    mapping = resolve_columns(headers, ColumnSchema())

    assert mapping == {
        "title": "Title",
        "supplemental_video_type": "Supplemental.Video.Type",
        "start_time": "Start.Time",
        "duration": "Duration",
    }


def test_resolve_columns_reports_missing():
    with pytest.raises(SchemaError) as excinfo:
        resolve_columns(["Title", "Duration"], ColumnSchema())

    assert set(excinfo.value.missing) == {"supplemental_video_type", "start_time"}
    assert isinstance(excinfo.value, ValueError)


def test_load_sessions(sample_export):
    loader = ViewingActivityLoader(str(sample_export), verbose=False, progress_bars=False)

    raw = loader.load_raw_frame()
    sessions = loader.load_sessions()

    assert list(raw.columns) == ["title", "supplemental_video_type", "start_time", "duration"]
    assert len(raw) == len(SAMPLE_ROWS)
    # 2 supplemental rows and 1 malformed timestamp dropped
    assert len(sessions) == 6
    assert sum(s.duration_minutes for s in sessions) == pytest.approx(395.0)


def test_custom_headers_via_schema(tmp_path):
    path = tmp_path / "custom.csv"
    path.write_text("Name,Kind,When,Length\nInception,,2024-01-02 18:00:00,02:00:00\n")
    schema = ColumnSchema(title="Name", supplemental_video_type="Kind", start_time="When", duration="Length")

    loader = ViewingActivityLoader(str(path), columns=schema, verbose=False, progress_bars=False)
    frame = loader.load_session_frame()

    assert frame["duration_minutes"].tolist() == [120.0]
    assert frame["content_type"].tolist() == ["Movie"]


def test_missing_column_raises_schema_error(tmp_path):
    path = write_export(
        tmp_path / "partial.csv",
        SAMPLE_ROWS,
        header=["Title", "Start Time", "Duration"],
    )
    loader = ViewingActivityLoader(str(path), verbose=False, progress_bars=False)

    with pytest.raises(SchemaError, match="supplemental_video_type"):
        loader.load_raw_frame()


def test_empty_export_warns(tmp_path):
    path = write_export(tmp_path / "bad.csv", [("garbage", "00:10:00", "X", "")])
    loader = ViewingActivityLoader(str(path), verbose=False, progress_bars=False)

    with pytest.warns(UserWarning, match="No valid sessions"):
        sessions = loader.load_sessions()

    assert sessions == []
