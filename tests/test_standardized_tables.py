"""Tests for daily aggregation, active-day normalization and summaries."""

import datetime as dt

import numpy as np
import pandas as pd
import pytest

from viewstats.configs import load_config
from viewstats.constants import WEEKDAYS
from viewstats.data.records import RawRow, filter_sessions, sessions_to_frame
from viewstats.data.standardized_tables import (
    build_all_standardized_tables,
    build_daily_frame,
    build_hourly_frame,
    content_split,
    count_active_days,
    date_range,
    heatmap_pivot,
    monthly_activity,
    save_tables,
    select_record_day,
    summarize_viewing,
    top_shows,
)

from conftest import SAMPLE_ROWS


def _session_frame(rows):
    raw = [
        RawRow(title=title, supplemental_video_type=video_type, start_time=start, duration=duration)
        for start, duration, title, video_type in rows
    ]
    return sessions_to_frame(filter_sessions(raw))


@pytest.fixture
def sessions():
    return _session_frame(SAMPLE_ROWS)


@pytest.fixture
def daily(sessions):
    return build_daily_frame(sessions)


def test_daily_frame(daily):
    assert list(daily.columns) == ["date", "total_minutes", "day_of_week", "month"]
    assert daily["date"].tolist() == [
        dt.date(2024, 1, 1),
        dt.date(2024, 1, 2),
        dt.date(2024, 1, 3),
        dt.date(2024, 1, 8),
        dt.date(2024, 2, 10),
    ]
    assert daily["total_minutes"].tolist() == pytest.approx([135.0, 120.0, 30.0, 50.0, 60.0])
    assert daily["day_of_week"].astype(str).tolist() == ["Monday", "Tuesday", "Wednesday", "Monday", "Saturday"]
    assert daily["month"].tolist() == ["January"] * 4 + ["February"]
    assert list(daily["day_of_week"].cat.categories) == list(WEEKDAYS)


def test_daily_sum_matches_sessions(sessions, daily):
    assert daily["total_minutes"].sum() == pytest.approx(sessions["duration_minutes"].sum())
    assert (daily["total_minutes"] > 0).all()


def test_zero_minute_days_are_not_active():
    frame = _session_frame([
        ("2024-01-01 10:00:00", "00:00:00", "Nothing", ""),
        ("2024-01-02 10:00:00", "00:10:00", "Something", ""),
    ])

    daily = build_daily_frame(frame)
    hourly = build_hourly_frame(frame, daily)

    assert daily["date"].tolist() == [dt.date(2024, 1, 2)]
    assert hourly["day_of_week"].astype(str).tolist() == ["Tuesday"]


def test_record_day_prefers_earliest_tie():
    daily = pd.DataFrame({
        "date": [dt.date(2024, 1, 3), dt.date(2024, 1, 1), dt.date(2024, 1, 2)],
        "total_minutes": [250.0, 100.0, 250.0],
        "day_of_week": ["Wednesday", "Monday", "Tuesday"],
        "month": ["January"] * 3,
    })

    record = select_record_day(daily)

    assert record.date == dt.date(2024, 1, 2)
    assert record.total_minutes == 250.0
    assert record.total_hours == pytest.approx(250.0 / 60)
    assert record.day_of_week == "Tuesday"


def test_record_day_from_sample(daily):
    assert select_record_day(daily).date == dt.date(2024, 1, 1)


def test_active_day_counts(daily):
    counts = count_active_days(daily)
    assert dict(zip(counts["day_of_week"].astype(str), counts["active_day_count"])) == {
        "Monday": 2,
        "Tuesday": 1,
        "Wednesday": 1,
        "Saturday": 1,
    }


def test_hourly_average_uses_active_days_of_weekday():
    # Three active Mondays, only one of them with viewing at 20:00
    frame = _session_frame([
        ("2024-01-01 20:00:00", "01:30:00", "Late Movie", ""),
        ("2024-01-08 08:00:00", "00:10:00", "Morning", ""),
        ("2024-01-15 09:00:00", "00:10:00", "Morning", ""),
    ])
    daily = build_daily_frame(frame)

    hourly = build_hourly_frame(frame, daily)
    slot = hourly[(hourly["day_of_week"] == "Monday") & (hourly["hour"] == 20)].iloc[0]

    assert slot["total_minutes"] == pytest.approx(90.0)
    assert slot["active_day_count"] == 3
    assert slot["average_minutes"] == pytest.approx(30.0)


def test_hourly_frame_from_sample(sessions, daily):
    hourly = build_hourly_frame(sessions, daily)

    assert list(hourly.columns) == ["day_of_week", "hour", "total_minutes", "active_day_count", "average_minutes"]
    keyed = {
        (str(r.day_of_week), r.hour): r.average_minutes
        for r in hourly.itertuples(index=False)
    }
    assert keyed == pytest.approx({
        ("Monday", 20): 70.0,
        ("Monday", 21): 22.5,
        ("Tuesday", 18): 120.0,
        ("Wednesday", 22): 30.0,
        ("Saturday", 14): 60.0,
    })
    assert (hourly["active_day_count"] >= 1).all()
    assert hourly["total_minutes"].sum() == pytest.approx(sessions["duration_minutes"].sum())


def test_heatmap_pivot_shape(sessions, daily):
    grid = heatmap_pivot(build_hourly_frame(sessions, daily))

    assert grid.shape == (7, 24)
    assert list(grid.index) == list(reversed(WEEKDAYS))
    assert grid.loc["Monday", 20] == pytest.approx(70.0)
    assert np.isnan(grid.loc["Sunday", 0])


def test_top_shows(sessions):
    shows = top_shows(sessions, n=5)

    assert shows["show_name"].tolist() == ["Breaking Bad", "The Office (U.S.)"]
    assert shows["hours_watched"].tolist() == pytest.approx([2.25, 110 / 60])


def test_top_shows_limit(sessions):
    assert len(top_shows(sessions, n=1)) == 1


def test_content_split(sessions):
    split = content_split(sessions).set_index("content_type")

    assert split.loc["Movie", "total_minutes"] == pytest.approx(150.0)
    assert split.loc["TV Show", "total_minutes"] == pytest.approx(245.0)
    assert split.loc["Movie", "percentage"] == 38.0
    assert split.loc["TV Show", "percentage"] == 62.0


def test_monthly_activity(sessions):
    monthly = monthly_activity(sessions)

    assert monthly["month_year"].tolist() == ["2024-01", "2024-02"]
    assert monthly["items_watched"].tolist() == [5, 1]
    assert monthly["total_hours"].tolist() == pytest.approx([335 / 60, 1.0])


def test_date_range(daily):
    span = date_range(daily)
    assert span.start == dt.date(2024, 1, 1)
    assert span.end == dt.date(2024, 2, 10)
    assert span.span_days == 40


def test_empty_sessions_give_empty_tables():
    empty = sessions_to_frame([])

    daily = build_daily_frame(empty)
    hourly = build_hourly_frame(empty, daily)

    assert daily.empty and hourly.empty
    assert count_active_days(daily).empty
    assert select_record_day(daily) is None
    assert date_range(daily) is None
    assert top_shows(empty).empty
    assert monthly_activity(empty).empty


def test_build_all_and_summarize(smoke_config):
    tables = build_all_standardized_tables(smoke_config)

    assert set(tables) == {"session_frame", "daily_frame", "active_day_counts", "hourly_frame"}

    summary = summarize_viewing(tables, top_n=smoke_config.analysis.top_n_shows)
    assert summary.n_sessions == 6
    assert summary.n_active_days == 5
    assert summary.total_hours == pytest.approx(395 / 60)
    assert summary.total_days == pytest.approx(395 / 60 / 24)
    assert summary.record_day.date == dt.date(2024, 1, 1)


def test_build_all_missing_input(tmp_path):
    config = load_config("smoke", override_input_path=str(tmp_path / "missing.csv"))

    with pytest.raises(FileNotFoundError):
        build_all_standardized_tables(config)


def test_save_tables(tmp_path, sessions, daily):
    paths = save_tables({"daily_frame": daily}, str(tmp_path / "tables"))

    assert [p.name for p in paths] == ["daily_frame.csv"]
    assert pd.read_csv(paths[0])["total_minutes"].sum() == pytest.approx(395.0)
