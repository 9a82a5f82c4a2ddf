import csv
import datetime as dt

import pytest

from viewstats.configs import load_config


EXPORT_HEADER = [
    "Profile Name",
    "Start Time",
    "Duration",
    "Attributes",
    "Title",
    "Supplemental Video Type",
    "Device Type",
    "Bookmark",
    "Latest Bookmark",
    "Country",
]

# (start time, duration, title, supplemental type)
SAMPLE_ROWS = [
    ("2024-01-01 20:00:00", "01:30:00", "Breaking Bad: Season 1: Pilot", ""),
    ("2024-01-01 21:40:00", "00:45:00", "Breaking Bad: Season 1: Cat's in the Bag...", ""),
    ("2024-01-01 19:00:00", "00:01:00", "Breaking Bad: Season 2 (Trailer)", "TRAILER"),
    ("2024-01-02 18:00:00", "02:00:00", "Inception", ""),
    ("2024-01-03 22:15:00", "00:30:00", "The Matrix: Reloaded", ""),
    ("not a date", "00:20:00", "Broken Row", ""),
    ("2024-01-08 20:30:00", "00:50:00", "The Office (U.S.): Season 2: Diversity Day", ""),
    ("2024-01-08 09:00:00", "00:00:30", "The Office (U.S.): Season 2: Recap", "RECAP"),
    ("2024-02-10 14:00:00", "01:00:00", "The Office (U.S.): Season 3: Gay Witch Hunt", ""),
]


def write_export(path, rows, header=EXPORT_HEADER):
    with open(path, "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(header)
        for start, duration, title, video_type in rows:
            record = {
                "Profile Name": "Ellie",
                "Start Time": start,
                "Duration": duration,
                "Attributes": "",
                "Title": title,
                "Supplemental Video Type": video_type,
                "Device Type": "Smart TV",
                "Bookmark": duration,
                "Latest Bookmark": duration,
                "Country": "US (United States)",
            }
            writer.writerow([record.get(col, "") for col in header])
    return path


@pytest.fixture
def sample_export(tmp_path):
    """Small export with excluded, malformed and valid rows."""
    return write_export(tmp_path / "ViewingActivity.csv", SAMPLE_ROWS)


@pytest.fixture
def synthetic_export(tmp_path):
    """Eight weeks of deterministic viewing, heavier on weekends."""
    rows = []
    start = dt.date(2024, 3, 4)  # a Monday
    for offset in range(56):
        day = start + dt.timedelta(days=offset)
        if offset % 9 == 4:
            continue  # some inactive days
        weekend = day.isoweekday() >= 6
        minutes = 40 + (offset * 7) % 35 + (90 if weekend else 0)
        hour = 20 if not weekend else 15
        rows.append((
            f"{day.isoformat()} {hour:02d}:05:00",
            f"{minutes // 60:02d}:{minutes % 60:02d}:00",
            f"Show {offset % 3}: Season 1: Episode {offset}",
            "",
        ))
        rows.append((
            f"{day.isoformat()} 12:00:00",
            "00:02:00",
            "Preview",
            "HOOK",
        ))
    return write_export(tmp_path / "Synthetic.csv", rows)


@pytest.fixture
def smoke_config(tmp_path, sample_export):
    return load_config(
        "smoke",
        override_input_path=str(sample_export),
        override_output_root=str(tmp_path / "out"),
    )
