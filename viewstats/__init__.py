"""
Viewing History Analysis

This package turns a streaming-service viewing activity export into
daily viewing-time tables and tests whether viewing intensity differs
by day of week.

Structure:
    viewstats/
    ├── __init__.py              # This file
    ├── constants.py             # Fixed weekday/month tables, exclusion set
    ├── configs/                 # Runtime configs (default/smoke)
    ├── data/                    # Export loading and standardized tables
    │   ├── records.py          # Row parsing and session filtering
    │   └── standardized_tables.py  # daily_frame, hourly_frame, summaries
    ├── stats/                   # Normality check, Kruskal-Wallis, bootstrap
    ├── viz/                     # Timeline, boxplot, density, Q-Q, heatmap
    ├── hypotheses/              # Hypothesis implementations
    └── run_analysis.py          # End-to-end CLI

Key Data Products:
    - session_frame: One row per cleaned playback event
    - daily_frame: One row per active day with total minutes
    - hourly_frame: One row per (weekday, hour) with active-day averages

Usage:
    from viewstats.configs import load_config
    from viewstats.data.standardized_tables import build_all_standardized_tables

    config = load_config("default", override_input_path="ViewingActivity.csv")
    tables = build_all_standardized_tables(config)
"""

__version__ = "0.1.0"
