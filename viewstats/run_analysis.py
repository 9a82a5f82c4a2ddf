#!/usr/bin/env python -u
"""
Run the full viewing history analysis.

Usage:
    python -m viewstats.run_analysis --input ViewingActivity.csv
    python -m viewstats.run_analysis --config smoke --input ViewingActivity.csv --no-figures
"""

import argparse
import json
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from viewstats.configs import RuntimeConfig, ensure_output_dirs, load_config
from viewstats.data.standardized_tables import (
    ViewingSummary,
    build_all_standardized_tables,
    save_tables,
    summarize_viewing,
)
from viewstats.hypotheses import AVAILABLE_HYPOTHESES


def format_summary(summary: ViewingSummary) -> str:
    """Render the descriptive summary as console text."""
    lines = [
        "--- TOTAL WATCH TIME ---",
        f"Sessions: {summary.n_sessions:,}",
        f"Active Days: {summary.n_active_days:,}",
        f"Total Hours Watched: {summary.total_hours:.2f}",
        f"Total Days Spent Watching: {summary.total_days:.2f}",
        "",
        f"--- TOP {len(summary.top_shows)} BINGED SHOWS ---",
    ]
    for rank, row in enumerate(summary.top_shows.itertuples(index=False), start=1):
        lines.append(f"  {rank}. {row.show_name}: {row.hours_watched:.2f} h")

    lines += ["", "--- MOVIES VS TV SHOWS ---"]
    for row in summary.content_split.itertuples(index=False):
        lines.append(f"  {row.content_type}: {row.total_minutes:.1f} min ({row.percentage:.1f}%)")

    lines += ["", "--- DATA TIMELINE ---"]
    if summary.date_range is None:
        lines.append("  No viewing activity")
    else:
        lines.append(f"Start Date: {summary.date_range.start}")
        lines.append(f"End Date:   {summary.date_range.end}")
        lines.append(f"Total Days Spanned: {summary.date_range.span_days}")

    lines += ["", "--- ITEMS PER MONTH ---"]
    for row in summary.monthly_activity.itertuples(index=False):
        lines.append(f"  {row.month_year}: {row.items_watched} items, {row.total_hours:.2f} h")

    lines += ["", "--- MOST ACTIVE DAY EVER ---"]
    record = summary.record_day
    if record is None:
        lines.append("  No viewing activity")
    else:
        lines.append(
            f"  {record.date} ({record.day_of_week}, {record.month}): "
            f"{record.total_minutes:.1f} min ({record.total_hours:.2f} h)"
        )

    lines += ["", "--- ACTIVE DAYS PER WEEKDAY ---"]
    for row in summary.active_day_counts.itertuples(index=False):
        lines.append(f"  {row.day_of_week}: {row.active_day_count}")

    return "\n".join(lines)


def run_analysis(
    config: RuntimeConfig,
    hypothesis_ids: Optional[List[str]] = None,
    make_figures: bool = True
) -> Dict[str, Any]:
    """
    Build tables, report descriptive statistics and run hypotheses.

    Args:
        config: Runtime configuration
        hypothesis_ids: Hypotheses to run (default: all available)
        make_figures: Render figures

    Returns:
        Dict of hypothesis id -> result summary (or error)
    """
    print(f"{'='*70}")
    print(f"VIEWING HISTORY ANALYSIS")
    print(f"Started: {datetime.now().isoformat()}")
    print(f"Input: {config.paths.input_path}")
    print(f"Output: {config.paths.output_root}")
    print(f"{'='*70}\n")

    # Fails before any output is written if the export is missing
    tables = build_all_standardized_tables(config)
    ensure_output_dirs(config)

    summary = summarize_viewing(tables, top_n=config.analysis.top_n_shows)
    summary_text = format_summary(summary)
    print(summary_text)

    summary_path = Path(config.paths.reports_dir) / "summary_report.txt"
    with open(summary_path, 'w') as f:
        f.write(summary_text)
    print(f"Saved: {summary_path}")

    save_tables(
        {
            **tables,
            'top_shows': summary.top_shows,
            'content_split': summary.content_split,
            'monthly_activity': summary.monthly_activity,
        },
        config.paths.tables_dir,
    )

    results = {}

    for h_id in hypothesis_ids or list(AVAILABLE_HYPOTHESES):
        HypothesisClass = AVAILABLE_HYPOTHESES[h_id]

        try:
            h = HypothesisClass(config, tables=tables)
            result = h.run(make_figures=make_figures)

            results[h_id] = {
                'supported': result.supported,
                'effect_size': float(result.effect_size) if result.effect_size == result.effect_size else None,
                'effect_size_ci': list(result.effect_size_ci),
                'p_value': float(result.p_value) if result.p_value == result.p_value else None,
                'n_observations': result.n_observations,
                'error': result.statistics.get('error'),
                'timestamp': result.timestamp,
            }
        except Exception as e:
            import traceback
            print(f"ERROR: {e}")
            traceback.print_exc()
            results[h_id] = {'error': str(e)}

    # Save summary
    results_path = Path(config.paths.output_root) / 'results_summary.json'
    with open(results_path, 'w') as f:
        json.dump(results, f, indent=2, default=str)
    print(f"\nSaved summary to {results_path}")

    print(f"\nCompleted: {datetime.now().isoformat()}")
    return results


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Analyze a viewing activity export")
    parser.add_argument("--config", default="default",
                        help="Configuration to use (default or smoke)")
    parser.add_argument("--input", type=str, default=None,
                        help="Override viewing activity CSV path")
    parser.add_argument("--output-root", type=str, default=None,
                        help="Override output directory")
    parser.add_argument("--hypothesis", choices=list(AVAILABLE_HYPOTHESES.keys()) + ['all'],
                        default='all', help="Hypothesis to test (or 'all')")
    parser.add_argument("--no-figures", action="store_true",
                        help="Skip figure rendering")
    args = parser.parse_args(argv)

    config = load_config(args.config, override_input_path=args.input,
                         override_output_root=args.output_root)
    hypothesis_ids = None if args.hypothesis == 'all' else [args.hypothesis]

    try:
        run_analysis(config, hypothesis_ids=hypothesis_ids, make_figures=not args.no_figures)
    except FileNotFoundError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
