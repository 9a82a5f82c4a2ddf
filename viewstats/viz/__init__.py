"""
Visualization Utilities for Viewing Analysis

Provides the standard figures for a viewing history run:
- Timeline of daily minutes with a LOWESS trend
- Daily minutes by weekday (boxplot with jittered days)
- Per-weekday density grid
- Normal Q-Q plot of daily minutes
- Weekday x hour heatmap of active-day averages

All plots share one serif style so the figures read as a set.
"""

from pathlib import Path
from typing import Dict, List, Optional, Tuple

import numpy as np
import pandas as pd

from viewstats.constants import WEEKDAYS
from viewstats.data.standardized_tables import heatmap_pivot
from viewstats.stats import qq_points

# Lazy imports for matplotlib (can be slow)
_plt = None
_sns = None


def _get_plt():
    """Lazy import matplotlib."""
    global _plt
    if _plt is None:
        import matplotlib
        matplotlib.use('Agg')  # Use non-interactive backend by default
        import matplotlib.pyplot as plt
        _plt = plt
        plt.style.use('seaborn-v0_8-whitegrid')
        plt.rcParams.update({
            'figure.figsize': (10, 6),
            'font.family': 'serif',
            'font.size': 11,
            'axes.titlesize': 13,
            'axes.labelsize': 12,
            'xtick.labelsize': 10,
            'ytick.labelsize': 10,
            'legend.fontsize': 10,
            'figure.dpi': 100,
            'savefig.dpi': 150,
            'savefig.bbox': 'tight'
        })
    return _plt


def _get_sns():
    """Lazy import seaborn."""
    global _sns
    if _sns is None:
        import seaborn as sns
        _sns = sns
        sns.set_palette("husl")
    return _sns


# =============================================================================
# Color Palettes and Styling
# =============================================================================

VIEWING_PALETTE = {
    'line': 'steelblue',
    'trend': 'darkred',
    'points': 'black',
    'reference': '#A23B72',
}


def get_weekday_palette() -> Dict[str, str]:
    """One husl color per weekday, Monday first."""
    sns = _get_sns()
    colors = sns.color_palette("husl", len(WEEKDAYS)).as_hex()
    return dict(zip(WEEKDAYS, colors))


# =============================================================================
# Timeline
# =============================================================================

def plot_timeline(
    daily_frame: pd.DataFrame,
    title: str = "Timeline of Daily Viewing",
    trend_frac: float = 0.3,
    ax=None
):
    """
    Line plot of total minutes per active day with a LOWESS trend.

    Args:
        daily_frame: Table with 'date' and 'total_minutes'
        title: Plot title
        trend_frac: LOWESS smoothing span
        ax: Matplotlib axes (creates new figure if None)

    Returns:
        matplotlib axes
    """
    plt = _get_plt()
    from statsmodels.nonparametric.smoothers_lowess import lowess

    if ax is None:
        fig, ax = plt.subplots(figsize=(12, 6))

    dates = pd.to_datetime(daily_frame['date'])
    minutes = daily_frame['total_minutes'].to_numpy(dtype=float)

    ax.plot(dates, minutes, color=VIEWING_PALETTE['line'], alpha=0.6)

    if len(daily_frame) >= 3:
        x = dates.map(pd.Timestamp.toordinal).to_numpy(dtype=float)
        # At least three neighbours per local fit
        frac = min(1.0, max(trend_frac, 3.0 / len(daily_frame)))
        smoothed = lowess(minutes, x, frac=frac, return_sorted=True)
        trend_dates = [pd.Timestamp.fromordinal(int(v)) for v in smoothed[:, 0]]
        ax.plot(trend_dates, smoothed[:, 1], color=VIEWING_PALETTE['trend'], linewidth=2)

    if len(daily_frame) > 0:
        subtitle = f"Daily watch time from {min(daily_frame['date'])} to {max(daily_frame['date'])}"
        ax.set_title(f"{title}\n{subtitle}")
    else:
        ax.set_title(title)
    ax.set_xlabel('Date')
    ax.set_ylabel('Minutes Watched per Day')

    return ax


# =============================================================================
# Weekday Comparisons
# =============================================================================

def plot_weekday_box(
    daily_frame: pd.DataFrame,
    title: str = "Viewing Intensity by Day of Week",
    ax=None
):
    """
    Boxplot of daily minutes per weekday with each active day jittered on top.

    Args:
        daily_frame: Table with 'day_of_week' and 'total_minutes'
        title: Plot title
        ax: Matplotlib axes

    Returns:
        matplotlib axes
    """
    plt = _get_plt()
    sns = _get_sns()

    if ax is None:
        fig, ax = plt.subplots(figsize=(10, 6))

    plot_df = daily_frame.assign(day_of_week=daily_frame['day_of_week'].astype(str))
    order = list(WEEKDAYS)

    sns.boxplot(
        data=plot_df, x='day_of_week', y='total_minutes',
        order=order, hue='day_of_week', hue_order=order,
        palette=get_weekday_palette(), legend=False, ax=ax
    )
    sns.stripplot(
        data=plot_df, x='day_of_week', y='total_minutes',
        order=order, color=VIEWING_PALETTE['points'],
        alpha=0.1, jitter=0.2, ax=ax
    )

    ax.set_title(f"{title}\nTotal Minutes Watched (Active Days Only)")
    ax.set_xlabel('Day of Week')
    ax.set_ylabel('Total Minutes Watched')
    ax.tick_params(axis='x', rotation=45)

    return ax


def plot_weekday_density(
    daily_frame: pd.DataFrame,
    title: str = "Distribution of Viewing Minutes by Day",
    ncols: int = 4
):
    """
    Grid of density curves, one panel per weekday.

    Weekdays with fewer than two distinct values get an empty panel.

    Returns:
        matplotlib figure
    """
    sns = _get_sns()

    nrows = int(np.ceil(len(WEEKDAYS) / ncols))
    fig, axes = create_figure_grid(nrows, ncols, sharex=True)
    palette = get_weekday_palette()
    labels = daily_frame['day_of_week'].astype(str)

    for ax, day in zip(axes.flat, WEEKDAYS):
        values = daily_frame.loc[labels == day, 'total_minutes']
        if values.nunique() >= 2:
            sns.kdeplot(values, fill=True, alpha=0.5, color=palette[day], ax=ax)
        else:
            ax.text(0.5, 0.5, 'n/a', ha='center', va='center', transform=ax.transAxes)
        ax.set_title(day)
        ax.set_xlabel('Minutes Watched')
        ax.set_ylabel('Density')

    for ax in list(axes.flat)[len(WEEKDAYS):]:
        ax.set_visible(False)

    fig.suptitle(title)
    return fig


# =============================================================================
# Diagnostics
# =============================================================================

def plot_qq(
    values,
    title: str = "Q-Q Plot of Viewing Minutes",
    ax=None
):
    """
    Normal Q-Q plot with a least-squares reference line.

    Returns:
        matplotlib axes
    """
    plt = _get_plt()

    if ax is None:
        fig, ax = plt.subplots(figsize=(8, 8))

    points = qq_points(values)
    ax.scatter(points['theoretical'], points['observed'], s=15, alpha=0.6,
               color=VIEWING_PALETTE['line'])

    if len(points) >= 2:
        slope, intercept = np.polyfit(points['theoretical'], points['observed'], 1)
        x_range = np.array([points['theoretical'].min(), points['theoretical'].max()])
        ax.plot(x_range, slope * x_range + intercept, color=VIEWING_PALETTE['reference'],
                linestyle='--')

    ax.set_title(title)
    ax.set_xlabel('Theoretical Quantiles (Normal)')
    ax.set_ylabel('Observed Minutes')

    return ax


# =============================================================================
# Heatmap
# =============================================================================

def plot_hourly_heatmap(
    hourly_frame: pd.DataFrame,
    title: str = "Heatmap: Average Active Intensity",
    cmap: str = 'plasma',
    figsize: Tuple[int, int] = (14, 6)
):
    """
    Weekday x hour heatmap of average minutes over active days.

    Returns:
        matplotlib figure
    """
    plt = _get_plt()
    sns = _get_sns()

    grid = heatmap_pivot(hourly_frame)

    fig, ax = plt.subplots(figsize=figsize)
    sns.heatmap(
        grid,
        cmap=cmap,
        linewidths=0.5,
        linecolor='white',
        cbar_kws={'label': 'Avg Min'},
        ax=ax
    )

    ax.set_title(f"{title}\nMinutes watched per hour slot (active days only)")
    ax.set_xlabel('Hour of Day')
    ax.set_ylabel('Day of Week')

    return fig


# =============================================================================
# Utility Functions
# =============================================================================

def save_figure(
    fig,
    name: str,
    output_dir: str,
    formats: List[str] = ['png', 'pdf'],
    dpi: int = 150
):
    """
    Save figure in multiple formats.

    Args:
        fig: matplotlib figure
        name: Base filename (without extension)
        output_dir: Output directory
        formats: List of formats to save
        dpi: Resolution for raster formats
    """
    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)

    for fmt in formats:
        path = output_path / f"{name}.{fmt}"
        fig.savefig(path, format=fmt, dpi=dpi, bbox_inches='tight')
        print(f"Saved: {path}")


def create_figure_grid(
    nrows: int,
    ncols: int,
    figsize: Optional[Tuple[int, int]] = None,
    sharex: bool = False,
    sharey: bool = False
):
    """
    Create figure with grid of subplots.

    Args:
        nrows, ncols: Grid dimensions
        figsize: Figure size (auto-calculated if None)
        sharex, sharey: Share axes

    Returns:
        Tuple of (figure, axes array)
    """
    plt = _get_plt()

    if figsize is None:
        figsize = (5 * ncols, 4 * nrows)

    return plt.subplots(nrows, ncols, figsize=figsize, sharex=sharex, sharey=sharey, squeeze=False)
