"""
Statistical Utilities for Viewing Analysis

Provides the statistical functions the weekday hypothesis relies on:
- Normality diagnostics (Shapiro-Wilk with explicit skip markers, Q-Q points)
- Kruskal-Wallis rank sum test with tie correction
- Effect size (epsilon squared) and bootstrap confidence intervals
- Extended descriptive statistics
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from scipy import stats

from viewstats.constants import (
    SHAPIRO_MAX_N,
    SKIPPED_SAMPLE_TOO_LARGE,
    SKIPPED_SAMPLE_TOO_SMALL,
)


def _clean(values) -> np.ndarray:
    arr = np.asarray(values, dtype=float)
    return arr[~np.isnan(arr)]


# =============================================================================
# Normality Diagnostics
# =============================================================================

@dataclass
class NormalityResult:
    """Outcome of the normality check; informational only."""
    test: str
    n_observations: int
    statistic: Optional[float] = None
    p_value: Optional[float] = None
    skipped: bool = False
    skip_reason: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)


def normality_check(values, max_n: int = SHAPIRO_MAX_N) -> NormalityResult:
    """
    Shapiro-Wilk normality test over one sample.

    The test is run only when 3 <= n < max_n. Outside that range the result
    carries skipped=True and a skip marker instead of a p-value; for large
    samples the Q-Q plot is the only check.

    Args:
        values: Sample values (NaN ignored)
        max_n: Sample size at which the numerical test is skipped

    Returns:
        NormalityResult
    """
    sample = _clean(values)
    n = len(sample)

    if n >= max_n:
        return NormalityResult(
            test="shapiro-wilk",
            n_observations=n,
            skipped=True,
            skip_reason=SKIPPED_SAMPLE_TOO_LARGE,
        )
    if n < 3:
        return NormalityResult(
            test="shapiro-wilk",
            n_observations=n,
            skipped=True,
            skip_reason=SKIPPED_SAMPLE_TOO_SMALL,
        )

    statistic, p_value = stats.shapiro(sample)
    return NormalityResult(
        test="shapiro-wilk",
        n_observations=n,
        statistic=float(statistic),
        p_value=float(p_value),
    )


def qq_points(values) -> pd.DataFrame:
    """
    Normal Q-Q plot input.

    Returns:
        DataFrame with 'theoretical' (normal quantiles) and 'observed'
        (sorted sample) columns
    """
    sample = _clean(values)
    if len(sample) == 0:
        return pd.DataFrame({"theoretical": [], "observed": []})
    theoretical, observed = stats.probplot(sample, dist="norm", fit=False)
    return pd.DataFrame({"theoretical": theoretical, "observed": observed})


# =============================================================================
# Kruskal-Wallis
# =============================================================================

@dataclass
class KruskalWallisResult:
    """Kruskal-Wallis H test result."""
    statistic: float
    df: int
    p_value: float
    n_observations: int
    group_sizes: Dict[str, int] = field(default_factory=dict)
    tie_correction: float = 1.0
    insufficient_data: bool = False
    reason: Optional[str] = None

    @property
    def epsilon_squared(self) -> float:
        """Rank-based effect size H / (N - 1)."""
        if self.insufficient_data or self.n_observations < 2:
            return float("nan")
        return self.statistic / (self.n_observations - 1)

    def to_dict(self) -> dict:
        result = asdict(self)
        result["epsilon_squared"] = self.epsilon_squared
        return result


def _insufficient(reason: str, n: int, group_sizes: Dict[str, int]) -> KruskalWallisResult:
    return KruskalWallisResult(
        statistic=float("nan"),
        df=0,
        p_value=float("nan"),
        n_observations=n,
        group_sizes=group_sizes,
        insufficient_data=True,
        reason=reason,
    )


def kruskal_wallis(groups: Mapping[Any, Sequence[float]]) -> KruskalWallisResult:
    """
    Kruskal-Wallis rank sum test.

    All observations are ranked jointly (ties get the average rank), then

        H = 12 / (N (N + 1)) * sum(R_g^2 / n_g) - 3 (N + 1)

    divided by the tie correction 1 - sum(t^3 - t) / (N^3 - N). The p-value
    comes from the chi-squared distribution with (non-empty groups - 1) df.

    Empty groups are excluded. With fewer than two non-empty groups, or when
    every observation is tied, the result is flagged insufficient_data.

    Args:
        groups: Mapping of group label -> values (NaN ignored)

    Returns:
        KruskalWallisResult
    """
    samples = {str(label): _clean(values) for label, values in groups.items()}
    group_sizes = {label: len(s) for label, s in samples.items()}
    present = [s for s in samples.values() if len(s) > 0]
    n_total = int(sum(len(s) for s in present))

    if len(present) < 2:
        return _insufficient("fewer than two non-empty groups", n_total, group_sizes)

    pooled = np.concatenate(present)
    ranks = stats.rankdata(pooled)

    rank_term = 0.0
    start = 0
    for sample in present:
        group_ranks = ranks[start:start + len(sample)]
        rank_term += group_ranks.sum() ** 2 / len(sample)
        start += len(sample)

    h = 12.0 / (n_total * (n_total + 1)) * rank_term - 3 * (n_total + 1)

    _, tie_counts = np.unique(pooled, return_counts=True)
    tie_correction = 1.0 - float(np.sum(tie_counts ** 3 - tie_counts)) / (n_total ** 3 - n_total)
    if tie_correction <= 0:
        return _insufficient("all observations are tied", n_total, group_sizes)

    h /= tie_correction
    df = len(present) - 1

    return KruskalWallisResult(
        statistic=float(h),
        df=df,
        p_value=float(stats.chi2.sf(h, df)),
        n_observations=n_total,
        group_sizes=group_sizes,
        tie_correction=tie_correction,
    )


def kruskal_by_group(
    df: pd.DataFrame,
    group_col: str,
    value_col: str,
    order: Optional[List[str]] = None
) -> KruskalWallisResult:
    """
    Kruskal-Wallis test of value_col across the levels of group_col.

    Args:
        df: DataFrame with data
        group_col: Column defining groups
        value_col: Column with values to compare
        order: Group labels to report (levels absent from df count as empty)

    Returns:
        KruskalWallisResult
    """
    labels = df[group_col].astype(str)
    if order is None:
        order = sorted(labels.unique())

    groups = {level: df.loc[labels == level, value_col].to_numpy() for level in order}
    return kruskal_wallis(groups)


# =============================================================================
# Bootstrap
# =============================================================================

def bootstrap_ci(
    data: np.ndarray,
    statistic: Callable = np.mean,
    n_bootstrap: int = 1000,
    ci_level: float = 0.95,
    random_state: int = 42
) -> Tuple[float, float, float]:
    """
    Compute bootstrap confidence interval.

    Rows of data (axis 0) are resampled with replacement, so a 2-D array
    keeps each observation's columns together.

    Args:
        data: Array of observations
        statistic: Function to compute statistic (may return NaN)
        n_bootstrap: Number of bootstrap samples
        ci_level: Confidence level (e.g., 0.95)
        random_state: Random seed

    Returns:
        Tuple of (point estimate, lower CI, upper CI)
    """
    data = np.asarray(data)
    point_estimate = statistic(data)

    n = len(data)
    if n == 0 or n_bootstrap <= 0:
        return point_estimate, float("nan"), float("nan")

    rng = np.random.RandomState(random_state)
    boot_stats = []

    for _ in range(n_bootstrap):
        idx = rng.randint(0, n, size=n)
        boot_stats.append(statistic(data[idx]))

    boot_stats = np.asarray(boot_stats, dtype=float)
    boot_stats = boot_stats[~np.isnan(boot_stats)]
    if len(boot_stats) == 0:
        return point_estimate, float("nan"), float("nan")

    alpha = 1 - ci_level
    lower = np.percentile(boot_stats, 100 * alpha / 2)
    upper = np.percentile(boot_stats, 100 * (1 - alpha / 2))

    return point_estimate, float(lower), float(upper)


# =============================================================================
# Summary Statistics
# =============================================================================

def describe_extended(
    series: pd.Series,
    percentiles: List[float] = [5, 25, 50, 75, 95]
) -> Dict[str, float]:
    """
    Extended descriptive statistics including tail percentiles.

    Args:
        series: Numeric series
        percentiles: Percentiles to compute

    Returns:
        Dict with statistics
    """
    s = series.dropna()

    if len(s) == 0:
        return {'n': 0}

    result = {
        'n': len(s),
        'mean': float(s.mean()),
        'std': float(s.std()),
        'min': float(s.min()),
        'max': float(s.max()),
        'skew': float(s.skew()),
        'kurtosis': float(s.kurtosis()),
        'iqr': float(s.quantile(0.75) - s.quantile(0.25))
    }

    for p in percentiles:
        result[f'p{p}'] = float(s.quantile(p / 100))

    return result
