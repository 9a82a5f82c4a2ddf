"""
Hypothesis H1: Day of Week → Viewing Intensity

Claim: Total minutes watched on an active day differ by day of week.

Mechanism:
    Work and school schedules leave more free time on some days than others,
    so binge sessions should cluster on particular weekdays.

Key Metrics:
    - total_minutes: Minutes watched per active day (daily_frame)
    - day_of_week: Monday..Sunday grouping

Test Plan:
    1. Check normality of daily minutes (Shapiro-Wilk, informational only)
    2. Daily minutes are right-skewed, so compare weekdays with the
       rank-based Kruskal-Wallis test instead of one-way ANOVA
    3. Report epsilon squared as the effect size with a bootstrap CI
    4. Supported when p < alpha
"""

from datetime import datetime

import numpy as np

from viewstats.constants import WEEKDAYS
from viewstats.hypotheses.template import HypothesisTest, HypothesisResult
from viewstats.stats import (
    bootstrap_ci,
    describe_extended,
    kruskal_by_group,
    kruskal_wallis,
    normality_check,
)
from viewstats.viz import (
    plot_hourly_heatmap,
    plot_qq,
    plot_timeline,
    plot_weekday_box,
    plot_weekday_density,
    save_figure,
)


def _epsilon_squared(coded: np.ndarray) -> float:
    """Effect size for rows of (weekday code, minutes)."""
    codes = coded[:, 0]
    groups = {code: coded[codes == code, 1] for code in np.unique(codes)}
    return kruskal_wallis(groups).epsilon_squared


class H1_WeekdayIntensity(HypothesisTest):
    """
    Hypothesis 1: Viewing intensity differs by day of week.

    Only active days enter the test: a day without viewing is absent from
    daily_frame rather than counted as zero minutes.
    """

    HYPOTHESIS_ID = "H1"
    HYPOTHESIS_NAME = "Day of Week → Viewing Intensity"
    CLAIM = "Minutes watched per active day differ by day of week"

    def __init__(self, config, tables=None):
        super().__init__(config, tables)
        self.normality = None
        self.kruskal = None

    def analyze(self) -> HypothesisResult:
        df = self.daily_frame
        analysis = self.config.analysis

        self.normality = normality_check(df['total_minutes'], max_n=analysis.normality_max_n)
        self.kruskal = kruskal_by_group(df, 'day_of_week', 'total_minutes', order=list(WEEKDAYS))
        kw = self.kruskal

        normality_stats = {
            'normality_test': self.normality.test,
            'normality_p_value': (
                self.normality.skip_reason if self.normality.skipped else self.normality.p_value
            ),
        }

        if kw.insufficient_data:
            return self._empty_result(
                f"Insufficient data: {kw.reason}",
                n_observations=kw.n_observations,
                statistics={**normality_stats, 'group_sizes': kw.group_sizes},
            )

        coded = np.column_stack([
            df['day_of_week'].cat.codes.to_numpy(dtype=float),
            df['total_minutes'].to_numpy(dtype=float),
        ])
        epsilon_sq, ci_lower, ci_upper = bootstrap_ci(
            coded,
            _epsilon_squared,
            n_bootstrap=analysis.n_bootstrap,
            random_state=analysis.random_state,
        )

        labels = df['day_of_week'].astype(str)
        medians = {
            day: float(df.loc[labels == day, 'total_minutes'].median())
            for day in WEEKDAYS
            if (labels == day).any()
        }

        supported = kw.p_value < analysis.alpha

        return HypothesisResult(
            hypothesis_id=self.HYPOTHESIS_ID,
            hypothesis_name=self.HYPOTHESIS_NAME,
            claim=self.CLAIM,
            supported=supported,
            effect_size=epsilon_sq,
            effect_size_ci=(ci_lower, ci_upper),
            p_value=kw.p_value,
            statistics={
                'kruskal_h': kw.statistic,
                'kruskal_df': kw.df,
                'kruskal_p_value': kw.p_value,
                'tie_correction': kw.tie_correction,
                'group_sizes': kw.group_sizes,
                'median_minutes_by_weekday': medians,
                **normality_stats,
                'daily_minutes': describe_extended(df['total_minutes']),
            },
            config_name=self.config.name,
            n_observations=kw.n_observations,
            timestamp=datetime.now().isoformat()
        )

    def report(self) -> str:
        lines = [super().report()]
        if self.results is None:
            return lines[0]

        lines.append("")
        if self.normality is not None:
            if self.normality.skipped:
                marker = self.normality.skip_reason
                lines.append(f"Shapiro-Wilk normality test: {marker} (check the Q-Q plot)")
            else:
                lines.append(f"Shapiro-Wilk normality test p-value: {self.normality.p_value:.4e}")

        kw = self.kruskal
        if kw is None:
            return "\n".join(lines)
        if kw.insufficient_data:
            lines.append(f"Kruskal-Wallis rank sum test: insufficient data ({kw.reason})")
        else:
            lines.append("Kruskal-Wallis rank sum test (total_minutes ~ day_of_week)")
            lines.append(
                f"  Kruskal-Wallis chi-squared = {kw.statistic:.4f}, "
                f"df = {kw.df}, p-value = {kw.p_value:.4e}"
            )
        return "\n".join(lines)

    def visualize(self):
        df = self.daily_frame

        if df is None or len(df) == 0:
            print("Insufficient data for visualization")
            return

        import matplotlib.pyplot as plt

        out = str(self.output_dir)

        # 1. Timeline
        fig, ax = plt.subplots(figsize=(12, 6))
        plot_timeline(df, ax=ax)
        save_figure(fig, f'{self.HYPOTHESIS_ID}_timeline', out)
        plt.close(fig)

        # 2. Boxplot by weekday
        fig, ax = plt.subplots(figsize=(10, 6))
        plot_weekday_box(df, title=f'{self.HYPOTHESIS_ID}: Viewing Intensity by Day of Week', ax=ax)
        save_figure(fig, f'{self.HYPOTHESIS_ID}_weekday_box', out)
        plt.close(fig)

        # 3. Density per weekday
        fig = plot_weekday_density(df)
        save_figure(fig, f'{self.HYPOTHESIS_ID}_density', out)
        plt.close(fig)

        # 4. Q-Q plot
        fig, ax = plt.subplots(figsize=(8, 8))
        plot_qq(df['total_minutes'], ax=ax)
        save_figure(fig, f'{self.HYPOTHESIS_ID}_qq', out)
        plt.close(fig)

        # 5. Heatmap of active-day averages
        if self.hourly_frame is not None and len(self.hourly_frame) > 0:
            fig = plot_hourly_heatmap(self.hourly_frame)
            save_figure(fig, f'{self.HYPOTHESIS_ID}_heatmap', out)
            plt.close(fig)
