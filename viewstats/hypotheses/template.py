"""
Hypothesis Testing Template

Base classes shared by every hypothesis about viewing behaviour. A hypothesis
subclasses HypothesisTest and overrides analyze() (and usually visualize()).

The pipeline is:
1. Loading standardized tables
2. Running the hypothesis-specific statistics
3. Generating visualizations
4. Producing a structured report
"""

import json
from dataclasses import dataclass, asdict
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

import pandas as pd

from viewstats.configs import RuntimeConfig, ensure_output_dirs
from viewstats.data.standardized_tables import build_all_standardized_tables


@dataclass
class HypothesisResult:
    """Structured result from hypothesis test."""
    hypothesis_id: str
    hypothesis_name: str
    claim: str

    # Statistical results
    supported: bool  # Did the test support the hypothesis?
    effect_size: float  # Primary effect size
    effect_size_ci: tuple  # Confidence interval
    p_value: float

    # Summary statistics
    statistics: Dict[str, Any]

    # Metadata
    config_name: str
    n_observations: int
    timestamp: str

    def to_dict(self) -> dict:
        return asdict(self)

    def save(self, output_dir: str):
        """Save result as JSON."""
        path = Path(output_dir) / f"{self.hypothesis_id}_result.json"
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2, default=str)
        print(f"Saved: {path}")


class HypothesisTest:
    """
    Base class for hypothesis tests.

    Override the following methods to implement a hypothesis:
    - setup(): Load and prepare data
    - analyze(): Run statistical tests
    - visualize(): Generate plots
    - report(): Produce summary report
    """

    # Override these in subclasses
    HYPOTHESIS_ID = "H0"
    HYPOTHESIS_NAME = "Template Hypothesis"
    CLAIM = "This is a template claim"

    def __init__(self, config: RuntimeConfig, tables: Optional[Dict[str, pd.DataFrame]] = None):
        self.config = config
        self.output_dir = Path(config.paths.output_root) / self.HYPOTHESIS_ID
        self.output_dir.mkdir(parents=True, exist_ok=True)

        # Pre-built tables skip the load in setup()
        self._tables = tables

        # Data (populated by setup)
        self.session_frame: Optional[pd.DataFrame] = None
        self.daily_frame: Optional[pd.DataFrame] = None
        self.hourly_frame: Optional[pd.DataFrame] = None

        # Results (populated by analyze)
        self.results: Optional[HypothesisResult] = None

    def setup(self):
        """Load and prepare data. Override if custom data needed."""
        ensure_output_dirs(self.config)
        tables = self._tables if self._tables is not None else build_all_standardized_tables(self.config)
        self.session_frame = tables['session_frame']
        self.daily_frame = tables['daily_frame']
        self.hourly_frame = tables.get('hourly_frame')
        print(f"Loaded daily_frame: {self.daily_frame.shape}")

    def analyze(self) -> HypothesisResult:
        """Run statistical analysis. MUST override in subclass."""
        raise NotImplementedError("Subclasses must implement analyze()")

    def visualize(self):
        """Generate visualizations. Override for custom plots."""
        pass

    def _empty_result(self, error_msg: str, n_observations: int = 0,
                      statistics: Optional[Dict[str, Any]] = None) -> HypothesisResult:
        stats = {'error': error_msg}
        stats.update(statistics or {})
        return HypothesisResult(
            hypothesis_id=self.HYPOTHESIS_ID,
            hypothesis_name=self.HYPOTHESIS_NAME,
            claim=self.CLAIM,
            supported=False,
            effect_size=float('nan'),
            effect_size_ci=(float('nan'), float('nan')),
            p_value=float('nan'),
            statistics=stats,
            config_name=self.config.name,
            n_observations=n_observations,
            timestamp=datetime.now().isoformat()
        )

    def report(self) -> str:
        """Generate text report. Override for custom reporting."""
        if self.results is None:
            return "No results available. Run analyze() first."

        r = self.results
        report_lines = [
            f"=" * 60,
            f"HYPOTHESIS TEST: {r.hypothesis_id}",
            f"=" * 60,
            f"",
            f"Name: {r.hypothesis_name}",
            f"Claim: {r.claim}",
            f"",
            f"RESULT: {'SUPPORTED' if r.supported else 'NOT SUPPORTED'}",
            f"",
            f"Primary Effect Size: {r.effect_size:.4f}",
            f"95% CI: [{r.effect_size_ci[0]:.4f}, {r.effect_size_ci[1]:.4f}]",
            f"p-value: {r.p_value:.4e}",
            f"",
            f"Observations: {r.n_observations:,}",
            f"Config: {r.config_name}",
            f"Timestamp: {r.timestamp}",
            f"",
            f"Additional Statistics:",
        ]

        for key, value in r.statistics.items():
            if isinstance(value, float):
                report_lines.append(f"  {key}: {value:.4f}")
            else:
                report_lines.append(f"  {key}: {value}")

        return "\n".join(report_lines)

    def run(self, make_figures: bool = True) -> HypothesisResult:
        """Execute full hypothesis test pipeline."""
        print(f"\n{'='*60}")
        print(f"Running: {self.HYPOTHESIS_ID} - {self.HYPOTHESIS_NAME}")
        print(f"{'='*60}\n")

        print("Step 1: Setup...")
        self.setup()

        print("\nStep 2: Analyze...")
        self.results = self.analyze()

        if make_figures:
            print("\nStep 3: Visualize...")
            self.visualize()

        print("\nStep 4: Report...")
        report = self.report()
        print(report)

        # Save results
        self.results.save(str(self.output_dir))

        # Save report
        report_path = self.output_dir / f"{self.HYPOTHESIS_ID}_report.txt"
        with open(report_path, 'w') as f:
            f.write(report)
        print(f"Saved: {report_path}")

        return self.results
