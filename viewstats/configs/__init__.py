"""
Configuration management for viewing history analysis.

Provides two runtime tiers:
- default: Full analysis with bootstrap CIs and progress bars
- smoke: Fast sanity check (no bootstrap, quiet progress)
"""

from pathlib import Path
from typing import Any, Dict, List, Optional
import yaml
from dataclasses import dataclass, field

from viewstats.constants import EXCLUDED_SUPPLEMENTAL_TYPES, SHAPIRO_MAX_N


@dataclass
class DataPaths:
    """Paths to the input export and outputs."""
    # Input path
    input_path: str = "ViewingActivity.csv"

    # Output paths
    output_root: str = "viewing_outputs"

    @property
    def tables_dir(self) -> str:
        return f"{self.output_root}/tables"

    @property
    def figures_dir(self) -> str:
        return f"{self.output_root}/figures"

    @property
    def reports_dir(self) -> str:
        return f"{self.output_root}/reports"


@dataclass
class ColumnSchema:
    """Maps logical field names to the export's column headers."""
    title: str = "Title"
    supplemental_video_type: str = "Supplemental Video Type"
    start_time: str = "Start Time"
    duration: str = "Duration"

    def as_dict(self) -> Dict[str, str]:
        return {
            "title": self.title,
            "supplemental_video_type": self.supplemental_video_type,
            "start_time": self.start_time,
            "duration": self.duration,
        }


@dataclass
class AnalysisConfig:
    """Configuration for filtering and statistics."""
    excluded_video_types: List[str] = field(
        default_factory=lambda: sorted(EXCLUDED_SUPPLEMENTAL_TYPES)
    )
    top_n_shows: int = 5

    # Shapiro-Wilk is skipped at or above this many active days
    normality_max_n: int = SHAPIRO_MAX_N

    alpha: float = 0.05

    # Bootstrap CI for the effect size (0 disables it)
    n_bootstrap: int = 500
    random_state: int = 42


@dataclass
class RuntimeConfig:
    """Full runtime configuration."""
    name: str  # default, smoke

    # Paths
    paths: DataPaths = field(default_factory=DataPaths)

    # Input schema
    columns: ColumnSchema = field(default_factory=ColumnSchema)

    # Analysis
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)

    # Verbosity
    verbose: bool = True
    progress_bars: bool = True


def _section(raw: Dict[str, Any], key: str) -> Dict[str, Any]:
    return raw.get(key) or {}


def load_config(
    name: str = "default",
    override_input_path: Optional[str] = None,
    override_output_root: Optional[str] = None,
) -> RuntimeConfig:
    """
    Load a named configuration.

    Args:
        name: Config name ("default" or "smoke")
        override_input_path: Optional override for the viewing activity CSV
        override_output_root: Optional override for the output directory

    Returns:
        RuntimeConfig with appropriate settings
    """
    configs_dir = Path(__file__).parent
    config_path = configs_dir / f"{name}.yaml"

    if not config_path.exists():
        raise ValueError(f"Config '{name}' not found at {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    paths_raw = _section(raw, "paths")
    columns_raw = _section(raw, "columns")
    analysis_raw = _section(raw, "analysis")

    # Build config objects
    paths = DataPaths(
        input_path=override_input_path or paths_raw.get("input_path", DataPaths.input_path),
        output_root=override_output_root or paths_raw.get("output_root", DataPaths.output_root),
    )

    columns = ColumnSchema(
        title=columns_raw.get("title", ColumnSchema.title),
        supplemental_video_type=columns_raw.get(
            "supplemental_video_type", ColumnSchema.supplemental_video_type
        ),
        start_time=columns_raw.get("start_time", ColumnSchema.start_time),
        duration=columns_raw.get("duration", ColumnSchema.duration),
    )

    analysis = AnalysisConfig(
        excluded_video_types=list(
            analysis_raw.get("excluded_video_types", sorted(EXCLUDED_SUPPLEMENTAL_TYPES))
        ),
        top_n_shows=analysis_raw.get("top_n_shows", 5),
        normality_max_n=analysis_raw.get("normality_max_n", SHAPIRO_MAX_N),
        alpha=analysis_raw.get("alpha", 0.05),
        n_bootstrap=analysis_raw.get("n_bootstrap", 500),
        random_state=analysis_raw.get("random_state", 42),
    )

    config = RuntimeConfig(
        name=name,
        paths=paths,
        columns=columns,
        analysis=analysis,
        verbose=raw.get("verbose", True),
        progress_bars=raw.get("progress_bars", True),
    )

    return config


def ensure_output_dirs(config: RuntimeConfig) -> None:
    """Create output directories if they don't exist."""
    dirs = [
        config.paths.output_root,
        config.paths.tables_dir,
        config.paths.figures_dir,
        config.paths.reports_dir,
    ]
    for d in dirs:
        Path(d).mkdir(parents=True, exist_ok=True)
