"""
Hypothesis implementations.

Each hypothesis is implemented as a class inheriting from HypothesisTest.
See template.py for the structure.
"""

from typing import Optional

from viewstats.configs import load_config
from viewstats.hypotheses.template import HypothesisTest, HypothesisResult
from viewstats.hypotheses.weekday_intensity import H1_WeekdayIntensity


AVAILABLE_HYPOTHESES = {
    'H1': H1_WeekdayIntensity,
}


def run_hypothesis(
    hypothesis_id: str,
    config_name: str = "default",
    input_path: Optional[str] = None,
    output_root: Optional[str] = None,
    make_figures: bool = True
) -> HypothesisResult:
    """
    Run a specific hypothesis test.

    Args:
        hypothesis_id: Hypothesis identifier (e.g., "H1")
        config_name: Config to use ("default" or "smoke")
        input_path: Optional override for the viewing activity CSV
        output_root: Optional override for the output directory
        make_figures: Render figures

    Returns:
        HypothesisResult
    """
    if hypothesis_id not in AVAILABLE_HYPOTHESES:
        raise ValueError(f"Unknown hypothesis: {hypothesis_id}. Available: {list(AVAILABLE_HYPOTHESES.keys())}")

    config = load_config(config_name, override_input_path=input_path, override_output_root=output_root)
    hypothesis_class = AVAILABLE_HYPOTHESES[hypothesis_id]

    test = hypothesis_class(config)
    return test.run(make_figures=make_figures)


__all__ = [
    'HypothesisTest',
    'HypothesisResult',
    'H1_WeekdayIntensity',
    'run_hypothesis',
    'AVAILABLE_HYPOTHESES',
]
