"""Decision Scorer - multi-criteria decision analysis.

Ranks options against weighted criteria with soft constraint penalties,
and explains the result with confidence, rationale, sensitivity
(tipping points) and Monte Carlo robustness checks.
"""

from .constraints import calculate_constraint_penalty
from .engine import DecisionEngine, load_decision, validate_decision
from .explainer import generate_analysis
from .monte_carlo import run_simulation
from .normalizer import normalize_score
from .ranking import calculate_confidence, generate_rankings
from .scorer import calculate_score
from .sensitivity import analyze, compare_scenario, find_tipping_point, what_if_analysis

__version__ = "1.0.0"

__all__ = [
    "DecisionEngine",
    "analyze",
    "calculate_confidence",
    "calculate_constraint_penalty",
    "calculate_score",
    "compare_scenario",
    "find_tipping_point",
    "generate_analysis",
    "generate_rankings",
    "load_decision",
    "normalize_score",
    "run_simulation",
    "validate_decision",
    "what_if_analysis",
]
