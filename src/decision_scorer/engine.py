"""Decision Engine - orchestrates the full scoring pipeline.

Loads decision files, validates them and runs ranking, sensitivity
analysis and (optionally) Monte Carlo simulation into one report.
"""

import json
import logging
from datetime import date
from pathlib import Path
from typing import Optional, Union

from pydantic import ValidationError

from .config import get_config
from .constraints import days_until_deadline
from .monte_carlo import ScoreRanges, run_simulation
from .ranking import generate_rankings
from .schema import Decision, DecisionReport, ScoreRange
from .sensitivity import analyze

logger = logging.getLogger(__name__)


class DecisionLoadError(Exception):
    """Raised when a decision or score range file cannot be loaded."""


def _read_json(path: Union[str, Path]):
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return json.load(f)
    except OSError as e:
        raise DecisionLoadError(f"Cannot read {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise DecisionLoadError(f"Invalid JSON in {path}: {e}") from e


def load_decision(path: Union[str, Path]) -> Decision:
    """Load a decision from a JSON file.

    Raises:
        DecisionLoadError: If the file is missing, not JSON or not a decision.
    """
    data = _read_json(path)
    # Exported decisions may be wrapped in a single-item list
    if isinstance(data, list) and len(data) == 1:
        data = data[0]
    try:
        return Decision.model_validate(data)
    except ValidationError as e:
        raise DecisionLoadError(f"Invalid decision in {path}: {e}") from e


def load_score_ranges(path: Union[str, Path]) -> dict[str, dict[str, ScoreRange]]:
    """Load score ranges (option id -> criterion id -> {min, max}) from JSON."""
    data = _read_json(path)
    if not isinstance(data, dict):
        raise DecisionLoadError(f"Score ranges in {path} must be a JSON object")
    try:
        return {
            option_id: {
                criterion_id: ScoreRange.model_validate(r)
                for criterion_id, r in (ranges or {}).items()
            }
            for option_id, ranges in data.items()
        }
    except (ValidationError, AttributeError) as e:
        raise DecisionLoadError(f"Invalid score ranges in {path}: {e}") from e


def validate_decision(decision: Decision) -> tuple[bool, list[str]]:
    """Check that a decision is complete enough to rank.

    Returns:
        Tuple of (is_valid, list of issues)
    """
    issues = []

    if not decision.title.strip():
        issues.append("Decision title is empty")

    if len(decision.options) < 2:
        issues.append(f"At least 2 options required, found {len(decision.options)}")
    for i, option in enumerate(decision.options, 1):
        if not option.name.strip():
            issues.append(f"Option {i} ({option.id}) has no name")

    if not decision.criteria:
        issues.append("At least 1 criterion required")
    for i, criterion in enumerate(decision.criteria, 1):
        if not criterion.name.strip():
            issues.append(f"Criterion {i} ({criterion.id}) has no name")

    option_ids = [o.id for o in decision.options]
    duplicates = sorted({i for i in option_ids if option_ids.count(i) > 1})
    if duplicates:
        issues.append(f"Duplicate option ids: {', '.join(duplicates)}")

    criterion_ids = [c.id for c in decision.criteria]
    duplicates = sorted({i for i in criterion_ids if criterion_ids.count(i) > 1})
    if duplicates:
        issues.append(f"Duplicate criterion ids: {', '.join(duplicates)}")

    return len(issues) == 0, issues


def validate_decision_file(path: Union[str, Path]) -> tuple[bool, list[str]]:
    """Validate a decision JSON file."""
    try:
        decision = load_decision(path)
    except DecisionLoadError as e:
        return False, [str(e)]
    return validate_decision(decision)


class DecisionEngine:
    """Runs the complete decision analysis pipeline.

    Pipeline:
    1. Rank options (scores, constraint penalties, confidence, rationale)
    2. Sensitivity analysis (tipping points, robustness)
    3. Monte Carlo simulation (only when score ranges are supplied)
    """

    def __init__(self, default_score: Optional[float] = None):
        self.default_score = (
            default_score if default_score is not None
            else get_config().scoring.missing_score
        )

    def evaluate(
        self,
        decision: Decision,
        score_ranges: Optional[ScoreRanges] = None,
        simulations: Optional[int] = None,
        seed: Optional[int] = None,
        apply_constraints: Optional[bool] = None,
        today: Optional[date] = None,
    ) -> DecisionReport:
        """Evaluate a decision.

        Args:
            decision: Decision to evaluate
            score_ranges: Optional score uncertainty for Monte Carlo simulation
            simulations: Number of simulation trials (defaults to config)
            seed: Seed for reproducible simulation
            apply_constraints: Apply constraints during sensitivity scans
            today: Reference date for the deadline countdown

        Returns:
            Report with rankings, sensitivity and simulation results
        """
        warnings = []
        is_valid, issues = validate_decision(decision)
        if not is_valid:
            warnings.extend(issues)
            logger.warning("Evaluating incomplete decision %r: %s", decision.title, "; ".join(issues))

        ranking = generate_rankings(
            decision.options,
            decision.criteria,
            decision.constraints,
            default_score=self.default_score,
        )

        sensitivity = analyze(
            ranking.rankings,
            decision.criteria,
            decision.options,
            constraints=decision.constraints,
            apply_constraints=apply_constraints,
            default_score=self.default_score,
        )

        simulation = None
        if score_ranges:
            simulation = run_simulation(
                decision.options,
                decision.criteria,
                score_ranges,
                simulations=simulations,
                seed=seed,
                default_score=self.default_score,
            )

        deadline_days = days_until_deadline(decision.constraints, today)
        if decision.constraints.deadline and deadline_days is None:
            warnings.append(f"Deadline not understood: {decision.constraints.deadline}")

        return DecisionReport(
            decision_title=decision.title,
            ranking=ranking,
            sensitivity=sensitivity,
            simulation=simulation,
            days_until_deadline=deadline_days,
            processing_warnings=warnings,
        )

    def evaluate_file(
        self,
        path: Union[str, Path],
        ranges_path: Optional[Union[str, Path]] = None,
        **kwargs,
    ) -> DecisionReport:
        """Load and evaluate a decision file."""
        decision = load_decision(path)
        score_ranges = load_score_ranges(ranges_path) if ranges_path else None
        return self.evaluate(decision, score_ranges=score_ranges, **kwargs)
