"""Constraint Penalizer - Phase 3 of the Decision Scoring Engine.

Soft constraints never exclude an option. Each violated constraint
multiplies the option's score by a factor in (0, 1].
"""

import logging
from datetime import date, datetime
from typing import Optional

from .config import get_config
from .normalizer import parse_amount
from .schema import (
    ConstraintPenalty,
    ConstraintViolation,
    Constraints,
    Option,
    ViolationSeverity,
    ViolationType,
)

logger = logging.getLogger(__name__)


def calculate_constraint_penalty(
    option: Option,
    constraints: Optional[Constraints],
) -> ConstraintPenalty:
    """Calculate the penalty factor for an option's constraint violations.

    Budget is checked only when both the budget and the option's estimated
    cost parse as numbers and the budget is positive. Compliance is checked
    whenever the option carries a compliance score.

    Args:
        option: Option to check
        constraints: Soft constraints of the decision, may be None

    Returns:
        Cumulative penalty factor and violations (budget first, then compliance)
    """
    if constraints is None:
        return ConstraintPenalty(factor=1.0, violations=[])

    cfg = get_config().constraint_penalties
    factor = 1.0
    violations: list[ConstraintViolation] = []

    budget_factor, budget_violation = _budget_penalty(option, constraints)
    factor *= budget_factor
    if budget_violation:
        violations.append(budget_violation)

    if option.constraint_compliance is not None:
        compliance = option.constraint_compliance
        factor *= cfg.compliance_floor + (compliance / 10) * (1 - cfg.compliance_floor)

        if compliance < cfg.compliance_warning_below:
            severity = (
                ViolationSeverity.SEVERE
                if compliance < cfg.compliance_severe_below
                else ViolationSeverity.MODERATE
            )
            violations.append(ConstraintViolation(
                type=ViolationType.NOTES,
                severity=severity,
                message="Low constraint compliance from notes",
            ))

    return ConstraintPenalty(factor=factor, violations=violations)


def _budget_penalty(
    option: Option,
    constraints: Constraints,
) -> tuple[float, Optional[ConstraintViolation]]:
    """Penalty for the option's estimated cost against the budget."""
    if not constraints.budget or not option.estimated_cost:
        return 1.0, None

    budget = parse_amount(constraints.budget)
    cost = parse_amount(option.estimated_cost)
    if budget is None or cost is None or budget <= 0:
        logger.debug(
            "Skipping budget check for %s: budget=%r cost=%r",
            option.id, constraints.budget, option.estimated_cost,
        )
        return 1.0, None

    cfg = get_config().constraint_penalties
    ratio = cost / budget
    over_pct = round((ratio - 1) * 100)

    if ratio > cfg.severe_budget_ratio:
        return cfg.severe_budget_factor, ConstraintViolation(
            type=ViolationType.BUDGET,
            severity=ViolationSeverity.SEVERE,
            message=f"{over_pct}% over budget",
        )
    if ratio > 1.0:
        # Smooth 0-30% penalty across the moderate band
        return max(cfg.over_budget_floor, 1 - (ratio - 1) * cfg.over_budget_slope), ConstraintViolation(
            type=ViolationType.BUDGET,
            severity=ViolationSeverity.MODERATE,
            message=f"{over_pct}% over budget",
        )
    if ratio > cfg.near_budget_ratio:
        return cfg.near_budget_factor, ConstraintViolation(
            type=ViolationType.BUDGET,
            severity=ViolationSeverity.MINOR,
            message="Close to budget limit",
        )
    return 1.0, None


def days_until_deadline(
    constraints: Optional[Constraints],
    today: Optional[date] = None,
) -> Optional[int]:
    """Days remaining until the decision deadline.

    Negative when the deadline has passed. None when there is no deadline
    or it cannot be parsed as an ISO date.
    """
    if constraints is None or not constraints.deadline:
        return None

    raw = constraints.deadline.strip()
    try:
        deadline = date.fromisoformat(raw[:10])
    except ValueError:
        try:
            deadline = datetime.fromisoformat(raw).date()
        except ValueError:
            logger.warning("Ignoring unparsable deadline: %r", constraints.deadline)
            return None

    return (deadline - (today or date.today())).days
