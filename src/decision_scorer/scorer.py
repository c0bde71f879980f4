"""Scorer - Phase 2 of the Decision Scoring Engine.

Computes the weighted score of an option against a criteria set.
The score is a weighted arithmetic mean on the 0-10 scale.
"""

from typing import Optional

from .config import get_config
from .normalizer import normalize_score
from .schema import Criterion, CriterionScore, Option, ScoreBreakdown


def resolve_default_score(default_score: Optional[float] = None) -> float:
    """Return the score assumed for unscored criteria.

    An explicit ``default_score`` wins; otherwise the configured policy applies.
    """
    if default_score is not None:
        return default_score
    return get_config().scoring.missing_score


def option_score(option: Option, criterion: Criterion, default_score: float) -> float:
    """Score of ``option`` on ``criterion``, or ``default_score`` when unscored."""
    return option.scores.get(criterion.id, default_score)


def calculate_score(
    option: Option,
    criteria: list[Criterion],
    default_score: Optional[float] = None,
) -> ScoreBreakdown:
    """Calculate the weighted score of one option.

    Args:
        option: Option to score
        criteria: Criteria with weights
        default_score: Score for criteria the option was not scored on
            (defaults to the configured missing score policy)

    Returns:
        Raw weighted total, maximum possible total and the 0-10 normalized score
    """
    missing = resolve_default_score(default_score)
    total = 0.0
    max_possible = 0.0

    for criterion in criteria:
        score = normalize_score(option_score(option, criterion, missing), 0, 10)
        total += criterion.weight * score
        max_possible += criterion.weight * 10

    return ScoreBreakdown(
        raw=total,
        max=max_possible,
        normalized=(total / max_possible * 10) if max_possible > 0 else 0,
    )


def get_criteria_breakdown(
    option: Option,
    criteria: list[Criterion],
    default_score: Optional[float] = None,
) -> list[CriterionScore]:
    """Per-criterion breakdown of an option's score, in criteria order."""
    missing = resolve_default_score(default_score)
    breakdown = []
    for criterion in criteria:
        score = option_score(option, criterion, missing)
        breakdown.append(CriterionScore(
            criterion_id=criterion.id,
            criterion_name=criterion.name,
            weight=criterion.weight,
            score=score,
            weighted_score=score * criterion.weight,
        ))
    return breakdown
