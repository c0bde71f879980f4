"""Ranking Engine - Phase 4 of the Decision Scoring Engine.

Scores every option, applies constraint penalties, sorts and ranks the
results, then derives confidence and the rationale for the winner.
"""

from typing import Optional

from .config import get_config
from .constraints import calculate_constraint_penalty
from .explainer import generate_analysis
from .schema import (
    Confidence,
    ConfidenceLevel,
    Constraints,
    Criterion,
    Option,
    RankedOption,
    RankingResult,
)
from .scorer import calculate_score, get_criteria_breakdown, resolve_default_score


def generate_rankings(
    options: list[Option],
    criteria: list[Criterion],
    constraints: Optional[Constraints] = None,
    default_score: Optional[float] = None,
) -> RankingResult:
    """Rank options by constraint-adjusted weighted score.

    Args:
        options: Options to rank
        criteria: Weighted criteria
        constraints: Optional soft constraints
        default_score: Score for unscored criteria (defaults to config policy)

    Returns:
        Rankings (best first), confidence and analysis. Empty input yields
        empty rankings, confidence 0 and no analysis.
    """
    if not options or not criteria:
        return RankingResult(rankings=[], confidence=0, analysis=None)

    missing = resolve_default_score(default_score)

    scored = []
    for option in options:
        score = calculate_score(option, criteria, default_score=missing)
        penalty = calculate_constraint_penalty(option, constraints)
        scored.append(dict(
            option=option,
            total_score=score.raw * penalty.factor,
            raw_score=score.raw,
            max_possible=score.max,
            normalized_score=score.normalized * penalty.factor,
            raw_normalized_score=score.normalized,
            constraint_penalty=penalty.factor,
            constraint_violations=penalty.violations,
            criteria_scores=get_criteria_breakdown(option, criteria, default_score=missing),
        ))

    # sorted() is stable, so equal scores keep input order
    scored = sorted(scored, key=lambda s: s["total_score"], reverse=True)
    rankings = [RankedOption(rank=i + 1, **s) for i, s in enumerate(scored)]

    return RankingResult(
        rankings=rankings,
        confidence=calculate_confidence(rankings),
        analysis=generate_analysis(rankings, criteria, constraints),
    )


def calculate_confidence(rankings: list[RankedOption]) -> Confidence:
    """Classify the margin between the top two options.

    Margin is the total score gap relative to the maximum possible score.
    A single option has nothing to compete with and gets high confidence.
    """
    if len(rankings) < 2:
        return Confidence(level=ConfidenceLevel.HIGH, value=1.0, label="HIGH")

    top, second = rankings[0], rankings[1]
    if top.max_possible == 0:
        return Confidence(level=ConfidenceLevel.LOW, value=0.5, label="LOW")

    cfg = get_config().confidence_thresholds
    margin = (top.total_score - second.total_score) / top.max_possible

    if margin < cfg.low_margin:
        return Confidence(
            level=ConfidenceLevel.LOW,
            value=0.4,
            label="LOW",
            message="Options are extremely close. Consider additional criteria.",
        )
    if margin < cfg.close_margin:
        return Confidence(
            level=ConfidenceLevel.MEDIUM,
            value=0.6,
            label="MEDIUM",
            message="Close competition. Small changes could shift the ranking.",
        )
    if margin < cfg.clear_margin:
        return Confidence(
            level=ConfidenceLevel.MEDIUM,
            value=0.75,
            label="MEDIUM",
            message="Clear leader, but second option is competitive.",
        )
    return Confidence(
        level=ConfidenceLevel.HIGH,
        value=0.9,
        label="HIGH",
        message="Strong confidence in the recommendation.",
    )
