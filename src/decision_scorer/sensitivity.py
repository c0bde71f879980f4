"""Sensitivity Analyzer - Phase 6 of the Decision Scoring Engine.

Finds tipping points (criterion weights at which the winner would change)
and summarizes how robust the current winner is to weight changes.
Re-ranking always works on copies of the criteria; inputs are never mutated.
"""

import logging
from typing import Mapping, Optional

from .config import get_config
from .ranking import generate_rankings
from .schema import (
    Constraints,
    Criterion,
    Option,
    RankedOption,
    SensitivityResult,
    TippingDirection,
    TippingPoint,
    TippingPointSummary,
    WhatIfResult,
)
from .scorer import resolve_default_score

logger = logging.getLogger(__name__)

MIN_WEIGHT = 1
MAX_WEIGHT = 10


def _scan_constraints(
    constraints: Optional[Constraints],
    apply_constraints: Optional[bool],
) -> Optional[Constraints]:
    """Constraints to use while re-ranking, honouring the configured policy."""
    if apply_constraints is None:
        apply_constraints = get_config().sensitivity.apply_constraints
    return constraints if apply_constraints else None


def _with_weights(criteria: list[Criterion], weights: Mapping[str, int]) -> list[Criterion]:
    """Copies of ``criteria`` with the given weights, clamped to 1-10."""
    return [
        c.model_copy(update={"weight": max(MIN_WEIGHT, min(MAX_WEIGHT, int(weights[c.id])))})
        if c.id in weights else c.model_copy()
        for c in criteria
    ]


def _with_weight(criteria: list[Criterion], criterion_id: str, new_weight: int) -> list[Criterion]:
    return _with_weights(criteria, {criterion_id: new_weight})


class SensitivityAnalyzer:
    """Analyzes how sensitive a ranking is to criterion weights.

    Scans candidate weights linearly outward from the current weight and
    reports the first one at which a different option ranks first.
    """

    def __init__(
        self,
        constraints: Optional[Constraints] = None,
        apply_constraints: Optional[bool] = None,
        default_score: Optional[float] = None,
    ):
        cfg = get_config().sensitivity
        self.constraints = _scan_constraints(constraints, apply_constraints)
        self.default_score = resolve_default_score(default_score)
        self.sensitive_steps = cfg.sensitive_steps
        self.sensitive_criterion_penalty = cfg.sensitive_criterion_penalty
        self.close_gap = cfg.close_gap
        self.close_gap_penalty = cfg.close_gap_penalty
        self.robust_threshold = cfg.robust_threshold

    def analyze(
        self,
        rankings: list[RankedOption],
        criteria: list[Criterion],
        options: Optional[list[Option]] = None,
    ) -> Optional[SensitivityResult]:
        """Find tipping points and robustness for a ranking.

        Args:
            rankings: Ranked options, best first
            criteria: Criteria the ranking was computed with
            options: Source options; when given they replace the embedded
                options of the rankings (matched by id) during re-ranking

        Returns:
            Sensitivity result, or None with fewer than two ranked options
        """
        if len(rankings) < 2:
            return None

        winner, runner_up = rankings[0], rankings[1]
        gap = winner.normalized_score - runner_up.normalized_score

        tipping_points = [
            self._tipping_point(rankings, criteria, criterion, options)
            for criterion in criteria
        ]
        sensitive = [tp for tp in tipping_points if tp.is_sensitive]

        robustness = 100 - len(sensitive) * self.sensitive_criterion_penalty
        if gap < self.close_gap:
            robustness -= self.close_gap_penalty
        robustness = max(0, robustness)

        logger.debug(
            "Sensitivity for %s: %d sensitive criteria, robustness %s",
            winner.id, len(sensitive), robustness,
        )

        return SensitivityResult(
            winner=winner,
            runner_up=runner_up,
            gap_to_runner_up=gap,
            robustness=robustness,
            tipping_points=tipping_points,
            sensitive_criteria=sensitive,
            is_robust=robustness >= self.robust_threshold,
        )

    def _tipping_point(
        self,
        rankings: list[RankedOption],
        criteria: list[Criterion],
        criterion: Criterion,
        options: Optional[list[Option]],
    ) -> TippingPoint:
        winner, runner_up = rankings[0], rankings[1]
        winner_score = self._score(winner, criterion)
        runner_up_score = self._score(runner_up, criterion)
        score_diff = winner_score - runner_up_score
        current = criterion.weight

        if score_diff > 0:
            # Winner is favoured here; less weight may flip the decision
            candidates = range(current - 1, MIN_WEIGHT - 1, -1)
            direction = TippingDirection.DECREASE
        elif score_diff < 0:
            candidates = range(current + 1, MAX_WEIGHT + 1)
            direction = TippingDirection.INCREASE
        else:
            candidates = range(0)
            direction = None

        tipping_weight = None
        for weight in candidates:
            new_rankings = self.simulate_with_weight(rankings, criteria, criterion.id, weight, options)
            if new_rankings and new_rankings[0].id != winner.id:
                tipping_weight = weight
                break

        return TippingPoint(
            criterion_id=criterion.id,
            criterion_name=criterion.name,
            current_weight=current,
            winner_score=winner_score,
            runner_up_score=runner_up_score,
            score_diff=score_diff,
            tipping_weight=tipping_weight,
            direction=direction if tipping_weight is not None else None,
            is_sensitive=(
                tipping_weight is not None
                and abs(tipping_weight - current) <= self.sensitive_steps
            ),
        )

    def _score(self, ranked: RankedOption, criterion: Criterion) -> float:
        score = ranked.criterion_score(criterion.id)
        return self.default_score if score is None else score

    def simulate_with_weight(
        self,
        rankings: list[RankedOption],
        criteria: list[Criterion],
        criterion_id: str,
        new_weight: int,
        options: Optional[list[Option]] = None,
    ) -> list[RankedOption]:
        """Re-rank with one criterion's weight replaced.

        Options keep their current ranking order so that ties still favour
        the current winner.
        """
        by_id = {o.id: o for o in options} if options else {}
        ordered = [by_id.get(r.id, r.option) for r in rankings]

        return generate_rankings(
            ordered,
            _with_weight(criteria, criterion_id, new_weight),
            self.constraints,
            default_score=self.default_score,
        ).rankings


def analyze(
    rankings: list[RankedOption],
    criteria: list[Criterion],
    options: Optional[list[Option]] = None,
    constraints: Optional[Constraints] = None,
    apply_constraints: Optional[bool] = None,
    default_score: Optional[float] = None,
) -> Optional[SensitivityResult]:
    """Analyze tipping points and robustness of a ranking.

    Constraint penalties are applied while re-ranking only when
    ``apply_constraints`` is true (defaults to the configured policy).
    """
    analyzer = SensitivityAnalyzer(constraints, apply_constraints, default_score)
    return analyzer.analyze(rankings, criteria, options)


def simulate_with_weight(
    rankings: list[RankedOption],
    criteria: list[Criterion],
    criterion_id: str,
    new_weight: int,
    constraints: Optional[Constraints] = None,
    apply_constraints: Optional[bool] = None,
    default_score: Optional[float] = None,
) -> list[RankedOption]:
    """Re-rank a ranking's options with one criterion weight changed."""
    analyzer = SensitivityAnalyzer(constraints, apply_constraints, default_score)
    return analyzer.simulate_with_weight(rankings, criteria, criterion_id, new_weight)


def what_if_analysis(
    options: list[Option],
    criteria: list[Criterion],
    criterion_id: str,
    new_weight: int,
    constraints: Optional[Constraints] = None,
    apply_constraints: Optional[bool] = None,
    default_score: Optional[float] = None,
) -> WhatIfResult:
    """Compare the winner before and after changing one criterion weight.

    Args:
        options: Options to rank
        criteria: Current criteria
        criterion_id: Criterion whose weight changes
        new_weight: Weight to try
        constraints: Decision constraints
        apply_constraints: Whether constraints apply (defaults to config)
        default_score: Score for unscored criteria

    Returns:
        Original and new winner names, whether the winner changed and the
        new rankings
    """
    return compare_scenario(
        options, criteria, {criterion_id: new_weight},
        constraints=constraints,
        apply_constraints=apply_constraints,
        default_score=default_score,
    )


def compare_scenario(
    options: list[Option],
    criteria: list[Criterion],
    weights: Mapping[str, int],
    constraints: Optional[Constraints] = None,
    apply_constraints: Optional[bool] = None,
    default_score: Optional[float] = None,
) -> WhatIfResult:
    """Compare the winner before and after changing several weights at once.

    ``weights`` maps criterion ids to new weights; unknown ids are ignored
    and weights are clamped to 1-10.
    """
    scan_constraints = _scan_constraints(constraints, apply_constraints)

    original = generate_rankings(options, criteria, scan_constraints, default_score)
    modified = generate_rankings(
        options,
        _with_weights(criteria, weights),
        scan_constraints,
        default_score,
    )

    changed = bool(
        original.rankings
        and modified.rankings
        and original.rankings[0].id != modified.rankings[0].id
    )

    return WhatIfResult(
        original_winner=original.winner.name if original.winner else None,
        new_winner=modified.winner.name if modified.winner else None,
        changed=changed,
        new_rankings=modified.rankings,
    )


def find_tipping_point(
    options: list[Option],
    criteria: list[Criterion],
    criterion_id: str,
    constraints: Optional[Constraints] = None,
    apply_constraints: Optional[bool] = None,
    default_score: Optional[float] = None,
) -> Optional[TippingPointSummary]:
    """Find the lowest weight (1-10) for a criterion that changes the winner.

    Returns None with fewer than two options, for an unknown criterion, or
    when no weight changes the winner.
    """
    scan_constraints = _scan_constraints(constraints, apply_constraints)

    original = generate_rankings(options, criteria, scan_constraints, default_score)
    if len(original.rankings) < 2:
        return None

    criterion = next((c for c in criteria if c.id == criterion_id), None)
    if criterion is None:
        return None

    for weight in range(MIN_WEIGHT, MAX_WEIGHT + 1):
        result = what_if_analysis(
            options, criteria, criterion_id, weight,
            constraints=scan_constraints,
            apply_constraints=True,
            default_score=default_score,
        )
        if result.changed:
            logger.debug("Tipping point for %s at weight %d", criterion_id, weight)
            return TippingPointSummary(
                criterion_name=criterion.name,
                tipping_weight=weight,
                new_winner=result.new_winner,
            )

    return None
