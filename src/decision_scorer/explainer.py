"""Explainer - Phase 5 of the Decision Scoring Engine.

Generates the explanation for a ranking: the winner's strengths and
weaknesses, a structured rationale, constraint warnings and per-option
trade-offs.
"""

from typing import Optional

from .config import get_config
from .schema import (
    Analysis,
    Constraints,
    Criterion,
    RankedOption,
    RationaleClause,
    RationaleKind,
    Strength,
    Tradeoff,
    ViolationSeverity,
    Weakness,
)

# Violations worth surfacing to the user
WARNING_SEVERITIES = (ViolationSeverity.SEVERE, ViolationSeverity.MODERATE)


class RecommendationExplainer:
    """Explains why the top-ranked option won.

    Principles:
    - Every recommendation must be explainable
    - The rationale is structured data; rendering is left to the caller
    - Trade-offs are judged per option, not relative to other options

    Configuration:
    - Strength/weakness thresholds can be customized via decision-config.yaml
    """

    def __init__(self):
        """Initialize explainer with configuration."""
        cfg = get_config()
        self.strength_min_score = cfg.analysis.strength_min_score
        self.weakness_max_score = cfg.analysis.weakness_max_score
        self.max_strengths = cfg.analysis.max_strengths
        self.max_weaknesses = cfg.analysis.max_weaknesses
        self.close_gap = cfg.analysis.close_gap
        self.pro_min_score = cfg.analysis.pro_min_score
        self.con_max_score = cfg.analysis.con_max_score
        self.missing_score = cfg.scoring.missing_score

    def analyze(
        self,
        rankings: list[RankedOption],
        criteria: list[Criterion],
        constraints: Optional[Constraints] = None,
    ) -> Optional[Analysis]:
        """Build the analysis for sorted, penalized rankings.

        Args:
            rankings: Ranked options, best first
            criteria: Criteria the options were ranked on
            constraints: Constraints the ranking was computed with

        Returns:
            Analysis of the winner, or None when there are no rankings
        """
        if not rankings:
            return None

        winner = rankings[0]
        runner_up = rankings[1] if len(rankings) > 1 else None

        strengths = self.find_strengths(winner, rankings, criteria)
        weaknesses = self.find_weaknesses(winner, rankings, criteria)
        clauses = self.build_rationale(winner, runner_up, strengths, weaknesses)

        return Analysis(
            winner=winner.name,
            runner_up=runner_up.name if runner_up else None,
            strengths=strengths,
            weaknesses=weaknesses,
            rationale=" ".join(c.text for c in clauses),
            rationale_clauses=clauses,
            constraint_warnings=self.collect_constraint_warnings(rankings),
            tradeoffs=self.generate_tradeoffs(rankings, criteria),
        )

    def _score(self, ranked: RankedOption, criterion: Criterion) -> float:
        score = ranked.criterion_score(criterion.id)
        if score is None:
            score = ranked.scores.get(criterion.id, self.missing_score)
        return score

    def find_strengths(
        self,
        winner: RankedOption,
        rankings: list[RankedOption],
        criteria: list[Criterion],
    ) -> list[Strength]:
        """Criteria where the winner beats the field average and scores well.

        Ordered by advantage times criterion weight, most important first.
        """
        candidates = []
        for criterion in criteria:
            winner_score = self._score(winner, criterion)
            mean = sum(self._score(r, criterion) for r in rankings) / len(rankings)

            if winner_score > mean and winner_score >= self.strength_min_score:
                candidates.append((criterion.weight, Strength(
                    criterion_id=criterion.id,
                    name=criterion.name,
                    score=winner_score,
                    advantage=winner_score - mean,
                )))

        candidates.sort(key=lambda c: c[1].advantage * c[0], reverse=True)
        return [s for _, s in candidates[:self.max_strengths]]

    def find_weaknesses(
        self,
        winner: RankedOption,
        rankings: list[RankedOption],
        criteria: list[Criterion],
    ) -> list[Weakness]:
        """Criteria where the winner trails the best option and scores poorly."""
        weaknesses = []
        for criterion in criteria:
            winner_score = self._score(winner, criterion)
            best = max(self._score(r, criterion) for r in rankings)

            if winner_score < best and winner_score <= self.weakness_max_score:
                weaknesses.append(Weakness(
                    criterion_id=criterion.id,
                    name=criterion.name,
                    score=winner_score,
                    deficit=best - winner_score,
                ))

        weaknesses.sort(key=lambda w: w.deficit, reverse=True)
        return weaknesses[:self.max_weaknesses]

    def build_rationale(
        self,
        winner: RankedOption,
        runner_up: Optional[RankedOption],
        strengths: list[Strength],
        weaknesses: list[Weakness],
    ) -> list[RationaleClause]:
        """Narrative clauses: winner, strengths, runner-up, weaknesses."""
        text = f"{winner.name} scores highest with {winner.normalized_score:.1f}/10"
        if winner.constraint_penalty < 1:
            text += f" (includes {round((1 - winner.constraint_penalty) * 100)}% constraint penalty)"
        clauses = [RationaleClause(
            kind=RationaleKind.WINNER,
            text=text + ".",
            subjects=[winner.name],
        )]

        if strengths:
            names = [s.name for s in strengths]
            clauses.append(RationaleClause(
                kind=RationaleKind.STRENGTHS,
                text=f"Key strengths include {' and '.join(names)}.",
                subjects=names,
            ))

        if runner_up:
            gap = winner.normalized_score - runner_up.normalized_score
            if gap < self.close_gap:
                text = (
                    f"{runner_up.name} is very close behind ({runner_up.normalized_score:.1f}/10) "
                    "and could be considered a safe fallback."
                )
            else:
                text = f"{runner_up.name} follows at {runner_up.normalized_score:.1f}/10."
            clauses.append(RationaleClause(
                kind=RationaleKind.RUNNER_UP,
                text=text,
                subjects=[runner_up.name],
            ))

        if weaknesses:
            names = [w.name for w in weaknesses]
            clauses.append(RationaleClause(
                kind=RationaleKind.WEAKNESSES,
                text=(
                    f"Note: the winner scores lower on {' and '.join(names)}; "
                    "consider if these matter more than weighted."
                ),
                subjects=names,
            ))

        return clauses

    def collect_constraint_warnings(self, rankings: list[RankedOption]) -> list[str]:
        """One warning per moderate or severe violation, for every option."""
        warnings = []
        for ranked in rankings:
            for violation in ranked.constraint_violations:
                if violation.severity in WARNING_SEVERITIES:
                    warnings.append(f"{ranked.name}: {violation.message}")
        return warnings

    def generate_tradeoffs(
        self,
        rankings: list[RankedOption],
        criteria: list[Criterion],
    ) -> list[Tradeoff]:
        """Pros (high scores) and cons (low scores) for each option."""
        tradeoffs = []
        for ranked in rankings:
            pros = []
            cons = []
            for criterion in criteria:
                score = self._score(ranked, criterion)
                if score >= self.pro_min_score:
                    pros.append(criterion.name)
                elif score <= self.con_max_score:
                    cons.append(criterion.name)
            tradeoffs.append(Tradeoff(
                option_id=ranked.id,
                option_name=ranked.name,
                pros=pros,
                cons=cons,
            ))
        return tradeoffs


def generate_analysis(
    rankings: list[RankedOption],
    criteria: list[Criterion],
    constraints: Optional[Constraints] = None,
) -> Optional[Analysis]:
    """Generate the analysis for a ranking.

    Args:
        rankings: Ranked options, best first
        criteria: Criteria the options were ranked on
        constraints: Constraints used for the ranking

    Returns:
        Analysis, or None for empty rankings
    """
    return RecommendationExplainer().analyze(rankings, criteria, constraints)
