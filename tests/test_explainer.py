"""Tests for the recommendation explainer."""

import pytest

from decision_scorer.explainer import RecommendationExplainer, generate_analysis
from decision_scorer.ranking import generate_rankings
from decision_scorer.schema import Constraints, Criterion, Option, RationaleKind


@pytest.fixture
def rankings(options, criteria):
    return generate_rankings(options, criteria).rankings


class TestStrengthsAndWeaknesses:
    """Tests for strength and weakness detection."""

    def test_winner_strengths(self, rankings, criteria):
        analysis = generate_analysis(rankings, criteria)
        assert [s.criterion_id for s in analysis.strengths] == ["price"]
        strength = analysis.strengths[0]
        assert strength.score == 9
        assert strength.advantage == pytest.approx(9 - 17 / 3)

    def test_winner_weaknesses(self, rankings, criteria):
        analysis = generate_analysis(rankings, criteria)
        assert [w.criterion_id for w in analysis.weaknesses] == ["support"]
        assert analysis.weaknesses[0].deficit == pytest.approx(5)

    def test_strengths_ordered_by_weighted_advantage(self):
        criteria = [
            Criterion(id="a", name="A", weight=1),
            Criterion(id="b", name="B", weight=10),
            Criterion(id="c", name="C", weight=5),
            Criterion(id="d", name="D", weight=3),
        ]
        options = [
            Option(id="w", name="W", scores={"a": 10, "b": 8, "c": 9, "d": 9}),
            Option(id="l", name="L", scores={"a": 0, "b": 6, "c": 3, "d": 5}),
        ]
        analysis = generate_analysis(generate_rankings(options, criteria).rankings, criteria)
        # Weighted advantages: a 5, b 10, c 15, d 6; only the top three are kept
        assert [s.name for s in analysis.strengths] == ["C", "B", "D"]

    def test_at_most_two_weaknesses(self):
        criteria = [Criterion(id=c, name=c.upper(), weight=1) for c in "abc"]
        criteria.append(Criterion(id="z", name="Z", weight=10))
        options = [
            Option(id="w", name="W", scores={"a": 4, "b": 2, "c": 3, "z": 10}),
            Option(id="l", name="L", scores={"a": 5, "b": 9, "c": 10, "z": 0}),
        ]
        analysis = generate_analysis(generate_rankings(options, criteria).rankings, criteria)
        assert [w.name for w in analysis.weaknesses] == ["B", "C"]


class TestRationale:
    """Tests for the structured rationale."""

    def test_clauses_in_narrative_order(self, rankings, criteria):
        analysis = generate_analysis(rankings, criteria)
        kinds = [c.kind for c in analysis.rationale_clauses]
        assert kinds == [
            RationaleKind.WINNER,
            RationaleKind.STRENGTHS,
            RationaleKind.RUNNER_UP,
            RationaleKind.WEAKNESSES,
        ]

    def test_rationale_text(self, rankings, criteria):
        analysis = generate_analysis(rankings, criteria)
        assert analysis.rationale == (
            "Alpha scores highest with 7.1/10. "
            "Key strengths include Price. "
            "Bravo is very close behind (7.0/10) and could be considered a safe fallback. "
            "Note: the winner scores lower on Support; consider if these matter more than weighted."
        )

    def test_clause_subjects(self, rankings, criteria):
        clauses = generate_analysis(rankings, criteria).rationale_clauses
        assert clauses[0].subjects == ["Alpha"]
        assert clauses[1].subjects == ["Price"]
        assert clauses[2].subjects == ["Bravo"]
        assert clauses[3].subjects == ["Support"]

    def test_distant_runner_up(self):
        criteria = [Criterion(id="a", name="A", weight=5)]
        options = [
            Option(id="w", name="Winner", scores={"a": 9}),
            Option(id="l", name="Loser", scores={"a": 2}),
        ]
        analysis = generate_analysis(generate_rankings(options, criteria).rankings, criteria)
        runner_up = analysis.rationale_clauses[2]
        assert runner_up.kind == RationaleKind.RUNNER_UP
        assert runner_up.text == "Loser follows at 2.0/10."

    def test_single_option_has_no_runner_up(self):
        criteria = [Criterion(id="a", name="A", weight=5)]
        rankings = generate_rankings([Option(id="s", name="Solo", scores={"a": 6})], criteria).rankings
        analysis = generate_analysis(rankings, criteria)
        assert analysis.winner == "Solo"
        assert analysis.runner_up is None
        assert [c.kind for c in analysis.rationale_clauses] == [RationaleKind.WINNER]
        assert analysis.rationale == "Solo scores highest with 6.0/10."

    def test_penalized_winner_mentions_penalty(self):
        criteria = [Criterion(id="a", name="A", weight=5)]
        options = [
            Option(id="w", name="Winner", scores={"a": 10}, estimated_cost="120"),
            Option(id="l", name="Loser", scores={"a": 2}, estimated_cost="50"),
        ]
        rankings = generate_rankings(options, criteria, Constraints(budget="100")).rankings
        analysis = generate_analysis(rankings, criteria)
        assert analysis.rationale_clauses[0].text == (
            "Winner scores highest with 8.8/10 (includes 12% constraint penalty)."
        )

    def test_empty_rankings(self, criteria):
        assert generate_analysis([], criteria) is None


class TestWarningsAndTradeoffs:
    """Tests for constraint warnings and per-option trade-offs."""

    def test_tradeoffs_for_every_option(self, rankings, criteria):
        tradeoffs = generate_analysis(rankings, criteria).tradeoffs
        assert [(t.option_name, t.pros, t.cons) for t in tradeoffs] == [
            ("Alpha", ["Price"], []),
            ("Bravo", ["Quality", "Support"], []),
            ("Charlie", ["Support"], ["Price", "Quality"]),
        ]

    def test_only_moderate_and_severe_violations_warn(self):
        criteria = [Criterion(id="a", name="A", weight=5)]
        options = [
            Option(id="near", name="Near", scores={"a": 9}, estimated_cost="95"),
            Option(id="over", name="Over", scores={"a": 9}, estimated_cost="300"),
            Option(id="risky", name="Risky", scores={"a": 9}, constraint_compliance=4),
        ]
        rankings = generate_rankings(options, criteria, Constraints(budget="100")).rankings
        warnings = generate_analysis(rankings, criteria).constraint_warnings
        assert "Over: 200% over budget" in warnings
        assert "Risky: Low constraint compliance from notes" in warnings
        assert not any(w.startswith("Near") for w in warnings)

    def test_thresholds_from_config(self, rankings, criteria):
        explainer = RecommendationExplainer()
        explainer.pro_min_score = 10
        tradeoffs = explainer.generate_tradeoffs(rankings, criteria)
        assert tradeoffs[0].pros == []
        assert tradeoffs[2].pros == ["Support"]
