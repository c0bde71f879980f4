"""Tests for decision loading, validation and the engine pipeline."""

import json
from datetime import date

import pytest

from decision_scorer.engine import (
    DecisionEngine,
    DecisionLoadError,
    load_decision,
    load_score_ranges,
    validate_decision,
    validate_decision_file,
)
from decision_scorer.schema import Constraints, Criterion, Decision, Option


@pytest.fixture
def decision(options, criteria) -> Decision:
    return Decision(
        id="d1",
        title="Pick a vendor",
        options=options,
        criteria=criteria,
        constraints=Constraints(deadline="2026-11-01"),
    )


@pytest.fixture
def decision_file(tmp_path):
    data = {
        "id": "d1",
        "title": "Pick a vendor",
        "options": [
            {"id": "a", "name": "Acme", "scores": {"cost": 8, "speed": 5}, "estimatedCost": 900},
            {"id": "b", "name": "Bolt", "scores": {"cost": 4, "speed": 9}, "constraintCompliance": 6},
        ],
        "criteria": [
            {"id": "cost", "name": "Cost", "weight": 7},
            {"id": "speed", "name": "Speed", "weight": 5},
        ],
        "constraints": {"budget": "$1,000", "deadline": None, "notes": "Must ship in Q1"},
        "created_at": "2026-10-01T09:30:00",
    }
    path = tmp_path / "decision.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


class TestLoadDecision:
    """Tests for load_decision() and load_score_ranges()."""

    def test_load_decision_with_camel_case_fields(self, decision_file):
        decision = load_decision(decision_file)
        assert decision.title == "Pick a vendor"
        assert decision.options[0].estimated_cost == "900"
        assert decision.options[1].constraint_compliance == 6
        assert decision.constraints.budget == "$1,000"
        assert decision.criteria[0].weight == 7

    def test_single_item_list_is_unwrapped(self, tmp_path, decision_file):
        path = tmp_path / "wrapped.json"
        path.write_text("[" + decision_file.read_text(encoding="utf-8") + "]", encoding="utf-8")
        assert load_decision(path).title == "Pick a vendor"

    def test_missing_file(self, tmp_path):
        with pytest.raises(DecisionLoadError, match="Cannot read"):
            load_decision(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(DecisionLoadError, match="Invalid JSON"):
            load_decision(path)

    def test_invalid_decision(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"criteria": [{"id": "c", "weight": 50}]}), encoding="utf-8")
        with pytest.raises(DecisionLoadError, match="Invalid decision"):
            load_decision(path)

    def test_load_score_ranges(self, tmp_path):
        path = tmp_path / "ranges.json"
        path.write_text(json.dumps({"a": {"cost": {"min": 3, "max": 7}}, "b": None}), encoding="utf-8")
        ranges = load_score_ranges(path)
        assert ranges["a"]["cost"].min == 3
        assert ranges["a"]["cost"].max == 7
        assert ranges["b"] == {}

    def test_score_ranges_must_be_an_object(self, tmp_path):
        path = tmp_path / "ranges.json"
        path.write_text("[1, 2]", encoding="utf-8")
        with pytest.raises(DecisionLoadError):
            load_score_ranges(path)

    def test_score_range_out_of_scale(self, tmp_path):
        path = tmp_path / "ranges.json"
        path.write_text(json.dumps({"a": {"cost": {"min": 3, "max": 70}}}), encoding="utf-8")
        with pytest.raises(DecisionLoadError, match="Invalid score ranges"):
            load_score_ranges(path)


class TestValidateDecision:
    """Tests for validate_decision()."""

    def test_complete_decision_is_valid(self, decision):
        assert validate_decision(decision) == (True, [])

    def test_reports_every_issue(self):
        decision = Decision(
            title="  ",
            options=[Option(id="x", name="")],
            criteria=[],
        )
        is_valid, issues = validate_decision(decision)
        assert is_valid is False
        assert "Decision title is empty" in issues
        assert "At least 2 options required, found 1" in issues
        assert "Option 1 (x) has no name" in issues
        assert "At least 1 criterion required" in issues

    def test_duplicate_ids(self):
        decision = Decision(
            title="Dupes",
            options=[Option(id="x", name="X"), Option(id="x", name="Y")],
            criteria=[Criterion(id="c", name="C"), Criterion(id="c", name="D")],
        )
        _, issues = validate_decision(decision)
        assert "Duplicate option ids: x" in issues
        assert "Duplicate criterion ids: c" in issues

    def test_validate_file(self, decision_file, tmp_path):
        assert validate_decision_file(decision_file) == (True, [])
        is_valid, issues = validate_decision_file(tmp_path / "missing.json")
        assert is_valid is False
        assert issues[0].startswith("Cannot read")


class TestDefaultScores:
    """Tests for Decision.with_default_scores()."""

    def test_fills_only_gaps(self):
        decision = Decision(
            title="Gaps",
            options=[Option(id="x", name="X", scores={"a": 2})],
            criteria=[Criterion(id="a", name="A"), Criterion(id="b", name="B")],
        )
        filled = decision.with_default_scores(5)
        assert filled.options[0].scores == {"a": 2, "b": 5}
        assert decision.options[0].scores == {"a": 2}


class TestDecisionEngine:
    """Tests for the full pipeline."""

    def test_report_contents(self, decision):
        report = DecisionEngine().evaluate(decision, today=date(2026, 10, 18))
        assert report.decision_title == "Pick a vendor"
        assert report.ranking.winner.id == "alpha"
        assert report.sensitivity.robustness == 20
        assert report.simulation is None
        assert report.days_until_deadline == 14
        assert report.processing_warnings == []

    def test_simulation_runs_with_ranges(self, decision):
        ranges = {"charlie": {"price": {"min": 10, "max": 10}, "quality": {"min": 10, "max": 10}}}
        report = DecisionEngine().evaluate(decision, score_ranges=ranges, simulations=20, seed=1)
        assert report.simulation.simulations == 20
        assert report.simulation.most_likely.id == "charlie"

    def test_incomplete_decision_still_evaluated(self):
        decision = Decision(title="", options=[Option(id="x", name="X")], criteria=[])
        report = DecisionEngine().evaluate(decision)
        assert report.ranking.rankings == []
        assert report.ranking.confidence == 0
        assert report.sensitivity is None
        assert "Decision title is empty" in report.processing_warnings

    def test_unreadable_deadline_warns(self, decision):
        decision.constraints.deadline = "soon"
        report = DecisionEngine().evaluate(decision)
        assert report.days_until_deadline is None
        assert "Deadline not understood: soon" in report.processing_warnings

    def test_default_score_policy(self):
        decision = Decision(
            title="Sparse",
            options=[
                Option(id="sparse", name="Sparse", scores={"a": 6}),
                Option(id="full", name="Full", scores={"a": 4, "b": 4}),
            ],
            criteria=[Criterion(id="a", name="A"), Criterion(id="b", name="B")],
        )
        assert DecisionEngine().evaluate(decision).ranking.winner.id == "full"
        assert DecisionEngine(default_score=5).evaluate(decision).ranking.winner.id == "sparse"

    def test_evaluate_file(self, decision_file, tmp_path):
        ranges = tmp_path / "ranges.json"
        ranges.write_text(json.dumps({"b": {"cost": {"min": 9, "max": 10}}}), encoding="utf-8")
        report = DecisionEngine().evaluate_file(decision_file, ranges, simulations=10, seed=2)
        # Acme sits exactly at 90% of budget, below the near-budget band
        assert report.ranking.winner.id == "a"
        assert report.ranking.winner.constraint_penalty == 1.0
        # Bolt is penalized for its compliance score of 6
        assert report.ranking.rankings[1].constraint_penalty == pytest.approx(0.88)
        assert report.simulation.simulations == 10
        assert report.days_until_deadline is None
