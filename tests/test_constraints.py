"""Tests for soft constraint penalties and the deadline helper."""

from datetime import date

import pytest

from decision_scorer.constraints import calculate_constraint_penalty, days_until_deadline
from decision_scorer.schema import (
    Constraints,
    Option,
    ViolationSeverity,
    ViolationType,
)


def make_option(cost=None, compliance=None) -> Option:
    return Option(
        id="o",
        name="Option",
        estimated_cost=cost,
        constraint_compliance=compliance,
    )


BUDGET = Constraints(budget="$100")


class TestBudgetPenalty:
    """Budget ratio bands: severe, moderate, minor, none."""

    def test_no_constraints_means_no_penalty(self):
        penalty = calculate_constraint_penalty(make_option(cost="500"), None)
        assert penalty.factor == 1.0
        assert penalty.violations == []

    def test_ratio_over_one_and_a_half_is_severe(self):
        penalty = calculate_constraint_penalty(make_option(cost="200"), BUDGET)
        assert penalty.factor == pytest.approx(0.5)
        assert len(penalty.violations) == 1
        violation = penalty.violations[0]
        assert violation.type == ViolationType.BUDGET
        assert violation.severity == ViolationSeverity.SEVERE
        assert violation.message == "100% over budget"

    def test_ratio_of_exactly_one_and_a_half_is_moderate(self):
        penalty = calculate_constraint_penalty(make_option(cost="150"), BUDGET)
        assert penalty.factor == pytest.approx(0.7)
        assert penalty.violations[0].severity == ViolationSeverity.MODERATE
        assert penalty.violations[0].message == "50% over budget"

    def test_moderate_band_is_proportional(self):
        penalty = calculate_constraint_penalty(make_option(cost="120"), BUDGET)
        assert penalty.factor == pytest.approx(0.88)
        assert penalty.violations[0].message == "20% over budget"

    def test_close_to_budget_is_minor(self):
        penalty = calculate_constraint_penalty(make_option(cost="95"), BUDGET)
        assert penalty.factor == pytest.approx(0.95)
        assert penalty.violations[0].severity == ViolationSeverity.MINOR
        assert penalty.violations[0].message == "Close to budget limit"

    def test_exactly_at_budget_is_minor(self):
        penalty = calculate_constraint_penalty(make_option(cost="100"), BUDGET)
        assert penalty.factor == pytest.approx(0.95)

    def test_well_under_budget_has_no_penalty(self):
        for cost in ("90", "50", "0"):
            penalty = calculate_constraint_penalty(make_option(cost=cost), BUDGET)
            assert penalty.factor == 1.0
            assert penalty.violations == []

    def test_formatted_budget_is_parsed(self):
        constraints = Constraints(budget="$1,000")
        penalty = calculate_constraint_penalty(make_option(cost="1200"), constraints)
        assert penalty.factor == pytest.approx(0.88)

    @pytest.mark.parametrize("budget, cost", [
        ("lots", "100"),
        ("0", "100"),
        ("$100", "unknown"),
        (None, "100"),
        ("$100", None),
    ])
    def test_unparsable_values_skip_budget_check(self, budget, cost):
        penalty = calculate_constraint_penalty(make_option(cost=cost), Constraints(budget=budget))
        assert penalty.factor == 1.0
        assert penalty.violations == []


class TestCompliancePenalty:
    """Compliance score maps linearly to a 0.7-1.0 multiplier."""

    @pytest.mark.parametrize("compliance, factor", [
        (10, 1.0),
        (5, 0.85),
        (0, 0.7),
    ])
    def test_compliance_factor(self, compliance, factor):
        penalty = calculate_constraint_penalty(make_option(compliance=compliance), Constraints())
        assert penalty.factor == pytest.approx(factor)

    def test_compliance_of_five_is_not_a_violation(self):
        penalty = calculate_constraint_penalty(make_option(compliance=5), Constraints())
        assert penalty.violations == []

    def test_low_compliance_is_moderate(self):
        penalty = calculate_constraint_penalty(make_option(compliance=4), Constraints())
        assert penalty.violations[0].type == ViolationType.NOTES
        assert penalty.violations[0].severity == ViolationSeverity.MODERATE

    def test_very_low_compliance_is_severe(self):
        penalty = calculate_constraint_penalty(make_option(compliance=2), Constraints())
        assert penalty.violations[0].severity == ViolationSeverity.SEVERE

    def test_penalties_multiply_budget_first(self):
        penalty = calculate_constraint_penalty(make_option(cost="200", compliance=4), BUDGET)
        assert penalty.factor == pytest.approx(0.5 * 0.82)
        assert [v.type for v in penalty.violations] == [ViolationType.BUDGET, ViolationType.NOTES]

    def test_factor_is_never_zero(self):
        penalty = calculate_constraint_penalty(make_option(cost="1000000", compliance=0), BUDGET)
        assert 0 < penalty.factor <= 1
        assert penalty.factor == pytest.approx(0.35)


class TestDaysUntilDeadline:
    """Tests for days_until_deadline()."""

    def test_days_remaining(self):
        constraints = Constraints(deadline="2026-11-01")
        assert days_until_deadline(constraints, today=date(2026, 10, 18)) == 14

    def test_past_deadline_is_negative(self):
        constraints = Constraints(deadline="2026-10-01T12:00:00")
        assert days_until_deadline(constraints, today=date(2026, 10, 18)) == -17

    def test_missing_or_invalid_deadline(self):
        assert days_until_deadline(None) is None
        assert days_until_deadline(Constraints()) is None
        assert days_until_deadline(Constraints(deadline="next friday")) is None
