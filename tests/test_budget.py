"""Tests for budget.py."""

from decimal import Decimal

import pytest

from budget import check_milestone, paid_amount, remaining_budget
from errors import BudgetExceeded, InvalidAmount


class TestRemainingBudget:
    """Tests for paid and remaining amounts."""

    def test_nothing_paid(self, fixed_project):
        assert paid_amount(fixed_project, []) == Decimal("0")
        assert remaining_budget(fixed_project, []) == Decimal("500")

    def test_only_own_entries_count(self, fixed_project, make_entry):
        entries = [
            make_entry(project_id="proj-fixed", gross="200"),
            make_entry(project_id="proj-hourly", gross="999"),
            make_entry(project_id="proj-fixed", gross="50.50"),
        ]

        assert paid_amount(fixed_project, entries) == Decimal("250.50")
        assert remaining_budget(fixed_project, entries) == Decimal("249.50")

    def test_never_below_zero(self, fixed_project, make_entry):
        entries = [make_entry(project_id="proj-fixed", gross="600")]

        assert remaining_budget(fixed_project, entries) == Decimal("0")


class TestCheckMilestone:
    """Tests for milestone validation."""

    def test_within_budget(self, fixed_project, make_entry):
        entries = [make_entry(project_id="proj-fixed", gross="200")]

        assert check_milestone(fixed_project, entries, "300") == Decimal("300")

    def test_within_tolerance(self, fixed_project, make_entry):
        """A cent of rounding slack is allowed."""
        entries = [make_entry(project_id="proj-fixed", gross="200")]

        check_milestone(fixed_project, entries, "300.01")

    def test_over_budget(self, fixed_project, make_entry):
        entries = [make_entry(project_id="proj-fixed", gross="200")]

        with pytest.raises(BudgetExceeded) as excinfo:
            check_milestone(fixed_project, entries, "300.02")

        assert excinfo.value.remaining == Decimal("300")
        assert excinfo.value.requested == Decimal("300.02")
        assert excinfo.value.code == "BUDGET_EXCEEDED"

    def test_exhausted_budget(self, fixed_project, make_entry):
        entries = [make_entry(project_id="proj-fixed", gross="500")]

        with pytest.raises(BudgetExceeded):
            check_milestone(fixed_project, entries, "1")

    def test_negative_amount_rejected(self, fixed_project):
        with pytest.raises(InvalidAmount):
            check_milestone(fixed_project, [], "-5")
