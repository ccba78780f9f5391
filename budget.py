"""Remaining budget on fixed-price projects."""

from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal

from errors import BudgetExceeded
from models import Project, TimeEntry
from utils import TOLERANCE, ZERO, to_amount


def paid_amount(project: Project, entries: Iterable[TimeEntry]) -> Decimal:
    """Gross already booked against the project."""
    return sum((e.gross_usd for e in entries if e.project_id == project.id), ZERO)


def remaining_budget(project: Project, entries: Iterable[TimeEntry]) -> Decimal:
    return max(ZERO, to_amount(project.rate) - paid_amount(project, entries))


def check_milestone(
    project: Project, entries: Iterable[TimeEntry], requested_amount: object
) -> Decimal:
    """Reject a milestone larger than what is left. Returns the remaining budget."""
    requested = to_amount(requested_amount)
    remaining = remaining_budget(project, entries)
    if requested - remaining > TOLERANCE:
        raise BudgetExceeded(remaining=remaining, requested=requested)
    return remaining
