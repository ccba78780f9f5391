"""Date and money helpers shared by the ledger and the UI."""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal, InvalidOperation

from errors import InvalidAmount

ZERO = Decimal("0")
# Slack allowed when comparing sums of money against a limit
TOLERANCE = Decimal("0.01")


def get_week_start(d: date) -> date:
    """Get the Monday that starts the week containing date d."""
    return d - timedelta(days=d.weekday())


def get_week_end(d: date) -> date:
    """Get the Sunday that ends the week containing date d."""
    return get_week_start(d) + timedelta(days=6)


def get_month_start(d: date) -> date:
    return d.replace(day=1)


def days_in_range(start: date, end: date) -> list[date]:
    """Every date from start to end inclusive."""
    return [start + timedelta(days=i) for i in range((end - start).days + 1)]


def to_amount(value: object) -> Decimal:
    """Read a user-supplied money amount, rejecting anything that isn't >= 0."""
    if value is None or isinstance(value, bool):
        raise InvalidAmount(value)
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except InvalidOperation:
        raise InvalidAmount(value) from None
    if not amount.is_finite():
        raise InvalidAmount(value)
    if amount < 0:
        raise InvalidAmount(value, "must not be negative")
    return amount


def format_usd(amount: Decimal) -> str:
    return f"${amount:,.2f}"


def format_inr(amount: Decimal) -> str:
    return f"₹{amount:,.2f}"
