"""Available balance and withdrawal checks."""

from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal

from errors import InsufficientFunds, InvalidAmount, InvalidStatus
from models import PAYMENT_STATUSES, STATUS_PENDING, STATUS_RECEIVED, TimeEntry, Withdrawal
from utils import TOLERANCE, ZERO, to_amount


def total_earned(entries: Iterable[TimeEntry]) -> Decimal:
    return sum((e.net_usd for e in entries), ZERO)


def total_withdrawn(withdrawals: Iterable[Withdrawal]) -> Decimal:
    return sum((w.net_earnings for w in withdrawals), ZERO)


def available_balance(entries: Iterable[TimeEntry], withdrawals: Iterable[Withdrawal]) -> Decimal:
    """Net earned minus already withdrawn, never below zero."""
    return max(ZERO, total_earned(entries) - total_withdrawn(withdrawals))


def validate_withdrawal(requested: object, available: Decimal) -> Decimal:
    """Return the requested amount, or raise if it exceeds the balance."""
    amount = to_amount(requested)
    if amount > available + TOLERANCE:
        raise InsufficientFunds(available=available, requested=amount)
    return amount


def withdrawal_amount(net_earnings: object, transaction_fee: object) -> Decimal:
    """What actually arrives after the transaction fee."""
    net = to_amount(net_earnings)
    fee = to_amount(transaction_fee)
    if fee > net:
        raise InvalidAmount(fee, "transaction fee exceeds the amount withdrawn")
    return net - fee


def check_status(status: object) -> str:
    if status not in PAYMENT_STATUSES:
        raise InvalidStatus(status)
    return status  # type: ignore[return-value]


def toggle_status(status: str) -> str:
    """pending <-> received."""
    return STATUS_RECEIVED if check_status(status) == STATUS_PENDING else STATUS_PENDING
