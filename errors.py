"""Exceptions raised by the earnings pipeline.

Every rejection carries the values a caller needs to explain it, so the UI
never has to parse messages.
"""

from __future__ import annotations

from decimal import Decimal


class TimeFlowError(Exception):
    """Base class for ledger errors."""

    code = "TIMEFLOW_ERROR"


class InvalidTimeInput(TimeFlowError):
    """A time value that is not a non-negative finite number."""

    code = "INVALID_TIME_INPUT"

    def __init__(self, value: object, reason: str | None = None):
        self.value = value
        self.reason = reason
        message = f"Invalid time input: {value!r}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)


class InvalidAmount(TimeFlowError):
    """A money amount that is missing, negative or not a number."""

    code = "INVALID_AMOUNT"

    def __init__(self, value: object, reason: str | None = None):
        self.value = value
        self.reason = reason
        message = f"Invalid amount: {value!r}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)


class InvalidProject(TimeFlowError):
    """Project fields that cannot be saved."""

    code = "INVALID_PROJECT"


class InvalidStatus(TimeFlowError):
    """A withdrawal payment status other than pending or received."""

    code = "INVALID_STATUS"

    def __init__(self, status: object):
        self.status = status
        super().__init__(f"Invalid payment status: {status!r}")


class BudgetExceeded(TimeFlowError):
    """A milestone asks for more than is left on a fixed-price contract."""

    code = "BUDGET_EXCEEDED"

    def __init__(self, remaining: Decimal, requested: Decimal):
        self.remaining = remaining
        self.requested = requested
        super().__init__(
            f"Milestone of ${requested:.2f} exceeds remaining budget of ${remaining:.2f}"
        )


class InsufficientFunds(TimeFlowError):
    """A withdrawal asks for more than the available balance."""

    code = "INSUFFICIENT_FUNDS"

    def __init__(self, available: Decimal, requested: Decimal):
        self.available = available
        self.requested = requested
        super().__init__(
            f"Cannot withdraw ${requested:.2f}; available balance is ${available:.2f}"
        )


class MissingConfiguration(TimeFlowError):
    """Deduction or currency settings have not been saved yet."""

    code = "MISSING_CONFIGURATION"

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"{name} settings are not configured")


class NotFound(TimeFlowError):
    """A project, entry or withdrawal id that does not exist."""

    code = "NOT_FOUND"

    def __init__(self, kind: str, item_id: str):
        self.kind = kind
        self.item_id = item_id
        super().__init__(f"{kind} {item_id!r} not found")
