"""Ledger operations: validate a request fully, then write it.

Each create runs inside ``storage.transaction()`` so the figures it checks
against (a project's paid amount, the available balance) cannot change
between the check and the insert. A rejected request raises before anything
is written and the transaction is rolled back.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal

import storage
from balance import available_balance, check_status, toggle_status, validate_withdrawal, withdrawal_amount
from budget import check_milestone, remaining_budget
from earnings import compute_earnings
from errors import InvalidAmount, InvalidProject, InvalidTimeInput, NotFound, TimeFlowError
from models import (
    PROJECT_HOURLY,
    PROJECT_TYPES,
    STATUS_PENDING,
    CurrencyConfig,
    DeductionConfig,
    EarningsInput,
    Project,
    TimeEntry,
    Withdrawal,
)
from timeparse import FORMAT_HM, parse_time_input
from utils import to_amount

logger = logging.getLogger("timeflow.ledger")


def _require_project(project_id: str, conn) -> Project:
    project = storage.get_project(project_id, conn=conn)
    if project is None:
        raise NotFound("Project", project_id)
    return project


# --- Projects ---


def _check_project_fields(name: str, project_type: str) -> None:
    if not name or not name.strip():
        raise InvalidProject("Project name is required")
    if project_type not in PROJECT_TYPES:
        raise InvalidProject(f"Unknown project type {project_type!r}")


def add_project(
    name: str, rate: object, project_type: str = PROJECT_HOURLY, color: str = "#3b82f6"
) -> Project:
    _check_project_fields(name, project_type)
    project = storage.create_project(
        Project(name=name.strip(), rate=to_amount(rate), type=project_type, color=color)
    )
    logger.info("Created %s project %s (%s)", project.type, project.name, project.id)
    return project


def edit_project(project_id: str, **changes) -> Project:
    """Change a project's name, rate, type or colour.

    Entries already logged keep the earnings they were recorded with.
    """
    if "rate" in changes:
        changes["rate"] = to_amount(changes["rate"])
    if "name" in changes:
        if not changes["name"] or not changes["name"].strip():
            raise InvalidProject("Project name is required")
        changes["name"] = changes["name"].strip()
    if "type" in changes and changes["type"] not in PROJECT_TYPES:
        raise InvalidProject(f"Unknown project type {changes['type']!r}")
    project = storage.update_project(project_id, **changes)
    if project is None:
        raise NotFound("Project", project_id)
    return project


def remove_project(project_id: str) -> None:
    """Delete a project together with its entries."""
    with storage.transaction() as conn:
        _require_project(project_id, conn)
        storage.delete_project(project_id, conn=conn)
    logger.info("Deleted project %s and its entries", project_id)


def project_budget(project_id: str) -> Decimal | None:
    """Remaining budget of a fixed-price project, None for hourly ones."""
    project = storage.get_project(project_id)
    if project is None:
        raise NotFound("Project", project_id)
    if not project.is_fixed:
        return None
    return remaining_budget(project, storage.get_project_entries(project_id))


# --- Settings ---


def update_deductions(**changes) -> DeductionConfig:
    """Save new deduction rates. Existing entries are not recalculated."""
    values = {name: to_amount(value) for name, value in changes.items()}
    config = storage.update_deduction_config(**values)
    logger.info("Updated deduction settings: %s", values)
    return config


def update_exchange_rate(usd_to_inr: object) -> CurrencyConfig:
    rate = to_amount(usd_to_inr)
    config = storage.update_currency_config(usd_to_inr=rate)
    logger.info("Updated USD to INR rate to %s", rate)
    return config


# --- Time Entries ---


def record_entry(
    project_id: str,
    entry_date: date,
    value: object = None,
    amount: object = None,
    input_format: str | None = None,
    description: str | None = None,
) -> TimeEntry:
    """Compute and store an entry for either kind of project.

    Hourly projects take a time ``value`` (H.MM or fractional hours, see
    ``timeparse``). Fixed projects take a milestone ``amount``; without one
    the whole contract value is requested.

    Giving a time value to a fixed project, or an amount to an hourly one,
    is rejected.
    """
    try:
        with storage.transaction() as conn:
            project = _require_project(project_id, conn)
            deductions = storage.get_deduction_config(conn=conn)
            currency = storage.get_currency_config(conn=conn)

            if project.is_fixed:
                if value is not None:
                    raise InvalidTimeInput(value, "fixed-price projects take a milestone amount, not time")
                requested = to_amount(amount if amount is not None else project.rate)
                check_milestone(project, storage.get_project_entries(project.id, conn=conn), requested)
                earnings_input = EarningsInput(minutes=0, manual_gross_amount=requested)
                minutes, used_format = 0, FORMAT_HM
                raw_input = str(amount if amount is not None else requested)
            else:
                if amount is not None:
                    raise InvalidAmount(amount, "hourly projects take a time value, not an amount")
                if value is None:
                    raise InvalidTimeInput(None, "hourly entries need a time value")
                parsed = parse_time_input(value, format=input_format)
                if parsed.minutes > storage.MAX_MINUTES:
                    raise InvalidTimeInput(value, "too large to store")
                earnings_input = EarningsInput(minutes=parsed.minutes)
                minutes, used_format = parsed.minutes, parsed.format
                raw_input = str(value)

            breakdown = compute_earnings(project, deductions, currency, earnings_input)
            entry = storage.create_time_entry(
                TimeEntry.from_breakdown(
                    project_id=project.id,  # type: ignore[arg-type]
                    entry_date=entry_date,
                    minutes=minutes,
                    input_format=used_format,
                    raw_input=raw_input,
                    description=description,
                    breakdown=breakdown,
                ),
                conn=conn,
            )
    except TimeFlowError as exc:
        logger.warning("Rejected entry for project %s: %s", project_id, exc)
        raise

    logger.info(
        "Logged %d minutes / $%.2f gross on %s for %s",
        entry.minutes, entry.gross_usd, entry.date, project.name,
    )
    return entry


def record_time(
    project_id: str,
    value: object,
    entry_date: date,
    description: str | None = None,
    input_format: str | None = None,
) -> TimeEntry:
    """Log time against an hourly project."""
    return record_entry(
        project_id, entry_date, value=value, input_format=input_format, description=description
    )


def record_milestone(
    project_id: str, amount: object, entry_date: date, description: str | None = None
) -> TimeEntry:
    """Book a milestone payment against a fixed-price project."""
    return record_entry(project_id, entry_date, amount=amount, description=description)


def remove_entry(entry_id: str) -> None:
    with storage.transaction() as conn:
        if storage.get_time_entry(entry_id, conn=conn) is None:
            raise NotFound("Time entry", entry_id)
        storage.delete_time_entry(entry_id, conn=conn)
    logger.info("Deleted time entry %s", entry_id)


# --- Withdrawals ---


def current_balance() -> Decimal:
    return available_balance(storage.get_time_entries(), storage.get_withdrawals())


def record_withdrawal(
    net_earnings: object,
    transaction_fee: object = 0,
    withdrawal_date: date | None = None,
    notes: str | None = None,
    payment_status: str = STATUS_PENDING,
) -> Withdrawal:
    """Draw down the balance. The received amount is always net minus fee."""
    try:
        net = to_amount(net_earnings)
        fee = to_amount(transaction_fee)
        received = withdrawal_amount(net, fee)
        status = check_status(payment_status)

        with storage.transaction() as conn:
            available = available_balance(
                storage.get_time_entries(conn=conn), storage.get_withdrawals(conn=conn)
            )
            validate_withdrawal(net, available)
            withdrawal = storage.create_withdrawal(
                Withdrawal(
                    net_earnings=net,
                    transaction_fee=fee,
                    withdrawal_amount=received,
                    withdrawal_date=withdrawal_date or date.today(),
                    payment_status=status,
                    notes=notes,
                ),
                conn=conn,
            )
    except TimeFlowError as exc:
        logger.warning("Rejected withdrawal of %s: %s", net_earnings, exc)
        raise

    logger.info("Recorded withdrawal of $%.2f (%s)", withdrawal.net_earnings, withdrawal.id)
    return withdrawal


def set_withdrawal_status(withdrawal_id: str, status: str) -> Withdrawal:
    updated = storage.update_withdrawal_status(withdrawal_id, check_status(status))
    if updated is None:
        raise NotFound("Withdrawal", withdrawal_id)
    return updated


def toggle_withdrawal_status(withdrawal_id: str) -> Withdrawal:
    """Flip a withdrawal between pending and received."""
    withdrawal = storage.get_withdrawal(withdrawal_id)
    if withdrawal is None:
        raise NotFound("Withdrawal", withdrawal_id)
    return set_withdrawal_status(withdrawal_id, toggle_status(withdrawal.payment_status))


def remove_withdrawal(withdrawal_id: str) -> None:
    with storage.transaction() as conn:
        if storage.get_withdrawal(withdrawal_id, conn=conn) is None:
            raise NotFound("Withdrawal", withdrawal_id)
        storage.delete_withdrawal(withdrawal_id, conn=conn)
    logger.info("Deleted withdrawal %s", withdrawal_id)
