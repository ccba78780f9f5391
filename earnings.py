"""Gross-to-net earnings calculation.

The deduction chain runs in a fixed order:

    service  = gross * service_fee%
    tds      = gross * tds%
    gst      = service * gst%        (GST is charged on the service fee)
    transfer = transfer_fee          (flat, USD)
    total    = service + tds + gst + transfer
    net_usd  = max(0, gross - total)
    net_inr  = net_usd * exchange rate

Rates come from the caller on every call. The result is a snapshot: the
ledger stores it on the entry so later edits to the settings never change
recorded earnings.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation

from errors import InvalidTimeInput, MissingConfiguration
from models import CurrencyConfig, DeductionConfig, EarningsBreakdown, EarningsInput, Project
from timeparse import minutes_to_hours_decimal
from utils import ZERO

HUNDRED = Decimal("100")


def _rate(value: object) -> Decimal:
    """A configured rate, with anything missing or unusable counting as zero."""
    if value is None or isinstance(value, bool):
        return ZERO
    try:
        number = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except InvalidOperation:
        return ZERO
    if not number.is_finite() or number < 0:
        return ZERO
    return number


def compute_earnings(
    project: Project,
    deductions: DeductionConfig | None,
    currency: CurrencyConfig | None,
    earnings_input: EarningsInput,
) -> EarningsBreakdown:
    """Compute the full breakdown for one entry against ``project``."""
    if deductions is None:
        raise MissingConfiguration("deduction")
    if currency is None:
        raise MissingConfiguration("currency")

    if project.is_fixed:
        hours_decimal = minutes_to_hours_decimal(earnings_input.minutes or 0)
        if earnings_input.manual_gross_amount is None:
            gross_usd = _rate(project.rate)
        else:
            gross_usd = _rate(earnings_input.manual_gross_amount)
    else:
        if earnings_input.minutes is None:
            raise InvalidTimeInput(None, "hourly entries need a time value")
        hours_decimal = minutes_to_hours_decimal(earnings_input.minutes)
        gross_usd = hours_decimal * _rate(project.rate)

    service = gross_usd * (_rate(deductions.service_fee) / HUNDRED)
    tds = gross_usd * (_rate(deductions.tds) / HUNDRED)
    gst = service * (_rate(deductions.gst) / HUNDRED)
    transfer = _rate(deductions.transfer_fee)
    total = service + tds + gst + transfer

    net_usd = max(ZERO, gross_usd - total)
    exchange_rate = _rate(currency.usd_to_inr)

    return EarningsBreakdown(
        hours_decimal=hours_decimal,
        gross_usd=gross_usd,
        deduction_service=service,
        deduction_tds=tds,
        deduction_gst=gst,
        deduction_transfer=transfer,
        deduction_total=total,
        net_usd=net_usd,
        net_inr=net_usd * exchange_rate,
        exchange_rate=exchange_rate,
    )
