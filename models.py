from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

PROJECT_HOURLY = "hourly"
PROJECT_FIXED = "fixed"
PROJECT_TYPES = (PROJECT_HOURLY, PROJECT_FIXED)

STATUS_PENDING = "pending"
STATUS_RECEIVED = "received"
PAYMENT_STATUSES = (STATUS_PENDING, STATUS_RECEIVED)


@dataclass
class Project:
    name: str
    rate: Decimal
    type: str = PROJECT_HOURLY
    color: str = "#3b82f6"
    id: str | None = None
    created_at: datetime | None = None

    @property
    def is_fixed(self) -> bool:
        """Fixed-price projects carry a total contract value in ``rate``."""
        return self.type == PROJECT_FIXED


@dataclass
class DeductionConfig:
    service_fee: Decimal = Decimal("10")
    tds: Decimal = Decimal("0.1")
    gst: Decimal = Decimal("18")
    transfer_fee: Decimal = Decimal("0.99")
    id: str | None = None
    updated_at: datetime | None = None


@dataclass
class CurrencyConfig:
    usd_to_inr: Decimal = Decimal("84.0")
    id: str | None = None
    last_updated: datetime | None = None


@dataclass(frozen=True)
class ParsedTime:
    minutes: int
    format: str
    used_legacy_fractional: bool
    had_overflow: bool
    source: object


@dataclass(frozen=True)
class EarningsInput:
    """Either logged minutes (hourly) or a milestone amount (fixed)."""

    minutes: int | None = None
    manual_gross_amount: Decimal | None = None


@dataclass(frozen=True)
class EarningsBreakdown:
    hours_decimal: Decimal
    gross_usd: Decimal
    deduction_service: Decimal
    deduction_tds: Decimal
    deduction_gst: Decimal
    deduction_transfer: Decimal
    deduction_total: Decimal
    net_usd: Decimal
    net_inr: Decimal
    exchange_rate: Decimal


@dataclass(frozen=True)
class TimeEntry:
    project_id: str
    date: date
    minutes: int
    input_format: str
    raw_input: str | None
    description: str | None
    gross_usd: Decimal
    deduction_service: Decimal
    deduction_gst: Decimal
    deduction_tds: Decimal
    deduction_transfer: Decimal
    deduction_total: Decimal
    net_usd: Decimal
    net_inr: Decimal
    exchange_rate: Decimal
    id: str | None = None
    created_at: datetime | None = None

    @property
    def hours(self) -> Decimal:
        """Logged time as decimal hours."""
        return Decimal(self.minutes) / 60

    @classmethod
    def from_breakdown(
        cls,
        project_id: str,
        entry_date: date,
        minutes: int,
        input_format: str,
        raw_input: str | None,
        description: str | None,
        breakdown: EarningsBreakdown,
    ) -> TimeEntry:
        """Snapshot a computed breakdown into a new entry."""
        return cls(
            project_id=project_id,
            date=entry_date,
            minutes=minutes,
            input_format=input_format,
            raw_input=raw_input,
            description=description,
            gross_usd=breakdown.gross_usd,
            deduction_service=breakdown.deduction_service,
            deduction_gst=breakdown.deduction_gst,
            deduction_tds=breakdown.deduction_tds,
            deduction_transfer=breakdown.deduction_transfer,
            deduction_total=breakdown.deduction_total,
            net_usd=breakdown.net_usd,
            net_inr=breakdown.net_inr,
            exchange_rate=breakdown.exchange_rate,
        )


@dataclass
class Withdrawal:
    net_earnings: Decimal
    transaction_fee: Decimal
    withdrawal_amount: Decimal
    withdrawal_date: date
    payment_status: str = STATUS_PENDING
    notes: str | None = None
    id: str | None = None
    created_at: datetime | None = None
