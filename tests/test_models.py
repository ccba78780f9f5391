"""Tests for models.py - project, settings and entry dataclasses."""

from dataclasses import FrozenInstanceError
from datetime import date
from decimal import Decimal

import pytest

from models import (
    CurrencyConfig,
    DeductionConfig,
    EarningsBreakdown,
    Project,
    TimeEntry,
    Withdrawal,
)


class TestProject:
    """Tests for Project dataclass."""

    def test_defaults(self):
        project = Project(name="Portal", rate=Decimal("25"))
        assert project.type == "hourly"
        assert project.color == "#3b82f6"
        assert project.id is None
        assert project.is_fixed is False

    def test_fixed(self, fixed_project):
        assert fixed_project.is_fixed is True


class TestSettings:
    """Tests for DeductionConfig and CurrencyConfig defaults."""

    def test_deduction_defaults(self):
        config = DeductionConfig()
        assert config.service_fee == Decimal("10")
        assert config.tds == Decimal("0.1")
        assert config.gst == Decimal("18")
        assert config.transfer_fee == Decimal("0.99")

    def test_currency_default(self):
        assert CurrencyConfig().usd_to_inr == Decimal("84.0")


class TestTimeEntry:
    """Tests for TimeEntry dataclass."""

    @pytest.fixture
    def breakdown(self):
        return EarningsBreakdown(
            hours_decimal=Decimal("1.5"),
            gross_usd=Decimal("37.5"),
            deduction_service=Decimal("3.75"),
            deduction_tds=Decimal("0.0375"),
            deduction_gst=Decimal("0.675"),
            deduction_transfer=Decimal("0.99"),
            deduction_total=Decimal("5.4525"),
            net_usd=Decimal("32.0475"),
            net_inr=Decimal("2691.99"),
            exchange_rate=Decimal("84"),
        )

    def test_from_breakdown_copies_figures(self, breakdown):
        entry = TimeEntry.from_breakdown(
            project_id="proj-hourly",
            entry_date=date(2026, 1, 27),
            minutes=90,
            input_format="fractional",
            raw_input="1.5",
            description="Review",
            breakdown=breakdown,
        )

        assert entry.project_id == "proj-hourly"
        assert entry.minutes == 90
        assert entry.input_format == "fractional"
        assert entry.gross_usd == Decimal("37.5")
        assert entry.deduction_gst == Decimal("0.675")
        assert entry.deduction_total == Decimal("5.4525")
        assert entry.net_inr == Decimal("2691.99")
        assert entry.exchange_rate == Decimal("84")
        assert entry.id is None

    def test_hours(self, make_entry):
        assert make_entry(minutes=90).hours == Decimal("1.5")
        assert make_entry(minutes=0).hours == Decimal("0")

    def test_entry_is_immutable(self, make_entry):
        entry = make_entry()
        with pytest.raises(FrozenInstanceError):
            entry.net_usd = Decimal("0")  # type: ignore[misc]


class TestWithdrawal:
    """Tests for Withdrawal dataclass."""

    def test_defaults(self):
        withdrawal = Withdrawal(
            net_earnings=Decimal("10"),
            transaction_fee=Decimal("1"),
            withdrawal_amount=Decimal("9"),
            withdrawal_date=date(2026, 1, 30),
        )
        assert withdrawal.payment_status == "pending"
        assert withdrawal.notes is None
