"""Shared fixtures for tests."""

from __future__ import annotations

import os
import sys
import tempfile
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Generator

import pytest

# Modules live at the repository root
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

# Set up a throwaway database before anything imports storage
_test_db_dir = tempfile.mkdtemp()
os.environ["TIMEFLOW_DB"] = os.path.join(_test_db_dir, "session.db")


@pytest.fixture
def temp_database(tmp_path, monkeypatch) -> Generator:
    """Point storage at a fresh database for one test."""
    import storage

    monkeypatch.setattr(storage, "DB_PATH", tmp_path / "test_timeflow.db")
    storage.init_db()

    yield storage


@pytest.fixture
def seeded_database(temp_database) -> Generator:
    """A fresh database with the default deduction and currency settings."""
    temp_database.seed_defaults()
    yield temp_database


@pytest.fixture
def hourly_project():
    """Create a sample hourly Project for testing."""
    from models import Project

    return Project(
        id="proj-hourly",
        name="Client Portal",
        rate=Decimal("25"),
        type="hourly",
        color="#22c55e",
    )


@pytest.fixture
def fixed_project():
    """Create a sample fixed-price Project for testing."""
    from models import Project

    return Project(
        id="proj-fixed",
        name="Landing Page",
        rate=Decimal("500"),
        type="fixed",
        color="#f97316",
    )


@pytest.fixture
def default_deductions():
    from models import DeductionConfig

    return DeductionConfig(
        service_fee=Decimal("10"),
        tds=Decimal("0.1"),
        gst=Decimal("18"),
        transfer_fee=Decimal("0.99"),
    )


@pytest.fixture
def default_currency():
    from models import CurrencyConfig

    return CurrencyConfig(usd_to_inr=Decimal("84"))


@pytest.fixture
def make_entry():
    """Build a TimeEntry snapshot with just the fields a test cares about."""
    from models import TimeEntry

    def _make(
        project_id: str = "proj-hourly",
        entry_date: date = date(2026, 1, 27),
        minutes: int = 60,
        gross: str = "25",
        net: str = "20",
        inr: str = "1680",
        deductions: str = "5",
        entry_id: str | None = None,
    ) -> TimeEntry:
        return TimeEntry(
            id=entry_id,
            project_id=project_id,
            date=entry_date,
            minutes=minutes,
            input_format="hm",
            raw_input=str(minutes),
            description=None,
            gross_usd=Decimal(gross),
            deduction_service=Decimal("0"),
            deduction_gst=Decimal("0"),
            deduction_tds=Decimal("0"),
            deduction_transfer=Decimal("0"),
            deduction_total=Decimal(deductions),
            net_usd=Decimal(net),
            net_inr=Decimal(inr),
            exchange_rate=Decimal("84"),
        )

    return _make


@pytest.fixture
def make_withdrawal():
    from models import Withdrawal

    def _make(net: str = "10", fee: str = "0", status: str = "pending",
              withdrawal_date: date = date(2026, 1, 30)) -> Withdrawal:
        return Withdrawal(
            net_earnings=Decimal(net),
            transaction_fee=Decimal(fee),
            withdrawal_amount=Decimal(net) - Decimal(fee),
            withdrawal_date=withdrawal_date,
            payment_status=status,
        )

    return _make
