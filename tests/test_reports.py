"""Tests for reports.py - dashboard, weekly and insight totals."""

from datetime import date
from decimal import Decimal

import pytest

from reports import (
    dashboard,
    entries_in_range,
    insights,
    period_range,
    project_totals,
    summarize,
    weekly_breakdown,
)

TODAY = date(2026, 1, 28)  # A Wednesday


@pytest.fixture
def projects(hourly_project, fixed_project):
    return [hourly_project, fixed_project]


@pytest.fixture
def entries(make_entry):
    return [
        make_entry(entry_date=date(2026, 1, 26), minutes=120, gross="50", net="40", inr="3360", deductions="10"),
        make_entry(entry_date=date(2026, 1, 28), minutes=90, gross="37.5", net="30", inr="2520", deductions="7.5"),
        make_entry(project_id="proj-fixed", entry_date=date(2026, 1, 27), minutes=0,
                   gross="200", net="170", inr="14280", deductions="30"),
        make_entry(entry_date=date(2026, 1, 20), minutes=60, gross="25", net="20", inr="1680"),
        make_entry(entry_date=date(2025, 12, 30), minutes=60, gross="25", net="20", inr="1680"),
    ]


class TestPeriodRange:
    """Tests for dashboard period bounds."""

    def test_week(self):
        assert period_range("week", TODAY) == (date(2026, 1, 26), date(2026, 2, 1))

    def test_last_week(self):
        assert period_range("last_week", TODAY) == (date(2026, 1, 19), date(2026, 1, 25))

    def test_month(self):
        assert period_range("month", TODAY) == (date(2026, 1, 1), TODAY)

    def test_all(self):
        assert period_range("all", TODAY) == (None, TODAY)

    def test_unknown(self):
        with pytest.raises(ValueError):
            period_range("year", TODAY)


class TestSummaries:
    """Tests for summarize, entries_in_range and project_totals."""

    def test_summarize_empty(self):
        totals = summarize([])
        assert totals.count == 0
        assert totals.net_usd == Decimal("0")

    def test_summarize(self, entries):
        totals = summarize(entries[:2])

        assert totals.minutes == 210
        assert totals.gross_usd == Decimal("87.5")
        assert totals.deductions == Decimal("17.5")
        assert totals.net_usd == Decimal("70")
        assert totals.net_inr == Decimal("5880")
        assert totals.count == 2

    def test_entries_in_range_inclusive(self, entries):
        selected = entries_in_range(entries, date(2026, 1, 20), date(2026, 1, 26))
        assert sorted(e.date for e in selected) == [date(2026, 1, 20), date(2026, 1, 26)]

    def test_entries_in_range_open_start(self, entries):
        assert len(entries_in_range(entries, None, TODAY)) == 5

    def test_project_totals(self, entries, projects):
        totals = project_totals(entries, projects)

        assert totals["proj-fixed"].gross_usd == Decimal("200")
        assert totals["proj-hourly"].count == 4

    def test_project_totals_skips_unknown(self, make_entry, projects):
        assert project_totals([make_entry(project_id="gone")], projects) == {}


class TestDashboard:
    """Tests for the dashboard figures."""

    def test_this_week(self, entries, projects, make_withdrawal):
        withdrawals = [make_withdrawal(net="50", status="received"), make_withdrawal(net="10")]
        result = dashboard(entries, withdrawals, projects, TODAY, period="week")

        assert result.totals.count == 3
        assert result.totals.net_usd == Decimal("240")
        assert set(result.by_project) == {"proj-hourly", "proj-fixed"}
        # Balance covers every entry, not just the period
        assert result.available == Decimal("220")
        assert result.withdrawn == Decimal("60")
        assert result.pending == Decimal("10")

    def test_last_week(self, entries, projects):
        result = dashboard(entries, [], projects, TODAY, period="last_week")

        assert result.totals.count == 1
        assert result.totals.minutes == 60

    def test_month_excludes_december(self, entries, projects):
        assert dashboard(entries, [], projects, TODAY, period="month").totals.count == 4

    def test_all_time(self, entries, projects):
        result = dashboard(entries, [], projects, TODAY, period="all")

        assert result.start is None
        assert result.totals.count == 5


class TestWeeklyBreakdown:
    """Tests for the per-day weekly grid."""

    def test_minutes_by_day(self, entries, projects):
        rows = weekly_breakdown(entries, projects, date(2026, 1, 26))
        hourly, fixed = rows

        assert hourly.project.id == "proj-hourly"
        assert hourly.day_minutes == [120, 0, 90, 0, 0, 0, 0]
        assert hourly.totals.net_usd == Decimal("70")
        assert fixed.day_minutes == [0] * 7
        assert fixed.totals.gross_usd == Decimal("200")

    def test_any_day_selects_its_week(self, entries, projects):
        rows = weekly_breakdown(entries, projects, date(2026, 1, 29))
        assert rows[0].day_minutes[0] == 120

    def test_projects_without_entries_listed(self, projects):
        rows = weekly_breakdown([], projects, TODAY)
        assert [r.totals.count for r in rows] == [0, 0]


class TestInsights:
    """Tests for weekly insights."""

    def test_insights(self, entries, projects):
        result = insights(entries, projects, TODAY)

        assert result.top_project.id == "proj-fixed"
        assert result.top_day == "Monday"
        assert result.average_daily_hours == Decimal(210) / 60 / 7
        assert result.average_daily_earnings == Decimal("240") / 7

    def test_empty_week(self, projects):
        result = insights([], projects, TODAY)

        assert result.top_project is None
        assert result.top_day is None
        assert result.average_daily_hours == Decimal("0")
