"""Totals for the dashboard, weekly and history views."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal

from balance import available_balance, total_withdrawn
from models import STATUS_PENDING, Project, TimeEntry, Withdrawal
from utils import ZERO, days_in_range, get_month_start, get_week_end, get_week_start

PERIODS = ("week", "last_week", "month", "all")
PERIOD_LABELS = {
    "week": "This Week",
    "last_week": "Last Week",
    "month": "This Month",
    "all": "All Time",
}


@dataclass
class Totals:
    minutes: int = 0
    gross_usd: Decimal = ZERO
    deductions: Decimal = ZERO
    net_usd: Decimal = ZERO
    net_inr: Decimal = ZERO
    count: int = 0

    def add(self, entry: TimeEntry) -> None:
        self.minutes += entry.minutes
        self.gross_usd += entry.gross_usd
        self.deductions += entry.deduction_total
        self.net_usd += entry.net_usd
        self.net_inr += entry.net_inr
        self.count += 1


@dataclass
class Dashboard:
    period: str
    start: date | None
    end: date
    totals: Totals
    by_project: dict[str, Totals]
    available: Decimal
    withdrawn: Decimal
    pending: Decimal


@dataclass
class WeekRow:
    project: Project
    day_minutes: list[int] = field(default_factory=lambda: [0] * 7)
    totals: Totals = field(default_factory=Totals)


@dataclass
class Insights:
    top_project: Project | None
    top_day: str | None
    average_daily_hours: Decimal
    average_daily_earnings: Decimal


def summarize(entries: Iterable[TimeEntry]) -> Totals:
    totals = Totals()
    for entry in entries:
        totals.add(entry)
    return totals


def entries_in_range(entries: Iterable[TimeEntry], start: date | None, end: date) -> list[TimeEntry]:
    """Entries dated from start to end inclusive; start=None means no lower bound."""
    return [e for e in entries if (start is None or e.date >= start) and e.date <= end]


def period_range(period: str, today: date) -> tuple[date | None, date]:
    """(start, end) of a dashboard period. Weeks start on Monday."""
    if period == "week":
        return get_week_start(today), get_week_end(today)
    if period == "last_week":
        last_week = today - timedelta(days=7)
        return get_week_start(last_week), get_week_end(last_week)
    if period == "month":
        return get_month_start(today), today
    if period == "all":
        return None, today
    raise ValueError(f"Unknown period {period!r}")


def project_totals(entries: Iterable[TimeEntry], projects: Iterable[Project]) -> dict[str, Totals]:
    """Totals keyed by project id; projects without entries are omitted."""
    known = {p.id for p in projects}
    result: dict[str, Totals] = {}
    for entry in entries:
        if entry.project_id in known:
            result.setdefault(entry.project_id, Totals()).add(entry)
    return result


def dashboard(
    entries: list[TimeEntry],
    withdrawals: list[Withdrawal],
    projects: list[Project],
    today: date,
    period: str = "week",
) -> Dashboard:
    start, end = period_range(period, today)
    in_period = entries_in_range(entries, start, end)
    pending = sum(
        (w.net_earnings for w in withdrawals if w.payment_status == STATUS_PENDING), ZERO
    )
    return Dashboard(
        period=period,
        start=start,
        end=end,
        totals=summarize(in_period),
        by_project=project_totals(in_period, projects),
        available=available_balance(entries, withdrawals),
        withdrawn=total_withdrawn(withdrawals),
        pending=pending,
    )


def weekly_breakdown(
    entries: Iterable[TimeEntry], projects: Iterable[Project], week_start: date
) -> list[WeekRow]:
    """Per-project minutes for each day Monday to Sunday, plus week totals."""
    week_start = get_week_start(week_start)
    days = days_in_range(week_start, week_start + timedelta(days=6))
    rows = {p.id: WeekRow(project=p) for p in projects}

    for entry in entries:
        row = rows.get(entry.project_id)
        if row is None or entry.date not in days:
            continue
        row.day_minutes[days.index(entry.date)] += entry.minutes
        row.totals.add(entry)

    return list(rows.values())


def insights(entries: Iterable[TimeEntry], projects: Iterable[Project], today: date) -> Insights:
    """Top project and busiest day this week, with daily averages over 7 days."""
    start, end = get_week_start(today), get_week_end(today)
    week_entries = entries_in_range(entries, start, end)
    by_id = {p.id: p for p in projects}

    earnings: dict[str, Decimal] = {}
    day_minutes: dict[str, int] = {}
    for entry in week_entries:
        earnings[entry.project_id] = earnings.get(entry.project_id, ZERO) + entry.net_usd
        day = entry.date.strftime("%A")
        day_minutes[day] = day_minutes.get(day, 0) + entry.minutes

    top_project = by_id.get(max(earnings, key=lambda k: earnings[k])) if earnings else None
    top_day = max(day_minutes, key=lambda k: day_minutes[k]) if day_minutes else None
    totals = summarize(week_entries)

    return Insights(
        top_project=top_project,
        top_day=top_day,
        average_daily_hours=Decimal(totals.minutes) / 60 / 7,
        average_daily_earnings=totals.net_usd / 7,
    )
