"""Custom widgets for the earnings dashboard."""

from __future__ import annotations

from decimal import Decimal

from textual.widgets import Static
from rich.text import Text

from reports import Insights, Totals
from timeparse import format_minutes_hm
from utils import format_inr, format_usd


class ViewHeader(Static):
    """Shows the view title on the left and optional week navigation on the right."""

    WIDTH = 74

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.nav_start = 0
        self.left_arrow_pos = -1
        self.right_arrow_pos = -1

    def update_display(self, title: str, nav: str | None = None):
        text = Text()
        text.append(title, style="bold")

        if nav is None:
            self.left_arrow_pos = self.right_arrow_pos = -1
            self.update(text)
            return

        week_nav = f"◄ {nav} ►"
        self.nav_start = max(len(title) + 2, self.WIDTH - len(week_nav))

        # Store positions for click detection
        self.left_arrow_pos = self.nav_start
        self.right_arrow_pos = self.nav_start + len(week_nav) - 1

        text.append(" " * (self.nav_start - len(title)))
        text.append(week_nav, style="bold")
        self.update(text)

    def on_click(self, event) -> None:
        """Clicking an arrow moves the weekly view."""
        if self.left_arrow_pos < 0:
            return
        if self.left_arrow_pos <= event.x < self.left_arrow_pos + 2:
            self.app.action_prev_week()  # type: ignore[attr-defined]
        elif self.right_arrow_pos <= event.x < self.right_arrow_pos + 2:
            self.app.action_next_week()  # type: ignore[attr-defined]


class EarningsSummary(Static):
    """Time, gross, deductions and net for the current view."""

    def update_display(self, label: str, totals: Totals, show_inr: bool = False):
        text = Text()
        text.append(f"{label:>24}  {format_minutes_hm(totals.minutes):>10}   "
                    f"({totals.count} {'entry' if totals.count == 1 else 'entries'})\n", style="bold")
        text.append(f"{'Gross':>24}  {format_usd(totals.gross_usd):>14}\n")

        # Deductions dim when nothing was deducted
        text.append(f"{'Deductions':>24}  {format_usd(totals.deductions):>14}\n",
                    style="dim" if totals.deductions == 0 else "")

        net = format_inr(totals.net_inr) if show_inr else format_usd(totals.net_usd)
        text.append(f"{'Net':>24}  {net:>14}", style="bold")
        self.update(text)


class BalanceSummary(Static):
    """Available balance and withdrawal totals."""

    def update_display(self, available: Decimal, withdrawn: Decimal, pending: Decimal):
        text = Text()
        text.append(f"{'Available':>24}  {format_usd(available):>14}\n", style="bold")
        text.append(f"{'Withdrawn':>24}  {format_usd(withdrawn):>14}\n")
        text.append(f"{'Pending':>24}  {format_usd(pending):>14}",
                    style="dim" if pending == 0 else "yellow")
        self.update(text)


class InsightsSummary(Static):
    """This week's top project, busiest day and daily averages."""

    def update_display(self, insights: Insights):
        text = Text()
        if insights.top_project is None:
            text.append(f"{'This week':>24}  nothing logged yet", style="dim")
            self.update(text)
            return

        text.append(f"{'Top project':>24}  ")
        text.append(insights.top_project.name, style=insights.top_project.color)
        text.append(f"\n{'Busiest day':>24}  {insights.top_day}\n")
        text.append(f"{'Daily average':>24}  {insights.average_daily_hours:.1f}h  "
                    f"{format_usd(insights.average_daily_earnings)}")
        self.update(text)
