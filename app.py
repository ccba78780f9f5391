#!/usr/bin/env python3
"""Earnings dashboard TUI application."""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Footer, DataTable
from textual.coordinate import Coordinate
from rich.text import Text

import ledger
import storage
from budget import remaining_budget
from errors import TimeFlowError
from models import Project, TimeEntry, Withdrawal
from reports import (
    PERIOD_LABELS, PERIODS, dashboard, entries_in_range, insights, summarize, weekly_breakdown,
)
from screens import ConfirmScreen, EntryScreen, ProjectScreen, SettingsScreen, WithdrawalScreen
from timeparse import format_minutes_hm
from utils import format_inr, format_usd, get_week_start
from widgets import BalanceSummary, EarningsSummary, InsightsSummary, ViewHeader

VIEW_TITLES = {
    "dashboard": "DASHBOARD",
    "weekly": "WEEKLY",
    "entries": "ENTRIES",
    "withdrawals": "WITHDRAWALS",
    "projects": "PROJECTS",
}

# Actions only offered in some views
VIEW_ACTIONS = {
    "prev_week": ("weekly",),
    "next_week": ("weekly",),
    "cycle_period": ("dashboard",),
    "toggle_status": ("withdrawals",),
    "new_withdrawal": ("withdrawals", "dashboard"),
    "new_project": ("projects",),
    "delete_selected": ("entries", "withdrawals", "projects"),
}

Row = tuple[str, list]


class LedgerDataTable(DataTable):
    """DataTable that hands left/right to the app for week navigation."""

    def on_key(self, event) -> None:
        if getattr(self.app, "view_mode", None) != "weekly":
            return

        if event.key == "left":
            self.app.action_prev_week()  # type: ignore[attr-defined]
            event.prevent_default()
            event.stop()
        elif event.key == "right":
            self.app.action_next_week()  # type: ignore[attr-defined]
            event.prevent_default()
            event.stop()


class TimeFlowApp(App):
    """Main earnings dashboard."""

    CSS = """
    Screen {
        background: $surface;
    }

    #view-header {
        height: auto;
        background: $primary;
        color: $text;
        padding: 0 1;
        text-style: bold;
    }

    #earnings-summary, #insights-summary, #balance-summary {
        height: auto;
        padding: 1 2;
        color: $text;
    }

    #ledger-table {
        height: 1fr;
        margin: 1 2;
    }

    .hidden {
        display: none;
    }

    DataTable > .datatable--cursor {
        background: $secondary;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("d", "dashboard_view", "Dashboard"),
        Binding("w", "weekly_view", "Week"),
        Binding("e", "entries_view", "Entries"),
        Binding("h", "withdrawals_view", "History"),
        Binding("p", "projects_view", "Projects"),
        Binding("n", "new_entry", "Log"),
        Binding("W", "new_withdrawal", "Withdraw"),
        Binding("P", "new_project", "New Project"),
        Binding("s", "settings", "Settings"),
        Binding("full_stop", "cycle_period", "Period"),
        Binding("t", "goto_today", "Today", show=False),
        Binding("space", "toggle_status", "Paid/Pending"),
        Binding("x", "delete_selected", "Delete"),
        Binding("$", "toggle_currency", "$/₹"),
    ]

    def __init__(self):
        super().__init__()
        storage.init_db()
        storage.seed_defaults()

        # View mode: "dashboard", "weekly", "entries", "withdrawals" or "projects"
        self.view_mode = "dashboard"
        self.period = "week"
        self.today = date.today()
        self.week_start = get_week_start(self.today)
        self.show_inr = False

        self.projects: list[Project] = []
        self.entries: list[TimeEntry] = []
        self.withdrawals: list[Withdrawal] = []

    def compose(self) -> ComposeResult:
        yield ViewHeader(id="view-header")
        yield EarningsSummary(id="earnings-summary")
        yield InsightsSummary(id="insights-summary")
        yield LedgerDataTable(id="ledger-table", cursor_type="row")
        yield BalanceSummary(id="balance-summary")
        yield Footer()

    def on_mount(self):
        self._refresh_display()
        self.query_one("#ledger-table", DataTable).focus()

    # --- Data ---

    def _load_data(self):
        self.projects = storage.get_projects()
        self.entries = storage.get_time_entries()
        self.withdrawals = storage.get_withdrawals()

    def _project_names(self) -> dict[str, str]:
        return {p.id: p.name for p in self.projects}  # type: ignore[misc]

    def _money(self, usd: Decimal, inr: Decimal) -> str:
        return format_inr(inr) if self.show_inr else format_usd(usd)

    def _week_label(self) -> str:
        week_end = self.week_start + timedelta(days=6)
        return f"{self.week_start.strftime('%b %d')} - {week_end.strftime('%b %d, %Y')}"

    # --- Rows for each view ---

    def _dashboard_rows(self) -> list[Row]:
        """Per-project totals for the selected period."""
        report = dashboard(self.entries, self.withdrawals, self.projects, self.today, self.period)
        rows = []
        for project in self.projects:
            totals = report.by_project.get(project.id)  # type: ignore[arg-type]
            if totals is None:
                continue
            rows.append((project.id, [
                Text(project.name, style=project.color),
                format_minutes_hm(totals.minutes),
                format_usd(totals.gross_usd),
                format_usd(totals.deductions),
                self._money(totals.net_usd, totals.net_inr),
            ]))
        return rows

    def _weekly_rows(self) -> list[Row]:
        rows = []
        for week_row in weekly_breakdown(self.entries, self.projects, self.week_start):
            cells: list = [Text(week_row.project.name, style=week_row.project.color)]
            cells += [format_minutes_hm(m) if m else "-" for m in week_row.day_minutes]
            cells += [
                format_minutes_hm(week_row.totals.minutes),
                self._money(week_row.totals.net_usd, week_row.totals.net_inr),
            ]
            rows.append((week_row.project.id, cells))
        return rows

    def _entry_rows(self) -> list[Row]:
        names = self._project_names()
        return [
            (e.id, [  # type: ignore[misc]
                e.date.strftime("%a %d %b %Y"),
                names.get(e.project_id, "?"),
                format_minutes_hm(e.minutes) if e.minutes else "milestone",
                e.input_format,
                format_usd(e.gross_usd),
                format_usd(e.deduction_total),
                self._money(e.net_usd, e.net_inr),
                e.description or "",
            ])
            for e in self.entries
        ]

    def _withdrawal_rows(self) -> list[Row]:
        return [
            (w.id, [  # type: ignore[misc]
                w.withdrawal_date.strftime("%d %b %Y"),
                format_usd(w.net_earnings),
                format_usd(w.transaction_fee),
                format_usd(w.withdrawal_amount),
                Text(w.payment_status, style="green" if w.payment_status == "received" else "yellow"),
                w.notes or "",
            ])
            for w in self.withdrawals
        ]

    def _project_rows(self) -> list[Row]:
        rows = []
        for project in self.projects:
            if project.is_fixed:
                remaining = format_usd(remaining_budget(project, self.entries))
            else:
                remaining = "-"
            rows.append((project.id, [  # type: ignore[arg-type]
                Text(project.name, style=project.color),
                project.type,
                format_usd(project.rate) + ("" if project.is_fixed else "/hr"),
                remaining,
            ]))
        return rows

    VIEW_COLUMNS = {
        "dashboard": ("Project", "Time", "Gross", "Deductions", "Net"),
        "weekly": ("Project", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun", "Total", "Net"),
        "entries": ("Date", "Project", "Time", "Format", "Gross", "Deductions", "Net", "Description"),
        "withdrawals": ("Date", "Amount", "Fee", "Received", "Status", "Notes"),
        "projects": ("Project", "Type", "Rate", "Remaining"),
    }

    def _rows_for_view(self) -> list[Row]:
        return {
            "dashboard": self._dashboard_rows,
            "weekly": self._weekly_rows,
            "entries": self._entry_rows,
            "withdrawals": self._withdrawal_rows,
            "projects": self._project_rows,
        }[self.view_mode]()

    def _header_text(self) -> tuple[str, str | None]:
        title = VIEW_TITLES[self.view_mode]
        if self.view_mode == "dashboard":
            return f"{title}: {PERIOD_LABELS[self.period]}", None
        if self.view_mode == "weekly":
            return title, self._week_label()
        return title, None

    def _summary_entries(self) -> tuple[str, list[TimeEntry]]:
        """Label and entries summarised above the table."""
        if self.view_mode == "dashboard":
            report = dashboard(self.entries, self.withdrawals, self.projects, self.today, self.period)
            return PERIOD_LABELS[self.period], entries_in_range(self.entries, report.start, report.end)
        if self.view_mode == "weekly":
            return "Week", entries_in_range(self.entries, self.week_start, self.week_start + timedelta(days=6))
        return "All Time", self.entries

    # --- Display ---

    def _refresh_display(self):
        self._load_data()

        title, nav = self._header_text()
        self.query_one("#view-header", ViewHeader).update_display(title, nav)

        label, summary_entries = self._summary_entries()
        self.query_one("#earnings-summary", EarningsSummary).update_display(
            label, summarize(summary_entries), self.show_inr
        )

        insights_summary = self.query_one("#insights-summary", InsightsSummary)
        insights_summary.set_class(self.view_mode != "dashboard", "hidden")
        insights_summary.update_display(insights(self.entries, self.projects, self.today))

        report = dashboard(self.entries, self.withdrawals, self.projects, self.today, self.period)
        self.query_one("#balance-summary", BalanceSummary).update_display(
            report.available, report.withdrawn, report.pending
        )

        table = self.query_one("#ledger-table", DataTable)
        cursor_row = table.cursor_row
        table.clear(columns=True)
        table.add_columns(*self.VIEW_COLUMNS[self.view_mode])
        for key, cells in self._rows_for_view():
            table.add_row(*cells, key=key)
        if table.row_count:
            table.move_cursor(row=min(cursor_row, table.row_count - 1))

    def _set_view_mode(self, mode: str):
        self.view_mode = mode
        self.refresh_bindings()
        self._refresh_display()

    def check_action(self, action: str, parameters: tuple[object, ...]) -> bool | None:
        """Hide actions that don't apply to the current view."""
        views = VIEW_ACTIONS.get(action)
        if views is not None and self.view_mode not in views:
            return False
        return True

    def _selected_key(self) -> str | None:
        table = self.query_one("#ledger-table", DataTable)
        if table.row_count == 0:
            return None
        return table.coordinate_to_cell_key(Coordinate(table.cursor_row, 0)).row_key.value

    def _run(self, operation, *args, **kwargs):
        """Call a ledger operation, showing any rejection instead of raising."""
        try:
            result = operation(*args, **kwargs)
        except TimeFlowError as exc:
            self.notify(str(exc), severity="error")
            return None
        self._refresh_display()
        return result

    # --- View actions ---

    def action_dashboard_view(self):
        self._set_view_mode("dashboard")

    def action_weekly_view(self):
        self._set_view_mode("weekly")

    def action_entries_view(self):
        self._set_view_mode("entries")

    def action_withdrawals_view(self):
        self._set_view_mode("withdrawals")

    def action_projects_view(self):
        self._set_view_mode("projects")

    def action_cycle_period(self):
        self.period = PERIODS[(PERIODS.index(self.period) + 1) % len(PERIODS)]
        self._refresh_display()

    def action_prev_week(self):
        self.week_start -= timedelta(days=7)
        self._refresh_display()

    def action_next_week(self):
        self.week_start += timedelta(days=7)
        self._refresh_display()

    def action_goto_today(self):
        self.today = date.today()
        self.week_start = get_week_start(self.today)
        self._refresh_display()

    def action_toggle_currency(self):
        self.show_inr = not self.show_inr
        self._refresh_display()

    # --- Editing actions ---

    def action_new_entry(self):
        if not self.projects:
            self.notify("Create a project first (p, then P)", severity="warning")
            return
        self.push_screen(EntryScreen(self.projects, self.today), self._on_entry_entered)

    def _on_entry_entered(self, result: dict | None) -> None:
        if result is None:
            return
        entry = self._run(ledger.record_entry, **result)
        if entry is not None:
            self.notify(f"Logged {format_usd(entry.net_usd)} net")

    def action_new_project(self):
        self.push_screen(ProjectScreen(), self._on_project_created)

    def _on_project_created(self, result: dict | None) -> None:
        if result is None:
            return
        self._run(ledger.add_project, result["name"], result["rate"], result["type"], result["color"])

    def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        """Enter on a project opens it for editing."""
        if self.view_mode != "projects" or event.row_key.value is None:
            return
        project_id = event.row_key.value
        project = next((p for p in self.projects if p.id == project_id), None)
        if project is None:
            return

        def on_edited(result: dict | None) -> None:
            if result is not None:
                self._run(ledger.edit_project, project_id, **result)

        self.push_screen(ProjectScreen(project), on_edited)

    def action_settings(self):
        screen = SettingsScreen(storage.get_deduction_config(), storage.get_currency_config())
        self.push_screen(screen, self._on_settings_saved)

    def _on_settings_saved(self, result: dict | None) -> None:
        if result is None:
            return
        result = dict(result)
        usd_to_inr = result.pop("usd_to_inr")
        saved = self._run(ledger.update_deductions, **result)
        if saved is not None and self._run(ledger.update_exchange_rate, usd_to_inr) is not None:
            self.notify("Settings saved. Existing entries keep their figures.")

    def action_new_withdrawal(self):
        self.push_screen(WithdrawalScreen(ledger.current_balance(), self.today), self._on_withdrawal_entered)

    def _on_withdrawal_entered(self, result: dict | None) -> None:
        if result is None:
            return
        self._run(ledger.record_withdrawal, **result)

    def action_toggle_status(self):
        withdrawal_id = self._selected_key()
        if withdrawal_id:
            self._run(ledger.toggle_withdrawal_status, withdrawal_id)

    def action_delete_selected(self):
        key = self._selected_key()
        if key is None:
            return

        operation, message = {
            "entries": (ledger.remove_entry, "Delete this entry?"),
            "withdrawals": (ledger.remove_withdrawal, "Delete this withdrawal?"),
            "projects": (ledger.remove_project, "Delete this project and all of its entries?"),
        }[self.view_mode]

        def on_confirmed(confirmed: bool | None) -> None:
            if confirmed:
                self._run(operation, key)

        self.push_screen(ConfirmScreen(message), on_confirmed)


def main():
    app = TimeFlowApp()
    app.run()


if __name__ == "__main__":
    main()
