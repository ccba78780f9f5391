"""Modal screens for the earnings dashboard."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.coordinate import Coordinate
from textual.widgets import Button, Checkbox, DataTable, Input, Label
from textual.screen import ModalScreen

from balance import withdrawal_amount
from errors import TimeFlowError
from models import PROJECT_FIXED, PROJECT_HOURLY, CurrencyConfig, DeductionConfig, Project
from timeparse import FORMAT_FRACTIONAL, FORMAT_HM, format_minutes_readable, parse_time_input
from utils import format_usd, to_amount

DIALOG_CSS = """
    .dialog {
        width: 70;
        height: auto;
        padding: 1 2;
        background: $surface;
        border: thick $primary;
    }

    .dialog-title {
        width: 100%;
        text-align: center;
        text-style: bold;
        margin-bottom: 1;
    }

    .field-group {
        width: 1fr;
        height: auto;
        margin: 0 1 0 0;
    }

    .field-label {
        height: 1;
        color: $text-muted;
    }

    .field-row {
        width: 100%;
        height: auto;
        margin-bottom: 1;
    }

    .field-row Input {
        width: 100%;
    }

    .hint {
        height: 1;
        color: $text-muted;
    }

    .dialog-buttons {
        width: 100%;
        height: auto;
        margin-top: 1;
        align: center middle;
    }

    .dialog-buttons Button {
        width: auto;
        min-width: 12;
        margin: 0 2;
    }
"""


def parse_date_input(val: str) -> date | None:
    """Parse YYYY-MM-DD, returning None if blank or invalid."""
    val = val.strip()
    if not val:
        return None
    try:
        return date.fromisoformat(val)
    except ValueError:
        return None


class ConfirmScreen(ModalScreen[bool]):
    """Simple confirmation dialog."""

    CSS = """
    ConfirmScreen {
        align: center middle;
    }

    #confirm-dialog {
        width: 50;
        height: auto;
        padding: 1 2;
        background: $surface;
        border: thick $warning;
    }

    #confirm-buttons {
        width: 100%;
        height: auto;
        margin-top: 1;
    }

    #confirm-buttons Button {
        width: 1fr;
        margin: 0 1;
    }
    """

    BINDINGS = [
        Binding("escape", "cancel", "Cancel"),
        Binding("y", "confirm", "Yes"),
        Binding("n", "cancel", "No"),
    ]

    def __init__(self, message: str):
        super().__init__()
        self.message = message

    def compose(self) -> ComposeResult:
        with Vertical(id="confirm-dialog"):
            yield Label(self.message)
            with Horizontal(id="confirm-buttons"):
                yield Button("Yes (Y)", variant="warning", id="yes")
                yield Button("No (N)", variant="default", id="no")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(event.button.id == "yes")

    def action_confirm(self) -> None:
        self.dismiss(True)

    def action_cancel(self) -> None:
        self.dismiss(False)


class EntryScreen(ModalScreen[dict | None]):
    """Log time (hourly projects) or a milestone amount (fixed projects).

    Time is typed as H.MM, so 1.30 means one hour thirty minutes. Ticking
    "Decimal hours" reads it as fractional hours instead (1.5 = 90 minutes).
    """

    CSS = "EntryScreen { align: center middle; }\n" + DIALOG_CSS + """
    #entry-projects {
        height: 8;
        margin-bottom: 1;
    }
    """

    BINDINGS = [
        Binding("escape", "cancel", "Cancel"),
    ]

    FIELD_ORDER = ["entry-date", "entry-time", "entry-amount", "entry-description"]

    def __init__(self, projects: list[Project], entry_date: date | None = None):
        super().__init__()
        self.projects = projects
        self.entry_date = entry_date or date.today()

    def compose(self) -> ComposeResult:
        with Vertical(classes="dialog"):
            yield Label("Log Entry", classes="dialog-title")
            yield DataTable(id="entry-projects", cursor_type="row")

            with Horizontal(classes="field-row"):
                with Vertical(classes="field-group"):
                    yield Label("Date (YYYY-MM-DD)", classes="field-label")
                    yield Input(value=self.entry_date.isoformat(), id="entry-date")
                with Vertical(classes="field-group"):
                    yield Label("Time (H.MM)", classes="field-label")
                    yield Input(placeholder="1.30", id="entry-time")
                with Vertical(classes="field-group"):
                    yield Label("Milestone ($)", classes="field-label")
                    yield Input(placeholder="fixed only", id="entry-amount")

            yield Checkbox("Decimal hours (1.5 = 1h 30m)", id="entry-fractional")
            yield Label("", id="entry-preview", classes="hint")

            with Vertical(classes="field-row"):
                yield Label("Description", classes="field-label")
                yield Input(id="entry-description")

            with Horizontal(classes="dialog-buttons"):
                yield Button("Save", variant="primary", id="save")
                yield Button("Cancel", variant="default", id="cancel")

    def on_mount(self) -> None:
        table = self.query_one("#entry-projects", DataTable)
        table.add_columns("Project", "Type", "Rate")
        for project in self.projects:
            table.add_row(project.name, project.type, format_usd(project.rate), key=project.id)
        table.focus()

    def selected_project(self) -> Project | None:
        table = self.query_one("#entry-projects", DataTable)
        if not self.projects or table.row_count == 0:
            return None
        row_key = table.coordinate_to_cell_key(Coordinate(table.cursor_row, 0)).row_key
        return next((p for p in self.projects if p.id == row_key.value), None)

    def time_format(self) -> str:
        return FORMAT_FRACTIONAL if self.query_one("#entry-fractional", Checkbox).value else FORMAT_HM

    def preview_text(self, value: str, time_format: str) -> str:
        """Show how the typed time will be read."""
        if not value.strip():
            return ""
        try:
            parsed = parse_time_input(value.strip(), format=time_format)
        except TimeFlowError:
            return "Not a valid time"
        text = f"= {format_minutes_readable(parsed.minutes)}"
        if parsed.had_overflow:
            text += " (minutes past 59 are added as written)"
        return text

    def _update_preview(self) -> None:
        value = self.query_one("#entry-time", Input).value
        self.query_one("#entry-preview", Label).update(self.preview_text(value, self.time_format()))

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id == "entry-time":
            self._update_preview()

    def on_checkbox_changed(self, event: Checkbox.Changed) -> None:
        self._update_preview()

    def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        project = self.selected_project()
        target = "#entry-amount" if project and project.is_fixed else "#entry-time"
        self.query_one(target, Input).focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        """Move to next field on Enter, or save if on last field."""
        current_id = event.input.id
        if current_id in self.FIELD_ORDER:
            current_idx = self.FIELD_ORDER.index(current_id)
            if current_idx < len(self.FIELD_ORDER) - 1:
                next_id = self.FIELD_ORDER[current_idx + 1]
                self.query_one(f"#{next_id}", Input).focus()
            else:
                self._save_entry()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "cancel":
            self.dismiss(None)
        elif event.button.id == "save":
            self._save_entry()

    def action_cancel(self) -> None:
        self.dismiss(None)

    def _save_entry(self) -> None:
        project = self.selected_project()
        if project is None:
            self.app.notify("Create a project first", severity="error")
            return

        entry_date = parse_date_input(self.query_one("#entry-date", Input).value)
        if entry_date is None:
            self.app.notify("Invalid date. Use YYYY-MM-DD", severity="error")
            return

        description = self.query_one("#entry-description", Input).value.strip() or None
        result = {
            "project_id": project.id,
            "entry_date": entry_date,
            "description": description,
        }

        try:
            if project.is_fixed:
                amount_val = self.query_one("#entry-amount", Input).value.strip()
                result["amount"] = to_amount(amount_val) if amount_val else None
            else:
                time_val = self.query_one("#entry-time", Input).value.strip()
                # Parse here so mistakes are caught before the dialog closes
                parse_time_input(time_val, format=self.time_format())
                result["value"] = time_val
                result["input_format"] = self.time_format()
        except TimeFlowError as exc:
            self.app.notify(str(exc), severity="error")
            return

        self.dismiss(result)


class ProjectScreen(ModalScreen[dict | None]):
    """Create or edit a project."""

    CSS = "ProjectScreen { align: center middle; }\n" + DIALOG_CSS

    BINDINGS = [
        Binding("escape", "cancel", "Cancel"),
    ]

    def __init__(self, project: Project | None = None):
        super().__init__()
        self.project = project  # None means creating new

    def compose(self) -> ComposeResult:
        title = "Edit Project" if self.project else "New Project"
        with Vertical(classes="dialog"):
            yield Label(title, classes="dialog-title")

            with Vertical(classes="field-row"):
                yield Label("Name", classes="field-label")
                yield Input(value=self.project.name if self.project else "", id="project-name")

            with Horizontal(classes="field-row"):
                with Vertical(classes="field-group"):
                    yield Label("Rate ($/hr or contract total)", classes="field-label")
                    yield Input(
                        value=str(self.project.rate) if self.project else "",
                        placeholder="25",
                        id="project-rate",
                    )
                with Vertical(classes="field-group"):
                    yield Label("Colour", classes="field-label")
                    yield Input(
                        value=self.project.color if self.project else "#3b82f6",
                        id="project-color",
                    )

            yield Checkbox(
                "Fixed price",
                value=bool(self.project and self.project.is_fixed),
                id="project-fixed",
            )

            with Horizontal(classes="dialog-buttons"):
                yield Button("Save", variant="primary", id="save")
                yield Button("Cancel", variant="default", id="cancel")

    def on_mount(self) -> None:
        self.query_one("#project-name", Input).focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id == "project-name":
            self.query_one("#project-rate", Input).focus()
        else:
            self._save_project()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "cancel":
            self.dismiss(None)
        elif event.button.id == "save":
            self._save_project()

    def action_cancel(self) -> None:
        self.dismiss(None)

    def _save_project(self) -> None:
        name = self.query_one("#project-name", Input).value.strip()
        if not name:
            self.app.notify("Name is required", severity="error")
            return

        try:
            rate = to_amount(self.query_one("#project-rate", Input).value)
        except TimeFlowError:
            self.app.notify("Rate must be a number", severity="error")
            return

        fixed = self.query_one("#project-fixed", Checkbox).value
        self.dismiss({
            "name": name,
            "rate": rate,
            "type": PROJECT_FIXED if fixed else PROJECT_HOURLY,
            "color": self.query_one("#project-color", Input).value.strip() or "#3b82f6",
        })


class SettingsScreen(ModalScreen[dict | None]):
    """Deduction rates and the USD to INR exchange rate."""

    CSS = "SettingsScreen { align: center middle; }\n" + DIALOG_CSS

    BINDINGS = [
        Binding("escape", "cancel", "Cancel"),
    ]

    FIELDS = [
        ("service_fee", "Service fee (%)"),
        ("tds", "TDS (%)"),
        ("gst", "GST on fee (%)"),
        ("transfer_fee", "Transfer fee ($)"),
        ("usd_to_inr", "USD to INR"),
    ]

    def __init__(self, deductions: DeductionConfig | None, currency: CurrencyConfig | None):
        super().__init__()
        self.deductions = deductions or DeductionConfig()
        self.currency = currency or CurrencyConfig()

    def current_value(self, name: str) -> Decimal:
        source = self.currency if name == "usd_to_inr" else self.deductions
        return getattr(source, name)

    def compose(self) -> ComposeResult:
        with Vertical(classes="dialog"):
            yield Label("Settings", classes="dialog-title")
            yield Label("Changes apply to new entries only", classes="hint")
            for name, label in self.FIELDS:
                with Horizontal(classes="field-row"):
                    yield Label(label, classes="field-group")
                    yield Input(value=str(self.current_value(name)), id=f"setting-{name.replace('_', '-')}")

            with Horizontal(classes="dialog-buttons"):
                yield Button("Save", variant="primary", id="save")
                yield Button("Cancel", variant="default", id="cancel")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "cancel":
            self.dismiss(None)
        elif event.button.id == "save":
            self._save_settings()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        self._save_settings()

    def action_cancel(self) -> None:
        self.dismiss(None)

    def _save_settings(self) -> None:
        values = {}
        for name, label in self.FIELDS:
            raw = self.query_one(f"#setting-{name.replace('_', '-')}", Input).value
            try:
                values[name] = to_amount(raw)
            except TimeFlowError:
                self.app.notify(f"{label} must be a number", severity="error")
                return
        self.dismiss(values)


class WithdrawalScreen(ModalScreen[dict | None]):
    """Record a withdrawal against the available balance."""

    CSS = "WithdrawalScreen { align: center middle; }\n" + DIALOG_CSS

    BINDINGS = [
        Binding("escape", "cancel", "Cancel"),
    ]

    FIELD_ORDER = ["withdrawal-amount", "withdrawal-fee", "withdrawal-date", "withdrawal-notes"]

    def __init__(self, available: Decimal, withdrawal_date: date | None = None):
        super().__init__()
        self.available = available
        self.withdrawal_date = withdrawal_date or date.today()

    def compose(self) -> ComposeResult:
        with Vertical(classes="dialog"):
            yield Label("New Withdrawal", classes="dialog-title")
            yield Label(f"Available: {format_usd(self.available)}", classes="hint")

            with Horizontal(classes="field-row"):
                with Vertical(classes="field-group"):
                    yield Label("Amount ($)", classes="field-label")
                    yield Input(id="withdrawal-amount")
                with Vertical(classes="field-group"):
                    yield Label("Fee ($)", classes="field-label")
                    yield Input(value="0", id="withdrawal-fee")
                with Vertical(classes="field-group"):
                    yield Label("Date", classes="field-label")
                    yield Input(value=self.withdrawal_date.isoformat(), id="withdrawal-date")

            yield Label("", id="withdrawal-received", classes="hint")

            with Vertical(classes="field-row"):
                yield Label("Notes", classes="field-label")
                yield Input(id="withdrawal-notes")

            with Horizontal(classes="dialog-buttons"):
                yield Button("Save", variant="primary", id="save")
                yield Button("Cancel", variant="default", id="cancel")

    def on_mount(self) -> None:
        self.query_one("#withdrawal-amount", Input).focus()

    def received_text(self, amount: str, fee: str) -> str:
        """What arrives after the fee, or blank while the inputs are incomplete."""
        try:
            return f"You receive {format_usd(withdrawal_amount(amount, fee or '0'))}"
        except TimeFlowError:
            return ""

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id in ("withdrawal-amount", "withdrawal-fee"):
            text = self.received_text(
                self.query_one("#withdrawal-amount", Input).value,
                self.query_one("#withdrawal-fee", Input).value,
            )
            self.query_one("#withdrawal-received", Label).update(text)

    def on_input_submitted(self, event: Input.Submitted) -> None:
        current_id = event.input.id
        if current_id in self.FIELD_ORDER[:-1]:
            next_id = self.FIELD_ORDER[self.FIELD_ORDER.index(current_id) + 1]
            self.query_one(f"#{next_id}", Input).focus()
        else:
            self._save_withdrawal()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "cancel":
            self.dismiss(None)
        elif event.button.id == "save":
            self._save_withdrawal()

    def action_cancel(self) -> None:
        self.dismiss(None)

    def _save_withdrawal(self) -> None:
        withdrawal_date = parse_date_input(self.query_one("#withdrawal-date", Input).value)
        if withdrawal_date is None:
            self.app.notify("Invalid date. Use YYYY-MM-DD", severity="error")
            return

        try:
            net = to_amount(self.query_one("#withdrawal-amount", Input).value)
            fee = to_amount(self.query_one("#withdrawal-fee", Input).value or "0")
            withdrawal_amount(net, fee)
        except TimeFlowError as exc:
            self.app.notify(str(exc), severity="error")
            return

        self.dismiss({
            "net_earnings": net,
            "transaction_fee": fee,
            "withdrawal_date": withdrawal_date,
            "notes": self.query_one("#withdrawal-notes", Input).value.strip() or None,
        })
