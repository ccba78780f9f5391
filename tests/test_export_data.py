"""Tests for export_data.py - CSV and Excel exports."""

import csv
from datetime import date
from decimal import Decimal

from openpyxl import load_workbook

from export_data import (
    ENTRY_COLUMNS,
    WITHDRAWAL_COLUMNS,
    entry_row,
    export_csv,
    export_xlsx,
    main,
    withdrawal_row,
)


class TestRows:
    """Tests for single export rows."""

    def test_entry_row(self, make_entry):
        entry = make_entry(minutes=110, gross="45.833333", net="39.389166", inr="3308.69")
        row = entry_row(entry, {"proj-hourly": "Client Portal"})

        assert len(row) == len(ENTRY_COLUMNS)
        assert row[:5] == ["2026-01-27", "Client Portal", "1:50", 110, "hm"]
        assert row[7] == 45.83
        assert row[13] == 39.39
        assert row[14] == 3308.69
        assert row[15] == 84.0

    def test_deleted_project(self, make_entry):
        assert entry_row(make_entry(), {})[1] == "(deleted)"

    def test_withdrawal_row(self, make_withdrawal):
        row = withdrawal_row(make_withdrawal(net="10", fee="0.5", status="received"))

        assert len(row) == len(WITHDRAWAL_COLUMNS)
        assert row == ["2026-01-30", 10.0, 0.5, 9.5, "received", ""]


class TestExport:
    """Tests for file exports."""

    def test_export_csv(self, tmp_path, make_entry, hourly_project):
        path = tmp_path / "out.csv"
        count = export_csv(path, [make_entry(), make_entry(entry_date=date(2026, 1, 28))], [hourly_project])

        assert count == 2
        with open(path, newline="") as f:
            rows = list(csv.reader(f))
        assert rows[0] == ENTRY_COLUMNS
        assert rows[1][1] == "Client Portal"
        assert rows[2][0] == "2026-01-28"

    def test_export_xlsx(self, tmp_path, make_entry, make_withdrawal, hourly_project):
        path = tmp_path / "out.xlsx"
        count = export_xlsx(path, [make_entry()], [hourly_project], [make_withdrawal()])

        assert count == 1
        wb = load_workbook(path)
        assert wb.sheetnames == ["Entries", "Withdrawals"]
        entries = list(wb["Entries"].iter_rows(values_only=True))
        assert list(entries[0]) == ENTRY_COLUMNS
        assert entries[1][1] == "Client Portal"
        withdrawals = list(wb["Withdrawals"].iter_rows(values_only=True))
        assert withdrawals[1][4] == "pending"

    def test_export_xlsx_without_withdrawals(self, tmp_path, make_entry, hourly_project):
        path = tmp_path / "out.xlsx"
        export_xlsx(path, [make_entry()], [hourly_project])

        assert load_workbook(path).sheetnames == ["Entries"]

    def test_stored_entries(self, seeded_database, tmp_path):
        import ledger

        project = ledger.add_project("Portal", "25")
        ledger.record_time(project.id, "1.50", date(2026, 1, 27), input_format="hm")

        path = tmp_path / "out.csv"
        export_csv(path, seeded_database.get_time_entries(), seeded_database.get_projects())
        with open(path, newline="") as f:
            rows = list(csv.reader(f))

        assert rows[1][1] == "Portal"
        assert rows[1][2] == "1:50"
        assert rows[1][5] == "1.50"
        assert Decimal(rows[1][14]) == Decimal("3308.69")


class TestMain:
    """Tests for the command line entry point."""

    def test_usage(self, capsys):
        assert main(["a", "b"]) == 2
        assert "usage" in capsys.readouterr().err
