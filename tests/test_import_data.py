"""Tests for import_data.py - loading historical entries."""

import json
from datetime import date, datetime
from decimal import Decimal

import pytest
from openpyxl import Workbook

from import_data import import_file, import_rows, main, parse_date, read_json, read_workbook


class TestParseDate:
    """Tests for parse_date function."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("2025-08-30", date(2025, 8, 30)),
            ("2025-08-30 00:00:00", date(2025, 8, 30)),
            ("2025-08-30T09:15:00", date(2025, 8, 30)),
            (datetime(2025, 8, 30, 12, 0), date(2025, 8, 30)),
            (date(2025, 8, 30), date(2025, 8, 30)),
        ],
    )
    def test_valid(self, value, expected):
        assert parse_date(value) == expected

    @pytest.mark.parametrize("value", [None, "", "30/08/2025", "soon"])
    def test_invalid(self, value):
        assert parse_date(value) is None


class TestReaders:
    """Tests for the JSON and workbook readers."""

    def test_read_json_list(self, tmp_path):
        path = tmp_path / "entries.json"
        path.write_text(json.dumps([{"Date": "2026-01-27", "Project": "Portal", "Hours": 1.5}]))

        assert read_json(path) == [{"date": "2026-01-27", "project": "Portal", "hours": 1.5}]

    def test_read_json_object(self, tmp_path):
        path = tmp_path / "entries.json"
        path.write_text(json.dumps({"entries": [{"date": "2026-01-27"}]}))

        assert read_json(path) == [{"date": "2026-01-27"}]

    def test_read_workbook(self, tmp_path):
        path = tmp_path / "entries.xlsx"
        wb = Workbook()
        ws = wb.active
        ws.append(["Date", "Project", "Hours", None])
        ws.append([datetime(2026, 1, 27), "Portal", "1.50", "ignored"])
        ws.append([None, None, None, None])
        other = wb.create_sheet("February")
        other.append(["date", "project", "hours"])
        other.append(["2026-02-02", "Portal", 2])
        wb.save(path)

        rows = read_workbook(path)

        assert len(rows) == 2
        assert rows[0]["project"] == "Portal"
        assert rows[0]["hours"] == "1.50"
        assert parse_date(rows[0]["date"]) == date(2026, 1, 27)
        assert "" not in rows[0]
        assert rows[1]["hours"] == 2


class TestImportRows:
    """Tests for recording imported rows."""

    def test_creates_project_and_entry(self, seeded_database):
        result = import_rows(
            [{"date": "2026-01-27", "project": "Portal", "rate": 25, "hours": "1.50", "format": "hm"}]
        )

        assert result.imported == 1
        assert result.errors == []
        project = seeded_database.get_projects()[0]
        assert project.name == "Portal"
        entry = seeded_database.get_time_entries()[0]
        assert entry.project_id == project.id
        assert entry.minutes == 110

    def test_existing_project_matched_by_name(self, seeded_database):
        import ledger

        project = ledger.add_project("Portal", "25")
        result = import_rows([{"date": "2026-01-27", "project": "portal", "hours": 1.5}])

        assert result.imported == 1
        entry = seeded_database.get_time_entries()[0]
        assert entry.project_id == project.id
        # Old rows without a format column go through the legacy guess
        assert entry.minutes == 90
        assert len(seeded_database.get_projects()) == 1

    def test_fixed_milestone(self, seeded_database):
        result = import_rows(
            [{"date": "2026-01-27", "project": "Landing", "rate": 500, "type": "fixed", "amount": 200}]
        )

        assert result.imported == 1
        assert seeded_database.get_time_entries()[0].gross_usd == Decimal("200")

    def test_bad_rows_skipped(self, seeded_database):
        rows = [
            {"date": "someday", "project": "Portal", "rate": 25, "hours": "1"},
            {"date": "2026-01-27", "project": "Unknown", "hours": "1"},
            {"date": "2026-01-27", "project": "Portal", "rate": 25, "hours": "lots"},
            {"date": "2026-01-27", "hours": "1"},
            {"date": "2026-01-28", "project": "Portal", "hours": "2"},
        ]
        result = import_rows(rows)

        assert result.imported == 1
        assert result.skipped == 4
        assert result.errors[0].startswith("row 1:")
        assert "Unknown" in result.errors[1]
        assert len(seeded_database.get_time_entries()) == 1

    def test_mismatched_and_oversized_rows_skipped(self, seeded_database):
        rows = [
            {"date": "2026-01-27", "project": "Landing", "rate": 500, "type": "fixed", "hours": "2"},
            {"date": "2026-01-27", "project": "Portal", "rate": 25, "hours": "1" * 30},
            {"date": "2026-01-28", "project": "Portal", "hours": "1.30", "format": "hm"},
        ]
        result = import_rows(rows)

        assert result.imported == 1
        assert result.skipped == 2
        assert "milestone amount" in result.errors[0]
        assert "too large to store" in result.errors[1]
        assert seeded_database.get_time_entries()[0].minutes == 90

    def test_import_file_json(self, seeded_database, tmp_path):
        path = tmp_path / "entries.json"
        path.write_text(json.dumps(
            {"entries": [{"date": "2026-01-27", "project": "Portal", "rate": "25", "hours": "2"}]}
        ))

        assert import_file(path).imported == 1
        assert seeded_database.get_time_entries()[0].gross_usd == Decimal("50")


class TestMain:
    """Tests for the command line entry point."""

    def test_usage(self, capsys):
        assert main([]) == 2
        assert "usage" in capsys.readouterr().err
