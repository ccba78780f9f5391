#!/usr/bin/env python3
"""Import historical time entries from an Excel workbook or JSON file.

Rows need ``date``, ``project`` and either ``hours`` (hourly projects) or
``amount`` (fixed-price milestones). A ``format`` column of ``hm`` or
``fractional`` says how to read ``hours``; rows without one are old data and
go through the legacy format guess in ``timeparse``. Projects that don't exist
yet are created from the row's ``rate`` and ``type`` columns.

Every row is priced through the normal ledger path with today's settings.
"""

from __future__ import annotations

import json
import logging
import sys
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path

from openpyxl import load_workbook

import ledger
import storage
from errors import TimeFlowError
from logging_config import configure_logging
from models import PROJECT_HOURLY, Project

logger = logging.getLogger("timeflow.import")


@dataclass
class ImportResult:
    imported: int = 0
    skipped: int = 0
    errors: list[str] = field(default_factory=list)


def parse_date(val) -> date | None:
    """Parse a cell value like '2025-08-30', '2025-08-30 00:00:00' or a datetime."""
    if val is None or val == "":
        return None
    if isinstance(val, datetime):
        return val.date()
    if isinstance(val, date):
        return val

    try:
        date_part = str(val).strip().split(" ")[0].split("T")[0]
        return date.fromisoformat(date_part)
    except ValueError:
        return None


def _clean(val) -> str | None:
    if val is None:
        return None
    text = str(val).strip()
    return text or None


def read_workbook(path: Path) -> list[dict]:
    """Read rows from every sheet, keyed by the lower-cased header row."""
    wb = load_workbook(path, read_only=True, data_only=True)
    rows: list[dict] = []
    for ws in wb.worksheets:
        values = ws.iter_rows(values_only=True)
        header = next(values, None)
        if not header:
            continue
        keys = [str(h).strip().lower() if h is not None else "" for h in header]
        for row in values:
            if all(cell is None for cell in row):
                continue
            rows.append({k: v for k, v in zip(keys, row) if k})
    wb.close()
    return rows


def read_json(path: Path) -> list[dict]:
    with open(path) as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get("entries", [])
    return [{str(k).lower(): v for k, v in row.items()} for row in data]


def _find_or_create_project(row: dict, projects: dict[str, Project]) -> Project:
    name = _clean(row.get("project"))
    if not name:
        raise ValueError("missing project")
    project = projects.get(name.lower())
    if project is None:
        if row.get("rate") is None:
            raise ValueError(f"unknown project {name!r} and no rate to create it")
        project = ledger.add_project(
            name, row["rate"], _clean(row.get("type")) or PROJECT_HOURLY
        )
        projects[name.lower()] = project
    return project


def import_rows(rows: list[dict]) -> ImportResult:
    """Record each row as an entry, skipping the ones that fail."""
    result = ImportResult()
    projects = {p.name.lower(): p for p in storage.get_projects()}

    for line, row in enumerate(rows, start=1):
        entry_date = parse_date(row.get("date"))
        try:
            if entry_date is None:
                raise ValueError(f"bad date {row.get('date')!r}")
            project = _find_or_create_project(row, projects)
            ledger.record_entry(
                project.id,  # type: ignore[arg-type]
                entry_date,
                value=row.get("hours"),
                amount=row.get("amount"),
                input_format=_clean(row.get("format")),
                description=_clean(row.get("description")),
            )
        except (TimeFlowError, ValueError) as exc:
            result.skipped += 1
            result.errors.append(f"row {line}: {exc}")
            logger.warning("Skipping row %d: %s", line, exc)
            continue
        result.imported += 1

    return result


def import_file(path: Path) -> ImportResult:
    rows = read_json(path) if path.suffix.lower() == ".json" else read_workbook(path)
    return import_rows(rows)


def main(argv: list[str] | None = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    if len(argv) != 1:
        print("usage: import_data.py <entries.xlsx|entries.json>", file=sys.stderr)
        return 2

    configure_logging()
    storage.init_db()
    storage.seed_defaults()

    result = import_file(Path(argv[0]))
    logger.info("Imported %d entries, skipped %d", result.imported, result.skipped)
    return 0 if not result.errors else 1


if __name__ == "__main__":
    sys.exit(main())
