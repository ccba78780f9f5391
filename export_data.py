#!/usr/bin/env python3
"""Export time entries with their full earnings breakdown to CSV or Excel."""

from __future__ import annotations

import csv
import logging
import sys
from pathlib import Path

from openpyxl import Workbook

import storage
from logging_config import configure_logging
from models import Project, TimeEntry, Withdrawal
from timeparse import format_minutes_hm

logger = logging.getLogger("timeflow.export")

ENTRY_COLUMNS = [
    "Date",
    "Project",
    "Time",
    "Minutes",
    "Format",
    "Raw Input",
    "Description",
    "Gross USD",
    "Service Fee",
    "GST",
    "TDS",
    "Transfer Fee",
    "Total Deductions",
    "Net USD",
    "Net INR",
    "Exchange Rate",
]

WITHDRAWAL_COLUMNS = [
    "Date",
    "Net Earnings",
    "Transaction Fee",
    "Amount Received",
    "Status",
    "Notes",
]


def entry_row(entry: TimeEntry, project_names: dict[str, str]) -> list:
    """One export row. Money is rounded to cents, rates are kept as stored."""
    return [
        entry.date.isoformat(),
        project_names.get(entry.project_id, "(deleted)"),
        format_minutes_hm(entry.minutes),
        entry.minutes,
        entry.input_format,
        entry.raw_input or "",
        entry.description or "",
        *(
            round(float(amount), 2)
            for amount in (
                entry.gross_usd,
                entry.deduction_service,
                entry.deduction_gst,
                entry.deduction_tds,
                entry.deduction_transfer,
                entry.deduction_total,
                entry.net_usd,
                entry.net_inr,
            )
        ),
        float(entry.exchange_rate),
    ]


def withdrawal_row(withdrawal: Withdrawal) -> list:
    return [
        withdrawal.withdrawal_date.isoformat(),
        round(float(withdrawal.net_earnings), 2),
        round(float(withdrawal.transaction_fee), 2),
        round(float(withdrawal.withdrawal_amount), 2),
        withdrawal.payment_status,
        withdrawal.notes or "",
    ]


def export_csv(path: Path, entries: list[TimeEntry], projects: list[Project]) -> int:
    """Write entries to a CSV file. Returns the number of rows written."""
    names = {p.id: p.name for p in projects}  # type: ignore[misc]
    with open(path, "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(ENTRY_COLUMNS)
        for entry in entries:
            writer.writerow(entry_row(entry, names))
    return len(entries)


def export_xlsx(
    path: Path,
    entries: list[TimeEntry],
    projects: list[Project],
    withdrawals: list[Withdrawal] | None = None,
) -> int:
    """Write entries (and withdrawals, if given) to an Excel workbook."""
    names = {p.id: p.name for p in projects}  # type: ignore[misc]
    wb = Workbook()
    ws = wb.active
    ws.title = "Entries"
    ws.append(ENTRY_COLUMNS)
    for entry in entries:
        ws.append(entry_row(entry, names))

    if withdrawals is not None:
        ws_w = wb.create_sheet("Withdrawals")
        ws_w.append(WITHDRAWAL_COLUMNS)
        for withdrawal in withdrawals:
            ws_w.append(withdrawal_row(withdrawal))

    wb.save(path)
    return len(entries)


def main(argv: list[str] | None = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    if len(argv) != 1:
        print("usage: export_data.py <out.csv|out.xlsx>", file=sys.stderr)
        return 2

    configure_logging()
    storage.init_db()
    path = Path(argv[0])
    entries = storage.get_time_entries()
    projects = storage.get_projects()

    if path.suffix.lower() == ".xlsx":
        count = export_xlsx(path, entries, projects, storage.get_withdrawals())
    else:
        count = export_csv(path, entries, projects)
    logger.info("Exported %d entries to %s", count, path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
