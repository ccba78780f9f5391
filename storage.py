from __future__ import annotations

import logging
import os
import sqlite3
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path

from models import (
    PROJECT_HOURLY,
    CurrencyConfig,
    DeductionConfig,
    Project,
    TimeEntry,
    Withdrawal,
)

logger = logging.getLogger("timeflow.storage")


def _get_db_path() -> Path:
    """Get database path from environment variable or default location."""
    if env_path := os.environ.get("TIMEFLOW_DB"):
        return Path(env_path)
    return Path(__file__).parent / "data" / "timeflow.db"


DB_PATH = _get_db_path()

# Largest value a sqlite INTEGER column holds
MAX_MINUTES = 2**63 - 1

_TIME_ENTRIES_TABLE = """
    CREATE TABLE IF NOT EXISTS time_entries (
        id TEXT PRIMARY KEY,
        project_id TEXT NOT NULL REFERENCES projects(id) ON DELETE CASCADE,
        minutes INTEGER NOT NULL DEFAULT 0,
        input_format TEXT NOT NULL DEFAULT 'hm',
        raw_input TEXT,
        date TEXT NOT NULL,
        description TEXT,
        gross_usd TEXT NOT NULL,
        deduction_service TEXT NOT NULL,
        deduction_gst TEXT NOT NULL,
        deduction_tds TEXT NOT NULL,
        deduction_transfer TEXT NOT NULL,
        deduction_total TEXT NOT NULL,
        net_usd TEXT NOT NULL,
        net_inr TEXT NOT NULL,
        exchange_rate TEXT NOT NULL,
        created_at TEXT NOT NULL
    );
"""

_SNAPSHOT_COLUMNS = (
    "gross_usd",
    "deduction_service",
    "deduction_gst",
    "deduction_tds",
    "deduction_transfer",
    "deduction_total",
    "net_usd",
    "net_inr",
    "exchange_rate",
)


def get_connection() -> sqlite3.Connection:
    DB_PATH.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(DB_PATH)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


@contextmanager
def transaction() -> Iterator[sqlite3.Connection]:
    """Hold the database write lock from the first read to the commit.

    Pass the yielded connection to the functions below so a
    read-validate-write sequence cannot interleave with another writer.
    """
    conn = get_connection()
    try:
        conn.execute("BEGIN IMMEDIATE")
        yield conn
        conn.commit()
    except BaseException:
        conn.rollback()
        raise
    finally:
        conn.close()


@contextmanager
def _use(conn: sqlite3.Connection | None) -> Iterator[sqlite3.Connection]:
    """Reuse the caller's connection, or open and commit a short-lived one."""
    if conn is not None:
        yield conn
        return
    own = get_connection()
    try:
        yield own
        own.commit()
    finally:
        own.close()


def _columns(conn: sqlite3.Connection, table: str) -> list[str]:
    return [row[1] for row in conn.execute(f"PRAGMA table_info({table})").fetchall()]


def init_db():
    """Create tables if they don't exist."""
    with _use(None) as conn:
        conn.executescript("""
            CREATE TABLE IF NOT EXISTS projects (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                rate TEXT NOT NULL,
                type TEXT NOT NULL DEFAULT 'hourly',
                color TEXT NOT NULL,
                created_at TEXT NOT NULL
            );

            CREATE TABLE IF NOT EXISTS deductions (
                id TEXT PRIMARY KEY,
                service_fee TEXT NOT NULL,
                tds TEXT NOT NULL,
                gst TEXT NOT NULL,
                transfer_fee TEXT NOT NULL,
                updated_at TEXT NOT NULL
            );

            CREATE TABLE IF NOT EXISTS currency_settings (
                id TEXT PRIMARY KEY,
                usd_to_inr TEXT NOT NULL,
                updated_at TEXT NOT NULL
            );

            CREATE TABLE IF NOT EXISTS withdrawals (
                id TEXT PRIMARY KEY,
                net_earnings TEXT NOT NULL,
                transaction_fee TEXT NOT NULL,
                withdrawal_amount TEXT NOT NULL,
                withdrawal_date TEXT NOT NULL,
                payment_status TEXT NOT NULL DEFAULT 'pending',
                notes TEXT,
                created_at TEXT NOT NULL
            );
        """ + _TIME_ENTRIES_TABLE)

        # Migration: projects created before fixed-price contracts existed
        if "type" not in _columns(conn, "projects"):
            logger.info("Adding type column to projects")
            conn.execute("ALTER TABLE projects ADD COLUMN type TEXT NOT NULL DEFAULT 'hourly'")

        # Migration: entries that stored fractional hours instead of minutes
        if "hours" in _columns(conn, "time_entries"):
            _migrate_hours_to_minutes(conn)

        conn.executescript("""
            CREATE INDEX IF NOT EXISTS idx_entries_date ON time_entries(date);
            CREATE INDEX IF NOT EXISTS idx_entries_project ON time_entries(project_id);
            CREATE INDEX IF NOT EXISTS idx_withdrawals_date ON withdrawals(withdrawal_date);
        """)


def _migrate_hours_to_minutes(conn: sqlite3.Connection):
    """Rebuild time_entries without the legacy hours column.

    Rows from before the switch were always fractional hours, so they are
    converted as such and keep the old value as their raw input.
    """
    columns = _columns(conn, "time_entries")
    from_hours = "CAST(ROUND(COALESCE(hours, 0) * 60) AS INTEGER)"
    minutes = f"COALESCE(minutes, {from_hours})" if "minutes" in columns else from_hours
    input_format = (
        "COALESCE(input_format, 'fractional')" if "input_format" in columns else "'fractional'"
    )
    raw_input = (
        "COALESCE(raw_input, CAST(hours AS TEXT), '0')"
        if "raw_input" in columns
        else "COALESCE(CAST(hours AS TEXT), '0')"
    )
    created_at = "COALESCE(created_at, date)" if "created_at" in columns else "date"
    snapshot = ", ".join(_SNAPSHOT_COLUMNS)

    count = conn.execute("SELECT COUNT(*) FROM time_entries").fetchone()[0]
    logger.info("Migrating %d time entries from hours to minutes", count)

    conn.executescript(f"""
        ALTER TABLE time_entries RENAME TO time_entries_legacy;
        {_TIME_ENTRIES_TABLE}
        INSERT INTO time_entries
            (id, project_id, minutes, input_format, raw_input, date, description,
             {snapshot}, created_at)
        SELECT id, project_id, {minutes}, {input_format}, {raw_input}, date, description,
               {snapshot}, {created_at}
        FROM time_entries_legacy;
        DROP TABLE time_entries_legacy;
    """)


def seed_defaults():
    """Save default deduction and currency settings if none exist yet."""
    with _use(None) as conn:
        if get_deduction_config(conn=conn) is None:
            update_deduction_config(conn=conn)
            logger.info("Seeded default deduction settings")
        if get_currency_config(conn=conn) is None:
            update_currency_config(conn=conn)
            logger.info("Seeded default currency settings")


def _new_id() -> str:
    return uuid.uuid4().hex


def _now() -> datetime:
    return datetime.now().replace(microsecond=0)


def _dec(val) -> Decimal:
    # Legacy rows hold REAL columns; str() keeps their shortest repr
    return Decimal(str(val))


def _parse_datetime(val: str | None) -> datetime | None:
    return datetime.fromisoformat(val) if val else None


def _parse_date(val: str) -> date:
    # Older rows may hold a full timestamp
    return date.fromisoformat(val[:10])


# --- Projects ---


def _row_to_project(row: sqlite3.Row) -> Project:
    return Project(
        id=row["id"],
        name=row["name"],
        rate=_dec(row["rate"]),
        type=row["type"] or PROJECT_HOURLY,
        color=row["color"],
        created_at=_parse_datetime(row["created_at"]),
    )


def get_projects(conn: sqlite3.Connection | None = None) -> list[Project]:
    """Get all projects in creation order."""
    with _use(conn) as c:
        rows = c.execute("SELECT * FROM projects ORDER BY created_at, name").fetchall()
    return [_row_to_project(row) for row in rows]


def get_project(project_id: str, conn: sqlite3.Connection | None = None) -> Project | None:
    """Get a single project by ID."""
    with _use(conn) as c:
        row = c.execute("SELECT * FROM projects WHERE id = ?", (project_id,)).fetchone()
    return _row_to_project(row) if row else None


def _save_project(c: sqlite3.Connection, project: Project):
    c.execute(
        """
        INSERT OR REPLACE INTO projects (id, name, rate, type, color, created_at)
        VALUES (?, ?, ?, ?, ?, ?)
        """,
        (
            project.id,
            project.name,
            str(project.rate),
            project.type,
            project.color,
            project.created_at.isoformat(),  # type: ignore[union-attr]
        ),
    )


def create_project(project: Project, conn: sqlite3.Connection | None = None) -> Project:
    """Insert a new project and return it with its ID."""
    created = replace(project, id=_new_id(), created_at=project.created_at or _now())
    with _use(conn) as c:
        _save_project(c, created)
    return created


def update_project(
    project_id: str, conn: sqlite3.Connection | None = None, **changes
) -> Project | None:
    """Update fields of a project. Returns None if it doesn't exist."""
    with _use(conn) as c:
        existing = get_project(project_id, conn=c)
        if existing is None:
            return None
        updated = replace(existing, **changes)
        c.execute(
            "UPDATE projects SET name = ?, rate = ?, type = ?, color = ? WHERE id = ?",
            (updated.name, str(updated.rate), updated.type, updated.color, project_id),
        )
    return updated


def delete_project(project_id: str, conn: sqlite3.Connection | None = None) -> None:
    """Delete a project and every time entry logged against it."""
    with _use(conn) as c:
        c.execute("DELETE FROM time_entries WHERE project_id = ?", (project_id,))
        c.execute("DELETE FROM projects WHERE id = ?", (project_id,))


# --- Settings ---


def _row_to_deductions(row: sqlite3.Row) -> DeductionConfig:
    return DeductionConfig(
        id=row["id"],
        service_fee=_dec(row["service_fee"]),
        tds=_dec(row["tds"]),
        gst=_dec(row["gst"]),
        transfer_fee=_dec(row["transfer_fee"]),
        updated_at=_parse_datetime(row["updated_at"]),
    )


def get_deduction_config(conn: sqlite3.Connection | None = None) -> DeductionConfig | None:
    with _use(conn) as c:
        row = c.execute("SELECT * FROM deductions LIMIT 1").fetchone()
    return _row_to_deductions(row) if row else None


def update_deduction_config(conn: sqlite3.Connection | None = None, **changes) -> DeductionConfig:
    """Update the deduction settings, creating the row on first write."""
    with _use(conn) as c:
        existing = get_deduction_config(conn=c)
        if existing is None:
            config = replace(DeductionConfig(**changes), id=_new_id(), updated_at=_now())
        else:
            config = replace(existing, **changes, updated_at=_now())
        c.execute(
            """
            INSERT OR REPLACE INTO deductions
            (id, service_fee, tds, gst, transfer_fee, updated_at)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                config.id,
                str(config.service_fee),
                str(config.tds),
                str(config.gst),
                str(config.transfer_fee),
                config.updated_at.isoformat(),  # type: ignore[union-attr]
            ),
        )
    return config


def _row_to_currency(row: sqlite3.Row) -> CurrencyConfig:
    return CurrencyConfig(
        id=row["id"],
        usd_to_inr=_dec(row["usd_to_inr"]),
        last_updated=_parse_datetime(row["updated_at"]),
    )


def get_currency_config(conn: sqlite3.Connection | None = None) -> CurrencyConfig | None:
    with _use(conn) as c:
        row = c.execute("SELECT * FROM currency_settings LIMIT 1").fetchone()
    return _row_to_currency(row) if row else None


def update_currency_config(conn: sqlite3.Connection | None = None, **changes) -> CurrencyConfig:
    """Update the exchange rate, creating the row on first write."""
    with _use(conn) as c:
        existing = get_currency_config(conn=c)
        if existing is None:
            config = replace(CurrencyConfig(**changes), id=_new_id(), last_updated=_now())
        else:
            config = replace(existing, **changes, last_updated=_now())
        c.execute(
            "INSERT OR REPLACE INTO currency_settings (id, usd_to_inr, updated_at) VALUES (?, ?, ?)",
            (config.id, str(config.usd_to_inr), config.last_updated.isoformat()),  # type: ignore[union-attr]
        )
    return config


# --- Time Entries ---


def _row_to_entry(row: sqlite3.Row) -> TimeEntry:
    return TimeEntry(
        id=row["id"],
        project_id=row["project_id"],
        minutes=int(row["minutes"]),
        input_format=row["input_format"],
        raw_input=row["raw_input"],
        date=_parse_date(row["date"]),
        description=row["description"],
        **{name: _dec(row[name]) for name in _SNAPSHOT_COLUMNS},
        created_at=_parse_datetime(row["created_at"]),
    )


def get_time_entries(conn: sqlite3.Connection | None = None) -> list[TimeEntry]:
    """Get all entries, newest first."""
    with _use(conn) as c:
        rows = c.execute(
            "SELECT * FROM time_entries ORDER BY date DESC, created_at DESC"
        ).fetchall()
    return [_row_to_entry(row) for row in rows]


def get_time_entry(entry_id: str, conn: sqlite3.Connection | None = None) -> TimeEntry | None:
    with _use(conn) as c:
        row = c.execute("SELECT * FROM time_entries WHERE id = ?", (entry_id,)).fetchone()
    return _row_to_entry(row) if row else None


def get_project_entries(
    project_id: str, conn: sqlite3.Connection | None = None
) -> list[TimeEntry]:
    with _use(conn) as c:
        rows = c.execute(
            "SELECT * FROM time_entries WHERE project_id = ? ORDER BY date",
            (project_id,),
        ).fetchall()
    return [_row_to_entry(row) for row in rows]


def create_time_entry(entry: TimeEntry, conn: sqlite3.Connection | None = None) -> TimeEntry:
    """Insert a computed entry and return it with its ID."""
    created = replace(entry, id=_new_id(), created_at=entry.created_at or _now())
    snapshot = [str(getattr(created, name)) for name in _SNAPSHOT_COLUMNS]
    with _use(conn) as c:
        c.execute(
            f"""
            INSERT INTO time_entries
            (id, project_id, minutes, input_format, raw_input, date, description,
             {", ".join(_SNAPSHOT_COLUMNS)}, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, {", ".join("?" * len(_SNAPSHOT_COLUMNS))}, ?)
            """,
            (
                created.id,
                created.project_id,
                created.minutes,
                created.input_format,
                created.raw_input,
                created.date.isoformat(),
                created.description,
                *snapshot,
                created.created_at.isoformat(),  # type: ignore[union-attr]
            ),
        )
    return created


def delete_time_entry(entry_id: str, conn: sqlite3.Connection | None = None) -> None:
    with _use(conn) as c:
        c.execute("DELETE FROM time_entries WHERE id = ?", (entry_id,))


# --- Withdrawals ---


def _row_to_withdrawal(row: sqlite3.Row) -> Withdrawal:
    return Withdrawal(
        id=row["id"],
        net_earnings=_dec(row["net_earnings"]),
        transaction_fee=_dec(row["transaction_fee"]),
        withdrawal_amount=_dec(row["withdrawal_amount"]),
        withdrawal_date=_parse_date(row["withdrawal_date"]),
        payment_status=row["payment_status"],
        notes=row["notes"],
        created_at=_parse_datetime(row["created_at"]),
    )


def get_withdrawals(conn: sqlite3.Connection | None = None) -> list[Withdrawal]:
    """Get all withdrawals, most recent first."""
    with _use(conn) as c:
        rows = c.execute(
            "SELECT * FROM withdrawals ORDER BY withdrawal_date DESC, created_at DESC"
        ).fetchall()
    return [_row_to_withdrawal(row) for row in rows]


def get_withdrawal(
    withdrawal_id: str, conn: sqlite3.Connection | None = None
) -> Withdrawal | None:
    with _use(conn) as c:
        row = c.execute("SELECT * FROM withdrawals WHERE id = ?", (withdrawal_id,)).fetchone()
    return _row_to_withdrawal(row) if row else None


def create_withdrawal(
    withdrawal: Withdrawal, conn: sqlite3.Connection | None = None
) -> Withdrawal:
    created = replace(withdrawal, id=_new_id(), created_at=withdrawal.created_at or _now())
    with _use(conn) as c:
        c.execute(
            """
            INSERT INTO withdrawals
            (id, net_earnings, transaction_fee, withdrawal_amount, withdrawal_date,
             payment_status, notes, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                created.id,
                str(created.net_earnings),
                str(created.transaction_fee),
                str(created.withdrawal_amount),
                created.withdrawal_date.isoformat(),
                created.payment_status,
                created.notes,
                created.created_at.isoformat(),  # type: ignore[union-attr]
            ),
        )
    return created


def update_withdrawal_status(
    withdrawal_id: str, status: str, conn: sqlite3.Connection | None = None
) -> Withdrawal | None:
    """Set the payment status. Returns None if the withdrawal doesn't exist."""
    with _use(conn) as c:
        c.execute(
            "UPDATE withdrawals SET payment_status = ? WHERE id = ?",
            (status, withdrawal_id),
        )
        return get_withdrawal(withdrawal_id, conn=c)


def delete_withdrawal(withdrawal_id: str, conn: sqlite3.Connection | None = None) -> None:
    with _use(conn) as c:
        c.execute("DELETE FROM withdrawals WHERE id = ?", (withdrawal_id,))
