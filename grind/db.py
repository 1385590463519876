"""
SQLite layer for the tracker.

Habits, their daily log entries, milestones and a small settings table.
All reads return typed records from grind.models; any sqlite3 failure is
re-raised as PersistenceError.
"""

from __future__ import annotations

import logging
import os
import sqlite3
from contextlib import contextmanager
from datetime import date, datetime
from enum import Enum
from typing import Callable, Dict, List, Optional

from .errors import NotFoundError, PersistenceError, ValidationError
from .models import Habit, LogEntry, LogStatus, Milestone, days_to_string

logger = logging.getLogger(__name__)

DB_PATH_DEFAULT = os.path.join("data", "grind.db")

HABIT_COLUMNS = (
    "id, name, description, frequency_type, frequency_value, frequency_days, "
    "created_at, is_active, target_date"
)
HABIT_UPDATABLE = {
    "name",
    "description",
    "frequency_type",
    "frequency_value",
    "frequency_days",
    "target_date",
    "is_active",
}
MILESTONE_UPDATABLE = {"title", "start_date", "end_date"}

HABIT_FILTERS = ("all", "active", "archived")

# Given the current status (None = unlogged) return the next one.
Transition = Callable[[Optional[LogStatus]], Optional[LogStatus]]


def _ensure_parent_dir(path) -> None:
    parent = os.path.dirname(os.fspath(path))
    if parent:
        os.makedirs(parent, exist_ok=True)


def _now_iso() -> str:
    return datetime.now().isoformat(timespec="seconds")


@contextmanager
def connect(db_path=DB_PATH_DEFAULT):
    _ensure_parent_dir(db_path)
    try:
        conn = sqlite3.connect(os.fspath(db_path), detect_types=sqlite3.PARSE_DECLTYPES)
    except sqlite3.Error as exc:
        raise PersistenceError(f"Could not open database {db_path}: {exc}") from exc
    conn.row_factory = sqlite3.Row
    try:
        conn.execute("PRAGMA foreign_keys = ON")
        yield conn
        conn.commit()
    except sqlite3.Error as exc:
        conn.rollback()
        logger.exception("Database call failed on %s", db_path)
        raise PersistenceError(str(exc)) from exc
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def init_db(db_path=DB_PATH_DEFAULT) -> None:
    """
    Create tables if they don't exist yet.
    """
    with connect(db_path) as conn:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS habits (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL,
                description TEXT DEFAULT '',
                frequency_type TEXT NOT NULL DEFAULT 'daily',
                frequency_value INTEGER,
                frequency_days TEXT DEFAULT '',       -- comma-separated 0..6 (Mon..Sun)
                created_at TEXT NOT NULL,
                is_active INTEGER NOT NULL DEFAULT 1,
                target_date TEXT                      -- YYYY-MM-DD
            )
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS habit_logs (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                habit_id INTEGER NOT NULL,
                day TEXT NOT NULL,                  -- YYYY-MM-DD
                status TEXT NOT NULL CHECK (status IN ('completed', 'skipped')),
                created_at TEXT NOT NULL,
                UNIQUE(habit_id, day),
                FOREIGN KEY (habit_id) REFERENCES habits(id) ON DELETE CASCADE
            )
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS milestones (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                title TEXT NOT NULL,
                start_date TEXT NOT NULL,
                end_date TEXT NOT NULL,
                created_at TEXT NOT NULL,
                CHECK (end_date >= start_date)
            )
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS settings (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL
            )
            """
        )


def _to_db(value):
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, (set, frozenset)):
        return days_to_string(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, bool):
        return 1 if value else 0
    return value


def _update_row(conn: sqlite3.Connection, table: str, allowed: set, row_id: int, fields: Dict) -> int:
    unknown = set(fields) - allowed
    if unknown:
        raise ValidationError(f"Cannot update {table} field(s): {', '.join(sorted(unknown))}")
    if not fields:
        return conn.execute(f"SELECT COUNT(*) FROM {table} WHERE id = ?", (row_id,)).fetchone()[0]
    cols = sorted(fields)
    assignments = ", ".join(f"{c} = ?" for c in cols)
    cur = conn.execute(
        f"UPDATE {table} SET {assignments} WHERE id = ?",
        tuple(_to_db(fields[c]) for c in cols) + (row_id,),
    )
    return cur.rowcount


# --- Habit store -------------------------------------------------------------

def _fetch_habit(conn: sqlite3.Connection, habit_id: int) -> Optional[Habit]:
    row = conn.execute(f"SELECT {HABIT_COLUMNS} FROM habits WHERE id = ?", (habit_id,)).fetchone()
    return Habit.from_row(row) if row else None


def _require_habit(conn: sqlite3.Connection, habit_id: int) -> Habit:
    habit = _fetch_habit(conn, habit_id)
    if habit is None:
        raise NotFoundError("habit", habit_id)
    return habit


def list_habits(filter: str = "all", db_path=DB_PATH_DEFAULT) -> List[Habit]:
    """
    Habits ordered most recent first. filter is 'all', 'active' or 'archived'.
    """
    if filter not in HABIT_FILTERS:
        raise ValueError(f"unknown habit filter {filter!r}")
    where = {"all": "", "active": "WHERE is_active = 1", "archived": "WHERE is_active = 0"}[filter]
    with connect(db_path) as conn:
        rows = conn.execute(
            f"SELECT {HABIT_COLUMNS} FROM habits {where} ORDER BY created_at DESC, id DESC"
        ).fetchall()
    return [Habit.from_row(r) for r in rows]


def get_habit(habit_id: int, db_path=DB_PATH_DEFAULT) -> Optional[Habit]:
    with connect(db_path) as conn:
        return _fetch_habit(conn, habit_id)


def create_habit(
    name: str,
    frequency_type: str,
    frequency_value: Optional[int] = None,
    frequency_days=frozenset(),
    target_date: Optional[date] = None,
    description: str = "",
    created_at: Optional[str] = None,
    db_path=DB_PATH_DEFAULT,
) -> Habit:
    with connect(db_path) as conn:
        cur = conn.execute(
            """
            INSERT INTO habits (name, description, frequency_type, frequency_value,
                                frequency_days, created_at, is_active, target_date)
            VALUES (?, ?, ?, ?, ?, ?, 1, ?)
            """,
            (
                name.strip(),
                (description or "").strip(),
                _to_db(frequency_type),
                frequency_value,
                days_to_string(frequency_days or ()),
                created_at or _now_iso(),
                _to_db(target_date),
            ),
        )
        return _fetch_habit(conn, cur.lastrowid)


def update_habit(habit_id: int, fields: Dict, db_path=DB_PATH_DEFAULT) -> Habit:
    with connect(db_path) as conn:
        if not _update_row(conn, "habits", HABIT_UPDATABLE, habit_id, fields):
            raise NotFoundError("habit", habit_id)
        return _fetch_habit(conn, habit_id)


def delete_habit(habit_id: int, db_path=DB_PATH_DEFAULT) -> None:
    """
    Remove the habit and its log entries in one transaction.
    """
    with connect(db_path) as conn:
        conn.execute("DELETE FROM habit_logs WHERE habit_id = ?", (habit_id,))
        cur = conn.execute("DELETE FROM habits WHERE id = ?", (habit_id,))
        if cur.rowcount == 0:
            raise NotFoundError("habit", habit_id)


# --- Log store ---------------------------------------------------------------

def _fetch_log(conn: sqlite3.Connection, habit_id: int, day: date) -> Optional[LogEntry]:
    row = conn.execute(
        "SELECT id, habit_id, day, status FROM habit_logs WHERE habit_id = ? AND day = ?",
        (habit_id, day.isoformat()),
    ).fetchone()
    return LogEntry.from_row(row) if row else None


def get_log(habit_id: int, day: date, db_path=DB_PATH_DEFAULT) -> Optional[LogEntry]:
    with connect(db_path) as conn:
        return _fetch_log(conn, habit_id, day)


def upsert_log(habit_id: int, day: date, status: LogStatus, db_path=DB_PATH_DEFAULT) -> LogEntry:
    """
    Create or update the entry for (habit, day).
    """
    with connect(db_path) as conn:
        _require_habit(conn, habit_id)
        conn.execute(
            """
            INSERT INTO habit_logs (habit_id, day, status, created_at)
            VALUES (?, ?, ?, ?)
            ON CONFLICT(habit_id, day) DO UPDATE SET
                status=excluded.status
            """,
            (habit_id, day.isoformat(), LogStatus(status).value, _now_iso()),
        )
        return _fetch_log(conn, habit_id, day)


def delete_log(log_id: int, db_path=DB_PATH_DEFAULT) -> None:
    with connect(db_path) as conn:
        cur = conn.execute("DELETE FROM habit_logs WHERE id = ?", (log_id,))
        if cur.rowcount == 0:
            raise NotFoundError("log", log_id)


def list_logs(
    habit_id: Optional[int] = None,
    start: Optional[date] = None,
    end: Optional[date] = None,
    db_path=DB_PATH_DEFAULT,
) -> List[LogEntry]:
    """
    Log entries ordered by day, optionally for one habit and within
    start <= day <= end (inclusive).
    """
    clauses, params = [], []
    if habit_id is not None:
        clauses.append("habit_id = ?")
        params.append(habit_id)
    if start is not None:
        clauses.append("day >= ?")
        params.append(start.isoformat())
    if end is not None:
        clauses.append("day <= ?")
        params.append(end.isoformat())
    where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
    with connect(db_path) as conn:
        rows = conn.execute(
            f"SELECT id, habit_id, day, status FROM habit_logs {where} ORDER BY day, habit_id",
            params,
        ).fetchall()
    return [LogEntry.from_row(r) for r in rows]


def apply_log_transition(
    habit_id: int, day: date, transition: Transition, db_path=DB_PATH_DEFAULT
) -> Optional[LogEntry]:
    """
    Read the entry for (habit, day), ask `transition` for the next status and
    write it back, all under one write lock. None means "no entry".
    """
    with connect(db_path) as conn:
        conn.execute("BEGIN IMMEDIATE")
        _require_habit(conn, habit_id)
        current = _fetch_log(conn, habit_id, day)
        target = transition(current.status if current else None)

        if target is None:
            if current is not None:
                conn.execute("DELETE FROM habit_logs WHERE id = ?", (current.id,))
            return None
        if current is None:
            conn.execute(
                "INSERT INTO habit_logs (habit_id, day, status, created_at) VALUES (?, ?, ?, ?)",
                (habit_id, day.isoformat(), LogStatus(target).value, _now_iso()),
            )
        elif current.status != target:
            conn.execute(
                "UPDATE habit_logs SET status = ? WHERE id = ?",
                (LogStatus(target).value, current.id),
            )
        return _fetch_log(conn, habit_id, day)


# --- Milestone store ---------------------------------------------------------

def _fetch_milestone(conn: sqlite3.Connection, milestone_id: int) -> Optional[Milestone]:
    row = conn.execute(
        "SELECT id, title, start_date, end_date FROM milestones WHERE id = ?", (milestone_id,)
    ).fetchone()
    return Milestone.from_row(row) if row else None


def get_milestone(milestone_id: int, db_path=DB_PATH_DEFAULT) -> Optional[Milestone]:
    with connect(db_path) as conn:
        return _fetch_milestone(conn, milestone_id)


def list_milestones(db_path=DB_PATH_DEFAULT) -> List[Milestone]:
    with connect(db_path) as conn:
        rows = conn.execute(
            "SELECT id, title, start_date, end_date FROM milestones ORDER BY start_date DESC, id DESC"
        ).fetchall()
    return [Milestone.from_row(r) for r in rows]


def create_milestone(title: str, start_date: date, end_date: date, db_path=DB_PATH_DEFAULT) -> Milestone:
    with connect(db_path) as conn:
        cur = conn.execute(
            "INSERT INTO milestones (title, start_date, end_date, created_at) VALUES (?, ?, ?, ?)",
            (title.strip(), start_date.isoformat(), end_date.isoformat(), _now_iso()),
        )
        return _fetch_milestone(conn, cur.lastrowid)


def update_milestone(milestone_id: int, fields: Dict, db_path=DB_PATH_DEFAULT) -> Milestone:
    with connect(db_path) as conn:
        if not _update_row(conn, "milestones", MILESTONE_UPDATABLE, milestone_id, fields):
            raise NotFoundError("milestone", milestone_id)
        return _fetch_milestone(conn, milestone_id)


def delete_milestone(milestone_id: int, db_path=DB_PATH_DEFAULT) -> None:
    with connect(db_path) as conn:
        cur = conn.execute("DELETE FROM milestones WHERE id = ?", (milestone_id,))
        if cur.rowcount == 0:
            raise NotFoundError("milestone", milestone_id)


# --- Settings ----------------------------------------------------------------

def get_setting(key: str, default: str = "", db_path=DB_PATH_DEFAULT) -> str:
    with connect(db_path) as conn:
        row = conn.execute("SELECT value FROM settings WHERE key = ?", (key,)).fetchone()
    return str(row["value"]) if row else default


def set_setting(key: str, value: str, db_path=DB_PATH_DEFAULT) -> None:
    with connect(db_path) as conn:
        conn.execute(
            """
            INSERT INTO settings (key, value) VALUES (?, ?)
            ON CONFLICT(key) DO UPDATE SET value=excluded.value
            """,
            (key, str(value)),
        )
