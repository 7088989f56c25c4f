"""
SQLite layer for the habit tracker.

The app keeps a tiny schema on disk so data survives restarts. The store
hands over the full habit list after every change and `save` rewrites it in
one transaction, so the file always holds a complete snapshot.
"""

from __future__ import annotations

import logging
import os
import sqlite3
from contextlib import contextmanager
from datetime import date, datetime
from typing import Dict, List, Optional, Sequence

from .models import Habit, HabitError, ReminderTime, StorageError

logger = logging.getLogger(__name__)

DB_PATH_DEFAULT = os.path.join("data", "habits.db")


def _ensure_parent_dir(path: str) -> None:
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)


@contextmanager
def connect(db_path: str = DB_PATH_DEFAULT):
    _ensure_parent_dir(db_path)
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    try:
        yield conn
        conn.commit()
    finally:
        conn.close()


def init_db(db_path: str = DB_PATH_DEFAULT) -> None:
    """
    Create tables if they don't exist yet.
    """
    with connect(db_path) as conn:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS habits (
                id TEXT PRIMARY KEY,
                position INTEGER NOT NULL,           -- creation order
                name TEXT NOT NULL,
                emoji TEXT NOT NULL,
                color TEXT NOT NULL,
                created_at TEXT NOT NULL,
                reminder_time TEXT                   -- HH:MM or NULL
            )
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS completions (
                habit_id TEXT NOT NULL,
                day TEXT NOT NULL,                   -- YYYY-MM-DD
                UNIQUE(habit_id, day),
                FOREIGN KEY (habit_id) REFERENCES habits(id) ON DELETE CASCADE
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


def _row_to_habit(row: sqlite3.Row, days: List[date]) -> Habit:
    reminder = row["reminder_time"]
    return Habit(
        id=row["id"],
        name=row["name"],
        emoji=row["emoji"],
        color=row["color"],
        created_at=datetime.fromisoformat(row["created_at"]),
        completed_dates=tuple(days),
        reminder_time=ReminderTime.parse(reminder) if reminder else None,
    )


class SqliteHabitStorage:
    """Durable store backed by a single SQLite file."""

    def __init__(self, db_path: str = DB_PATH_DEFAULT):
        self.db_path = db_path
        init_db(db_path)

    def load(self) -> List[Habit]:
        try:
            with connect(self.db_path) as conn:
                rows = conn.execute(
                    "SELECT id, name, emoji, color, created_at, reminder_time FROM habits ORDER BY position"
                ).fetchall()
                done = conn.execute("SELECT habit_id, day FROM completions ORDER BY day").fetchall()
        except (sqlite3.Error, OSError) as e:
            raise StorageError(f"Could not read {self.db_path}: {e}") from e

        try:
            days: Dict[str, List[date]] = {}
            for c in done:
                days.setdefault(c["habit_id"], []).append(date.fromisoformat(c["day"]))
            return [_row_to_habit(r, days.get(r["id"], [])) for r in rows]
        except (ValueError, HabitError) as e:
            raise StorageError(f"Corrupt habit data in {self.db_path}: {e}") from e

    def save(self, habits: Sequence[Habit]) -> None:
        try:
            with connect(self.db_path) as conn:
                conn.execute("DELETE FROM completions")
                conn.execute("DELETE FROM habits")
                conn.executemany(
                    """
                    INSERT INTO habits (id, position, name, emoji, color, created_at, reminder_time)
                    VALUES (?, ?, ?, ?, ?, ?, ?)
                    """,
                    [
                        (
                            h.id,
                            pos,
                            h.name,
                            h.emoji,
                            h.color,
                            h.created_at.isoformat(timespec="seconds"),
                            str(h.reminder_time) if h.reminder_time else None,
                        )
                        for pos, h in enumerate(habits)
                    ],
                )
                conn.executemany(
                    "INSERT INTO completions (habit_id, day) VALUES (?, ?)",
                    [(h.id, d.isoformat()) for h in habits for d in h.completed_dates],
                )
        except (sqlite3.Error, OSError) as e:
            raise StorageError(f"Could not write {self.db_path}: {e}") from e
        logger.debug("Saved %d habit(s) to %s", len(habits), self.db_path)

    # --- Settings ------------------------------------------------------------

    def get_setting(self, key: str, default: str = "") -> str:
        with connect(self.db_path) as conn:
            row = conn.execute("SELECT value FROM settings WHERE key = ?", (key,)).fetchone()
        return str(row["value"]) if row else default

    def set_setting(self, key: str, value: str) -> None:
        with connect(self.db_path) as conn:
            conn.execute(
                """
                INSERT INTO settings (key, value) VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET value=excluded.value
                """,
                (key, str(value)),
            )


class MemoryStorage:
    """
    In-process stand-in for SqliteHabitStorage (tests, throwaway sessions).
    """

    def __init__(self, habits: Optional[Sequence[Habit]] = None):
        self.habits: List[Habit] = list(habits or [])
        self.settings: Dict[str, str] = {}
        self.saves = 0

    def load(self) -> List[Habit]:
        return list(self.habits)

    def save(self, habits: Sequence[Habit]) -> None:
        self.habits = list(habits)
        self.saves += 1

    def get_setting(self, key: str, default: str = "") -> str:
        return self.settings.get(key, default)

    def set_setting(self, key: str, value: str) -> None:
        self.settings[key] = str(value)
