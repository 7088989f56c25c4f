"""
The habit store: the single owner of all habit records.

Every mutation replaces one snapshot, persists the whole list and then tells
subscribers (the reminder scheduler) what the collection looks like now.
A failed write is logged and retried on the next change; the in-memory list
stays authoritative in the meantime.
"""

from __future__ import annotations

import logging
import threading
from datetime import date, datetime
from typing import Callable, List, Optional, Protocol, Sequence
from uuid import uuid4

from .models import (
    DEFAULT_COLOR,
    DEFAULT_EMOJI,
    Habit,
    NotFoundError,
    ReminderInput,
    StorageError,
    coerce_reminder,
    validate_fields,
)

logger = logging.getLogger(__name__)

Listener = Callable[[List[Habit]], None]


class HabitStorage(Protocol):
    def load(self) -> List[Habit]: ...

    def save(self, habits: Sequence[Habit]) -> None: ...


class HabitStore:
    def __init__(self, storage: HabitStorage, today: Callable[[], date] = date.today):
        self._storage = storage
        self._today = today
        self._lock = threading.RLock()
        self._habits: List[Habit] = []
        self._listeners: List[Listener] = []
        self._dirty = False

    # --- Lifecycle -----------------------------------------------------------

    def load(self) -> List[Habit]:
        with self._lock:
            self._habits = list(self._storage.load())
            self._dirty = False
            logger.info("Loaded %d habit(s)", len(self._habits))
            self._notify()
            return list(self._habits)

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    @property
    def dirty(self) -> bool:
        """True while the last write to storage has not gone through."""
        return self._dirty

    def flush(self) -> bool:
        with self._lock:
            return self._persist()

    # --- Queries -------------------------------------------------------------

    def list(self) -> List[Habit]:
        with self._lock:
            return list(self._habits)

    def find(self, habit_id: str) -> Optional[Habit]:
        with self._lock:
            for h in self._habits:
                if h.id == habit_id:
                    return h
            return None

    def get(self, habit_id: str) -> Habit:
        with self._lock:
            return self._habits[self._index_of(habit_id)]

    def completed_today_count(self) -> int:
        today = self._today()
        return sum(1 for h in self.list() if h.is_completed_on(today))

    # --- Mutations -----------------------------------------------------------

    def create(
        self,
        name: str,
        emoji: str = DEFAULT_EMOJI,
        color: str = DEFAULT_COLOR,
        reminder_time: ReminderInput = None,
    ) -> Habit:
        name, emoji, color = validate_fields(name, emoji, color)
        habit = Habit(
            id=uuid4().hex,
            name=name,
            emoji=emoji,
            color=color,
            created_at=datetime.now().replace(microsecond=0),
            reminder_time=coerce_reminder(reminder_time),
        )
        with self._lock:
            self._habits.append(habit)
            self._changed()
        logger.info("Created habit %s (%s)", habit.id, habit.name)
        return habit

    def toggle_today(self, habit_id: str) -> Habit:
        today = self._today()
        with self._lock:
            idx = self._index_of(habit_id)
            habit = self._habits[idx].with_day_toggled(today)
            self._habits[idx] = habit
            self._changed()
        logger.info(
            "Habit %s %s for %s",
            habit_id,
            "completed" if habit.is_completed_on(today) else "reopened",
            today.isoformat(),
        )
        return habit

    def set_reminder(self, habit_id: str, reminder_time: ReminderInput) -> Habit:
        reminder = coerce_reminder(reminder_time)
        with self._lock:
            idx = self._index_of(habit_id)
            habit = self._habits[idx].with_reminder(reminder)
            self._habits[idx] = habit
            self._changed()
        logger.info("Habit %s reminder set to %s", habit_id, reminder or "none")
        return habit

    def delete(self, habit_id: str) -> None:
        with self._lock:
            idx = self._index_of(habit_id)
            del self._habits[idx]
            self._changed()
        logger.info("Deleted habit %s", habit_id)

    # --- Internals -----------------------------------------------------------

    def _index_of(self, habit_id: str) -> int:
        for i, h in enumerate(self._habits):
            if h.id == habit_id:
                return i
        logger.warning("Habit %s not found (stale reference?)", habit_id)
        raise NotFoundError(habit_id)

    def _persist(self) -> bool:
        try:
            self._storage.save(list(self._habits))
        except StorageError as e:
            self._dirty = True
            logger.warning("Could not save habits, will retry on next change: %s", e)
            return False
        self._dirty = False
        return True

    def _changed(self) -> None:
        self._persist()
        self._notify()

    def _notify(self) -> None:
        snapshot = list(self._habits)
        for listener in self._listeners:
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Habit listener %r failed", listener)
