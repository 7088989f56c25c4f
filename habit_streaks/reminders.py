"""
Daily habit reminders.

The scheduler keeps at most one pending timer per habit. Whenever the store
changes, `reconcile` compares the habits that want a reminder with the timers
already pending and only touches the difference. When a timer fires, the
habit is looked up again (it may have been deleted in the meantime), the
notification is shown if permission is granted, and the next day's timer is
registered.

Per habit:  Unscheduled -> Pending(at) -> Fired -> Pending(at + 1 day)
            and back to Unscheduled when the reminder is cleared or the
            habit is deleted.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable, Dict, Iterable, Optional, Protocol

from .models import Habit, ReminderTime
from .scheduling import AuthorizationStatus, TimerHandle

logger = logging.getLogger(__name__)

REMINDER_BODY = "Don't forget to complete your habit today!"


class SchedulingFacility(Protocol):
    def after(self, delay: timedelta, callback: Callable[[], None]) -> TimerHandle: ...

    def query_authorization(self) -> AuthorizationStatus: ...


class Notifier(Protocol):
    def notify(self, title: str, message: str) -> bool: ...


class ReminderState(Enum):
    UNSCHEDULED = "unscheduled"
    PENDING = "pending"


@dataclass
class PendingReminder:
    habit_id: str
    reminder_time: ReminderTime
    fire_at: datetime
    handle: Optional[TimerHandle] = None


def next_fire_at(reminder_time: ReminderTime, now: datetime) -> datetime:
    """
    Today at the reminder time, or tomorrow if that moment has passed.
    """
    at = now.replace(hour=reminder_time.hour, minute=reminder_time.minute, second=0, microsecond=0)
    if at < now:
        at += timedelta(days=1)
    return at


def reminder_title(habit: Habit) -> str:
    return f"{habit.emoji} Time for: {habit.name}"


class ReminderScheduler:
    def __init__(
        self,
        facility: SchedulingFacility,
        notifier: Notifier,
        now: Callable[[], datetime] = datetime.now,
    ):
        self._facility = facility
        self._notifier = notifier
        self._now = now
        self._lock = threading.RLock()
        self._known: Dict[str, Habit] = {}
        self._pending: Dict[str, PendingReminder] = {}
        self._last_fired: Dict[str, datetime] = {}

    def attach(self, store) -> None:
        """
        Follow a HabitStore: reconcile now and after every change.
        """
        store.subscribe(self.reconcile)
        self.reconcile(store.list())

    def state_of(self, habit_id: str) -> ReminderState:
        with self._lock:
            if habit_id in self._pending:
                return ReminderState.PENDING
            return ReminderState.UNSCHEDULED

    def last_fired(self, habit_id: str) -> Optional[datetime]:
        with self._lock:
            return self._last_fired.get(habit_id)

    def pending(self) -> Dict[str, datetime]:
        with self._lock:
            return {habit_id: p.fire_at for habit_id, p in self._pending.items()}

    def reconcile(self, habits: Iterable[Habit]) -> None:
        with self._lock:
            self._known = {h.id: h for h in habits}
            wanted = {h.id: h.reminder_time for h in self._known.values() if h.reminder_time}
            self._last_fired = {k: v for k, v in self._last_fired.items() if k in wanted}

            for habit_id, entry in list(self._pending.items()):
                if wanted.get(habit_id) != entry.reminder_time:
                    self._cancel(habit_id)

            now = self._now()
            for habit_id, reminder in wanted.items():
                if habit_id not in self._pending:
                    self._schedule(habit_id, reminder, next_fire_at(reminder, now))

    def shutdown(self) -> None:
        with self._lock:
            for habit_id in list(self._pending):
                self._cancel(habit_id)

    # --- Internals -----------------------------------------------------------

    def _schedule(self, habit_id: str, reminder: ReminderTime, fire_at: datetime) -> None:
        entry = PendingReminder(habit_id=habit_id, reminder_time=reminder, fire_at=fire_at)
        entry.handle = self._facility.after(fire_at - self._now(), lambda: self._fire(entry))
        self._pending[habit_id] = entry
        logger.debug("Reminder for %s scheduled at %s", habit_id, fire_at.isoformat(timespec="minutes"))

    def _cancel(self, habit_id: str) -> None:
        entry = self._pending.pop(habit_id)
        if entry.handle is not None:
            entry.handle.cancel()
        logger.debug("Reminder for %s cancelled", habit_id)

    def _fire(self, entry: PendingReminder) -> None:
        with self._lock:
            if self._pending.get(entry.habit_id) is not entry:
                logger.debug("Ignoring superseded reminder for %s", entry.habit_id)
                return
            del self._pending[entry.habit_id]

            habit = self._known.get(entry.habit_id)
            if habit is None or habit.reminder_time is None:
                logger.debug("Habit %s is gone, reminder dropped", entry.habit_id)
                return

            self._last_fired[habit.id] = entry.fire_at
            now = self._now()
            next_at = entry.fire_at + timedelta(days=1)
            if habit.reminder_time != entry.reminder_time or next_at < now:
                next_at = next_fire_at(habit.reminder_time, now)
            self._schedule(habit.id, habit.reminder_time, next_at)

        self._deliver(habit)

    def _deliver(self, habit: Habit) -> bool:
        status = self._facility.query_authorization()
        if status is not AuthorizationStatus.GRANTED:
            logger.info("Reminder for %s not shown, notifications %s", habit.id, status.value)
            return False
        try:
            return self._notifier.notify(reminder_title(habit), REMINDER_BODY)
        except Exception:
            logger.exception("Could not deliver reminder for %s", habit.id)
            return False
