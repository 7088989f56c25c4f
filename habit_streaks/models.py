"""
Habit records and the error types shared by the store and the UI.

A Habit is an immutable snapshot. The store swaps in a new snapshot on every
change, so the pages can hold on to whatever list they rendered.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Iterable, NamedTuple, Optional, Tuple, Union

EMOJIS = ["✨", "💪", "📚", "🏃", "🧘", "💧", "🎯", "✍️", "🌱", "🎨", "🎵", "🍎"]
COLORS = ["#0ea5e9", "#8b5cf6", "#ec4899", "#f59e0b", "#10b981", "#ef4444", "#06b6d4", "#6366f1"]

DEFAULT_EMOJI = EMOJIS[0]
DEFAULT_COLOR = COLORS[0]
DEFAULT_REMINDER = "09:00"

_HHMM = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*$")


class HabitError(Exception):
    """Base class for errors raised by the habit core."""


class ValidationError(HabitError):
    """Bad user input; nothing was changed."""


class NotFoundError(HabitError):
    """A habit id that the store does not know (usually a stale page)."""

    def __init__(self, habit_id: str):
        super().__init__(f"Unknown habit: {habit_id}")
        self.habit_id = habit_id


class StorageError(HabitError):
    """The durable store could not be read or written."""


class ReminderTime(NamedTuple):
    hour: int
    minute: int

    @classmethod
    def parse(cls, text: str) -> "ReminderTime":
        """
        '07:30' -> ReminderTime(7, 30). Raises ValidationError otherwise.
        """
        m = _HHMM.match(text or "")
        if not m:
            raise ValidationError(f"Reminder time must look like HH:MM, got {text!r}")
        hour, minute = int(m.group(1)), int(m.group(2))
        if not (0 <= hour <= 23 and 0 <= minute <= 59):
            raise ValidationError(f"Reminder time out of range: {text!r}")
        return cls(hour, minute)

    def __str__(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"


ReminderInput = Union[ReminderTime, str, None]


def coerce_reminder(value: ReminderInput) -> Optional[ReminderTime]:
    if value is None or isinstance(value, ReminderTime):
        return value
    if not str(value).strip():
        return None
    return ReminderTime.parse(str(value))


def normalize_dates(days: Iterable[date]) -> Tuple[date, ...]:
    return tuple(sorted(set(days)))


@dataclass(frozen=True)
class Habit:
    id: str
    name: str
    emoji: str = DEFAULT_EMOJI
    color: str = DEFAULT_COLOR
    created_at: datetime = field(default_factory=lambda: datetime.now().replace(microsecond=0))
    completed_dates: Tuple[date, ...] = ()
    reminder_time: Optional[ReminderTime] = None

    def __post_init__(self):
        # keep the set invariant even for records coming back from storage
        object.__setattr__(self, "completed_dates", normalize_dates(self.completed_dates))

    def is_completed_on(self, day: date) -> bool:
        return day in self.completed_dates

    def with_day_toggled(self, day: date) -> "Habit":
        if day in self.completed_dates:
            days = [d for d in self.completed_dates if d != day]
        else:
            days = [*self.completed_dates, day]
        return replace(self, completed_dates=normalize_dates(days))

    def with_reminder(self, reminder_time: Optional[ReminderTime]) -> "Habit":
        return replace(self, reminder_time=reminder_time)


def validate_fields(name: str, emoji: str, color: str) -> Tuple[str, str, str]:
    """
    Strip and check the user-entered fields of a new habit.
    """
    name = (name or "").strip()
    if not name:
        raise ValidationError("Please enter a name.")
    emoji = (emoji or "").strip()
    if not emoji:
        raise ValidationError("Please pick an emoji.")
    color = (color or "").strip()
    if not color:
        raise ValidationError("Please pick a color.")
    return name, emoji, color
