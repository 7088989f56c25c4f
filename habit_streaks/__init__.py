from .db import MemoryStorage, SqliteHabitStorage, init_db
from .models import Habit, HabitError, NotFoundError, ReminderTime, StorageError, ValidationError
from .store import HabitStore

__all__ = [
    "Habit",
    "HabitError",
    "HabitStore",
    "MemoryStorage",
    "NotFoundError",
    "ReminderTime",
    "SqliteHabitStorage",
    "StorageError",
    "ValidationError",
    "init_db",
]
