from datetime import datetime, timedelta

import pytest

from habit_streaks import HabitStore, MemoryStorage
from habit_streaks.reminders import ReminderScheduler
from habit_streaks.scheduling import AuthorizationStatus

from .helpers import TODAY


class Clock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class FakeHandle:
    def __init__(self, delay, callback):
        self.delay = delay
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class FakeFacility:
    """Keeps timers in a list; tests fire them by hand."""

    def __init__(self):
        self.timers = []
        self.status = AuthorizationStatus.GRANTED

    def after(self, delay, callback):
        handle = FakeHandle(delay, callback)
        self.timers.append(handle)
        return handle

    def active(self):
        return [t for t in self.timers if not t.cancelled]

    def query_authorization(self):
        return self.status


class RecordingNotifier:
    def __init__(self):
        self.sent = []

    def notify(self, title, message):
        self.sent.append((title, message))
        return True


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def store(storage):
    return HabitStore(storage, today=lambda: TODAY)


@pytest.fixture
def clock():
    return Clock(datetime(2026, 2, 7, 8, 0))


@pytest.fixture
def facility():
    return FakeFacility()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def reminders(facility, notifier, clock):
    return ReminderScheduler(facility, notifier, now=clock)
