import dataclasses
import logging
from datetime import timedelta

import pytest

from habit_streaks import Habit, HabitStore, MemoryStorage, NotFoundError, ReminderTime, StorageError, ValidationError

from .helpers import TODAY


class FlakyStorage(MemoryStorage):
    def __init__(self):
        super().__init__()
        self.broken = True

    def save(self, habits):
        if self.broken:
            raise StorageError("disk full")
        super().save(habits)


def test_create_assigns_id_and_empty_history(store, storage):
    habit = store.create("  Read 10 pages ", "📚", "#8b5cf6", "07:30")

    assert habit.id
    assert habit.name == "Read 10 pages"
    assert habit.completed_dates == ()
    assert habit.reminder_time == ReminderTime(7, 30)
    assert storage.habits == [habit]


def test_create_uses_defaults_and_unique_ids(store):
    a = store.create("Walk")
    b = store.create("Walk")

    assert a.id != b.id
    assert a.emoji == "✨"
    assert a.color == "#0ea5e9"
    assert a.reminder_time is None


@pytest.mark.parametrize("name", ["", "   ", "\t\n"])
def test_create_rejects_blank_name(store, storage, name):
    with pytest.raises(ValidationError):
        store.create(name, "✨", "#0ea5e9")
    assert store.list() == []
    assert storage.saves == 0


def test_create_rejects_bad_reminder(store):
    with pytest.raises(ValidationError):
        store.create("Stretch", reminder_time="25:00")
    assert store.list() == []


def test_list_keeps_creation_order(store):
    names = ["Walk", "Read", "Meditate"]
    for n in names:
        store.create(n)
    assert [h.name for h in store.list()] == names


def test_toggle_today_marks_and_unmarks(store, storage):
    habit = store.create("Water")

    done = store.toggle_today(habit.id)
    assert done.completed_dates == (TODAY,)
    assert storage.habits[0].completed_dates == (TODAY,)

    undone = store.toggle_today(habit.id)
    assert undone.completed_dates == ()


def test_toggle_twice_restores_existing_history():
    history = (TODAY - timedelta(days=3), TODAY - timedelta(days=1))
    habit = Habit(id="j1", name="Journal", completed_dates=history)
    store = HabitStore(MemoryStorage([habit]), today=lambda: TODAY)
    store.load()

    store.toggle_today(habit.id)
    assert store.get(habit.id).completed_dates == history + (TODAY,)
    store.toggle_today(habit.id)
    assert store.get(habit.id).completed_dates == history


def test_toggle_only_touches_one_habit(store):
    a = store.create("A")
    b = store.create("B")
    store.toggle_today(a.id)
    assert store.get(b.id).completed_dates == ()


def test_toggle_unknown_id(store, caplog):
    store.create("Walk")
    before = store.list()

    with caplog.at_level(logging.WARNING, logger="habit_streaks.store"):
        with pytest.raises(NotFoundError) as exc:
            store.toggle_today("nope")

    assert exc.value.habit_id == "nope"
    assert "nope" in caplog.text
    assert store.list() == before


def test_delete_unknown_id_leaves_store_unchanged(store, storage):
    store.create("Walk")
    before = store.list()
    saves = storage.saves

    with pytest.raises(NotFoundError):
        store.delete("missing")

    assert store.list() == before
    assert storage.saves == saves


def test_delete_last_habit_is_persisted(store, storage):
    habit = store.create("Walk")
    store.delete(habit.id)

    assert store.list() == []
    assert storage.habits == []
    assert store.find(habit.id) is None
    with pytest.raises(NotFoundError):
        store.get(habit.id)


def test_set_and_clear_reminder(store):
    habit = store.create("Stretch")

    updated = store.set_reminder(habit.id, "18:05")
    assert updated.reminder_time == ReminderTime(18, 5)

    cleared = store.set_reminder(habit.id, None)
    assert cleared.reminder_time is None


def test_snapshots_are_immutable(store):
    habit = store.create("Walk")
    with pytest.raises(dataclasses.FrozenInstanceError):
        habit.name = "Run"
    store.list().clear()
    assert len(store.list()) == 1


def test_completed_today_count(store):
    a = store.create("A")
    store.create("B")
    store.toggle_today(a.id)
    assert store.completed_today_count() == 1


def test_listeners_see_every_change(store):
    seen = []
    store.subscribe(lambda habits: seen.append([h.name for h in habits]))

    habit = store.create("Walk")
    store.create("Read")
    store.delete(habit.id)

    assert seen == [["Walk"], ["Walk", "Read"], ["Read"]]


def test_failed_save_is_not_fatal_and_retried():
    storage = FlakyStorage()
    store = HabitStore(storage, today=lambda: TODAY)

    habit = store.create("Walk")
    assert store.list() == [habit]
    assert store.dirty
    assert storage.habits == []

    storage.broken = False
    store.toggle_today(habit.id)
    assert not store.dirty
    assert [h.id for h in storage.habits] == [habit.id]


def test_flush_retries_pending_write():
    storage = FlakyStorage()
    store = HabitStore(storage, today=lambda: TODAY)
    store.create("Walk")

    assert store.flush() is False
    storage.broken = False
    assert store.flush() is True
    assert len(storage.habits) == 1


def test_load_replaces_collection(storage):
    first = HabitStore(storage, today=lambda: TODAY)
    habit = first.create("Walk")
    first.toggle_today(habit.id)

    second = HabitStore(storage, today=lambda: TODAY)
    assert second.load() == first.list()


def test_load_notifies_listeners(storage):
    storage.save([Habit(id="a", name="Walk"), Habit(id="b", name="Read")])
    store = HabitStore(storage, today=lambda: TODAY)
    seen = []
    store.subscribe(lambda habits: seen.append([h.id for h in habits]))

    store.load()

    assert seen == [["a", "b"]]


def test_failing_listener_does_not_undo_change(store, storage, caplog):
    def broken(habits):
        raise RuntimeError("scheduler is gone")

    seen = []
    store.subscribe(broken)
    store.subscribe(lambda habits: seen.append(len(habits)))

    with caplog.at_level(logging.ERROR, logger="habit_streaks.store"):
        habit = store.create("Walk")

    assert store.get(habit.id) == habit
    assert storage.habits == [habit]
    assert seen == [1]
    assert "scheduler is gone" in caplog.text
