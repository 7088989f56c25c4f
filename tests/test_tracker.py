from habit_streaks.config import AppConfig
from habit_streaks.scheduling import AuthorizationStatus
from habit_streaks.tracker import HabitTracker


def test_tracker_wires_store_and_reminders(tmp_path):
    config = AppConfig(db_path=str(tmp_path / "habits.db"))
    tracker = HabitTracker.from_config(config)
    try:
        habit = tracker.store.create("Walk", reminder_time="09:00")
        assert list(tracker.reminders.pending()) == [habit.id]
        assert len(tracker.facility.scheduler.get_jobs()) == 1

        tracker.store.delete(habit.id)
        assert tracker.reminders.pending() == {}
        assert tracker.facility.scheduler.get_jobs() == []

        assert tracker.notification_status() is AuthorizationStatus.UNDETERMINED
        assert tracker.request_notifications().result() is AuthorizationStatus.GRANTED
    finally:
        tracker.close()

    assert not tracker.facility.scheduler.running


def test_tracker_reloads_and_reschedules(tmp_path):
    config = AppConfig(db_path=str(tmp_path / "habits.db"), notifications_enabled=False)
    first = HabitTracker.from_config(config)
    habit = first.store.create("Read", reminder_time="21:30")
    first.close()

    second = HabitTracker.from_config(config)
    try:
        assert [h.id for h in second.store.list()] == [habit.id]
        assert list(second.reminders.pending()) == [habit.id]
        assert second.notification_status() is AuthorizationStatus.DENIED
    finally:
        second.close()
