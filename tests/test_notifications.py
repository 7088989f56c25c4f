from habit_streaks import notifications
from habit_streaks.notifications import DesktopNotifier


class FakePlyer:
    def __init__(self, error=None):
        self.calls = []
        self.error = error

    def notify(self, **kwargs):
        if self.error:
            raise self.error
        self.calls.append(kwargs)


def test_notify_passes_app_name(monkeypatch):
    fake = FakePlyer()
    monkeypatch.setattr(notifications, "plyer_notify", fake)

    assert DesktopNotifier(app_name="Streaks").notify("Time for: Walk", "Go")
    assert fake.calls == [{"title": "Time for: Walk", "message": "Go", "app_name": "Streaks", "timeout": 10}]


def test_unsupported_platform(monkeypatch):
    monkeypatch.setattr(notifications, "plyer_notify", FakePlyer(NotImplementedError()))
    assert DesktopNotifier().notify("Time for: Walk", "Go") is False
