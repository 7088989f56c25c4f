"""
Puts the pieces together for the app: SQLite storage, the habit store, the
APScheduler-backed facility and the reminder scheduler following the store.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future

from apscheduler.schedulers.background import BackgroundScheduler

from .config import AppConfig
from .db import SqliteHabitStorage
from .notifications import DesktopNotifier
from .reminders import ReminderScheduler
from .scheduling import ApschedulerFacility, AuthorizationStatus, NotificationPermissions
from .store import HabitStore

logger = logging.getLogger(__name__)


class HabitTracker:
    def __init__(self, store: HabitStore, facility: ApschedulerFacility, reminders: ReminderScheduler):
        self.store = store
        self.facility = facility
        self.reminders = reminders

    @classmethod
    def from_config(cls, config: AppConfig) -> "HabitTracker":
        storage = SqliteHabitStorage(config.db_path)
        store = HabitStore(storage)
        store.load()

        permissions = NotificationPermissions(storage, enabled=config.notifications_enabled)
        facility = ApschedulerFacility(BackgroundScheduler(), permissions)
        reminders = ReminderScheduler(facility, DesktopNotifier(app_name=config.app_name))

        facility.start()
        reminders.attach(store)
        logger.info("Tracker ready with %d habit(s) from %s", len(store.list()), config.db_path)
        return cls(store, facility, reminders)

    def notification_status(self) -> AuthorizationStatus:
        return self.facility.query_authorization()

    def request_notifications(self) -> "Future[AuthorizationStatus]":
        return self.facility.request_authorization()

    def close(self) -> None:
        self.reminders.shutdown()
        self.facility.shutdown()
        if self.store.dirty:
            self.store.flush()
