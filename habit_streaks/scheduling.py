"""
Scheduling facility used by the reminder scheduler.

Timers are one-shot APScheduler "date" jobs; cancelling a timer removes the
job. Whether notifications may be shown is a user decision kept in the
settings table, mirroring a browser's notification permission:
undetermined until asked, then granted or denied.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable, Protocol

from apscheduler.job import Job
from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.base import BaseScheduler

logger = logging.getLogger(__name__)

PERMISSION_KEY = "notification_permission"


class AuthorizationStatus(Enum):
    GRANTED = "granted"
    DENIED = "denied"
    UNDETERMINED = "undetermined"


class SettingsBackend(Protocol):
    def get_setting(self, key: str, default: str = "") -> str: ...

    def set_setting(self, key: str, value: str) -> None: ...


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class NotificationPermissions:
    """
    Persisted notification permission.

    With `enabled=False` (HABITS_NOTIFICATIONS=false) every query answers
    denied and requests never grant.
    """

    def __init__(self, settings: SettingsBackend, enabled: bool = True):
        self._settings = settings
        self.enabled = enabled

    def status(self) -> AuthorizationStatus:
        if not self.enabled:
            return AuthorizationStatus.DENIED
        raw = self._settings.get_setting(PERMISSION_KEY, AuthorizationStatus.UNDETERMINED.value)
        try:
            return AuthorizationStatus(raw)
        except ValueError:
            logger.warning("Ignoring unknown notification permission %r", raw)
            return AuthorizationStatus.UNDETERMINED

    def set_status(self, status: AuthorizationStatus) -> None:
        self._settings.set_setting(PERMISSION_KEY, status.value)
        logger.info("Notification permission is now %s", status.value)

    def request(self) -> "Future[AuthorizationStatus]":
        """
        Ask for permission. Only an undetermined status changes; a previous
        answer is returned as is.
        """
        result: "Future[AuthorizationStatus]" = Future()
        current = self.status()
        if current is AuthorizationStatus.UNDETERMINED:
            current = AuthorizationStatus.GRANTED if self.enabled else AuthorizationStatus.DENIED
            self.set_status(current)
        result.set_result(current)
        return result


class JobHandle:
    def __init__(self, job: Job):
        self.job = job

    def cancel(self) -> None:
        try:
            self.job.remove()
        except JobLookupError:
            logger.debug("Job %s already ran or was removed", self.job.id)


class ApschedulerFacility:
    def __init__(self, scheduler: BaseScheduler, permissions: NotificationPermissions):
        self.scheduler = scheduler
        self.permissions = permissions

    def start(self) -> None:
        if not self.scheduler.running:
            self.scheduler.start()
            logger.info("Reminder scheduler started")

    def shutdown(self) -> None:
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            logger.info("Reminder scheduler stopped")

    def after(self, delay: timedelta, callback: Callable[[], None]) -> JobHandle:
        run_date = datetime.now() + max(delay, timedelta(0))
        job = self.scheduler.add_job(
            callback,
            "date",
            run_date=run_date,
            misfire_grace_time=None,  # late jobs still run after sleep
            coalesce=True,
        )
        return JobHandle(job)

    def query_authorization(self) -> AuthorizationStatus:
        return self.permissions.status()

    def request_authorization(self) -> "Future[AuthorizationStatus]":
        return self.permissions.request()
