"""
Desktop notification delivery (plyer).
"""

from __future__ import annotations

import logging

from plyer import notification as plyer_notify

logger = logging.getLogger(__name__)


class DesktopNotifier:
    def __init__(self, app_name: str = "Habit Tracker", timeout: int = 10):
        self.app_name = app_name
        self.timeout = timeout

    def notify(self, title: str, message: str) -> bool:
        try:
            plyer_notify.notify(title=title, message=message, app_name=self.app_name, timeout=self.timeout)
        except NotImplementedError:
            # plyer has no backend for this platform
            logger.warning("Desktop notifications are not supported here: %s", title)
            return False
        logger.info("Notified: %s", title)
        return True
