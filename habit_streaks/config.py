"""
Configuration from environment variables (and an optional .env file).
"""

from __future__ import annotations

import logging.config
import os
import sys
from dataclasses import dataclass
from typing import Any, Dict

from dotenv import load_dotenv

from .db import DB_PATH_DEFAULT

load_dotenv()

_TRUTHY = {"1", "true", "yes", "on"}


def _env_flag(key: str, default: str) -> bool:
    return os.getenv(key, default).strip().lower() in _TRUTHY


@dataclass
class AppConfig:
    db_path: str = DB_PATH_DEFAULT
    log_level: str = "INFO"
    log_file: str = ""
    notifications_enabled: bool = True
    app_name: str = "Habit Tracker"

    @classmethod
    def from_env(cls) -> "AppConfig":
        return cls(
            db_path=os.getenv("HABITS_DB_PATH", DB_PATH_DEFAULT),
            log_level=os.getenv("HABITS_LOG_LEVEL", "INFO").upper(),
            log_file=os.getenv("HABITS_LOG_FILE", ""),
            notifications_enabled=_env_flag("HABITS_NOTIFICATIONS", "true"),
            app_name=os.getenv("HABITS_APP_NAME", "Habit Tracker"),
        )

    def get_logging_config(self) -> Dict[str, Any]:
        handlers = ["console"]
        handler_defs: Dict[str, Any] = {
            "console": {
                "class": "logging.StreamHandler",
                "level": self.log_level,
                "formatter": "default",
                "stream": sys.stdout,
            }
        }
        if self.log_file:
            log_dir = os.path.dirname(self.log_file)
            if log_dir:
                os.makedirs(log_dir, exist_ok=True)
            handlers.append("file")
            handler_defs["file"] = {
                "class": "logging.handlers.RotatingFileHandler",
                "level": self.log_level,
                "formatter": "default",
                "filename": self.log_file,
                "maxBytes": 10485760,  # 10MB
                "backupCount": 5,
                "encoding": "utf-8",
            }

        return {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
                    "datefmt": "%Y-%m-%d %H:%M:%S",
                }
            },
            "handlers": handler_defs,
            "loggers": {
                "habit_streaks": {"level": self.log_level, "handlers": handlers, "propagate": False},
                "apscheduler": {"level": "WARNING", "handlers": handlers, "propagate": False},
            },
        }


def configure_logging(config: AppConfig) -> None:
    logging.config.dictConfig(config.get_logging_config())
