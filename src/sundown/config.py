"""Host configuration: where data lives, which timezone, how to notify.

User settings (daily limit, reset time, ...) are not configured here; they
live in the settings store.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import tzinfo
from pathlib import Path
from typing import Optional

import click
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .db import DEFAULT_DB_PATH
from .notifications import DesktopNotificationService, NotificationService, WebhookNotificationService

LOG_HANDLER_NAME = "sundown"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass
class AppConfig:
    db_path: Path
    tz_name: Optional[str] = None
    verbose: bool = False
    webhook_url: Optional[str] = None

    @classmethod
    def from_env(cls) -> "AppConfig":
        return cls(
            db_path=Path(os.environ.get("SUNDOWN_DB", str(DEFAULT_DB_PATH))).expanduser(),
            tz_name=os.environ.get("SUNDOWN_TZ") or None,
            verbose=os.environ.get("SUNDOWN_VERBOSE", "false").lower() == "true",
            webhook_url=os.environ.get("SUNDOWN_WEBHOOK_URL") or None,
        )

    @property
    def tz(self) -> tzinfo | None:
        """Calendar timezone for day boundaries. ``None`` = system local."""
        if not self.tz_name:
            return None
        try:
            return ZoneInfo(self.tz_name)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise click.ClickException(f"Unknown timezone '{self.tz_name}'") from e

    def notification_service(self) -> NotificationService:
        if self.webhook_url:
            return WebhookNotificationService(self.webhook_url)
        return DesktopNotificationService()


def configure_logging(verbose: bool = False) -> logging.Logger:
    """Attach one stream handler to the ``sundown`` logger."""
    logger = logging.getLogger("sundown")
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    if not any(h.get_name() == LOG_HANDLER_NAME for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.set_name(LOG_HANDLER_NAME)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    return logger


def db_option(f):
    """Decorator to add the database path option to commands."""
    return click.option(
        "--db",
        "db_path",
        type=click.Path(dir_okay=False, path_type=Path),
        default=None,
        help="SQLite database path (env: SUNDOWN_DB)",
    )(f)


def tz_option(f):
    """Decorator to add the timezone option to commands."""
    return click.option(
        "--tz",
        "tz_name",
        default=None,
        help="IANA timezone for day boundaries (env: SUNDOWN_TZ)",
    )(f)


def verbose_option(f):
    """Decorator to add verbose option to commands."""
    return click.option(
        "--verbose", "-v",
        is_flag=True,
        help="Enable verbose output",
    )(f)
