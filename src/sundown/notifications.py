"""Notification delivery. Delivery is best-effort: failures are logged, never raised."""

from __future__ import annotations

import json
import logging
import shutil
import subprocess
import sys
from datetime import datetime
from typing import Protocol

import requests

logger = logging.getLogger("sundown.notifications")

NOTIFICATION_TITLE = "Sundown"


class NotificationService(Protocol):
    def request_authorization_if_needed(self) -> None: ...

    def send_over_limit_notification(self, message: str) -> None: ...


def over_limit_message(display: str) -> str:
    return f"Over limit: {display}"


class DesktopNotificationService:
    """Desktop banners via osascript on macOS and notify-send elsewhere."""

    def __init__(self, platform: str | None = None):
        self.platform = platform or sys.platform

    def _command(self, message: str) -> list[str]:
        if self.platform == "darwin":
            script = f"display notification {json.dumps(message)} with title {json.dumps(NOTIFICATION_TITLE)} sound name \"Glass\""
            return ["osascript", "-e", script]
        return ["notify-send", "--app-name", NOTIFICATION_TITLE, NOTIFICATION_TITLE, message]

    def request_authorization_if_needed(self) -> None:
        tool = self._command("")[0]
        if shutil.which(tool) is None:
            logger.warning(f"Desktop notifications unavailable: {tool} not found")

    def send_over_limit_notification(self, message: str) -> None:
        command = self._command(message)
        try:
            result = subprocess.run(command, capture_output=True, text=True, timeout=10)
        except (OSError, subprocess.TimeoutExpired) as e:
            logger.warning(f"Notification failed: {e}")
            return

        if result.returncode != 0:
            logger.warning(f"Notification failed: {command[0]} exited {result.returncode}: {result.stderr[:100]}")
            return
        logger.info(f"Notification sent: {message}")


class WebhookNotificationService:
    """POSTs a JSON notification payload to a webhook URL."""

    def __init__(self, webhook_url: str, timeout: float = 5.0, session: requests.Session | None = None):
        self.webhook_url = webhook_url
        self.timeout = timeout
        self.session = session or requests.Session()

    def request_authorization_if_needed(self) -> None:
        pass

    def send_over_limit_notification(self, message: str) -> None:
        payload = {
            "type": "notification",
            "title": NOTIFICATION_TITLE,
            "message": message,
            "timestamp": datetime.now().isoformat(),
        }
        try:
            response = self.session.post(self.webhook_url, json=payload, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.warning(f"Webhook notification failed: {e}")
            return
        logger.info(f"Webhook notification sent: {message}")
