"""Desktop notification channel with a browser-like permission model."""

from __future__ import annotations

import asyncio
import logging
import platform
import shutil
import subprocess
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from alerts.notifiers.base import Category, Notifier, NotifierTestResult, NotificationMessage

LOGGER = logging.getLogger(__name__)

APP_NAME = "BTC Solo Tracker"


class NotificationPermission(str, Enum):
    GRANTED = "granted"
    DENIED = "denied"
    DEFAULT = "default"  # not asked yet


def _quote_applescript(text: str) -> str:
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'


def backend_command(title: str, body: str, urgency: str = "normal") -> Optional[list[str]]:
    """Command line that shows a notification on this platform, if any."""

    system = platform.system().lower()
    if system == "linux" and shutil.which("notify-send"):
        return ["notify-send", "--app-name", APP_NAME, "--urgency", urgency, title, body]
    if system == "darwin" and shutil.which("osascript"):
        script = f"display notification {_quote_applescript(body)} with title {_quote_applescript(title)}"
        return ["osascript", "-e", script]
    return None


def run_command(command: list[str]) -> None:
    subprocess.run(command, check=True, timeout=10)


@dataclass(slots=True)
class DesktopNotifier(Notifier):
    """Platform notifications, delivered only once permission is granted.

    Permission alone gates delivery; ``notifiers.desktop.enabled`` only decides
    whether permission is requested at startup.
    """

    permission_state: NotificationPermission = NotificationPermission.DEFAULT
    name: str = "desktop"

    def permission(self) -> NotificationPermission:
        return self.permission_state

    def enabled(self) -> bool:
        return self.permission_state is NotificationPermission.GRANTED

    async def request_permission(self) -> NotificationPermission:
        """Ask for permission; granted when a notification backend exists.

        A denied permission is final for the process lifetime.
        """

        if self.permission_state is NotificationPermission.DEFAULT:
            available = backend_command(APP_NAME, "") is not None
            self.permission_state = (
                NotificationPermission.GRANTED if available else NotificationPermission.DENIED
            )
            LOGGER.info("Desktop notification permission: %s", self.permission_state.value)
        return self.permission_state

    async def send(self, message: NotificationMessage) -> bool:
        if not self.enabled():
            LOGGER.debug("Desktop notifier not permitted; skip %s", message.title)
            return False
        command = backend_command(message.title, message.body, message.urgency)
        if command is None:
            LOGGER.warning("No desktop notification backend available")
            return False
        try:
            await asyncio.to_thread(run_command, command)
            return True
        except Exception as exc:
            LOGGER.exception("Failed to show desktop notification: %s", exc)
            return False

    async def self_test(self) -> NotifierTestResult:
        ok = await self.send(
            NotificationMessage(title=APP_NAME, body="Test notification", category=Category.SYSTEM)
        )
        return NotifierTestResult(ok=ok, detail="Notification shown" if ok else "Notification not shown")


__all__ = ["APP_NAME", "NotificationPermission", "DesktopNotifier", "backend_command", "run_command"]
