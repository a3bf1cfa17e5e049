"""Notifier abstraction shared by the desktop and sound channels."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Protocol


class Category(str, Enum):
    BEST_SHARE = "best_share"
    DIFFICULTY = "difficulty"
    SYSTEM = "system"


@dataclass(slots=True)
class NotificationMessage:
    title: str
    body: str
    category: Category = Category.BEST_SHARE

    @property
    def urgency(self) -> str:
        """notify-send urgency level; only milestones are ``normal``."""
        return "normal" if self.category is Category.BEST_SHARE else "low"


@dataclass(slots=True)
class NotifierTestResult:
    ok: bool
    detail: str = ""


class Notifier(Protocol):
    name: str

    def enabled(self) -> bool:
        """Whether the channel may deliver right now."""

    async def send(self, message: NotificationMessage) -> bool:
        """Deliver ``message``; return ``False`` instead of raising on failure."""

    async def self_test(self) -> NotifierTestResult:
        """Deliver a test message and report the result."""
