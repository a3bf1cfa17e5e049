"""Execute the alert effects produced by the change detector."""

from __future__ import annotations

import inspect
import logging
from typing import Any, Callable, Iterable, Optional

from alerts.desktop import DesktopNotifier, NotificationPermission
from alerts.local_sound import LocalSoundNotifier
from alerts.notifiers.base import Category, NotificationMessage
from core.event_bus import EventBus
from core.events import EventType, HighlightEvent, Severity, ToastEvent
from core.units import format_grouped, format_timestamp, scale_with_suffix
from rules.change_detector import AlertEffect, AlertKind
from rules.config_loader import UIConfig
from storage.history import HistoryRing

LOGGER = logging.getLogger(__name__)

BEST_SHARE_FIELD = "best_share"

Step = Callable[[], Any]


class AlertDispatcher:
    """Fan alert effects out to the highlight, sound, desktop, history and toast channels.

    Each channel runs in isolation: a failure is logged and the remaining
    channels still run.
    """

    def __init__(
        self,
        event_bus: EventBus,
        history: HistoryRing,
        desktop: Optional[DesktopNotifier] = None,
        sound: Optional[LocalSoundNotifier] = None,
        ui: Optional[UIConfig] = None,
        timestamp_func: Callable[[], str] = format_timestamp,
    ) -> None:
        self.event_bus = event_bus
        self.history = history
        self.desktop = desktop
        self.sound = sound
        self.ui = ui or UIConfig()
        self._timestamp = timestamp_func

    async def dispatch(self, effects: Iterable[AlertEffect]) -> None:
        for effect in effects:
            if effect.kind is AlertKind.NEW_BEST_SHARE:
                await self._new_best_share(effect.value)
            elif effect.kind is AlertKind.DIFFICULTY_CHANGED:
                await self._difficulty_changed(effect.value)
            else:  # pragma: no cover - exhaustive enum
                LOGGER.warning("Unknown alert effect: %s", effect.kind)

    async def _new_best_share(self, value: float) -> None:
        formatted = scale_with_suffix(value)
        LOGGER.info("New best share %s", formatted)
        await self._run_step("highlight", self._highlight)
        await self._run_step("sound", lambda: self._play_sound(formatted))
        await self._run_step(
            "notification",
            lambda: self.notify("🎉 New Best Share!", f"New best share: {formatted}", Category.BEST_SHARE),
        )
        await self._run_step("history", lambda: self.history.append(value, self._timestamp()))
        await self._run_step(
            "toast", lambda: self.toast(f"New best share: {formatted}!", Severity.SUCCESS)
        )

    async def _difficulty_changed(self, value: float) -> None:
        grouped = format_grouped(value)
        LOGGER.info("Difficulty changed to %s", grouped)
        await self._run_step(
            "notification",
            lambda: self.notify("📊 Difficulty Changed", f"Network difficulty: {grouped}", Category.DIFFICULTY),
        )
        await self._run_step("toast", lambda: self.toast(f"Difficulty updated: {grouped}", Severity.INFO))

    async def _run_step(self, name: str, step: Step) -> None:
        try:
            result = step()
            if inspect.isawaitable(result):
                await result
        except Exception:
            LOGGER.exception("Alert step %s failed", name)

    def _highlight(self) -> None:
        self.event_bus.emit(
            HighlightEvent(
                event_type=EventType.HIGHLIGHT,
                field_name=BEST_SHARE_FIELD,
                duration=self.ui.highlight_seconds,
            )
        )

    async def _play_sound(self, formatted: str) -> None:
        if self.sound is None or not self.sound.enabled():
            return
        await self.sound.send(NotificationMessage(title="New best share", body=formatted))

    async def notify(self, title: str, body: str, category: Category = Category.SYSTEM) -> bool:
        """Best-effort desktop notification, skipped unless permission is granted."""

        if self.desktop is None or self.desktop.permission() is not NotificationPermission.GRANTED:
            LOGGER.debug("Desktop notifications not permitted; skip %s", title)
            return False
        delivered = await self.desktop.send(NotificationMessage(title=title, body=body, category=category))
        if not delivered:
            LOGGER.warning("Failed to deliver %s notification", category.value)
        return delivered

    def toast(self, message: str, severity: Severity = Severity.SUCCESS) -> None:
        self.event_bus.emit(
            ToastEvent(
                event_type=EventType.TOAST,
                message=message,
                severity=severity,
                duration=self.ui.toast_seconds,
            )
        )

    def error(self, message: str) -> None:
        self.event_bus.emit(
            ToastEvent(
                event_type=EventType.ERROR,
                message=message,
                severity=Severity.ERROR,
                duration=self.ui.error_seconds,
            )
        )


__all__ = ["AlertDispatcher", "BEST_SHARE_FIELD"]
