"""Fetch-and-process cycle tying the client, detector, dispatcher and UI together."""

from __future__ import annotations

import csv
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Dict, Optional, Protocol

from agent.scheduler import PollScheduler
from alerts.desktop import APP_NAME, DesktopNotifier, NotificationPermission
from alerts.dispatcher import AlertDispatcher
from connectors.pool_client import PoolClientError
from core.context import AppContext
from core.events import EventType, LoadingEvent, RenderEvent, Severity
from core.records import MetricRecord
from core.units import render_fields
from rules.change_detector import detect_changes
from storage.kv_store import LAST_ADDRESS_KEY

LOGGER = logging.getLogger(__name__)

INVALID_ADDRESS = "Please enter a valid BTC address"


class StatsClient(Protocol):
    async def fetch(self, address: str) -> MetricRecord:
        ...


class Monitor:
    """Owns the refresh cycle and the user-facing controls around it."""

    def __init__(
        self,
        context: AppContext,
        client: StatsClient,
        dispatcher: AlertDispatcher,
        desktop: Optional[DesktopNotifier] = None,
        now_func: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.context = context
        self.client = client
        self.dispatcher = dispatcher
        self.desktop = desktop
        self._now = now_func
        self.scheduler = PollScheduler(self._scheduled_cycle, interval=context.config.refresh_interval)

    async def refresh(self, address: Optional[str] = None) -> bool:
        """Fetch stats for ``address`` (default: the current subject) and process them.

        Returns ``False`` on input or transport errors; state is left untouched.
        """

        address = (address if address is not None else self.context.address).strip()
        if not address:
            self.dispatcher.error(INVALID_ADDRESS)
            return False

        self._loading(True)
        try:
            record = await self.client.fetch(address)
        except PoolClientError as exc:
            LOGGER.error("Error fetching data: %s", exc)
            self.dispatcher.error(f"Failed to fetch data: {exc}. Retrying...")
            return False
        finally:
            self._loading(False)

        await self.process(record)
        return True

    async def process(self, record: MetricRecord) -> None:
        """Render, compare against the snapshot store, apply, then alert."""

        fields = render_fields(record, self._now())
        state, effects = detect_changes(self.context.snapshot.watched, record)
        self.context.snapshot.apply(state, record)
        self.context.event_bus.emit(RenderEvent(event_type=EventType.RENDER, fields=fields))
        await self.dispatcher.dispatch(effects)

    async def _scheduled_cycle(self) -> None:
        if self.context.address:
            await self.refresh()

    def start(self) -> None:
        self.context.history.load()
        self.scheduler.start(immediate=True)

    def manual_refresh(self) -> bool:
        if not self.context.address.strip():
            self.dispatcher.error(f"{INVALID_ADDRESS} first")
            return False
        self.scheduler.manual_trigger()
        self.dispatcher.toast("Refreshing...", Severity.INFO)
        return True

    def change_address(self, address: str) -> bool:
        """Switch subject: persist it, fetch now and restart the timer."""

        address = address.strip()
        if not address:
            self.dispatcher.error(INVALID_ADDRESS)
            return False
        self.context.store.set(LAST_ADDRESS_KEY, address)
        self.context.address = address
        LOGGER.info("Monitoring address %s", address)
        self.scheduler.manual_trigger()
        self.scheduler.reset()
        return True

    def toggle_auto_refresh(self) -> bool:
        enabled = self.scheduler.toggle()
        if enabled:
            self.dispatcher.toast("Auto-refresh enabled", Severity.INFO)
        else:
            self.dispatcher.toast("Auto-refresh paused", Severity.INFO)
        return enabled

    async def enable_notifications(self) -> bool:
        if self.desktop is None:
            self.dispatcher.toast("Desktop notifications are not supported", Severity.ERROR)
            return False
        permission = self.desktop.permission()
        if permission is NotificationPermission.GRANTED:
            self.dispatcher.toast("Notifications already enabled!", Severity.SUCCESS)
            return True
        if permission is NotificationPermission.DENIED:
            return False
        if await self.desktop.request_permission() is not NotificationPermission.GRANTED:
            return False
        self.dispatcher.toast("Notifications enabled!", Severity.SUCCESS)
        await self.dispatcher.notify(APP_NAME, "Notifications are now enabled!")
        return True

    async def self_test_channels(self) -> Dict[str, bool]:
        """Run every configured channel's self-test and toast each outcome."""

        results: Dict[str, bool] = {}
        for channel in (self.desktop, self.dispatcher.sound):
            if channel is None:
                continue
            outcome = await channel.self_test()
            results[channel.name] = outcome.ok
            severity = Severity.SUCCESS if outcome.ok else Severity.ERROR
            self.dispatcher.toast(f"{channel.name}: {outcome.detail}", severity)
        return results

    def export_csv(self, directory: Path) -> Optional[Path]:
        """Write the last fetched payload as a two-line CSV file."""

        current = self.context.snapshot.current
        if current is None or not current.raw:
            self.dispatcher.error("No data to export. Fetch stats first!")
            return None

        stamp = datetime.now(timezone.utc).isoformat(timespec="milliseconds")
        stamp = stamp.replace("+00:00", "Z").replace(":", "-").replace(".", "-")
        path = Path(directory) / f"btc-mining-stats-{stamp}.csv"
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with path.open("w", newline="", encoding="utf-8") as fp:
                writer = csv.writer(fp)
                writer.writerow(list(current.raw.keys()))
                writer.writerow(list(current.raw.values()))
        except OSError as exc:
            LOGGER.error("Failed to export stats to %s: %s", path, exc)
            self.dispatcher.error(f"Export failed: {exc}")
            return None
        LOGGER.info("Exported stats to %s", path)
        self.dispatcher.toast("Data exported successfully!", Severity.SUCCESS)
        return path

    def stop(self) -> None:
        self.scheduler.stop()

    def _loading(self, active: bool) -> None:
        self.context.event_bus.emit(LoadingEvent(event_type=EventType.LOADING, active=active))


__all__ = ["Monitor", "StatsClient", "INVALID_ADDRESS"]
