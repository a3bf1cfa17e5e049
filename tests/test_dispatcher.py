import asyncio
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from alerts import desktop as desktop_module
from alerts import local_sound
from alerts.desktop import DesktopNotifier, NotificationPermission
from alerts.dispatcher import AlertDispatcher
from alerts.local_sound import LocalSoundNotifier
from alerts.notifiers.base import NotificationMessage, Notifier, NotifierTestResult
from core.context import AppContext
from core.event_bus import EventBus
from core.events import EventEnvelope, EventType
from rules.change_detector import AlertEffect, AlertKind
from rules.config_loader import AppConfig
from storage.history import HistoryRing
from storage.kv_store import KeyValueStore
from storage.migrate import initialize_database


@dataclass
class _FakeDesktop(Notifier):
    state: NotificationPermission = NotificationPermission.GRANTED
    fail: bool = False
    name: str = "desktop"
    messages: List[NotificationMessage] = field(default_factory=list)

    def permission(self) -> NotificationPermission:
        return self.state

    def enabled(self) -> bool:
        return self.state is NotificationPermission.GRANTED

    async def send(self, message: NotificationMessage) -> bool:
        if self.fail:
            raise RuntimeError("notification backend crashed")
        self.messages.append(message)
        return True

    async def self_test(self) -> NotifierTestResult:
        return NotifierTestResult(ok=True, detail="fake")


@pytest.fixture()
def bus(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> EventBus:
    db_path = tmp_path / "dispatch.db"
    monkeypatch.setenv("SOLO_TRACKER_DB_PATH", str(db_path))
    initialize_database(str(db_path))
    return EventBus()


@pytest.fixture()
def history(bus: EventBus) -> HistoryRing:
    return AppContext.build(AppConfig(), store=KeyValueStore(), event_bus=bus).history


def _collect(bus: EventBus) -> List[EventEnvelope]:
    events: List[EventEnvelope] = []
    for event_type in EventType:
        bus.subscribe(event_type.value, events.append)
    return events


def _best_share(value: float) -> AlertEffect:
    return AlertEffect(kind=AlertKind.NEW_BEST_SHARE, value=value, previous=1.0)


def test_new_best_share_runs_every_channel_in_order(bus: EventBus, history: HistoryRing) -> None:
    events = _collect(bus)
    desktop = _FakeDesktop()
    dispatcher = AlertDispatcher(bus, history, desktop=desktop, timestamp_func=lambda: "Jan 1, 10:00:00 AM")

    asyncio.run(dispatcher.dispatch([_best_share(6000.0)]))

    kinds = [env.event.event_type for env in events]
    assert kinds == [EventType.HIGHLIGHT, EventType.HISTORY, EventType.TOAST]
    assert events[0].event.field_name == "best_share"
    assert events[0].event.duration == 3.0
    assert events[2].event.message == "New best share: 6.00 K!"
    assert events[2].event.severity.value == "success"
    assert [m.body for m in desktop.messages] == ["New best share: 6.00 K"]
    assert history.entries[0].raw_value == 6000.0
    assert history.entries[0].timestamp == "Jan 1, 10:00:00 AM"


def test_failing_notification_does_not_block_other_channels(bus: EventBus, history: HistoryRing) -> None:
    events = _collect(bus)
    dispatcher = AlertDispatcher(bus, history, desktop=_FakeDesktop(fail=True))

    asyncio.run(dispatcher.dispatch([_best_share(2_000_000.0)]))

    assert len(history) == 1
    assert events[-1].event.message == "New best share: 2.00 M!"


def test_failing_sound_is_swallowed(bus: EventBus, history: HistoryRing, monkeypatch: pytest.MonkeyPatch) -> None:
    def _broken_play(sound_file, volume):
        raise OSError("audio device busy")

    monkeypatch.setattr(local_sound, "play", _broken_play)
    sound = LocalSoundNotifier(enabled_flag=True)
    dispatcher = AlertDispatcher(bus, history, sound=sound)

    asyncio.run(dispatcher.dispatch([_best_share(1500.0)]))
    assert len(history) == 1


def test_notifications_skipped_without_permission(bus: EventBus, history: HistoryRing) -> None:
    desktop = _FakeDesktop(state=NotificationPermission.DEFAULT)
    dispatcher = AlertDispatcher(bus, history, desktop=desktop)

    asyncio.run(dispatcher.dispatch([_best_share(1500.0)]))
    assert desktop.messages == []
    assert len(history) == 1


def test_difficulty_change_notifies_and_toasts_only(bus: EventBus, history: HistoryRing) -> None:
    events = _collect(bus)
    desktop = _FakeDesktop()
    dispatcher = AlertDispatcher(bus, history, desktop=desktop)

    effect = AlertEffect(kind=AlertKind.DIFFICULTY_CHANGED, value=83_148_355_189_239.0, previous=1.0)
    asyncio.run(dispatcher.dispatch([effect]))

    assert [env.event.event_type for env in events] == [EventType.TOAST]
    assert events[0].event.message == "Difficulty updated: 83,148,355,189,239"
    assert events[0].event.severity.value == "info"
    assert desktop.messages[0].body == "Network difficulty: 83,148,355,189,239"
    assert len(history) == 0


def test_desktop_permission_follows_backend_availability(monkeypatch: pytest.MonkeyPatch) -> None:
    sent: List[List[str]] = []
    monkeypatch.setattr(desktop_module, "backend_command", lambda title, body, urgency="normal": ["notify", title, body])
    monkeypatch.setattr(desktop_module, "run_command", sent.append)

    notifier = DesktopNotifier()
    assert asyncio.run(notifier.send(NotificationMessage(title="t", body="b"))) is False
    assert asyncio.run(notifier.request_permission()) is NotificationPermission.GRANTED
    assert asyncio.run(notifier.send(NotificationMessage(title="t", body="b"))) is True
    assert sent == [["notify", "t", "b"]]


def test_desktop_permission_denied_without_backend(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(desktop_module, "backend_command", lambda title, body, urgency="normal": None)
    notifier = DesktopNotifier()
    assert asyncio.run(notifier.request_permission()) is NotificationPermission.DENIED

    monkeypatch.setattr(desktop_module, "backend_command", lambda title, body, urgency="normal": ["notify"])
    assert asyncio.run(notifier.request_permission()) is NotificationPermission.DENIED
