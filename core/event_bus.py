"""Lightweight publish/subscribe bus decoupling the engine from the UI."""

from __future__ import annotations

import logging
import time
from collections import defaultdict
from typing import Callable, DefaultDict, Iterable, List

from core.events import EventBase, EventEnvelope

LOGGER = logging.getLogger(__name__)

Subscriber = Callable[[EventEnvelope], None]


class EventBus:
    """Synchronous fan-out of events to subscribers of their type."""

    def __init__(self) -> None:
        self._subscribers: DefaultDict[str, List[Subscriber]] = defaultdict(list)

    def subscribe(self, event_type: str, handler: Subscriber) -> None:
        """Register a callback for one event type."""

        self._subscribers[event_type].append(handler)

    def publish(self, envelope: EventEnvelope) -> None:
        """Deliver ``envelope`` to every subscriber of its event type.

        A failing subscriber is logged and does not stop delivery to the rest.
        """

        for handler in list(self._subscribers.get(envelope.event.event_type.value, [])):
            try:
                handler(envelope)
            except Exception:
                LOGGER.exception("Subscriber %r failed for %s", handler, envelope.event.event_type.value)

    def emit(self, event: EventBase) -> None:
        self.publish(EventEnvelope(event=event, ts=time.time()))

    def subscribers(self, event_type: str) -> Iterable[Subscriber]:
        """Expose subscribers for tests and debugging."""

        return tuple(self._subscribers.get(event_type, ()))
