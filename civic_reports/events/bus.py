from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, Callable, Protocol

from civic_reports.config import settings

logger = logging.getLogger(__name__)

EventHandler = Callable[[dict[str, Any]], None]


class EventBus(Protocol):
    def subscribe(self, event_type: str, handler: EventHandler) -> None:
        ...

    def publish(self, event_type: str, envelope: dict[str, Any]) -> None:
        ...


class InMemoryEventBus:
    """Synchronous fan-out to subscribers.

    A subscription key is an exact event type, a dotted prefix ending in
    ``.*`` (``report.*`` matches ``report.status.changed``) or ``*``.
    A failing handler is logged and does not stop delivery to the others.
    """

    def __init__(self) -> None:
        self._subscribers: dict[str, list[EventHandler]] = defaultdict(list)

    def subscribe(self, event_type: str, handler: EventHandler) -> None:
        self._subscribers[event_type].append(handler)

    def publish(self, event_type: str, envelope: dict[str, Any]) -> None:
        for key in self._keys_for(event_type):
            for handler in list(self._subscribers.get(key, [])):
                try:
                    handler(envelope)
                except Exception:
                    logger.exception("Handler %r failed for %s", handler, event_type)

    @staticmethod
    def _keys_for(event_type: str) -> list[str]:
        parts = event_type.split(".")
        prefixes = [".".join(parts[:i]) + ".*" for i in range(len(parts) - 1, 0, -1)]
        return [event_type, *prefixes, "*"]


def build_event_bus() -> EventBus:
    backend = settings.event_bus_backend
    if backend != "inmemory":
        logger.warning("Unsupported EVENT_BUS_BACKEND %r; using in-memory bus", backend)
    return InMemoryEventBus()
