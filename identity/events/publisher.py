"""Outbound event publishers.

Publishing is fire-and-forget: callers log failures and carry on.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Protocol

from identity.core.config import get_settings

logger = logging.getLogger(__name__)

DOCUMENT_VERIFIED = "system.document.verified"
DOCUMENT_REJECTED = "system.document.rejected"


class EventPublisher(Protocol):
    def notify(self, event_name: str, payload: dict[str, Any]) -> None: ...


class LoggingEventPublisher:
    """Writes each event to the log as JSON."""

    def notify(self, event_name: str, payload: dict[str, Any]) -> None:
        logger.info("event %s %s", event_name, json.dumps(payload, default=str, sort_keys=True))


@dataclass
class PublishedEvent:
    name: str
    payload: dict[str, Any]


@dataclass
class MemoryEventPublisher:
    """Keeps published events in memory (tests and local runs)."""

    events: list[PublishedEvent] = field(default_factory=list)

    def notify(self, event_name: str, payload: dict[str, Any]) -> None:
        self.events.append(PublishedEvent(name=event_name, payload=payload))

    def names(self) -> list[str]:
        return [event.name for event in self.events]

    def clear(self) -> None:
        self.events.clear()


_PUBLISHERS = {
    "log": LoggingEventPublisher,
    "memory": MemoryEventPublisher,
}


@lru_cache
def get_publisher() -> EventPublisher:
    """Get the process-wide publisher selected by ``Settings.event_publisher``."""
    kind = get_settings().event_publisher
    if kind not in _PUBLISHERS:
        raise ValueError(f"Unknown event publisher: {kind} (expected one of {sorted(_PUBLISHERS)})")
    return _PUBLISHERS[kind]()
