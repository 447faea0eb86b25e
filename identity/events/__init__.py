"""Outbound events."""

from .publisher import (
    DOCUMENT_REJECTED,
    DOCUMENT_VERIFIED,
    EventPublisher,
    LoggingEventPublisher,
    MemoryEventPublisher,
    PublishedEvent,
    get_publisher,
)

__all__ = [
    "DOCUMENT_VERIFIED",
    "DOCUMENT_REJECTED",
    "EventPublisher",
    "LoggingEventPublisher",
    "MemoryEventPublisher",
    "PublishedEvent",
    "get_publisher",
]
