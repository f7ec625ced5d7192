"""
Event sourcing infrastructure.

Provides append-only audit logging with immutable events.
"""

from src.kernel.events.event_store import EventStore
from src.kernel.events.event_types import (
    BaseEvent,
    EntryEvent,
    EntryCreatedEvent,
    EntryUpdatedEvent,
    EntryStatusChangedEvent,
    RoleEvent,
)

__all__ = [
    "EventStore",
    "BaseEvent",
    "EntryEvent",
    "EntryCreatedEvent",
    "EntryUpdatedEvent",
    "EntryStatusChangedEvent",
    "RoleEvent",
]
