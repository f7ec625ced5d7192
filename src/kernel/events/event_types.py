"""
Event type definitions using Pydantic for validation.

These are the payload schemas for events logged to the audit trail.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


def _now() -> datetime:
    return datetime.now(timezone.utc)


class BaseEvent(BaseModel):
    """Base event payload structure."""

    model_config = ConfigDict(extra="allow")

    timestamp: datetime = Field(default_factory=_now)
    metadata: Dict[str, Any] = Field(default_factory=dict)


# Entry Events

class EntryEvent(BaseEvent):
    """Entry-related event payloads."""

    kind: str


class EntryCreatedEvent(EntryEvent):
    """Entry creation event."""

    status: str


class EntryUpdatedEvent(EntryEvent):
    """Payload edit event."""

    changed_fields: List[str] = Field(default_factory=list)


class EntryStatusChangedEvent(EntryEvent):
    """Workflow transition event."""

    from_status: str
    to_status: str
    action: Optional[str] = None
    actor_role: str
    reason: Optional[str] = None


# Role Events

class RoleEvent(BaseEvent):
    """Role assignment event payloads."""

    role: Optional[str] = None
    previous_role: Optional[str] = None
