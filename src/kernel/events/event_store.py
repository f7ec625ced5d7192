"""
Event Store service for append-only audit logging.

Every entry mutation and role change is logged here in the same
transaction as the change.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel
from sqlalchemy import select, and_, desc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.kernel.errors import StorageError
from src.kernel.models.event_log import EventLog, EventType


class EventStore:
    """
    Service for managing the immutable event log.

    Usage:
        event_store = EventStore(session)
        await event_store.log(
            event_type=EventType.ENTRY_CREATED,
            entity_type="entry",
            entity_id=entry.id,
            actor=identity,
            payload={"kind": entry.kind},
        )
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def log(
        self,
        event_type: EventType,
        entity_type: str,
        entity_id: str,
        actor: Optional[str] = None,
        payload: Optional[Dict[str, Any]] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> EventLog:
        """
        Append an event to the audit log.

        Args:
            event_type: The type of event
            entity_type: "entry" or "role_assignment"
            entity_id: Entry id or assignment email
            actor: Identity that triggered the event (None for system events)
            payload: Additional event data
            ip_address: Client IP address
            user_agent: Client user agent

        Returns:
            The created EventLog record
        """
        if payload:
            payload = self._serialize_payload(payload)

        event = EventLog(
            event_type=event_type.value,
            entity_type=entity_type,
            entity_id=entity_id,
            actor=actor,
            payload=payload or {},
            ip_address=ip_address,
            user_agent=user_agent,
        )

        self.session.add(event)
        # Caller owns flush/commit
        return event

    async def log_from_model(
        self,
        event_type: EventType,
        entity_type: str,
        entity_id: str,
        actor: Optional[str],
        payload_model: BaseModel,
        ip_address: Optional[str] = None,
    ) -> EventLog:
        """Log an event using a Pydantic model as payload."""
        return await self.log(
            event_type=event_type,
            entity_type=entity_type,
            entity_id=entity_id,
            actor=actor,
            payload=payload_model.model_dump(mode="json"),
            ip_address=ip_address,
        )

    async def get_entity_history(
        self,
        entity_type: str,
        entity_id: str,
        event_types: Optional[List[EventType]] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[EventLog]:
        """
        Get the event history for a specific entity, newest first.
        """
        query = select(EventLog).where(
            and_(
                EventLog.entity_type == entity_type,
                EventLog.entity_id == entity_id,
            )
        )

        if event_types:
            query = query.where(EventLog.event_type.in_([e.value for e in event_types]))

        query = query.order_by(desc(EventLog.created_at)).offset(offset).limit(limit)

        try:
            result = await self.session.execute(query)
        except SQLAlchemyError as exc:
            raise StorageError("Event history query failed") from exc
        return list(result.scalars().all())

    def _serialize_payload(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Convert payload values to JSON-serializable types."""
        result = {}
        for key, value in payload.items():
            result[key] = self._serialize_value(value)
        return result

    def _serialize_value(self, value: Any) -> Any:
        if isinstance(value, Enum):
            return value.value
        if isinstance(value, datetime):
            return value.isoformat()
        if isinstance(value, dict):
            return self._serialize_payload(value)
        if isinstance(value, (list, tuple, set, frozenset)):
            return [self._serialize_value(v) for v in value]
        return value
