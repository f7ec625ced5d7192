"""
Entry endpoints - submission, listing, payload edits and workflow actions.
"""

from typing import List, Optional

from fastapi import APIRouter, Body, Query, Request, status

from src.api.deps import CurrentIdentity, DbSession, get_client_ip
from src.kernel.errors import ValidationError
from src.kernel.events.event_store import EventStore
from src.kernel.events.event_types import EntryCreatedEvent, EntryUpdatedEvent
from src.kernel.models.entry import Entry, EntryKind, EntryStatus
from src.kernel.models.event_log import EventType
from src.kernel.records.record_store import RecordStore
from src.logging_config import get_logger
from src.orchestration.actions import ActionSurface, WorkflowAction
from src.schemas.common import ErrorResponse
from src.schemas.entry import (
    EntryActionRequest,
    EntryCreate,
    EntryEventResponse,
    EntryResponse,
    EntryStatsResponse,
    EntryUpdate,
    validate_payload,
)

router = APIRouter(
    responses={
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
)
logger = get_logger(__name__)


def _to_response(entry: Entry, actions: Optional[set] = None) -> EntryResponse:
    return EntryResponse(
        id=entry.id,
        kind=entry.kind,
        status=entry.workflow_status.value,
        created_by=entry.created_by,
        created_at=entry.created_at,
        updated_at=entry.updated_at,
        reviewed_by=entry.reviewed_by,
        reviewed_at=entry.reviewed_at,
        published_by=entry.published_by,
        published_at=entry.published_at,
        rejection_reason=entry.rejection_reason,
        payload=entry.payload or {},
        available_actions=sorted(a.value for a in (actions or ())),
    )


@router.post("", response_model=EntryResponse, status_code=status.HTTP_201_CREATED)
async def create_entry(
    request: Request,
    data: EntryCreate,
    identity: CurrentIdentity,
    db: DbSession,
):
    """Create a draft entry owned by the caller."""
    store = RecordStore(db)
    entry = await store.insert(Entry(
        kind=data.kind.value,
        created_by=identity,
        payload=data.payload,
    ))

    await EventStore(db).log_from_model(
        event_type=EventType.ENTRY_CREATED,
        entity_type="entry",
        entity_id=entry.id,
        actor=identity,
        payload_model=EntryCreatedEvent(kind=entry.kind, status=entry.status),
        ip_address=get_client_ip(request),
    )
    logger.info("Entry created", extra={"entry_id": entry.id, "kind": entry.kind, "actor": identity})

    surface = ActionSurface(db)
    return _to_response(entry, await surface.available_actions(entry, identity))


@router.get("", response_model=List[EntryResponse])
async def list_entries(
    identity: CurrentIdentity,
    db: DbSession,
    kind: Optional[EntryKind] = Query(None),
    entry_status: Optional[EntryStatus] = Query(None, alias="status"),
    mine: bool = Query(False, description="Only entries created by the caller"),
):
    """List entries, optionally filtered by kind and status."""
    store = RecordStore(db)
    entries = await store.find_all(
        kind=kind,
        status=entry_status,
        created_by=identity if mine else None,
    )
    return [_to_response(e) for e in entries]


@router.get("/stats", response_model=EntryStatsResponse)
async def entry_stats(
    identity: CurrentIdentity,
    db: DbSession,
):
    """Counts per status and per kind."""
    return EntryStatsResponse(**await RecordStore(db).stats())


@router.get("/{entry_id}", response_model=EntryResponse)
async def get_entry(
    entry_id: str,
    identity: CurrentIdentity,
    db: DbSession,
):
    """Get an entry with the actions the caller may take on it."""
    surface = ActionSurface(db)
    entry = await surface.store.get(entry_id)
    return _to_response(entry, await surface.available_actions(entry, identity))


@router.patch("/{entry_id}", response_model=EntryResponse)
async def update_entry(
    request: Request,
    entry_id: str,
    data: EntryUpdate,
    identity: CurrentIdentity,
    db: DbSession,
):
    """Edit the payload of a draft or rejected entry (creator only)."""
    surface = ActionSurface(db)
    entry = await surface.store.get(entry_id)

    try:
        new_payload = validate_payload(entry.kind, {**(entry.payload or {}), **data.payload})
    except ValueError as exc:
        raise ValidationError(str(exc), field="payload") from exc

    changed = sorted(k for k, v in new_payload.items() if (entry.payload or {}).get(k) != v)
    entry = await surface.store.update_payload(entry, identity, new_payload)

    await EventStore(db).log_from_model(
        event_type=EventType.ENTRY_UPDATED,
        entity_type="entry",
        entity_id=entry.id,
        actor=identity,
        payload_model=EntryUpdatedEvent(kind=entry.kind, changed_fields=changed),
        ip_address=get_client_ip(request),
    )
    return _to_response(entry, await surface.available_actions(entry, identity))


@router.post("/{entry_id}/actions/{action}", response_model=EntryResponse)
async def perform_action(
    request: Request,
    entry_id: str,
    action: WorkflowAction,
    identity: CurrentIdentity,
    db: DbSession,
    data: Optional[EntryActionRequest] = Body(None),
):
    """Perform a workflow action (submit, approve, reject, publish, revert)."""
    surface = ActionSurface(db)
    entry = await surface.perform(
        entry_id,
        action,
        identity,
        reason=data.reason if data else None,
        ip_address=get_client_ip(request),
    )
    return _to_response(entry, await surface.available_actions(entry, identity))


@router.get("/{entry_id}/history", response_model=List[EntryEventResponse])
async def entry_history(
    entry_id: str,
    identity: CurrentIdentity,
    db: DbSession,
    limit: int = Query(100, ge=1, le=500),
):
    """Audit events for an entry, newest first."""
    await RecordStore(db).get(entry_id)
    events = await EventStore(db).get_entity_history("entry", entry_id, limit=limit)
    return [EntryEventResponse.model_validate(e) for e in events]
