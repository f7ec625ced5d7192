"""
Export endpoints - read-only projection of published entries for BI/ETL.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import APIRouter, Query

from src.api.deps import AppSettings, DbSession, ExportKey
from src.kernel.errors import ValidationError
from src.kernel.models.entry import Entry, EntryKind, EntryStatus
from src.kernel.records.record_store import RecordStore
from src.logging_config import get_logger
from src.schemas.common import ErrorResponse
from src.schemas.entry import PAYLOAD_SCHEMAS
from src.schemas.export import ExportMeta, PublishedExportResponse

router = APIRouter(responses={401: {"model": ErrorResponse}, 422: {"model": ErrorResponse}})
logger = get_logger(__name__)


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _parse_type(raw: Optional[str]) -> Optional[EntryKind]:
    if raw is None:
        return None
    try:
        return EntryKind.parse(raw)
    except ValueError:
        raise ValidationError(f"Unknown entry type '{raw}'", field="type") from None


def flatten_entry(entry: Entry) -> Dict[str, Any]:
    """
    Flatten an entry to a single-depth record for tabular connectors.

    Every payload field of the entry's kind is present (None when unset);
    audit columns win over payload keys of the same name.
    """
    payload = entry.payload or {}
    fields = PAYLOAD_SCHEMAS.get(entry.kind)
    record: Dict[str, Any] = {}
    if fields is not None:
        record.update({name: payload.get(name) for name in fields.model_fields})
    record.update({
        "id": entry.id,
        "entry_type": entry.kind,
        "status": entry.workflow_status.value,
        "created_by": entry.created_by,
        "created_at": _iso(entry.created_at),
        "updated_at": _iso(entry.updated_at),
        "reviewed_by": entry.reviewed_by,
        "reviewed_at": _iso(entry.reviewed_at),
        "published_by": entry.published_by,
        "published_at": _iso(entry.published_at),
        "rejection_reason": entry.rejection_reason,
    })
    return record


@router.get("/published", response_model=PublishedExportResponse)
async def list_published(
    _: ExportKey,
    settings: AppSettings,
    db: DbSession,
    entry_type: Optional[str] = Query(
        None, alias="type", description="research, partnership or ranking (academic reads as research)"
    ),
    meta: bool = Query(False, description="Wrap results in a metadata envelope"),
):
    """All published entries, flattened, optionally filtered by kind."""
    kind = _parse_type(entry_type)
    store = RecordStore(db)
    entries = await store.find_all(kind=kind, status=EntryStatus.PUBLISHED)
    data = [flatten_entry(e) for e in entries]

    logger.info(
        "Published export served",
        extra={"entry_type": kind.value if kind else None, "count": len(data)},
    )

    envelope = None
    if meta:
        envelope = ExportMeta(
            total=len(data),
            generated_at=datetime.now(timezone.utc),
            source=settings.export_source_name,
            version=settings.version,
            stats=await store.stats(),
        )
    return PublishedExportResponse(total_results=len(data), data=data, meta=envelope)
