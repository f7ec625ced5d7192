"""
Record Store - persistence for entries.

There is deliberately no way to set an entry's status unconditionally:
``insert`` always stores DRAFT, ``update_payload`` only writes while the
stored status is still the one the caller read and never changes it, and
``conditional_update`` only applies a patch built from a row of the
workflow transition table, and only when the stored status still equals
the value the caller read.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional

from sqlalchemy import func, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.kernel.errors import (
    ConflictError,
    ForbiddenError,
    InvalidTransitionError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from src.kernel.identity.role_directory import normalize_identity
from src.kernel.models.base import utcnow
from src.kernel.models.entry import Entry, EntryKind, EntryStatus

if TYPE_CHECKING:
    from src.orchestration.state_machine import TransitionRule

# Audit columns a transition may set
TRANSITION_COLUMNS = frozenset({
    "reviewed_by",
    "reviewed_at",
    "published_by",
    "published_at",
    "rejection_reason",
})

# Payload may only be edited while the author holds the entry
EDITABLE_STATUSES = frozenset({EntryStatus.DRAFT, EntryStatus.REJECTED})

# Stored spellings that read as each non-draft status
_STORED_SPELLINGS: Dict[EntryStatus, List[str]] = {
    EntryStatus.PENDING_REVIEW: ["pending_review", "in_review"],
    EntryStatus.APPROVED: ["approved"],
    EntryStatus.PUBLISHED: ["published"],
    EntryStatus.REJECTED: ["rejected"],
}


@dataclass(frozen=True)
class TransitionPatch:
    """The table row being applied plus the audit columns written with it."""

    rule: "TransitionRule"
    updated_at: datetime
    fields: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        unknown = set(self.fields) - TRANSITION_COLUMNS
        if unknown:
            raise ValueError(f"Transition patch cannot set: {sorted(unknown)}")

    @property
    def status(self) -> EntryStatus:
        return self.rule.to_status


def _status_filter(status: EntryStatus):
    """SQL condition matching rows that read as status."""
    stored = func.lower(func.trim(Entry.status))
    if status is EntryStatus.DRAFT:
        others = [s for spellings in _STORED_SPELLINGS.values() for s in spellings]
        return or_(Entry.status.is_(None), stored.notin_(others))
    return stored.in_(_STORED_SPELLINGS[status])


class RecordStore:
    """Entry persistence used by the workflow engine and the API layer."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find(self, entry_id: str) -> Optional[Entry]:
        try:
            result = await self.session.execute(
                select(Entry)
                .where(Entry.id == entry_id)
                .execution_options(populate_existing=True)
            )
        except SQLAlchemyError as exc:
            raise StorageError("Entry lookup failed") from exc
        return result.scalar_one_or_none()

    async def get(self, entry_id: str) -> Entry:
        """Like find, but raises NotFoundError."""
        entry = await self.find(entry_id)
        if entry is None:
            raise NotFoundError(f"Entry {entry_id} not found")
        return entry

    async def find_all(
        self,
        kind: Optional[EntryKind] = None,
        status: Optional[EntryStatus] = None,
        created_by: Optional[str] = None,
    ) -> List[Entry]:
        """List entries, newest first, optionally filtered."""
        query = select(Entry)
        if kind is not None:
            query = query.where(Entry.kind == EntryKind(kind).value)
        if status is not None:
            query = query.where(_status_filter(EntryStatus(status)))
        if created_by is not None:
            query = query.where(Entry.created_by == normalize_identity(created_by))
        query = query.order_by(Entry.created_at.desc(), Entry.id)

        try:
            result = await self.session.execute(query)
        except SQLAlchemyError as exc:
            raise StorageError("Entry query failed") from exc
        return list(result.scalars().all())

    async def insert(self, entry: Entry) -> Entry:
        """Persist a new entry. New entries always start as DRAFT."""
        entry.status = EntryStatus.DRAFT.value
        entry.created_by = normalize_identity(entry.created_by) or entry.created_by
        entry.kind = EntryKind(entry.kind).value
        entry.reviewed_by = entry.reviewed_at = None
        entry.published_by = entry.published_at = None
        entry.rejection_reason = None

        self.session.add(entry)
        await self._flush("Failed to insert entry")
        return entry

    async def update_payload(
        self,
        entry: Entry,
        actor: Optional[str],
        payload: Mapping[str, Any],
    ) -> Entry:
        """
        Replace kind-specific fields.

        Only the creator may edit, and only while the entry is DRAFT or
        REJECTED. Status is never changed here. The write is conditional
        on the status read into entry, so an edit racing a submit fails
        instead of landing on an entry already under review.

        Raises:
            ForbiddenError: actor is not the creator
            ValidationError: the entry is not editable in its status
            ConflictError: the status changed since entry was read
            NotFoundError: the row is gone
        """
        if normalize_identity(actor) != normalize_identity(entry.created_by):
            raise ForbiddenError("Only the entry's creator may edit it")
        if entry.workflow_status not in EDITABLE_STATUSES:
            raise ValidationError(
                f"Entry cannot be edited while {entry.workflow_status.value}",
                field="status",
            )

        stmt = (
            update(Entry)
            .where(Entry.id == entry.id, Entry.status == entry.status)
            .values(payload=dict(payload), updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        await self._execute_guarded(stmt, entry.id, entry.status, "Failed to update entry")
        return await self.get(entry.id)

    async def conditional_update(
        self,
        entry_id: str,
        expected_status: str,
        patch: TransitionPatch,
    ) -> Entry:
        """
        Atomically write patch if the stored status is still expected_status.

        expected_status is the raw stored value the caller read, so rows
        holding a malformed status can still be matched. The patch must
        carry a registered transition-table row leaving the status that
        expected_status reads as.

        Raises:
            InvalidTransitionError: the patch is not a table edge from expected_status
            ConflictError: the row exists but its status changed underneath us
            NotFoundError: the row is gone
        """
        from src.orchestration.state_machine import get_rule

        from_status = EntryStatus.parse(expected_status)
        if get_rule(from_status, patch.status) is not patch.rule:
            raise InvalidTransitionError(from_status.value, patch.status.value)

        values = {
            "status": patch.status.value,
            "updated_at": patch.updated_at,
            **patch.fields,
        }
        stmt = (
            update(Entry)
            .where(Entry.id == entry_id, Entry.status == expected_status)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        await self._execute_guarded(stmt, entry_id, expected_status, "Status update failed")
        return await self.get(entry_id)

    async def stats(self) -> Dict[str, int]:
        """Counts per status (as read) and per kind."""
        try:
            result = await self.session.execute(
                select(Entry.kind, Entry.status, func.count(Entry.id)).group_by(Entry.kind, Entry.status)
            )
        except SQLAlchemyError as exc:
            raise StorageError("Entry statistics query failed") from exc

        counts: Dict[str, int] = {"total": 0}
        counts.update({s.value: 0 for s in EntryStatus})
        counts.update({k.value: 0 for k in EntryKind})
        for kind, status, n in result.all():
            counts["total"] += n
            counts[EntryStatus.parse(status).value] += n
            if kind in counts:
                counts[kind] += n
        return counts

    async def _execute_guarded(self, stmt, entry_id: str, expected_status: str, message: str) -> None:
        """Run an UPDATE guarded on status; exactly one row must match."""
        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError as exc:
            raise StorageError(message) from exc

        if result.rowcount != 1:
            if await self.find(entry_id) is None:
                raise NotFoundError(f"Entry {entry_id} not found")
            raise ConflictError(entry_id, expected_status)

    async def _flush(self, message: str) -> None:
        try:
            await self.session.flush()
        except SQLAlchemyError as exc:
            raise StorageError(message) from exc
