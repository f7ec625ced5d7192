"""
Entry model - one workflow-tracked record (research, partnership or ranking).

Entry.status is written only by the workflow engine through a conditional
update; everything else treats it as read-only.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from sqlalchemy import DateTime, Index, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from src.kernel.models.base import Base, TimestampMixin, generate_id


class EntryKind(str, Enum):
    """Kinds of records collected by the portal."""

    RESEARCH = "research"
    PARTNERSHIP = "partnership"
    RANKING = "ranking"

    @classmethod
    def parse(cls, raw: str) -> "EntryKind":
        """
        Read a kind name from a client.

        Trimmed and lowercased; ``academic`` is accepted for RESEARCH.
        Raises ValueError for anything else.
        """
        value = str(raw).strip().lower()
        return cls(_KIND_ALIASES.get(value, value))


_KIND_ALIASES = {
    "academic": "research",
}


class EntryStatus(str, Enum):
    """Workflow state of an entry."""

    DRAFT = "draft"
    PENDING_REVIEW = "pending_review"
    APPROVED = "approved"
    PUBLISHED = "published"
    REJECTED = "rejected"

    @classmethod
    def parse(cls, raw: Optional[str]) -> "EntryStatus":
        """
        Read a stored status value.

        Values are trimmed and lowercased; the legacy ``in_review`` spelling
        maps to PENDING_REVIEW. Anything unrecognised (including None) reads
        as DRAFT.
        """
        if raw is None:
            return cls.DRAFT
        value = str(raw.value if isinstance(raw, Enum) else raw).strip().lower()
        value = _STATUS_ALIASES.get(value, value)
        try:
            return cls(value)
        except ValueError:
            return cls.DRAFT


_STATUS_ALIASES = {
    "in_review": EntryStatus.PENDING_REVIEW.value,
}


class Entry(Base, TimestampMixin):
    """
    A record submitted through the portal.

    Kind-specific fields (title/authors, partner name, ranking body, ...) live
    in ``payload`` and are opaque to the workflow.
    """

    __tablename__ = "entries"

    id: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
        default=generate_id,
    )
    kind: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
    )

    # Raw stored value; read through workflow_status
    status: Mapped[str] = mapped_column(
        String(50),
        default=EntryStatus.DRAFT.value,
        nullable=False,
    )

    created_by: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
    )

    # Review decision
    reviewed_by: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    reviewed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    # Publication
    published_by: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    published_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    rejection_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    payload: Mapped[dict[str, Any]] = mapped_column(
        JSON,
        nullable=False,
        default=dict,
    )

    __table_args__ = (
        Index("ix_entries_kind_status", "kind", "status"),
    )

    @property
    def workflow_status(self) -> EntryStatus:
        return EntryStatus.parse(self.status)

    @property
    def entry_kind(self) -> EntryKind:
        return EntryKind(self.kind)

    def __repr__(self) -> str:
        return f"<Entry {self.id} {self.kind} {self.status}>"
