"""
Kernel Data Models

Core SQLAlchemy models: entries, role assignments and the audit log.
"""

from src.kernel.models.base import Base, TimestampMixin, generate_id, utcnow
from src.kernel.models.entry import Entry, EntryKind, EntryStatus
from src.kernel.models.role_assignment import RoleAssignment, UserRole
from src.kernel.models.event_log import EventLog, EventType

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    "generate_id",
    "utcnow",
    # Entries
    "Entry",
    "EntryKind",
    "EntryStatus",
    # Roles
    "RoleAssignment",
    "UserRole",
    # Event Log
    "EventLog",
    "EventType",
]
