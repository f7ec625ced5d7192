"""
Stable Kernel Layer

Foundational components the workflow is built on:
- Entry and role assignment models
- Immutable Event Log (all mutations logged)
- Identity Core (bearer identity, role directory)
- Permission Core (capability policies)
- Record Store (entry persistence without an unconditional status setter)

Architectural Invariants:
- Entry status changes only through the workflow engine's conditional update
- Every mutation is logged in the same transaction
- Role strings are interpreted only by the role directory
"""

from src.kernel.models import (
    Entry,
    EntryKind,
    EntryStatus,
    RoleAssignment,
    UserRole,
    EventLog,
    EventType,
)

__all__ = [
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
