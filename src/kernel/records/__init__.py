"""
Record Store - entry persistence behind a narrow interface.
"""

from src.kernel.records.record_store import (
    EDITABLE_STATUSES,
    RecordStore,
    TransitionPatch,
)

__all__ = [
    "EDITABLE_STATUSES",
    "RecordStore",
    "TransitionPatch",
]
