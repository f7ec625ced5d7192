"""
Pydantic schemas for API request/response validation.
"""

from src.schemas.entry import (
    PAYLOAD_SCHEMAS,
    EntryActionRequest,
    EntryCreate,
    EntryEventResponse,
    EntryResponse,
    EntryStatsResponse,
    EntryUpdate,
    PartnershipPayload,
    RankingPayload,
    ResearchPayload,
)
from src.schemas.role import (
    CurrentRoleResponse,
    RoleAssignRequest,
    RoleAssignmentResponse,
)
from src.schemas.export import ExportMeta, PublishedExportResponse
from src.schemas.common import (
    ErrorResponse,
    HealthResponse,
)

__all__ = [
    # Entry
    "PAYLOAD_SCHEMAS",
    "EntryActionRequest",
    "EntryCreate",
    "EntryEventResponse",
    "EntryResponse",
    "EntryStatsResponse",
    "EntryUpdate",
    "PartnershipPayload",
    "RankingPayload",
    "ResearchPayload",
    # Role
    "CurrentRoleResponse",
    "RoleAssignRequest",
    "RoleAssignmentResponse",
    # Export
    "ExportMeta",
    "PublishedExportResponse",
    # Common
    "ErrorResponse",
    "HealthResponse",
]
