"""Role assignment schemas."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class RoleAssignRequest(BaseModel):
    """Request to set an identity's role."""

    role: str = Field(..., min_length=1, max_length=50)


class RoleAssignmentResponse(BaseModel):
    """Stored role row."""

    model_config = ConfigDict(from_attributes=True)

    email: str
    role: str
    assigned_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class CurrentRoleResponse(BaseModel):
    """The caller's resolved role and capabilities."""

    email: str
    role: str
    capabilities: List[str]
    workflow_profile: str
