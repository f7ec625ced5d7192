"""
Role administration endpoints.

Authorization is decided by RoleDirectory (MANAGE_ROLES capability), not
by these handlers.
"""

from typing import List

from fastapi import APIRouter, Request, status

from src.api.deps import CurrentIdentity, DbSession, get_client_ip
from src.kernel.identity.role_directory import RoleDirectory
from src.schemas.common import ErrorResponse
from src.schemas.role import CurrentRoleResponse, RoleAssignRequest, RoleAssignmentResponse

router = APIRouter(
    responses={
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
)


@router.get("/me", response_model=CurrentRoleResponse)
async def get_my_role(
    identity: CurrentIdentity,
    db: DbSession,
):
    """The caller's resolved role and capabilities."""
    directory = RoleDirectory(db)
    role = await directory.resolve_role(identity)
    return CurrentRoleResponse(
        email=identity,
        role=role.value,
        capabilities=sorted(c.value for c in directory.policy.capabilities_for(role)),
        workflow_profile=directory.policy.name,
    )


@router.get("", response_model=List[RoleAssignmentResponse])
async def list_roles(
    identity: CurrentIdentity,
    db: DbSession,
):
    """List all role assignments (admin only)."""
    rows = await RoleDirectory(db).list_assignments(identity)
    return [RoleAssignmentResponse.model_validate(r) for r in rows]


@router.put("/{email}", response_model=RoleAssignmentResponse)
async def assign_role(
    request: Request,
    email: str,
    data: RoleAssignRequest,
    identity: CurrentIdentity,
    db: DbSession,
):
    """Create or change an identity's role (admin only)."""
    row = await RoleDirectory(db).assign_role(
        identity,
        email,
        data.role,
        ip_address=get_client_ip(request),
    )
    return RoleAssignmentResponse.model_validate(row)


@router.delete("/{email}", status_code=status.HTTP_204_NO_CONTENT)
async def revoke_role(
    request: Request,
    email: str,
    identity: CurrentIdentity,
    db: DbSession,
):
    """Remove an identity's role row; it falls back to least privilege (admin only)."""
    await RoleDirectory(db).revoke_role(identity, email, ip_address=get_client_ip(request))
