"""
Role Directory - maps an identity (email) to a role.

This is the single place where stored role strings are interpreted.
Resolution never fails on a missing or malformed row: it degrades to the
active policy's lowest-privilege role.
"""

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.kernel.errors import NotFoundError, StorageError, UnauthorizedError, ValidationError
from src.kernel.events.event_store import EventStore
from src.kernel.events.event_types import RoleEvent
from src.kernel.models.event_log import EventType
from src.kernel.models.role_assignment import RoleAssignment, UserRole
from src.kernel.permissions.capabilities import Capability, CapabilityPolicy, get_policy
from src.logging_config import get_logger

logger = get_logger(__name__)


def normalize_identity(identity: Optional[str]) -> Optional[str]:
    """Trim and lowercase an identity; blank becomes None."""
    if identity is None:
        return None
    value = str(identity).strip().lower()
    return value or None


def match_role(raw: Optional[str], policy: CapabilityPolicy) -> Optional[UserRole]:
    """
    Match a raw role string against the policy's roles.

    Returns None when the value is missing or not a role of this policy.
    """
    if raw is None:
        return None
    value = str(raw).strip().lower()
    for role in policy.roles:
        if role.value == value:
            return role
    return None


class RoleDirectory:
    """
    Service for resolving and administering role assignments.

    Administrative operations take the acting identity explicitly and are
    gated by the MANAGE_ROLES capability of the active policy.
    """

    ENTITY_TYPE = "role_assignment"

    def __init__(self, session: AsyncSession, policy: Optional[CapabilityPolicy] = None):
        self.session = session
        self.policy = policy or get_policy()
        self.event_store = EventStore(session)

    async def resolve_role(self, identity: Optional[str]) -> UserRole:
        """
        Resolve the role for an identity.

        Raises:
            UnauthorizedError: identity is missing or blank
            StorageError: the lookup itself failed
        """
        email = normalize_identity(identity)
        if email is None:
            raise UnauthorizedError("No authenticated identity")

        row = await self._get_row(email)
        if row is None:
            return self.policy.default_role

        role = match_role(row.role, self.policy)
        if role is None:
            logger.warning(
                "Unrecognised role value, using least privilege",
                extra={"identity": email, "stored_role": row.role},
            )
            return self.policy.default_role
        return role

    async def capabilities_of(self, identity: Optional[str]) -> frozenset:
        role = await self.resolve_role(identity)
        return self.policy.capabilities_for(role)

    async def require(self, actor: Optional[str], capability: Capability, operation: str) -> UserRole:
        """Resolve actor and raise ForbiddenError unless they hold capability."""
        role = await self.resolve_role(actor)
        self.policy.require_capability(role, capability, operation)
        return role

    async def list_assignments(self, actor: Optional[str]) -> List[RoleAssignment]:
        """List every role row. Admin only."""
        await self.require(actor, Capability.MANAGE_ROLES, "list role assignments")
        try:
            result = await self.session.execute(
                select(RoleAssignment).order_by(RoleAssignment.email)
            )
        except SQLAlchemyError as exc:
            raise StorageError("Failed to list role assignments") from exc
        return list(result.scalars().all())

    async def assign_role(
        self,
        actor: Optional[str],
        identity: str,
        role: str,
        ip_address: Optional[str] = None,
    ) -> RoleAssignment:
        """
        Create or replace the role row for identity. Admin only.

        Raises:
            ValidationError: identity blank or role unknown to the active policy
        """
        actor_email = normalize_identity(actor)
        await self.require(actor_email, Capability.MANAGE_ROLES, "assign roles")

        email = normalize_identity(identity)
        if email is None:
            raise ValidationError("Identity is required", field="email")
        new_role = match_role(role, self.policy)
        if new_role is None:
            allowed = ", ".join(sorted(r.value for r in self.policy.roles))
            raise ValidationError(
                f"Unknown role '{role}'. Expected one of: {allowed}",
                field="role",
            )

        row = await self._get_row(email)
        previous = row.role if row else None
        if row is None:
            row = RoleAssignment(email=email, role=new_role.value, assigned_by=actor_email)
            self.session.add(row)
        else:
            row.role = new_role.value
            row.assigned_by = actor_email

        await self.event_store.log_from_model(
            event_type=EventType.ROLE_ASSIGNED,
            entity_type=self.ENTITY_TYPE,
            entity_id=email,
            actor=actor_email,
            payload_model=RoleEvent(role=new_role.value, previous_role=previous),
            ip_address=ip_address,
        )
        await self._flush()
        logger.info(
            "Role assigned",
            extra={"identity": email, "role": new_role.value, "previous_role": previous, "actor": actor_email},
        )
        return row

    async def revoke_role(
        self,
        actor: Optional[str],
        identity: str,
        ip_address: Optional[str] = None,
    ) -> None:
        """
        Delete the role row for identity. Admin only.

        The identity falls back to least privilege afterwards.
        """
        actor_email = normalize_identity(actor)
        await self.require(actor_email, Capability.MANAGE_ROLES, "revoke roles")

        email = normalize_identity(identity)
        row = await self._get_row(email) if email else None
        if row is None:
            raise NotFoundError(f"No role assignment for '{identity}'")

        previous = row.role
        await self.session.delete(row)
        await self.event_store.log_from_model(
            event_type=EventType.ROLE_REVOKED,
            entity_type=self.ENTITY_TYPE,
            entity_id=email,
            actor=actor_email,
            payload_model=RoleEvent(previous_role=previous),
            ip_address=ip_address,
        )
        await self._flush()
        logger.info("Role revoked", extra={"identity": email, "previous_role": previous, "actor": actor_email})

    async def bootstrap_admin(self, identity: Optional[str]) -> Optional[RoleAssignment]:
        """
        Give identity the admin role if it has no row yet.

        Used once at startup so a fresh deployment has someone able to
        assign roles. Returns the new row, or None if nothing was written.
        """
        email = normalize_identity(identity)
        if email is None:
            return None
        if await self._get_row(email) is not None:
            return None

        row = RoleAssignment(email=email, role=UserRole.ADMIN.value, assigned_by=None)
        self.session.add(row)
        await self.event_store.log_from_model(
            event_type=EventType.ROLE_BOOTSTRAPPED,
            entity_type=self.ENTITY_TYPE,
            entity_id=email,
            actor=None,
            payload_model=RoleEvent(role=UserRole.ADMIN.value),
        )
        await self._flush()
        logger.info("Bootstrap admin assigned", extra={"identity": email})
        return row

    async def _get_row(self, email: str) -> Optional[RoleAssignment]:
        try:
            result = await self.session.execute(
                select(RoleAssignment).where(RoleAssignment.email == email)
            )
        except SQLAlchemyError as exc:
            raise StorageError("Role lookup failed") from exc
        return result.scalar_one_or_none()

    async def _flush(self) -> None:
        try:
            await self.session.flush()
        except SQLAlchemyError as exc:
            raise StorageError("Failed to write role assignment") from exc
