"""
Capability policy - which roles hold which capabilities.

The workflow transition table and role administration are both expressed in
terms of capabilities, never raw role names. A policy is a role ->
capabilities mapping plus the role unknown identities fall back to; the
two pipeline shapes the portal supports are two policies over the same
transition table.
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Dict, FrozenSet, Mapping, Optional

from src.config import get_settings
from src.kernel.errors import ForbiddenError
from src.kernel.models.role_assignment import UserRole


class Capability(str, Enum):
    """Named permissions derived from a role."""

    REVIEW = "can_review"
    PUBLISH = "can_publish"
    MANAGE_ROLES = "can_manage_roles"


@dataclass(frozen=True)
class CapabilityPolicy:
    """Role -> capability grants for one pipeline shape."""

    name: str
    default_role: UserRole
    grants: Mapping[UserRole, FrozenSet[Capability]]

    @property
    def roles(self) -> FrozenSet[UserRole]:
        return frozenset(self.grants)

    def capabilities_for(self, role: UserRole) -> FrozenSet[Capability]:
        return self.grants.get(role, frozenset())

    def has_capability(self, role: UserRole, capability: Capability) -> bool:
        return capability in self.capabilities_for(role)

    def require_capability(
        self,
        role: UserRole,
        capability: Capability,
        operation: str,
    ) -> None:
        """Raise ForbiddenError unless role holds capability."""
        if not self.has_capability(role, capability):
            raise ForbiddenError(
                f"Role '{role.value}' lacks '{capability.value}' required to {operation}"
            )


def _grants(mapping: Dict[UserRole, set]) -> Mapping[UserRole, FrozenSet[Capability]]:
    return MappingProxyType({role: frozenset(caps) for role, caps in mapping.items()})


# professor authors, department head reviews, academic director publishes
THREE_ROLE_POLICY = CapabilityPolicy(
    name="three_role",
    default_role=UserRole.PROFESSOR,
    grants=_grants({
        UserRole.PROFESSOR: set(),
        UserRole.DEPARTMENT_HEAD: {Capability.REVIEW},
        UserRole.ACADEMIC_DIRECTOR: {Capability.REVIEW, Capability.PUBLISH},
        UserRole.ADMIN: {Capability.REVIEW, Capability.PUBLISH, Capability.MANAGE_ROLES},
    }),
)

# reviewer both reviews and publishes
TWO_ROLE_POLICY = CapabilityPolicy(
    name="two_role",
    default_role=UserRole.AUTHOR,
    grants=_grants({
        UserRole.AUTHOR: set(),
        UserRole.REVIEWER: {Capability.REVIEW, Capability.PUBLISH},
        UserRole.ADMIN: {Capability.REVIEW, Capability.PUBLISH, Capability.MANAGE_ROLES},
    }),
)

POLICIES: Mapping[str, CapabilityPolicy] = MappingProxyType({
    THREE_ROLE_POLICY.name: THREE_ROLE_POLICY,
    TWO_ROLE_POLICY.name: TWO_ROLE_POLICY,
})


def get_policy(name: Optional[str] = None) -> CapabilityPolicy:
    """Return the named policy, or the one selected by WORKFLOW_PROFILE."""
    key = name or get_settings().workflow_profile
    try:
        return POLICIES[key]
    except KeyError:
        raise ValueError(f"Unknown workflow profile: {key}") from None
