"""
Permission Core - capability-based access control.
"""

from src.kernel.permissions.capabilities import (
    POLICIES,
    THREE_ROLE_POLICY,
    TWO_ROLE_POLICY,
    Capability,
    CapabilityPolicy,
    get_policy,
)

__all__ = [
    "POLICIES",
    "THREE_ROLE_POLICY",
    "TWO_ROLE_POLICY",
    "Capability",
    "CapabilityPolicy",
    "get_policy",
]
