"""
Identity Core - bearer identity verification and the role directory.
"""

from src.kernel.identity.jwt import (
    AccessTokenPayload,
    JWTManager,
    create_access_token,
    verify_access_token,
)
from src.kernel.identity.role_directory import (
    RoleDirectory,
    match_role,
    normalize_identity,
)

__all__ = [
    "AccessTokenPayload",
    "JWTManager",
    "create_access_token",
    "verify_access_token",
    "RoleDirectory",
    "match_role",
    "normalize_identity",
]
