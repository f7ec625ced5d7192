"""
FastAPI dependencies for identity, database sessions and the export secret.
"""

import secrets
from typing import Annotated, Optional

from fastapi import Depends, Header, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from src.config import Settings, get_settings
from src.database import get_db
from src.kernel.identity.jwt import verify_access_token
from src.kernel.identity.role_directory import normalize_identity


security = HTTPBearer(auto_error=False)

DbSession = Annotated[AsyncSession, Depends(get_db)]
AppSettings = Annotated[Settings, Depends(get_settings)]


async def get_current_identity(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
) -> str:
    """
    Return the caller's email from the bearer token or raise 401.

    The identity is passed explicitly into every workflow call; nothing
    keeps it as ambient state.
    """
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = verify_access_token(credentials.credentials)
    identity = normalize_identity(payload.sub) if payload else None
    if not identity:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return identity


CurrentIdentity = Annotated[str, Depends(get_current_identity)]


EXPORT_KEY_HEADER = "X-Export-API-Key"


async def require_export_key(
    settings: AppSettings,
    api_key: Annotated[Optional[str], Header(alias=EXPORT_KEY_HEADER)] = None,
) -> None:
    """
    Check the shared export secret, if one is configured.

    The header must match the configured key byte-for-byte.
    """
    expected = settings.export_api_key
    if not expected:
        return
    provided = (api_key or "").encode("utf-8")
    if not secrets.compare_digest(provided, expected.encode("utf-8")):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Unauthorized. Provide a valid {EXPORT_KEY_HEADER} header.",
        )


ExportKey = Annotated[None, Depends(require_export_key)]


def get_client_ip(request: Request) -> Optional[str]:
    """Extract client IP from request."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None
