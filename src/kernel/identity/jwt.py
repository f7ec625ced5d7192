"""
JWT access token verification.

Tokens are issued by the identity provider; the portal only needs the
caller's email from the ``sub`` claim. ``create_access_token`` exists for
tests and local scripts.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from pydantic import BaseModel, ConfigDict

from src.config import get_settings


class AccessTokenPayload(BaseModel):
    """
    JWT access token payload.

    Only ``sub`` is required; provider tokens may omit the other claims.
    """

    model_config = ConfigDict(from_attributes=True)

    sub: str  # Email
    exp: Optional[datetime] = None
    iat: Optional[datetime] = None
    jti: Optional[str] = None


def _claim_time(payload: dict, claim: str) -> Optional[datetime]:
    value = payload.get(claim)
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value, tz=timezone.utc)
    return None


class JWTManager:
    """JWT token creation and verification."""

    def __init__(
        self,
        secret_key: Optional[str] = None,
        algorithm: Optional[str] = None,
        access_token_expire_minutes: Optional[int] = None,
    ):
        settings = get_settings()
        self.secret_key = secret_key or settings.secret_key
        self.algorithm = algorithm or settings.algorithm
        self.access_token_expire_minutes = (
            access_token_expire_minutes or settings.access_token_expire_minutes
        )

    def create_access_token(
        self,
        email: str,
        expires_delta: Optional[timedelta] = None,
    ) -> tuple[str, datetime, str]:
        """
        Create a new access token.

        Returns:
            Tuple of (token, expiration_datetime, token_id)
        """
        now = datetime.now(timezone.utc)
        expire = now + (expires_delta or timedelta(minutes=self.access_token_expire_minutes))
        jti = str(uuid.uuid4())

        payload = {
            "sub": email,
            "exp": expire,
            "iat": now,
            "jti": jti,
            "type": "access",
        }

        token = jwt.encode(payload, self.secret_key, algorithm=self.algorithm)
        return token, expire, jti

    def verify_access_token(self, token: str) -> Optional[AccessTokenPayload]:
        """
        Verify and decode an access token.

        Only ``sub`` is required. A ``type`` claim, when present, must be
        "access".

        Returns:
            AccessTokenPayload if valid, None otherwise
        """
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
            )
        except JWTError:
            return None

        token_type = payload.get("type")
        if token_type is not None and token_type != "access":
            return None
        subject = payload.get("sub")
        if not isinstance(subject, str) or not subject.strip():
            return None

        jti = payload.get("jti")
        return AccessTokenPayload(
            sub=subject,
            exp=_claim_time(payload, "exp"),
            iat=_claim_time(payload, "iat"),
            jti=str(jti) if jti is not None else None,
        )


def create_access_token(email: str, expires_delta: Optional[timedelta] = None) -> str:
    """Convenience function to mint an access token."""
    token, _, _ = JWTManager().create_access_token(email, expires_delta)
    return token


def verify_access_token(token: str) -> Optional[AccessTokenPayload]:
    """Convenience function to verify an access token."""
    return JWTManager().verify_access_token(token)
