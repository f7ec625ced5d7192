"""Unit tests for access token handling."""

from datetime import datetime, timedelta, timezone

from jose import jwt

from src.kernel.identity.jwt import JWTManager

SECRET = "test-secret-key-for-testing-only"


def _sign(claims: dict) -> str:
    return jwt.encode(claims, SECRET, algorithm="HS256")


def test_round_trip(jwt_manager: JWTManager):
    token, expire, jti = jwt_manager.create_access_token("alice@uni.edu")

    payload = jwt_manager.verify_access_token(token)

    assert payload is not None
    assert payload.sub == "alice@uni.edu"
    assert payload.jti == jti
    assert payload.exp == expire.replace(microsecond=0)


def test_provider_token_with_only_subject_and_expiry(jwt_manager: JWTManager):
    expire = datetime.now(timezone.utc) + timedelta(minutes=5)
    token = _sign({"sub": "carol@uni.edu", "exp": expire})

    payload = jwt_manager.verify_access_token(token)

    assert payload is not None
    assert payload.sub == "carol@uni.edu"
    assert payload.iat is None
    assert payload.jti is None


def test_token_without_expiry(jwt_manager: JWTManager):
    payload = jwt_manager.verify_access_token(_sign({"sub": "carol@uni.edu"}))

    assert payload is not None
    assert payload.exp is None


def test_non_access_type_rejected(jwt_manager: JWTManager):
    token = _sign({"sub": "carol@uni.edu", "type": "refresh"})

    assert jwt_manager.verify_access_token(token) is None


def test_missing_subject_rejected(jwt_manager: JWTManager):
    assert jwt_manager.verify_access_token(_sign({"type": "access"})) is None
    assert jwt_manager.verify_access_token(_sign({"sub": "  "})) is None


def test_wrong_secret_rejected(jwt_manager: JWTManager):
    token, _, _ = jwt_manager.create_access_token("alice@uni.edu")
    other = JWTManager(secret_key="another-secret-key-for-testing-only", algorithm="HS256")

    assert other.verify_access_token(token) is None


def test_expired_token_rejected(jwt_manager: JWTManager):
    token, _, _ = jwt_manager.create_access_token("alice@uni.edu", expires_delta=timedelta(seconds=-10))

    assert jwt_manager.verify_access_token(token) is None


def test_garbage_rejected(jwt_manager: JWTManager):
    assert jwt_manager.verify_access_token("not-a-token") is None
