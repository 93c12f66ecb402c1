"""
JWT helpers for the Bearer authentication used by the API.

Tokens are HS256-signed and carry the user id in ``sub`` (as a string) plus
the user's ``role`` so clients can tell which endpoints they may call. The
role is re-read from the database on every request; the claim is informative.
"""

import os
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt

JWT_ALGORITHM = "HS256"
JWT_EXPIRATION_HOURS = int(os.getenv("JWT_EXPIRATION_HOURS", "24"))
MIN_PRODUCTION_SECRET_LENGTH = 32
_DEV_SECRET = "dev-jwt-secret-change-me"
_WEAK_SECRETS = (_DEV_SECRET, "dev-secret-change-me", "secret123")


def get_jwt_secret_key() -> str:
    """Signing secret from JWT_SECRET_KEY.

    Raises:
        ValueError: in production when the secret is a development default
            or shorter than 32 characters
    """
    secret = os.getenv("JWT_SECRET_KEY", _DEV_SECRET)
    is_production = os.getenv("FLASK_ENV") == "production"

    if is_production and (
        secret in _WEAK_SECRETS or len(secret) < MIN_PRODUCTION_SECRET_LENGTH
    ):
        raise ValueError(
            f"JWT_SECRET_KEY must be a non-default secret of at least "
            f"{MIN_PRODUCTION_SECRET_LENGTH} characters in production."
        )
    return secret


def create_access_token(
    claims: Dict[str, Any], expires_delta: Optional[timedelta] = None
) -> str:
    """Sign ``claims`` with an ``exp`` set ``expires_delta`` from now."""
    lifetime = expires_delta or timedelta(hours=JWT_EXPIRATION_HOURS)
    payload = {**claims, "exp": datetime.now(timezone.utc) + lifetime}
    return jwt.encode(payload, get_jwt_secret_key(), algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """Verified claims, or None for a bad signature, expiry or malformed token."""
    try:
        return jwt.decode(token, get_jwt_secret_key(), algorithms=[JWT_ALGORITHM])
    except jwt.PyJWTError:
        return None


def create_user_token(user_id: int, role: str) -> str:
    return create_access_token({"sub": str(user_id), "role": role, "type": "access"})


def get_user_id_from_token(token: str) -> Optional[int]:
    claims = decode_access_token(token) or {}
    subject = claims.get("sub")
    if subject is None or not str(subject).isdigit():
        return None
    return int(subject)
