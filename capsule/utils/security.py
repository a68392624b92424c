"""Security utilities: identity-provider JWTs and invite tokens."""

import secrets
from datetime import datetime, timedelta, timezone

import jwt

from capsule.config import settings


# --- JWT Tokens ---

def create_access_token(user_id: str, expires_minutes: int | None = None) -> str:
    """Issue a token shaped like the identity provider's. Used by tests and local tooling."""
    minutes = expires_minutes if expires_minutes is not None else settings.access_token_expire_minutes
    expire = datetime.now(timezone.utc) + timedelta(minutes=minutes)
    payload = {
        "sub": user_id,
        "exp": expire,
        "type": "access",
    }
    if settings.jwt_audience:
        payload["aud"] = settings.jwt_audience
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> dict:
    """Verify signature, expiry and (when configured) audience; return the claims."""
    return jwt.decode(
        token,
        settings.jwt_secret,
        algorithms=[settings.jwt_algorithm],
        audience=settings.jwt_audience,
        options={"verify_aud": bool(settings.jwt_audience)},
    )


# --- Invite Token ---

def generate_invite_token() -> str:
    """URL-safe, unguessable invite token."""
    return secrets.token_urlsafe(settings.invite_token_bytes)
