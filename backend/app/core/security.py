from __future__ import annotations

from typing import Any, Optional

from jose import JWTError, jwt
from pydantic import BaseModel

from app.core.config import settings


class Identity(BaseModel):
    """Caller identity resolved from an identity-provider token."""

    id: str
    email: str
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None


def verify_token(token: str) -> dict[str, Any]:
    try:
        return jwt.decode(
            token,
            settings.AUTH_JWT_SECRET,
            algorithms=[settings.AUTH_JWT_ALGORITHM],
            audience=settings.AUTH_JWT_AUDIENCE,
        )
    except JWTError as exc:
        raise ValueError("Invalid token") from exc


def identity_from_claims(payload: dict[str, Any]) -> Identity:
    subject = payload.get("sub")
    if not subject:
        raise ValueError("Token has no subject")

    metadata = payload.get("user_metadata") or {}
    return Identity(
        id=str(subject),
        email=payload.get("email") or "",
        full_name=metadata.get("full_name") or metadata.get("name"),
        avatar_url=metadata.get("avatar_url") or metadata.get("picture"),
    )


def resolve_identity(token: str) -> Identity:
    """Verify a bearer token and map its claims to an :class:`Identity`."""
    return identity_from_claims(verify_token(token))
