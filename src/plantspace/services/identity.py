"""Credential-to-identity resolution shared by HTTP handlers and the relay."""

from __future__ import annotations

from sqlalchemy.orm import Session

from plantspace.core.errors import AuthenticationError
from plantspace.core.security import decode_access_token
from plantspace.models import User


def resolve_user(db: Session, token: str | None) -> User:
    """Return the user a bearer token belongs to.

    The user row is re-read on every call so deleted accounts lose access
    immediately.

    Raises:
        AuthenticationError: If the token is missing, malformed, expired, or its
            subject no longer exists.
    """
    if not token:
        raise AuthenticationError("Access token required", code="TOKEN_MISSING")

    user_id = decode_access_token(token)
    user = db.get(User, user_id)
    if user is None:
        raise AuthenticationError("Invalid or expired token", code="TOKEN_INVALID")
    return user
