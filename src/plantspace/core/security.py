"""Password hashing and JWT helpers."""
from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from plantspace.core.errors import AuthenticationError
from plantspace.core.settings import settings

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.bcrypt_rounds,
)


def hash_password(password: str) -> str:
    """Return a bcrypt hash of ``password``."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check ``plain_password`` against a stored bcrypt hash."""
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        return False


def create_access_token(
    user_id: str,
    *,
    username: str | None = None,
    email: str | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """Sign a JWT whose subject is the user id.

    Args:
        user_id: Identifier of the user the token is issued to.
        username: Optional username claim, informative only.
        email: Optional email claim, informative only.
        expires_delta: Override for the configured token lifetime.

    Returns:
        Encoded JWT string.
    """
    expire = datetime.now(UTC) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    payload: dict[str, Any] = {"sub": user_id, "exp": expire}
    if username is not None:
        payload["username"] = username
    if email is not None:
        payload["email"] = email
    return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> str:
    """Validate ``token`` and return its subject.

    Raises:
        AuthenticationError: If the token is malformed, expired or has no subject.
    """
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except ExpiredSignatureError as err:
        raise AuthenticationError("Token expired", code="TOKEN_EXPIRED") from err
    except JWTError as err:
        raise AuthenticationError("Invalid token", code="TOKEN_INVALID") from err

    subject = payload.get("sub")
    if not isinstance(subject, str) or not subject:
        raise AuthenticationError("Invalid token", code="TOKEN_INVALID")
    return subject
