"""Shared API dependencies for authentication and common functionality."""

from typing import Annotated

from fastapi import Depends, Query
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from plantspace.core.errors import AuthenticationError, AuthorizationError
from plantspace.db.session import get_db
from plantspace.models import User
from plantspace.services.identity import resolve_user

# HTTP Bearer scheme for JWT authentication; missing headers are reported by us.
bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]
CredentialsDep = Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)]


def get_current_user(credentials: CredentialsDep, db: SessionDep) -> User:
    """Get the current authenticated user from the bearer token.

    Args:
        credentials: HTTP Bearer token credentials, if any were sent
        db: Database session

    Returns:
        User object for the authenticated user

    Raises:
        AuthenticationError: If the token is missing, invalid, expired, or the
            user no longer exists
    """
    token = credentials.credentials if credentials else None
    return resolve_user(db, token)


def get_optional_user(credentials: CredentialsDep, db: SessionDep) -> User | None:
    """Resolve the caller when a valid token is present, otherwise stay anonymous."""
    if credentials is None:
        return None
    try:
        return resolve_user(db, credentials.credentials)
    except AuthenticationError:
        return None


def require_admin(current_user: Annotated[User, Depends(get_current_user)]) -> User:
    """Allow only users flagged ``is_admin``."""
    if not current_user.is_admin:
        raise AuthorizationError("Admin access required", code="ADMIN_REQUIRED")
    return current_user


class PageParams:
    """Offset pagination parameters shared by list endpoints."""

    def __init__(
        self,
        page: int = Query(1, ge=1, description="1-based page number"),
        limit: int = Query(20, ge=1, le=50, description="Items per page"),
    ) -> None:
        self.page = page
        self.limit = limit

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


# Type aliases for the identity dependencies
CurrentUserDep = Annotated[User, Depends(get_current_user)]
OptionalUserDep = Annotated[User | None, Depends(get_optional_user)]
AdminUserDep = Annotated[User, Depends(require_admin)]
PageDep = Annotated[PageParams, Depends()]
