"""Error taxonomy for the PlantSpace API.

Every error is an ``HTTPException`` so handlers can simply ``raise`` it; the
application-level exception handler renders ``code`` (and ``errors`` /
``retry_after`` where present) next to the usual ``detail`` field.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from fastapi import HTTPException, status


class PlantSpaceError(HTTPException):
    """Base class for all errors surfaced to API clients."""

    status_code_default: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code_default: str = "INTERNAL_ERROR"
    message_default: str = "Internal server error"

    def __init__(
        self,
        detail: str | None = None,
        *,
        code: str | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        super().__init__(
            status_code=self.status_code_default,
            detail=detail or self.message_default,
            headers=headers,
        )
        self.code = code or self.code_default

    def to_payload(self) -> dict[str, Any]:
        """Return the JSON body sent to the client."""
        return {"detail": self.detail, "code": self.code}


class ValidationError(PlantSpaceError):
    """Malformed or missing input; lists every violated constraint."""

    status_code_default = status.HTTP_400_BAD_REQUEST
    code_default = "VALIDATION_ERROR"
    message_default = "Validation failed"

    def __init__(
        self,
        detail: str | None = None,
        *,
        errors: Sequence[str] | None = None,
        code: str | None = None,
    ) -> None:
        super().__init__(detail, code=code)
        self.errors = list(errors) if errors else [str(self.detail)]

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        payload["errors"] = self.errors
        return payload


class AuthenticationError(PlantSpaceError):
    """Missing, invalid or expired credential."""

    status_code_default = status.HTTP_401_UNAUTHORIZED
    code_default = "TOKEN_INVALID"
    message_default = "Could not validate credentials"

    def __init__(self, detail: str | None = None, *, code: str | None = None) -> None:
        super().__init__(detail, code=code, headers={"WWW-Authenticate": "Bearer"})


class AuthorizationError(PlantSpaceError):
    """Valid identity, insufficient rights."""

    status_code_default = status.HTTP_403_FORBIDDEN
    code_default = "FORBIDDEN"
    message_default = "Not authorized to perform this action"


class NotFoundError(PlantSpaceError):
    status_code_default = status.HTTP_404_NOT_FOUND
    code_default = "NOT_FOUND"
    message_default = "Resource not found"


class ConflictError(PlantSpaceError):
    """Duplicate resource, e.g. already following or already liked."""

    status_code_default = status.HTTP_409_CONFLICT
    code_default = "CONFLICT"
    message_default = "Resource already exists"


class RateLimitError(PlantSpaceError):
    status_code_default = status.HTTP_429_TOO_MANY_REQUESTS
    code_default = "RATE_LIMIT_EXCEEDED"
    message_default = "Too many requests"

    def __init__(self, retry_after: int, detail: str | None = None) -> None:
        super().__init__(detail, headers={"Retry-After": str(retry_after)})
        self.retry_after = retry_after

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        payload["retry_after"] = self.retry_after
        return payload


class InternalError(PlantSpaceError):
    """Unexpected store failure; the detail shown to clients is always generic."""


__all__ = [
    "PlantSpaceError",
    "ValidationError",
    "AuthenticationError",
    "AuthorizationError",
    "NotFoundError",
    "ConflictError",
    "RateLimitError",
    "InternalError",
]
