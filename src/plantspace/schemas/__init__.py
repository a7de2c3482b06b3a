# src/plantspace/schemas/__init__.py
"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .comment import CommentCreate, CommentResponse
from .message import MessageCreate, MessageResponse
from .moderation import ModeratePostRequest, PostReportCreate, ReviewReportRequest
from .post import FeedResponse, Pagination, PostCreate, PostResponse
from .relay import RelayEnvelope
from .user import (
    AuthResponse,
    LoginRequest,
    PasswordChangeRequest,
    ProfileUpdateRequest,
    RegisterRequest,
    UserResponse,
    UserSummary,
)
from .verification import (
    UsernameCheckRequest,
    UsernameCheckResponse,
    VerificationReviewRequest,
    VerificationSubmitRequest,
)

__all__ = [
    "CommentCreate", "CommentResponse",
    "MessageCreate", "MessageResponse",
    "ModeratePostRequest", "PostReportCreate", "ReviewReportRequest",
    "FeedResponse", "Pagination", "PostCreate", "PostResponse",
    "RelayEnvelope",
    "AuthResponse", "LoginRequest", "PasswordChangeRequest", "ProfileUpdateRequest",
    "RegisterRequest", "UserResponse", "UserSummary",
    "UsernameCheckRequest", "UsernameCheckResponse",
    "VerificationReviewRequest", "VerificationSubmitRequest",
]
