# src/plantspace/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .auth import router as auth_router
from .comments import router as comments_router
from .messages import router as messages_router
from .moderation import router as moderation_router
from .onboarding import router as onboarding_router
from .posts import router as posts_router
from .relay import router as relay_router
from .users import router as users_router
from .verification import router as verification_router

__all__ = [
    "auth_router",
    "posts_router",
    "users_router",
    "messages_router",
    "comments_router",
    "moderation_router",
    "verification_router",
    "onboarding_router",
    "relay_router",
]
