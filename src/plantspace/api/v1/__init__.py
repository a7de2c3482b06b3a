# src/plantspace/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import (
    auth_router,
    comments_router,
    messages_router,
    moderation_router,
    onboarding_router,
    posts_router,
    relay_router,
    users_router,
    verification_router,
)

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
