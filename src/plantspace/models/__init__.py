# src/plantspace/models/__init__.py
"""SQLAlchemy models for the PlantSpace application."""

from .comment import Comment
from .follow import Follow
from .message import Message
from .moderation import PostReport
from .post import Like, Post
from .user import User
from .verification import VerificationRequest

__all__ = [
    "Comment",
    "Follow",
    "Message",
    "PostReport",
    "Like", "Post",
    "User",
    "VerificationRequest",
]
