# src/plantspace/models/post.py
"""SQLAlchemy models for posts and likes."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from plantspace.db.ids import new_id
from plantspace.db.session import Base
from plantspace.db.time import utcnow
from plantspace.models.user import User

# Moderation status codes.
MODERATION_APPROVED = "approved"
MODERATION_PENDING = "pending"
MODERATION_REJECTED = "rejected"
MODERATION_REPORTED = "reported"


class Post(Base):
    """Primary content entity produced by users."""

    __tablename__ = "posts"
    __table_args__ = (
        CheckConstraint("length(text) >= 1 AND length(text) <= 2000", name="ck_posts_text_length"),
        CheckConstraint("likes_count >= 0", name="ck_posts_likes_count"),
        CheckConstraint("comments_count >= 0", name="ck_posts_comments_count"),
        CheckConstraint("reports_count >= 0", name="ck_posts_reports_count"),
        CheckConstraint(
            "moderation_status IN ('approved', 'pending', 'rejected', 'reported')",
            name="ck_posts_moderation_status",
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False
    )
    text: Mapped[str] = mapped_column(Text, nullable=False)
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    hashtags: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)

    # Denormalised counters, kept in step by the like/comment/report handlers.
    likes_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    comments_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    reports_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    moderation_status: Mapped[str] = mapped_column(
        String(20), default=MODERATION_APPROVED, index=True, nullable=False
    )
    is_agriculture_related: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    moderation_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    moderated_by: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("users.id"), nullable=True
    )
    moderated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    author: Mapped[User] = relationship("User", foreign_keys=[user_id], lazy="joined")


class Like(Base):
    """A user's like on a post; one per (user, post)."""

    __tablename__ = "likes"
    __table_args__ = (UniqueConstraint("user_id", "post_id", name="uq_likes_user_post"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    post_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("posts.id", ondelete="CASCADE"), index=True, nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
