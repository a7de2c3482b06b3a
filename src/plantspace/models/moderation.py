# src/plantspace/models/moderation.py
"""Models tracking user reports against posts."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from plantspace.db.ids import new_id
from plantspace.db.session import Base
from plantspace.db.time import utcnow
from plantspace.models.post import Post
from plantspace.models.user import User

REPORT_PENDING = "pending"
REPORT_REVIEWED = "reviewed"
REPORT_DISMISSED = "dismissed"


class PostReport(Base):
    """A single user's report of a post; one per (post, reporter)."""

    __tablename__ = "post_reports"
    __table_args__ = (
        UniqueConstraint("post_id", "reporter_id", name="uq_post_reports_pair"),
        CheckConstraint(
            "reason IN ('not_agriculture_related', 'spam', 'inappropriate', "
            "'misinformation', 'other')",
            name="ck_post_reports_reason",
        ),
        CheckConstraint(
            "status IN ('pending', 'reviewed', 'dismissed')",
            name="ck_post_reports_status",
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    post_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("posts.id", ondelete="CASCADE"), index=True, nullable=False
    )
    reporter_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False
    )
    reason: Mapped[str] = mapped_column(String(50), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(20), default=REPORT_PENDING, nullable=False)
    admin_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    reviewed_by: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("users.id"), nullable=True
    )
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    post: Mapped[Post] = relationship("Post", lazy="joined")
    reporter: Mapped[User] = relationship("User", foreign_keys=[reporter_id], lazy="joined")
