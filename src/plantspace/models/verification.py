# src/plantspace/models/verification.py
"""Verification requests submitted by users for the verified badge."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from plantspace.db.ids import new_id
from plantspace.db.session import Base
from plantspace.db.time import utcnow
from plantspace.models.user import User

REQUEST_PENDING = "pending"
REQUEST_APPROVED = "approved"
REQUEST_REJECTED = "rejected"


class VerificationRequest(Base):
    """Proof-of-work and selfie evidence awaiting admin review."""

    __tablename__ = "verification_requests"
    __table_args__ = (
        CheckConstraint(
            "length(work_description) >= 10", name="ck_verification_description_length"
        ),
        CheckConstraint(
            "status IN ('pending', 'approved', 'rejected')", name="ck_verification_status"
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False
    )
    proof_of_work_url: Mapped[str] = mapped_column(Text, nullable=False)
    selfie_url: Mapped[str] = mapped_column(Text, nullable=False)
    work_description: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(String(20), default=REQUEST_PENDING, nullable=False)
    admin_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    submitted_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    reviewed_by: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("users.id"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    user: Mapped[User] = relationship("User", foreign_keys=[user_id], lazy="joined")
