# src/plantspace/models/message.py
"""Direct messages exchanged between two users."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from plantspace.db.ids import new_id
from plantspace.db.session import Base
from plantspace.db.time import utcnow
from plantspace.models.user import User


class Message(Base):
    """One chat message.

    Written by both the REST endpoint and the real-time relay; mutated only to
    stamp ``read_at`` and deleted only by its sender.
    """

    __tablename__ = "messages"
    __table_args__ = (
        CheckConstraint("sender_id != receiver_id", name="ck_messages_not_self"),
        CheckConstraint("length(text) <= 1000", name="ck_messages_text_length"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    sender_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False
    )
    receiver_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False
    )
    text: Mapped[str] = mapped_column(Text, nullable=False, default="")
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, index=True
    )
    read_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    sender: Mapped[User] = relationship("User", foreign_keys=[sender_id], lazy="joined")
    receiver: Mapped[User] = relationship("User", foreign_keys=[receiver_id], lazy="joined")
