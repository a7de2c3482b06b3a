"""Message ledger operations shared by the REST endpoints and the relay."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import and_, func, or_
from sqlalchemy.orm import Session

from plantspace.core.errors import NotFoundError, ValidationError
from plantspace.db.time import utcnow
from plantspace.models import Message, User
from plantspace.schemas.message import MessageResponse
from plantspace.schemas.user import UserSummary

logger = logging.getLogger(__name__)

MAX_MESSAGE_LENGTH = 1000


def serialize_message(message: Message) -> dict[str, Any]:
    """Render a message (with its sender profile) as a JSON-safe dict."""
    return MessageResponse.model_validate(message).model_dump(mode="json")


def create_message(
    db: Session,
    *,
    sender_id: str,
    receiver_id: str,
    text: str | None,
    image_url: str | None = None,
) -> Message:
    """Persist a message from ``sender_id`` to ``receiver_id``.

    Raises:
        ValidationError: If there is no content, the text is too long, or the
            sender is addressing themselves.
        NotFoundError: If the receiver does not exist.
    """
    body = (text or "").strip()
    errors: list[str] = []
    if not body and not image_url:
        errors.append("Message text or image is required")
    if len(body) > MAX_MESSAGE_LENGTH:
        errors.append(f"Message cannot exceed {MAX_MESSAGE_LENGTH} characters")
    if sender_id == receiver_id:
        errors.append("Cannot send a message to yourself")
    if errors:
        raise ValidationError(errors=errors)

    if db.get(User, receiver_id) is None:
        raise NotFoundError("Receiver not found")

    message = Message(
        sender_id=sender_id,
        receiver_id=receiver_id,
        text=body,
        image_url=image_url or None,
    )
    db.add(message)
    db.commit()
    db.refresh(message)
    return message


def _between(user_id: str, other_user_id: str):
    return or_(
        and_(Message.sender_id == user_id, Message.receiver_id == other_user_id),
        and_(Message.sender_id == other_user_id, Message.receiver_id == user_id),
    )


def get_conversation(
    db: Session,
    user_id: str,
    other_user_id: str,
    *,
    page: int = 1,
    limit: int = 50,
) -> tuple[list[Message], bool]:
    """Return one page of the conversation, oldest first, and whether more exist.

    Messages in the page that were addressed to ``user_id`` are stamped read.
    """
    offset = (page - 1) * limit
    newest_first = (
        db.query(Message)
        .filter(_between(user_id, other_user_id))
        .order_by(Message.created_at.desc(), Message.id.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )

    now = utcnow()
    stamped = 0
    for message in newest_first:
        if message.receiver_id == user_id and message.read_at is None:
            message.read_at = now
            stamped += 1
    if stamped:
        db.commit()

    return list(reversed(newest_first)), len(newest_first) == limit


def list_conversations(db: Session, user_id: str) -> list[dict[str, Any]]:
    """Group the user's messages by counterpart, newest conversation first."""
    messages = (
        db.query(Message)
        .filter(or_(Message.sender_id == user_id, Message.receiver_id == user_id))
        .order_by(Message.created_at.desc(), Message.id.desc())
        .all()
    )

    conversations: dict[str, dict[str, Any]] = {}
    for message in messages:
        if message.sender_id == user_id:
            other_id, other = message.receiver_id, message.receiver
        else:
            other_id, other = message.sender_id, message.sender
        entry = conversations.get(other_id)
        if entry is None:
            entry = {
                "user": UserSummary.model_validate(other).model_dump(mode="json"),
                "last_message": serialize_message(message),
                "unread_count": 0,
            }
            conversations[other_id] = entry
        if message.receiver_id == user_id and message.read_at is None:
            entry["unread_count"] += 1

    # Insertion order already follows the newest message of each conversation.
    return list(conversations.values())


def mark_conversation_read(db: Session, user_id: str, other_user_id: str) -> int:
    """Stamp every unread message from ``other_user_id`` to ``user_id``."""
    updated = (
        db.query(Message)
        .filter(
            Message.sender_id == other_user_id,
            Message.receiver_id == user_id,
            Message.read_at.is_(None),
        )
        .update({Message.read_at: utcnow()}, synchronize_session="fetch")
    )
    db.commit()
    return int(updated or 0)


def delete_message(db: Session, user_id: str, message_id: str) -> None:
    """Delete a message; only its sender may do so."""
    message = (
        db.query(Message)
        .filter(Message.id == message_id, Message.sender_id == user_id)
        .first()
    )
    if message is None:
        raise NotFoundError("Message not found or unauthorized")
    db.delete(message)
    db.commit()


def unread_count(db: Session, user_id: str) -> int:
    count = (
        db.query(func.count(Message.id))
        .filter(Message.receiver_id == user_id, Message.read_at.is_(None))
        .scalar()
    )
    return int(count or 0)
