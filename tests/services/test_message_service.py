"""Tests for the shared message ledger operations."""

import pytest

from plantspace.core.errors import NotFoundError, ValidationError
from plantspace.models import Message
from plantspace.services import messages as message_service


def test_create_message_trims_and_stores(db_session, test_user, other_user):
    message = message_service.create_message(
        db_session, sender_id=test_user.id, receiver_id=other_user.id, text="  hello  "
    )
    assert message.text == "hello"
    assert message.read_at is None
    assert db_session.query(Message).count() == 1


def test_create_message_collects_every_violation(db_session, test_user):
    with pytest.raises(ValidationError) as exc_info:
        message_service.create_message(
            db_session, sender_id=test_user.id, receiver_id=test_user.id, text=" "
        )
    assert exc_info.value.errors == [
        "Message text or image is required",
        "Cannot send a message to yourself",
    ]


def test_create_message_length_limit(db_session, test_user, other_user):
    with pytest.raises(ValidationError) as exc_info:
        message_service.create_message(
            db_session, sender_id=test_user.id, receiver_id=other_user.id, text="a" * 1001
        )
    assert exc_info.value.errors == ["Message cannot exceed 1000 characters"]

    message = message_service.create_message(
        db_session, sender_id=test_user.id, receiver_id=other_user.id, text="a" * 1000
    )
    assert len(message.text) == 1000


def test_create_message_unknown_receiver(db_session, test_user):
    with pytest.raises(NotFoundError):
        message_service.create_message(
            db_session, sender_id=test_user.id, receiver_id="ghost", text="hi"
        )


def test_serialize_message_includes_sender(db_session, test_user, other_user):
    message = message_service.create_message(
        db_session,
        sender_id=test_user.id,
        receiver_id=other_user.id,
        text="",
        image_url="https://cdn.example.com/pic.jpg",
    )
    record = message_service.serialize_message(message)
    assert record["image_url"] == "https://cdn.example.com/pic.jpg"
    assert record["sender"]["username"] == test_user.username
    assert isinstance(record["created_at"], str)


def test_conversation_paging(db_session, test_user, other_user):
    for index in range(3):
        message_service.create_message(
            db_session, sender_id=other_user.id, receiver_id=test_user.id, text=f"m{index}"
        )

    page, has_more = message_service.get_conversation(db_session, test_user.id, other_user.id, limit=2)
    assert len(page) == 2
    assert has_more is True
    assert page[0].created_at <= page[1].created_at
    assert all(message.read_at is not None for message in page)
    assert message_service.unread_count(db_session, test_user.id) == 1


def test_mark_read_and_delete(db_session, test_user, other_user):
    incoming = message_service.create_message(
        db_session, sender_id=other_user.id, receiver_id=test_user.id, text="ping"
    )
    assert message_service.mark_conversation_read(db_session, test_user.id, other_user.id) == 1
    assert message_service.mark_conversation_read(db_session, test_user.id, other_user.id) == 0

    with pytest.raises(NotFoundError):
        message_service.delete_message(db_session, test_user.id, incoming.id)
    message_service.delete_message(db_session, other_user.id, incoming.id)
    assert db_session.query(Message).count() == 0
