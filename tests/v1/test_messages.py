# tests/v1/test_messages.py
"""Tests for the direct message endpoints."""

from datetime import timedelta

from fastapi import status

from plantspace.db.time import utcnow
from plantspace.models import Message


def _add_message(db, sender, receiver, text, *, seconds_ago, read=False):
    created = utcnow() - timedelta(seconds=seconds_ago)
    message = Message(
        sender_id=sender.id,
        receiver_id=receiver.id,
        text=text,
        created_at=created,
        read_at=created if read else None,
    )
    db.add(message)
    db.flush()
    return message


def test_send_message(client, test_user, other_user, auth_token) -> None:
    response = client.post(
        "/api/messages",
        json={"receiverId": other_user.id, "text": "  Want some seedlings?  "},
        headers=auth_token,
    )
    assert response.status_code == status.HTTP_201_CREATED
    record = response.json()["data"]
    assert record["sender_id"] == test_user.id
    assert record["receiver_id"] == other_user.id
    assert record["text"] == "Want some seedlings?"
    assert record["read_at"] is None
    assert record["sender"]["username"] == test_user.username


def test_send_image_only_message(client, other_user, auth_token) -> None:
    response = client.post(
        "/api/messages",
        json={"receiver_id": other_user.id, "image_url": "https://cdn.example.com/leaf.jpg"},
        headers=auth_token,
    )
    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["data"]["text"] == ""


def test_send_message_validation(client, test_user, other_user, auth_token) -> None:
    response = client.post("/api/messages", json={"receiverId": other_user.id, "text": "  "}, headers=auth_token)
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert "Message text or image is required" in response.json()["errors"]

    response = client.post("/api/messages", json={"receiverId": test_user.id, "text": "hi me"}, headers=auth_token)
    assert response.status_code == status.HTTP_400_BAD_REQUEST

    response = client.post("/api/messages", json={"receiverId": "ghost", "text": "hello?"}, headers=auth_token)
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_conversation_page_marks_read(client, test_user, other_user, auth_token, db_session) -> None:
    first = _add_message(db_session, other_user, test_user, "Hi", seconds_ago=30)
    second = _add_message(db_session, test_user, other_user, "Hello", seconds_ago=20)
    third = _add_message(db_session, other_user, test_user, "How are the ferns?", seconds_ago=10)

    response = client.get(f"/api/messages/{other_user.id}", headers=auth_token)
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert [m["id"] for m in data["messages"]] == [first.id, second.id, third.id]
    assert data["pagination"]["has_more"] is False

    db_session.refresh(first)
    db_session.refresh(second)
    assert first.read_at is not None
    assert second.read_at is None


def test_conversations_and_unread_count(client, test_user, other_user, auth_token, user_factory, db_session) -> None:
    third_user = user_factory("ivy_climber")
    _add_message(db_session, other_user, test_user, "old", seconds_ago=50)
    _add_message(db_session, other_user, test_user, "newer", seconds_ago=40)
    latest = _add_message(db_session, third_user, test_user, "latest", seconds_ago=5)

    response = client.get("/api/messages/conversations", headers=auth_token)
    assert response.status_code == status.HTTP_200_OK
    conversations = response.json()["conversations"]
    assert [c["user"]["id"] for c in conversations] == [third_user.id, other_user.id]
    assert conversations[0]["last_message"]["id"] == latest.id
    assert conversations[1]["unread_count"] == 2

    count = client.get("/api/messages/unread/count", headers=auth_token).json()
    assert count == {"unread_count": 3}


def test_mark_as_read(client, test_user, other_user, auth_token, db_session) -> None:
    _add_message(db_session, other_user, test_user, "one", seconds_ago=10)
    _add_message(db_session, other_user, test_user, "two", seconds_ago=5)

    response = client.put(f"/api/messages/{other_user.id}/read", headers=auth_token)
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["updated"] == 2

    count = client.get("/api/messages/unread/count", headers=auth_token).json()
    assert count["unread_count"] == 0


def test_delete_message_sender_only(client, test_user, other_user, auth_token, other_auth_token, db_session) -> None:
    message = _add_message(db_session, test_user, other_user, "oops", seconds_ago=1)

    response = client.delete(f"/api/messages/{message.id}", headers=other_auth_token)
    assert response.status_code == status.HTTP_404_NOT_FOUND

    response = client.delete(f"/api/messages/{message.id}", headers=auth_token)
    assert response.status_code == status.HTTP_200_OK
    assert db_session.get(Message, message.id) is None
