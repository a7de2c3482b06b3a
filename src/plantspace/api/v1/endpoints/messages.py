# src/plantspace/api/v1/endpoints/messages.py
"""Direct message endpoints.

These share :mod:`plantspace.services.messages` with the real-time relay, so
a message sent here is indistinguishable from one sent over the socket.
"""

from typing import Any

from fastapi import APIRouter, Query, status

from plantspace.api.v1.dependencies import CurrentUserDep, SessionDep
from plantspace.schemas.message import MessageCreate
from plantspace.services import messages as message_service

router = APIRouter(prefix="/messages", tags=["messages"])


@router.get("/conversations")
async def list_conversations(current_user: CurrentUserDep, db: SessionDep) -> dict[str, Any]:
    return {"conversations": message_service.list_conversations(db, current_user.id)}


@router.get("/unread/count")
async def get_unread_count(current_user: CurrentUserDep, db: SessionDep) -> dict[str, int]:
    return {"unread_count": message_service.unread_count(db, current_user.id)}


@router.get("/{other_user_id}")
async def get_conversation(
    other_user_id: str,
    current_user: CurrentUserDep,
    db: SessionDep,
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=100),
) -> dict[str, Any]:
    """Return one page of the conversation with ``other_user_id``, oldest first."""
    messages, has_more = message_service.get_conversation(
        db, current_user.id, other_user_id, page=page, limit=limit
    )
    return {
        "messages": [message_service.serialize_message(message) for message in messages],
        "pagination": {"page": page, "limit": limit, "has_more": has_more},
    }


@router.post("", status_code=status.HTTP_201_CREATED)
async def send_message(
    message_data: MessageCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> dict[str, Any]:
    message = message_service.create_message(
        db,
        sender_id=current_user.id,
        receiver_id=message_data.receiver_id,
        text=message_data.text,
        image_url=message_data.image_url,
    )
    return {
        "message": "Message sent successfully",
        "data": message_service.serialize_message(message),
    }


@router.put("/{other_user_id}/read")
async def mark_as_read(
    other_user_id: str,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> dict[str, Any]:
    updated = message_service.mark_conversation_read(db, current_user.id, other_user_id)
    return {"message": "Messages marked as read", "updated": updated}


@router.delete("/{message_id}")
async def delete_message(message_id: str, current_user: CurrentUserDep, db: SessionDep) -> dict[str, str]:
    message_service.delete_message(db, current_user.id, message_id)
    return {"message": "Message deleted successfully"}
