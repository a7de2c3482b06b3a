"""Envelope and payload models for the real-time relay channel.

Field aliases follow the camelCase names the mobile client sends.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class RelayEnvelope(BaseModel):
    """One frame in either direction: ``{"event": ..., "data": {...}}``."""

    event: str
    data: dict[str, Any] = Field(default_factory=dict)


class _Payload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class JoinConversationPayload(_Payload):
    other_user_id: str = Field(..., alias="otherUserId", min_length=1)


class SendMessagePayload(_Payload):
    receiver_id: str = Field(..., alias="receiverId", min_length=1)
    text: str = ""
    image_url: str | None = Field(None, alias="imageUrl")


class TypingPayload(_Payload):
    receiver_id: str = Field(..., alias="receiverId", min_length=1)


class CallUserPayload(_Payload):
    callee_id: str = Field(..., alias="calleeId", min_length=1)
    offer: Any = None
    call_type: Literal["voice", "video"] = Field(..., alias="callType")


class AnswerCallPayload(_Payload):
    caller_id: str = Field(..., alias="callerId", min_length=1)
    answer: Any = None


class RejectCallPayload(_Payload):
    caller_id: str = Field(..., alias="callerId", min_length=1)


class EndCallPayload(_Payload):
    other_user_id: str = Field(..., alias="otherUserId", min_length=1)


class IceCandidatePayload(_Payload):
    other_user_id: str = Field(..., alias="otherUserId", min_length=1)
    candidate: Any = None
