"""Direct message Pydantic schemas shared by the REST API and the relay."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from .user import UserSummary


class MessageCreate(BaseModel):
    """Schema for sending a message over HTTP."""

    receiver_id: str = Field(..., validation_alias="receiverId")
    text: str | None = Field(None, max_length=1000)
    image_url: str | None = Field(None, validation_alias="imageUrl")

    model_config = ConfigDict(populate_by_name=True)


class MessageResponse(BaseModel):
    """Persisted message record, including the resolved sender profile."""

    id: str
    sender_id: str
    receiver_id: str
    text: str
    image_url: str | None
    created_at: datetime
    read_at: datetime | None
    sender: UserSummary | None = None

    model_config = ConfigDict(from_attributes=True)
