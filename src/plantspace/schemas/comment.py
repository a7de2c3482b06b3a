"""Comment schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from .user import UserSummary


class CommentCreate(BaseModel):
    text: str = Field(..., description="Comment body, 1-500 characters after trimming")


class CommentResponse(BaseModel):
    id: str
    post_id: str
    user_id: str
    text: str
    created_at: datetime
    user: UserSummary | None = Field(None, validation_alias="author")

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)
