"""Post-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from .user import UserSummary


class PostCreate(BaseModel):
    """Schema for creating a new post."""

    text: str = Field(..., description="Post body; hashtags are extracted from it")
    image_url: str | None = Field(None, description="Public URL of an already uploaded image")


class PostResponse(BaseModel):
    """Schema for post information returned by the API."""

    id: str
    user_id: str
    text: str
    image_url: str | None
    hashtags: list[str]
    likes_count: int
    comments_count: int
    moderation_status: str
    created_at: datetime
    updated_at: datetime | None = None
    users: UserSummary | None = Field(None, validation_alias="author")
    is_liked: bool = False

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class Pagination(BaseModel):
    page: int
    limit: int
    has_more: bool


class FeedResponse(BaseModel):
    posts: list[PostResponse]
    pagination: Pagination
