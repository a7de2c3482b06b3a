"""Moderation-related Pydantic schemas."""

from typing import Literal

from pydantic import BaseModel, Field

ReportReason = Literal[
    "not_agriculture_related",
    "spam",
    "inappropriate",
    "misinformation",
    "other",
]


class PostReportCreate(BaseModel):
    post_id: str
    reason: ReportReason
    description: str | None = Field(None, max_length=1000)


class ModeratePostRequest(BaseModel):
    """Admin decision on a post."""

    post_id: str
    action: Literal["approve", "reject"]
    moderation_notes: str | None = None
    is_agriculture_related: bool = True


class ReviewReportRequest(BaseModel):
    report_id: str
    action: Literal["dismiss", "uphold"]
    admin_notes: str | None = None
