"""Verification workflow schemas."""

from typing import Literal

from pydantic import BaseModel, Field


class UsernameCheckRequest(BaseModel):
    username: str


class UsernameCheckResponse(BaseModel):
    available: bool
    suggestions: list[str] | None = None


class VerificationSubmitRequest(BaseModel):
    proof_of_work_url: str = Field(..., min_length=1)
    selfie_url: str = Field(..., min_length=1)
    work_description: str = Field(..., min_length=10)


class VerificationReviewRequest(BaseModel):
    verification_id: str
    action: Literal["approve", "reject"]
    admin_notes: str | None = None
