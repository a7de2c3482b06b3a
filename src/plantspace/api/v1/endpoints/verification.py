# src/plantspace/api/v1/endpoints/verification.py
"""Username availability and the verified-badge workflow."""

import logging
import random
from typing import Any

from fastapi import APIRouter, status
from sqlalchemy import func

from plantspace.api.v1.dependencies import AdminUserDep, CurrentUserDep, SessionDep
from plantspace.core.errors import ConflictError, NotFoundError, ValidationError
from plantspace.db.time import utcnow
from plantspace.models import User, VerificationRequest
from plantspace.models.user import VERIFICATION_PENDING
from plantspace.models.verification import REQUEST_APPROVED, REQUEST_PENDING, REQUEST_REJECTED
from plantspace.schemas.user import UserSummary
from plantspace.schemas.verification import (
    UsernameCheckRequest,
    UsernameCheckResponse,
    VerificationReviewRequest,
    VerificationSubmitRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/verification", tags=["verification"])


def username_suggestions(username: str) -> list[str]:
    base = username.lower()
    return [
        f"{base}_farmer",
        f"{base}_green",
        f"{base}_eco",
        f"{base}{random.randint(0, 998)}",
        f"eco_{base}",
        f"green_{base}",
    ]


def _serialize_request(request: VerificationRequest, *, include_user: bool = False) -> dict[str, Any]:
    data: dict[str, Any] = {
        "id": request.id,
        "user_id": request.user_id,
        "proof_of_work_url": request.proof_of_work_url,
        "selfie_url": request.selfie_url,
        "work_description": request.work_description,
        "status": request.status,
        "admin_notes": request.admin_notes,
        "submitted_at": request.submitted_at.isoformat() if request.submitted_at else None,
        "reviewed_at": request.reviewed_at.isoformat() if request.reviewed_at else None,
    }
    if include_user:
        data["user"] = UserSummary.model_validate(request.user).model_dump(mode="json")
    return data


@router.post("/check-username", response_model=UsernameCheckResponse, response_model_exclude_none=True)
async def check_username(payload: UsernameCheckRequest, db: SessionDep) -> UsernameCheckResponse:
    username = payload.username.strip()
    if len(username) < 3:
        raise ValidationError("Username must be at least 3 characters long")

    taken = db.query(User.id).filter(User.username == username.lower()).first() is not None
    if taken:
        return UsernameCheckResponse(available=False, suggestions=username_suggestions(username))
    return UsernameCheckResponse(available=True)


@router.post("/submit", status_code=status.HTTP_201_CREATED)
async def submit_verification(
    payload: VerificationSubmitRequest,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> dict[str, Any]:
    """Submit evidence for review. Only one open or approved request per user."""
    existing = (
        db.query(VerificationRequest)
        .filter(
            VerificationRequest.user_id == current_user.id,
            VerificationRequest.status.in_([REQUEST_PENDING, REQUEST_APPROVED]),
        )
        .first()
    )
    if existing is not None:
        if existing.status == REQUEST_APPROVED:
            raise ConflictError("User is already verified", code="ALREADY_VERIFIED")
        raise ConflictError("Verification request already pending", code="VERIFICATION_PENDING")

    request = VerificationRequest(
        user_id=current_user.id,
        proof_of_work_url=payload.proof_of_work_url,
        selfie_url=payload.selfie_url,
        work_description=payload.work_description.strip(),
    )
    db.add(request)
    current_user.verification_status = VERIFICATION_PENDING
    db.commit()
    db.refresh(request)
    logger.info("User %s submitted verification request %s", current_user.id, request.id)

    return {
        "message": "Verification request submitted successfully",
        "verification_request": _serialize_request(request),
    }


@router.get("/status")
async def verification_status(current_user: CurrentUserDep, db: SessionDep) -> dict[str, Any]:
    latest = (
        db.query(VerificationRequest)
        .filter(VerificationRequest.user_id == current_user.id)
        .order_by(VerificationRequest.created_at.desc())
        .first()
    )
    return {
        "verification_request": _serialize_request(latest) if latest else None,
        "user_verification_status": current_user.verification_status,
        "is_verified": current_user.is_verified,
    }


@router.get("/admin/pending")
async def pending_requests(admin: AdminUserDep, db: SessionDep) -> dict[str, Any]:
    requests = (
        db.query(VerificationRequest)
        .filter(VerificationRequest.status == REQUEST_PENDING)
        .order_by(VerificationRequest.submitted_at.asc())
        .all()
    )
    return {
        "verification_requests": [
            _serialize_request(request, include_user=True) for request in requests
        ]
    }


@router.post("/admin/review")
async def review_request(
    payload: VerificationReviewRequest,
    admin: AdminUserDep,
    db: SessionDep,
) -> dict[str, str]:
    request = db.get(VerificationRequest, payload.verification_id)
    if request is None:
        raise NotFoundError("Verification request not found")
    if request.status != REQUEST_PENDING:
        raise ValidationError("Verification request has already been reviewed")

    new_status = REQUEST_APPROVED if payload.action == "approve" else REQUEST_REJECTED
    request.status = new_status
    request.admin_notes = payload.admin_notes
    request.reviewed_at = utcnow()
    request.reviewed_by = admin.id

    user = db.get(User, request.user_id)
    if user is not None:
        user.is_verified = payload.action == "approve"
        user.verification_status = new_status

    db.commit()
    logger.info("Admin %s %s verification %s", admin.id, new_status, request.id)
    return {"message": f"Verification request {payload.action}d successfully", "status": new_status}


@router.get("/admin/stats")
async def verification_stats(admin: AdminUserDep, db: SessionDep) -> dict[str, Any]:
    counts = dict(
        db.query(VerificationRequest.status, func.count(VerificationRequest.id))
        .group_by(VerificationRequest.status)
        .all()
    )
    verified_users = db.query(func.count(User.id)).filter(User.is_verified.is_(True)).scalar()
    return {
        "stats": {
            "total_requests": sum(counts.values()),
            "pending_requests": counts.get(REQUEST_PENDING, 0),
            "approved_requests": counts.get(REQUEST_APPROVED, 0),
            "rejected_requests": counts.get(REQUEST_REJECTED, 0),
            "verified_users": int(verified_users or 0),
        }
    }
