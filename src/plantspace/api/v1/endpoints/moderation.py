# src/plantspace/api/v1/endpoints/moderation.py
"""Content reporting and the admin moderation queue."""

import logging
from typing import Any

from fastapi import APIRouter, Query, status
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from plantspace.api.v1.dependencies import AdminUserDep, CurrentUserDep, SessionDep
from plantspace.core.errors import ConflictError, NotFoundError, ValidationError
from plantspace.db.time import utcnow
from plantspace.models import Post, PostReport
from plantspace.models.moderation import REPORT_DISMISSED, REPORT_PENDING, REPORT_REVIEWED
from plantspace.models.post import (
    MODERATION_APPROVED,
    MODERATION_PENDING,
    MODERATION_REJECTED,
    MODERATION_REPORTED,
)
from plantspace.schemas.moderation import (
    ModeratePostRequest,
    PostReportCreate,
    ReviewReportRequest,
)
from plantspace.schemas.post import PostResponse
from plantspace.schemas.user import UserSummary

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/moderation", tags=["moderation"])


def _serialize_report(report: PostReport, *, include_reporter: bool = False) -> dict[str, Any]:
    data: dict[str, Any] = {
        "id": report.id,
        "post_id": report.post_id,
        "reporter_id": report.reporter_id,
        "reason": report.reason,
        "description": report.description,
        "status": report.status,
        "admin_notes": report.admin_notes,
        "reviewed_by": report.reviewed_by,
        "reviewed_at": report.reviewed_at.isoformat() if report.reviewed_at else None,
        "created_at": report.created_at.isoformat() if report.created_at else None,
        "post": (
            PostResponse.model_validate(report.post).model_dump(mode="json")
            if report.post is not None
            else None
        ),
    }
    if include_reporter:
        data["reporter"] = UserSummary.model_validate(report.reporter).model_dump(mode="json")
    return data


@router.post("/report", status_code=status.HTTP_201_CREATED)
async def report_post(
    report_data: PostReportCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> dict[str, Any]:
    """File a report against a post; one report per user and post."""
    post = db.get(Post, report_data.post_id)
    if post is None:
        raise NotFoundError("Post not found")

    existing = (
        db.query(PostReport)
        .filter(PostReport.post_id == post.id, PostReport.reporter_id == current_user.id)
        .first()
    )
    if existing is not None:
        raise ConflictError("You have already reported this post", code="ALREADY_REPORTED")

    report = PostReport(
        post_id=post.id,
        reporter_id=current_user.id,
        reason=report_data.reason,
        description=report_data.description,
    )
    db.add(report)
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        raise ConflictError("You have already reported this post", code="ALREADY_REPORTED") from None

    post.reports_count = (
        db.query(func.count(PostReport.id)).filter(PostReport.post_id == post.id).scalar() or 0
    )
    if post.reports_count == 1:
        post.moderation_status = MODERATION_REPORTED
    db.commit()
    db.refresh(report)
    logger.info("Post %s reported by %s (%s)", post.id, current_user.id, report.reason)

    return {
        "message": "Post reported successfully. Our team will review it shortly.",
        "report": _serialize_report(report),
    }


@router.get("/my-reports")
async def my_reports(current_user: CurrentUserDep, db: SessionDep) -> dict[str, Any]:
    reports = (
        db.query(PostReport)
        .filter(PostReport.reporter_id == current_user.id)
        .order_by(PostReport.created_at.desc())
        .all()
    )
    return {"reports": [_serialize_report(report) for report in reports]}


@router.get("/admin/reports")
async def admin_reports(
    admin: AdminUserDep,
    db: SessionDep,
    report_status: str = Query(REPORT_PENDING, alias="status"),
) -> dict[str, Any]:
    """Reports in ``status``, oldest first."""
    reports = (
        db.query(PostReport)
        .filter(PostReport.status == report_status)
        .order_by(PostReport.created_at.asc())
        .all()
    )
    return {"reports": [_serialize_report(report, include_reporter=True) for report in reports]}


@router.get("/admin/pending-posts")
async def pending_posts(admin: AdminUserDep, db: SessionDep) -> dict[str, Any]:
    posts = (
        db.query(Post)
        .filter(Post.moderation_status.in_([MODERATION_PENDING, MODERATION_REPORTED]))
        .order_by(Post.created_at.asc())
        .all()
    )
    return {"posts": [PostResponse.model_validate(post).model_dump(mode="json") for post in posts]}


@router.post("/admin/moderate-post")
async def moderate_post(
    action_data: ModeratePostRequest,
    admin: AdminUserDep,
    db: SessionDep,
) -> dict[str, str]:
    """Approve or reject a post. Rejecting closes every report against it."""
    post = db.get(Post, action_data.post_id)
    if post is None:
        raise NotFoundError("Post not found")

    now = utcnow()
    new_status = MODERATION_APPROVED if action_data.action == "approve" else MODERATION_REJECTED
    post.moderation_status = new_status
    post.is_agriculture_related = action_data.is_agriculture_related
    post.moderation_notes = action_data.moderation_notes
    post.moderated_by = admin.id
    post.moderated_at = now

    if action_data.action == "reject":
        notes = action_data.moderation_notes or "Not agriculture/environment related"
        for report in db.query(PostReport).filter(PostReport.post_id == post.id).all():
            report.status = REPORT_REVIEWED
            report.admin_notes = f"Post rejected: {notes}"
            report.reviewed_by = admin.id
            report.reviewed_at = now

    db.commit()
    logger.info("Admin %s set post %s to %s", admin.id, post.id, new_status)
    return {"message": f"Post {action_data.action}d successfully", "status": new_status}


@router.post("/admin/review-report")
async def review_report(
    review_data: ReviewReportRequest,
    admin: AdminUserDep,
    db: SessionDep,
) -> dict[str, str]:
    report = db.get(PostReport, review_data.report_id)
    if report is None:
        raise NotFoundError("Report not found")
    if report.status != REPORT_PENDING:
        raise ValidationError("Report has already been reviewed")

    report.status = REPORT_REVIEWED
    report.admin_notes = review_data.admin_notes
    report.reviewed_by = admin.id
    report.reviewed_at = utcnow()

    if review_data.action == "uphold":
        post = db.get(Post, report.post_id)
        if post is not None:
            post.moderation_status = MODERATION_REPORTED

    db.commit()
    verb = "dismissed" if review_data.action == "dismiss" else "upheld"
    return {"message": f"Report {verb} successfully"}


@router.get("/admin/stats")
async def moderation_stats(admin: AdminUserDep, db: SessionDep) -> dict[str, Any]:
    post_counts = dict(
        db.query(Post.moderation_status, func.count(Post.id))
        .group_by(Post.moderation_status)
        .all()
    )
    report_counts = dict(
        db.query(PostReport.status, func.count(PostReport.id))
        .group_by(PostReport.status)
        .all()
    )
    return {
        "stats": {
            "total_posts": sum(post_counts.values()),
            "pending_posts": post_counts.get(MODERATION_PENDING, 0),
            "reported_posts": post_counts.get(MODERATION_REPORTED, 0),
            "approved_posts": post_counts.get(MODERATION_APPROVED, 0),
            "rejected_posts": post_counts.get(MODERATION_REJECTED, 0),
            "total_reports": sum(report_counts.values()),
            "pending_reports": report_counts.get(REPORT_PENDING, 0),
            "dismissed_reports": report_counts.get(REPORT_DISMISSED, 0),
        }
    }
