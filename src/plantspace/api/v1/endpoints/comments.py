# src/plantspace/api/v1/endpoints/comments.py
"""Comment endpoints."""

from typing import Any

from fastapi import APIRouter, status
from sqlalchemy import desc

from plantspace.api.v1.dependencies import CurrentUserDep, PageDep, SessionDep
from plantspace.core.errors import AuthorizationError, NotFoundError, ValidationError
from plantspace.models import Comment, Post
from plantspace.schemas.comment import CommentCreate, CommentResponse

router = APIRouter(prefix="/comments", tags=["comments"])

MAX_COMMENT_LENGTH = 500


def _serialize(comment: Comment) -> dict[str, Any]:
    return CommentResponse.model_validate(comment).model_dump(mode="json")


@router.get("/posts/{post_id}/comments")
async def list_comments(post_id: str, db: SessionDep, pagination: PageDep) -> dict[str, Any]:
    comments = (
        db.query(Comment)
        .filter(Comment.post_id == post_id)
        .order_by(desc(Comment.created_at), desc(Comment.id))
        .offset(pagination.offset)
        .limit(pagination.limit)
        .all()
    )
    return {
        "comments": [_serialize(comment) for comment in comments],
        "pagination": {
            "page": pagination.page,
            "limit": pagination.limit,
            "has_more": len(comments) == pagination.limit,
        },
    }


@router.post("/posts/{post_id}/comments", status_code=status.HTTP_201_CREATED)
async def create_comment(
    post_id: str,
    comment_data: CommentCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> dict[str, Any]:
    """Add a comment and bump the post's comment counter."""
    text = comment_data.text.strip()
    if not text or len(text) > MAX_COMMENT_LENGTH:
        raise ValidationError(
            f"Comment text must be between 1 and {MAX_COMMENT_LENGTH} characters"
        )

    post = db.get(Post, post_id)
    if post is None:
        raise NotFoundError("Post not found")

    comment = Comment(post_id=post.id, user_id=current_user.id, text=text)
    db.add(comment)
    post.comments_count += 1
    db.commit()
    db.refresh(comment)
    return {"message": "Comment added successfully", "comment": _serialize(comment)}


@router.delete("/{comment_id}")
async def delete_comment(comment_id: str, current_user: CurrentUserDep, db: SessionDep) -> dict[str, str]:
    comment = db.get(Comment, comment_id)
    if comment is None:
        raise NotFoundError("Comment not found")
    if comment.user_id != current_user.id:
        raise AuthorizationError("Not authorized to delete this comment")

    post = db.get(Post, comment.post_id)
    if post is not None:
        post.comments_count = max(0, post.comments_count - 1)
    db.delete(comment)
    db.commit()
    return {"message": "Comment deleted successfully"}
