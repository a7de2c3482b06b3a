# src/plantspace/api/v1/endpoints/posts.py
"""Post-related endpoints for the PlantSpace API."""

import logging
from typing import Any

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import String, cast, desc, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from plantspace.api.v1.dependencies import (
    CurrentUserDep,
    OptionalUserDep,
    PageDep,
    SessionDep,
)
from plantspace.core.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from plantspace.core.rate_limit import feed_rate_limit, post_rate_limit
from plantspace.models import Like, Post
from plantspace.models.post import MODERATION_APPROVED
from plantspace.schemas.post import FeedResponse, PostCreate
from plantspace.services.posts import extract_hashtags, serialize_post, serialize_posts

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/posts", tags=["posts"])

MAX_POST_LENGTH = 2000


def _get_post_or_404(db: Session, post_id: str) -> Post:
    post = db.get(Post, post_id)
    if post is None:
        raise NotFoundError("Post not found")
    return post


@router.get("/feed", response_model=FeedResponse, dependencies=[Depends(feed_rate_limit)])
async def get_feed(
    db: SessionDep,
    current_user: OptionalUserDep,
    pagination: PageDep,
) -> dict[str, Any]:
    """Approved posts, newest first, annotated for the caller."""
    posts = (
        db.query(Post)
        .filter(Post.moderation_status == MODERATION_APPROVED)
        .order_by(desc(Post.created_at), desc(Post.id))
        .offset(pagination.offset)
        .limit(pagination.limit)
        .all()
    )
    viewer_id = current_user.id if current_user else None
    return {
        "posts": serialize_posts(db, posts, viewer_id),
        "pagination": {
            "page": pagination.page,
            "limit": pagination.limit,
            "has_more": len(posts) == pagination.limit,
        },
    }


@router.get("/search")
async def search_posts(
    db: SessionDep,
    current_user: OptionalUserDep,
    pagination: PageDep,
    q: str = Query(..., min_length=1, description="Text or hashtag to look for"),
) -> dict[str, Any]:
    """Search approved posts by text or hashtag."""
    term = q.strip().lower()
    if not term:
        raise ValidationError("Search query is required")

    # Hashtags are stored as a JSON list, so match against its text form.
    posts = (
        db.query(Post)
        .filter(
            Post.moderation_status == MODERATION_APPROVED,
            or_(
                Post.text.ilike(f"%{term}%"),
                cast(Post.hashtags, String).ilike(f"%{term}%"),
            ),
        )
        .order_by(desc(Post.created_at), desc(Post.id))
        .offset(pagination.offset)
        .limit(pagination.limit)
        .all()
    )
    viewer_id = current_user.id if current_user else None
    return {
        "posts": serialize_posts(db, posts, viewer_id),
        "query": q,
        "pagination": {
            "page": pagination.page,
            "limit": pagination.limit,
            "has_more": len(posts) == pagination.limit,
        },
    }


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(post_rate_limit)],
)
async def create_post(
    post_data: PostCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> dict[str, Any]:
    """Create a new post.

    Args:
        post_data: Post body and optional image URL
        current_user: Authenticated author
        db: Database session

    Returns:
        Confirmation message and the created post
    """
    text = post_data.text.strip()
    if not text or len(text) > MAX_POST_LENGTH:
        raise ValidationError(f"Post text must be between 1 and {MAX_POST_LENGTH} characters")

    post = Post(
        user_id=current_user.id,
        text=text,
        image_url=post_data.image_url or None,
        hashtags=extract_hashtags(text),
    )
    db.add(post)
    db.commit()
    db.refresh(post)
    logger.info("User %s created post %s", current_user.id, post.id)

    return {"message": "Post created successfully", "post": serialize_post(db, post, current_user.id)}


@router.get("/{post_id}")
async def get_post(post_id: str, db: SessionDep, current_user: OptionalUserDep) -> dict[str, Any]:
    post = _get_post_or_404(db, post_id)
    return serialize_post(db, post, current_user.id if current_user else None)


@router.delete("/{post_id}")
async def delete_post(post_id: str, current_user: CurrentUserDep, db: SessionDep) -> dict[str, str]:
    """Delete a post. Only its author may do so."""
    post = _get_post_or_404(db, post_id)
    if post.user_id != current_user.id:
        raise AuthorizationError("Not authorized to delete this post")

    db.delete(post)
    db.commit()
    return {"message": "Post deleted successfully"}


@router.post("/{post_id}/like")
async def like_post(post_id: str, current_user: CurrentUserDep, db: SessionDep) -> dict[str, Any]:
    post = _get_post_or_404(db, post_id)
    existing = (
        db.query(Like)
        .filter(Like.user_id == current_user.id, Like.post_id == post.id)
        .first()
    )
    if existing is not None:
        raise ConflictError("Post already liked", code="ALREADY_LIKED")

    db.add(Like(user_id=current_user.id, post_id=post.id))
    post.likes_count += 1
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Post already liked", code="ALREADY_LIKED") from None
    return {"message": "Post liked successfully", "likes_count": post.likes_count}


@router.delete("/{post_id}/like")
async def unlike_post(post_id: str, current_user: CurrentUserDep, db: SessionDep) -> dict[str, Any]:
    post = _get_post_or_404(db, post_id)
    like = (
        db.query(Like)
        .filter(Like.user_id == current_user.id, Like.post_id == post.id)
        .first()
    )
    if like is None:
        raise ValidationError("Post not liked", code="NOT_LIKED")

    db.delete(like)
    post.likes_count = max(0, post.likes_count - 1)
    db.commit()
    return {"message": "Post unliked successfully", "likes_count": post.likes_count}
