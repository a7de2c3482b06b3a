# src/plantspace/api/v1/endpoints/users.py
"""User discovery, profiles and the follow graph."""

from typing import Any

from fastapi import APIRouter, Query, status
from sqlalchemy import desc, func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from plantspace.api.v1.dependencies import CurrentUserDep, PageDep, SessionDep
from plantspace.core.errors import ConflictError, NotFoundError, ValidationError
from plantspace.models import Follow, Post, User
from plantspace.models.post import MODERATION_APPROVED
from plantspace.schemas.user import UserSummary
from plantspace.services.posts import serialize_posts

router = APIRouter(prefix="/users", tags=["users"])

SEARCH_LIMIT = 20
PROFILE_POST_LIMIT = 10


def _get_user_or_404(db: Session, user_id: str) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


def _summaries(users: list[User]) -> list[dict[str, Any]]:
    return [UserSummary.model_validate(user).model_dump(mode="json") for user in users]


@router.get("/search")
async def search_users(
    current_user: CurrentUserDep,
    db: SessionDep,
    q: str = Query(..., description="At least two characters of a username or display name"),
) -> dict[str, Any]:
    """Find users by username or display name, verified accounts first."""
    term = q.strip()
    if len(term) < 2:
        raise ValidationError("Search query must be at least 2 characters")

    pattern = f"%{term.lower()}%"
    users = (
        db.query(User)
        .filter(
            User.id != current_user.id,
            or_(func.lower(User.username).like(pattern), func.lower(User.display_name).like(pattern)),
        )
        .order_by(desc(User.is_verified), User.username)
        .limit(SEARCH_LIMIT)
        .all()
    )
    return {"users": _summaries(users), "query": q}


@router.get("/{user_id}")
async def get_user_profile(
    user_id: str,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> dict[str, Any]:
    """Public profile with follow state and recent posts."""
    user = _get_user_or_404(db, user_id)

    followers = db.query(func.count(Follow.id)).filter(Follow.following_id == user.id).scalar()
    following = db.query(func.count(Follow.id)).filter(Follow.follower_id == user.id).scalar()
    posts_count = db.query(func.count(Post.id)).filter(Post.user_id == user.id).scalar()
    is_following = (
        db.query(Follow)
        .filter(Follow.follower_id == current_user.id, Follow.following_id == user.id)
        .first()
        is not None
    )
    recent_posts = (
        db.query(Post)
        .filter(Post.user_id == user.id, Post.moderation_status == MODERATION_APPROVED)
        .order_by(desc(Post.created_at), desc(Post.id))
        .limit(PROFILE_POST_LIMIT)
        .all()
    )

    profile = UserSummary.model_validate(user).model_dump(mode="json")
    profile.update(
        {
            "bio": user.bio,
            "cover_url": user.cover_url,
            "created_at": user.created_at.isoformat() if user.created_at else None,
            "followers_count": int(followers or 0),
            "following_count": int(following or 0),
            "posts_count": int(posts_count or 0),
            "is_following": is_following,
            "is_own_profile": user.id == current_user.id,
            "posts": serialize_posts(db, recent_posts, current_user.id),
        }
    )
    return profile


@router.post("/{user_id}/follow", status_code=status.HTTP_201_CREATED)
async def follow_user(user_id: str, current_user: CurrentUserDep, db: SessionDep) -> dict[str, str]:
    if user_id == current_user.id:
        raise ValidationError("Cannot follow yourself")
    target = _get_user_or_404(db, user_id)

    existing = (
        db.query(Follow)
        .filter(Follow.follower_id == current_user.id, Follow.following_id == target.id)
        .first()
    )
    if existing is not None:
        raise ConflictError("Already following this user", code="ALREADY_FOLLOWING")

    db.add(Follow(follower_id=current_user.id, following_id=target.id))
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Already following this user", code="ALREADY_FOLLOWING") from None
    return {"message": f"You are now following {target.display_name}"}


@router.delete("/{user_id}/follow")
async def unfollow_user(user_id: str, current_user: CurrentUserDep, db: SessionDep) -> dict[str, str]:
    follow = (
        db.query(Follow)
        .filter(Follow.follower_id == current_user.id, Follow.following_id == user_id)
        .first()
    )
    if follow is None:
        raise NotFoundError("Not following this user")

    db.delete(follow)
    db.commit()
    return {"message": "Unfollowed successfully"}


@router.get("/{user_id}/followers")
async def list_followers(user_id: str, db: SessionDep, pagination: PageDep) -> dict[str, Any]:
    _get_user_or_404(db, user_id)
    users = (
        db.query(User)
        .join(Follow, Follow.follower_id == User.id)
        .filter(Follow.following_id == user_id)
        .order_by(desc(Follow.created_at))
        .offset(pagination.offset)
        .limit(pagination.limit)
        .all()
    )
    return {
        "followers": _summaries(users),
        "pagination": {
            "page": pagination.page,
            "limit": pagination.limit,
            "has_more": len(users) == pagination.limit,
        },
    }


@router.get("/{user_id}/following")
async def list_following(user_id: str, db: SessionDep, pagination: PageDep) -> dict[str, Any]:
    _get_user_or_404(db, user_id)
    users = (
        db.query(User)
        .join(Follow, Follow.following_id == User.id)
        .filter(Follow.follower_id == user_id)
        .order_by(desc(Follow.created_at))
        .offset(pagination.offset)
        .limit(pagination.limit)
        .all()
    )
    return {
        "following": _summaries(users),
        "pagination": {
            "page": pagination.page,
            "limit": pagination.limit,
            "has_more": len(users) == pagination.limit,
        },
    }
