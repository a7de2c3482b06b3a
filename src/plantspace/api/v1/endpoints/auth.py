# src/plantspace/api/v1/endpoints/auth.py
"""Authentication endpoints for the PlantSpace API."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from plantspace.api.v1.dependencies import CurrentUserDep, SessionDep
from plantspace.core.errors import AuthenticationError, ConflictError, ValidationError
from plantspace.core.rate_limit import login_rate_limit, register_rate_limit
from plantspace.core.security import create_access_token, hash_password, verify_password
from plantspace.core.settings import settings
from plantspace.core.validators import (
    validate_display_name,
    validate_email,
    validate_password,
    validate_username,
)
from plantspace.models import Follow, Post, User
from plantspace.schemas.user import (
    AuthResponse,
    LoginRequest,
    PasswordChangeRequest,
    ProfileUpdateRequest,
    RegisterRequest,
    UserResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["authentication"])


def issue_token(user: User) -> str:
    """Return a signed access token for ``user``."""
    return create_access_token(user.id, username=user.username, email=user.email)


def _user_payload(user: User) -> dict[str, Any]:
    return UserResponse.model_validate(user).model_dump(mode="json")


def _profile_counts(db: Session, user_id: str) -> dict[str, int]:
    followers = db.query(func.count(Follow.id)).filter(Follow.following_id == user_id).scalar()
    following = db.query(func.count(Follow.id)).filter(Follow.follower_id == user_id).scalar()
    posts = db.query(func.count(Post.id)).filter(Post.user_id == user_id).scalar()
    return {
        "followers_count": int(followers or 0),
        "following_count": int(following or 0),
        "posts_count": int(posts or 0),
    }


def _validate_registration(payload: RegisterRequest) -> None:
    errors: list[str] = []
    if not payload.username:
        errors.append("Username is required")
    if not payload.email:
        errors.append("Email is required")
    if not payload.password:
        errors.append("Password is required")
    if not payload.display_name:
        errors.append("Display name is required")
    if errors:
        raise ValidationError(errors=errors)

    errors.extend(validate_username(payload.username or ""))
    errors.extend(validate_email(payload.email or ""))
    errors.extend(validate_password(payload.password or ""))
    errors.extend(validate_display_name(payload.display_name or ""))
    if errors:
        raise ValidationError(errors=errors)


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(register_rate_limit)],
)
async def register(payload: RegisterRequest, db: SessionDep) -> dict[str, Any]:
    """Create an account and return a token for it."""
    _validate_registration(payload)
    username = (payload.username or "").strip().lower()
    email = (payload.email or "").strip().lower()

    if db.query(User).filter(User.email == email).first() is not None:
        raise ConflictError("User with this email already exists", code="EMAIL_EXISTS")
    if db.query(User).filter(User.username == username).first() is not None:
        raise ConflictError("Username is already taken", code="USERNAME_EXISTS")

    user = User(
        username=username,
        email=email,
        password_hash=hash_password(payload.password or ""),
        display_name=(payload.display_name or "").strip(),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Registered user %s", user.id)

    return {
        "message": "Welcome to PlantSpace! Your account has been created successfully",
        "token": issue_token(user),
        "user": _user_payload(user),
    }


@router.post("/login", response_model=AuthResponse, dependencies=[Depends(login_rate_limit)])
async def login(payload: LoginRequest, db: SessionDep) -> dict[str, Any]:
    """Log in with an email address or username."""
    errors: list[str] = []
    if not payload.identifier:
        errors.append("Email or username is required")
    if not payload.password:
        errors.append("Password is required")
    if errors:
        raise ValidationError(errors=errors)

    identifier = (payload.identifier or "").strip().lower()
    column = User.email if "@" in identifier else User.username
    user = db.query(User).filter(column == identifier).first()

    if user is None or not verify_password(payload.password or "", user.password_hash):
        raise AuthenticationError(
            "Invalid email/username or password", code="INVALID_CREDENTIALS"
        )

    return {
        "message": "Login successful",
        "token": issue_token(user),
        "user": _user_payload(user),
    }


@router.get("/profile")
async def get_profile(current_user: CurrentUserDep, db: SessionDep) -> dict[str, Any]:
    """Return the caller's account together with social counts."""
    return {**_user_payload(current_user), **_profile_counts(db, current_user.id)}


@router.put("/profile")
async def update_profile(
    payload: ProfileUpdateRequest,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> dict[str, Any]:
    """Update display name, bio, avatar or cover image."""
    updates = payload.model_dump(exclude_unset=True)
    if not updates:
        raise ValidationError("No fields to update")

    if "display_name" in updates:
        display_name = (updates["display_name"] or "").strip()
        errors = validate_display_name(display_name)
        if errors:
            raise ValidationError(errors=errors)
        updates["display_name"] = display_name
    if updates.get("bio") is not None:
        updates["bio"] = updates["bio"].strip()

    for field, value in updates.items():
        setattr(current_user, field, value)
    db.commit()
    db.refresh(current_user)

    return {"message": "Profile updated successfully", "user": _user_payload(current_user)}


@router.put("/password")
async def change_password(
    payload: PasswordChangeRequest,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> dict[str, str]:
    """Replace the caller's password after checking the current one."""
    if not verify_password(payload.current_password, current_user.password_hash):
        raise AuthenticationError("Current password is incorrect", code="INVALID_CREDENTIALS")

    errors = validate_password(payload.new_password)
    if errors:
        raise ValidationError(errors=errors)

    current_user.password_hash = hash_password(payload.new_password)
    db.commit()
    return {"message": "Password updated successfully"}


@router.post("/refresh")
async def refresh_token(current_user: CurrentUserDep) -> dict[str, Any]:
    return {
        "token": issue_token(current_user),
        "expires_in": settings.access_token_ttl_seconds,
    }


@router.post("/logout")
async def logout(current_user: CurrentUserDep) -> dict[str, str]:
    """Tokens are stateless; clients discard theirs."""
    return {"message": "Logged out successfully"}
