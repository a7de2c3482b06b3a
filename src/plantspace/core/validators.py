"""Account field validators.

Each validator returns the full list of violated rules so a single response
can report all of them at once.
"""

from __future__ import annotations

import re

USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9_]+$")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PASSWORD_SPECIALS = "@$!%*?&"


def validate_username(username: str) -> list[str]:
    errors: list[str] = []
    if len(username) < 3 or len(username) > 50:
        errors.append("Username must be between 3 and 50 characters")
    if not USERNAME_PATTERN.match(username):
        errors.append("Username can only contain letters, numbers, and underscores")
    if username[:1].isdigit():
        errors.append("Username cannot start with a number")
    return errors


def validate_email(email: str) -> list[str]:
    errors: list[str] = []
    if not EMAIL_PATTERN.match(email):
        errors.append("Please enter a valid email address")
    if len(email) > 255:
        errors.append("Email address is too long")
    return errors


def validate_password(password: str) -> list[str]:
    errors: list[str] = []
    if len(password) < 8:
        errors.append("Password must be at least 8 characters long")
    if not re.search(r"[a-z]", password):
        errors.append("Password must contain at least one lowercase letter")
    if not re.search(r"[A-Z]", password):
        errors.append("Password must contain at least one uppercase letter")
    if not re.search(r"\d", password):
        errors.append("Password must contain at least one number")
    if not any(ch in PASSWORD_SPECIALS for ch in password):
        errors.append(
            f"Password must contain at least one special character ({PASSWORD_SPECIALS})"
        )
    return errors


def validate_display_name(display_name: str) -> list[str]:
    if len(display_name.strip()) < 1 or len(display_name) > 100:
        return ["Display name must be between 1 and 100 characters"]
    return []
