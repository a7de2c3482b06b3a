"""Post helpers: hashtag extraction and caller-aware serialization."""

from __future__ import annotations

import re
from collections.abc import Iterable
from typing import Any

from sqlalchemy.orm import Session

from plantspace.models import Like, Post
from plantspace.schemas.post import PostResponse

HASHTAG_PATTERN = re.compile(r"#\w+")
MAX_HASHTAGS = 10


def extract_hashtags(text: str) -> list[str]:
    """Return lower-cased, de-duplicated hashtags in order of first appearance."""
    seen: list[str] = []
    for tag in HASHTAG_PATTERN.findall(text):
        lowered = tag.lower()
        if lowered not in seen:
            seen.append(lowered)
    return seen[:MAX_HASHTAGS]


def liked_post_ids(db: Session, user_id: str | None, post_ids: Iterable[str]) -> set[str]:
    """Return the subset of ``post_ids`` that ``user_id`` has liked."""
    ids = list(post_ids)
    if user_id is None or not ids:
        return set()
    rows = (
        db.query(Like.post_id)
        .filter(Like.user_id == user_id, Like.post_id.in_(ids))
        .all()
    )
    return {post_id for (post_id,) in rows}


def serialize_posts(db: Session, posts: list[Post], viewer_id: str | None) -> list[dict[str, Any]]:
    liked = liked_post_ids(db, viewer_id, (post.id for post in posts))
    results = []
    for post in posts:
        item = PostResponse.model_validate(post)
        item.is_liked = post.id in liked
        results.append(item.model_dump(mode="json"))
    return results


def serialize_post(db: Session, post: Post, viewer_id: str | None) -> dict[str, Any]:
    return serialize_posts(db, [post], viewer_id)[0]
