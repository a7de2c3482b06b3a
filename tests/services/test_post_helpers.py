"""Tests for post helper functions."""

from plantspace.models import Like
from plantspace.services.posts import extract_hashtags, liked_post_ids


def test_extract_hashtags_dedupes_case_insensitively():
    assert extract_hashtags("#Rain then #sun then #rain") == ["#rain", "#sun"]


def test_extract_hashtags_caps_at_ten():
    text = " ".join(f"#tag{i}" for i in range(15))
    assert extract_hashtags(text) == [f"#tag{i}" for i in range(10)]


def test_extract_hashtags_none():
    assert extract_hashtags("no tags here") == []


def test_liked_post_ids(db_session, test_user, other_user, post_factory):
    liked = post_factory(other_user, "one")
    unliked = post_factory(other_user, "two")
    db_session.add(Like(user_id=test_user.id, post_id=liked.id))
    db_session.flush()

    assert liked_post_ids(db_session, test_user.id, [liked.id, unliked.id]) == {liked.id}
    assert liked_post_ids(db_session, None, [liked.id]) == set()
    assert liked_post_ids(db_session, test_user.id, []) == set()
