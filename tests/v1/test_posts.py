# tests/v1/test_posts.py
"""Tests for post endpoints."""

from fastapi import status
from sqlalchemy.exc import IntegrityError

from plantspace.models import Comment, Like, Post, PostReport
from plantspace.models.post import MODERATION_PENDING, MODERATION_REJECTED


def test_create_post_extracts_hashtags(client, auth_token, test_user) -> None:
    response = client.post(
        "/api/posts",
        json={"text": "  Harvest day! #Tomatoes #organic #tomatoes  "},
        headers=auth_token,
    )
    assert response.status_code == status.HTTP_201_CREATED
    post = response.json()["post"]
    assert post["text"] == "Harvest day! #Tomatoes #organic #tomatoes"
    assert post["hashtags"] == ["#tomatoes", "#organic"]
    assert post["users"]["id"] == test_user.id
    assert post["likes_count"] == 0
    assert post["is_liked"] is False


def test_create_post_rejects_blank_and_long_text(client, auth_token) -> None:
    response = client.post("/api/posts", json={"text": "   "}, headers=auth_token)
    assert response.status_code == status.HTTP_400_BAD_REQUEST

    response = client.post("/api/posts", json={"text": "x" * 2001}, headers=auth_token)
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_create_post_requires_auth(client) -> None:
    response = client.post("/api/posts", json={"text": "hello"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_feed_is_newest_first_and_hides_unapproved(client, test_user, post_factory) -> None:
    older = post_factory(test_user, "First sprouts")
    newer = post_factory(test_user, "Second sprouts")
    post_factory(test_user, "Waiting for review", moderation_status=MODERATION_PENDING)
    post_factory(test_user, "Off topic", moderation_status=MODERATION_REJECTED)

    response = client.get("/api/posts/feed")
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert [post["id"] for post in data["posts"]] == [newer.id, older.id]
    assert data["pagination"] == {"page": 1, "limit": 20, "has_more": False}


def test_feed_pagination(client, test_user, post_factory) -> None:
    for index in range(3):
        post_factory(test_user, f"Post number {index}")

    first = client.get("/api/posts/feed", params={"page": 1, "limit": 2}).json()
    second = client.get("/api/posts/feed", params={"page": 2, "limit": 2}).json()
    assert len(first["posts"]) == 2
    assert first["pagination"]["has_more"] is True
    assert len(second["posts"]) == 1
    assert second["pagination"]["has_more"] is False


def test_feed_marks_liked_posts_for_caller(client, test_user, other_user, auth_token, post_factory, db_session) -> None:
    liked = post_factory(other_user, "Like me")
    post_factory(other_user, "Ignore me")
    db_session.add(Like(user_id=test_user.id, post_id=liked.id))
    liked.likes_count = 1
    db_session.flush()

    posts = client.get("/api/posts/feed", headers=auth_token).json()["posts"]
    flags = {post["id"]: post["is_liked"] for post in posts}
    assert flags[liked.id] is True
    assert sum(flags.values()) == 1

    anonymous = client.get("/api/posts/feed").json()["posts"]
    assert all(post["is_liked"] is False for post in anonymous)


def test_feed_with_bad_token_is_anonymous(client, test_post) -> None:
    response = client.get("/api/posts/feed", headers={"Authorization": "Bearer garbage"})
    assert response.status_code == status.HTTP_200_OK
    assert len(response.json()["posts"]) == 1


def test_get_post(client, test_post) -> None:
    response = client.get(f"/api/posts/{test_post.id}")
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["id"] == test_post.id

    response = client.get("/api/posts/does-not-exist")
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_delete_post_author_only(client, test_post, auth_token, other_auth_token, db_session) -> None:
    response = client.delete(f"/api/posts/{test_post.id}", headers=other_auth_token)
    assert response.status_code == status.HTTP_403_FORBIDDEN

    response = client.delete(f"/api/posts/{test_post.id}", headers=auth_token)
    assert response.status_code == status.HTTP_200_OK
    assert db_session.get(Post, test_post.id) is None


def test_delete_post_removes_comments_likes_and_reports(
    client, test_post, auth_token, other_auth_token, db_session
) -> None:
    response = client.post(
        f"/api/comments/posts/{test_post.id}/comments",
        json={"text": "Which variety is that?"},
        headers=other_auth_token,
    )
    assert response.status_code == status.HTTP_201_CREATED
    response = client.post(f"/api/posts/{test_post.id}/like", headers=other_auth_token)
    assert response.status_code == status.HTTP_200_OK
    response = client.post(
        "/api/moderation/report",
        json={"post_id": test_post.id, "reason": "spam"},
        headers=other_auth_token,
    )
    assert response.status_code == status.HTTP_201_CREATED

    response = client.delete(f"/api/posts/{test_post.id}", headers=auth_token)
    assert response.status_code == status.HTTP_200_OK

    assert db_session.query(Comment).filter(Comment.post_id == test_post.id).count() == 0
    assert db_session.query(Like).filter(Like.post_id == test_post.id).count() == 0
    assert db_session.query(PostReport).filter(PostReport.post_id == test_post.id).count() == 0


def test_like_and_unlike(client, test_post, other_auth_token) -> None:
    response = client.post(f"/api/posts/{test_post.id}/like", headers=other_auth_token)
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["likes_count"] == 1

    response = client.post(f"/api/posts/{test_post.id}/like", headers=other_auth_token)
    assert response.status_code == status.HTTP_409_CONFLICT

    response = client.delete(f"/api/posts/{test_post.id}/like", headers=other_auth_token)
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["likes_count"] == 0

    response = client.delete(f"/api/posts/{test_post.id}/like", headers=other_auth_token)
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_search_posts_by_text_and_hashtag(client, test_user, post_factory) -> None:
    match_text = post_factory(test_user, "My basil is thriving")
    match_tag = post_factory(test_user, "Look at this #Basil")
    post_factory(test_user, "Nothing relevant here")

    response = client.get("/api/posts/search", params={"q": "basil"})
    assert response.status_code == status.HTTP_200_OK
    ids = {post["id"] for post in response.json()["posts"]}
    assert ids == {match_text.id, match_tag.id}


def test_like_unique_violation_is_conflict(client, test_post, other_auth_token, db_session, mocker) -> None:
    mocker.patch.object(
        db_session,
        "commit",
        side_effect=IntegrityError("INSERT INTO likes", {}, Exception("UNIQUE constraint failed")),
    )
    response = client.post(f"/api/posts/{test_post.id}/like", headers=other_auth_token)
    assert response.status_code == status.HTTP_409_CONFLICT
    assert response.json()["code"] == "ALREADY_LIKED"
