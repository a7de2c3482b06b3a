"""Tests for user discovery and follow endpoints."""

from fastapi import status
from sqlalchemy.exc import IntegrityError

from plantspace.models import Follow


def test_search_users_verified_first(client, auth_token, user_factory) -> None:
    plain = user_factory("rose_lover")
    verified = user_factory("rose_expert", is_verified=True)
    user_factory("cactus_fan")

    response = client.get("/api/users/search", params={"q": "rose"}, headers=auth_token)
    assert response.status_code == status.HTTP_200_OK
    ids = [user["id"] for user in response.json()["users"]]
    assert ids == [verified.id, plain.id]


def test_search_users_requires_two_characters(client, auth_token) -> None:
    response = client.get("/api/users/search", params={"q": "r"}, headers=auth_token)
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_get_profile(client, test_user, other_user, auth_token, post_factory, db_session) -> None:
    post_factory(other_user, "Mulching tips #soil")
    db_session.add(Follow(follower_id=test_user.id, following_id=other_user.id))
    db_session.flush()

    response = client.get(f"/api/users/{other_user.id}", headers=auth_token)
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["username"] == other_user.username
    assert data["followers_count"] == 1
    assert data["posts_count"] == 1
    assert data["is_following"] is True
    assert data["is_own_profile"] is False
    assert len(data["posts"]) == 1

    own = client.get(f"/api/users/{test_user.id}", headers=auth_token).json()
    assert own["is_own_profile"] is True


def test_get_unknown_profile(client, auth_token) -> None:
    response = client.get("/api/users/missing", headers=auth_token)
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_follow_flow(client, test_user, other_user, auth_token) -> None:
    response = client.post(f"/api/users/{other_user.id}/follow", headers=auth_token)
    assert response.status_code == status.HTTP_201_CREATED

    response = client.post(f"/api/users/{other_user.id}/follow", headers=auth_token)
    assert response.status_code == status.HTTP_409_CONFLICT

    followers = client.get(f"/api/users/{other_user.id}/followers").json()["followers"]
    assert [user["id"] for user in followers] == [test_user.id]

    following = client.get(f"/api/users/{test_user.id}/following").json()["following"]
    assert [user["id"] for user in following] == [other_user.id]

    response = client.delete(f"/api/users/{other_user.id}/follow", headers=auth_token)
    assert response.status_code == status.HTTP_200_OK

    response = client.delete(f"/api/users/{other_user.id}/follow", headers=auth_token)
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_cannot_follow_self_or_unknown(client, test_user, auth_token) -> None:
    response = client.post(f"/api/users/{test_user.id}/follow", headers=auth_token)
    assert response.status_code == status.HTTP_400_BAD_REQUEST

    response = client.post("/api/users/nobody/follow", headers=auth_token)
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_follow_unique_violation_is_conflict(client, other_user, auth_token, db_session, mocker) -> None:
    mocker.patch.object(
        db_session,
        "commit",
        side_effect=IntegrityError("INSERT INTO follows", {}, Exception("UNIQUE constraint failed")),
    )
    response = client.post(f"/api/users/{other_user.id}/follow", headers=auth_token)
    assert response.status_code == status.HTTP_409_CONFLICT
    assert response.json()["code"] == "ALREADY_FOLLOWING"
