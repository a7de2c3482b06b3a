# tests/v1/test_dependencies.py
"""Tests for API dependencies module."""

from datetime import timedelta

import pytest
from fastapi.security import HTTPAuthorizationCredentials
from jose import jwt

from plantspace.api.v1.dependencies import (
    PageParams,
    get_current_user,
    get_optional_user,
    require_admin,
)
from plantspace.core.errors import AuthenticationError, AuthorizationError
from plantspace.core.security import create_access_token
from plantspace.core.settings import settings


def _credentials(token: str) -> HTTPAuthorizationCredentials:
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


class TestGetCurrentUser:
    """Test the bearer-token identity dependency."""

    def test_valid_token(self, db_session, test_user):
        token = create_access_token(test_user.id)
        user = get_current_user(_credentials(token), db_session)
        assert user.id == test_user.id

    def test_missing_token(self, db_session):
        with pytest.raises(AuthenticationError) as exc_info:
            get_current_user(None, db_session)
        assert exc_info.value.code == "TOKEN_MISSING"
        assert exc_info.value.status_code == 401

    def test_expired_token(self, db_session, test_user):
        token = create_access_token(test_user.id, expires_delta=timedelta(seconds=-5))
        with pytest.raises(AuthenticationError) as exc_info:
            get_current_user(_credentials(token), db_session)
        assert exc_info.value.code == "TOKEN_EXPIRED"

    def test_wrong_secret(self, db_session, test_user):
        token = jwt.encode({"sub": test_user.id}, "not-the-secret", algorithm=settings.jwt_algorithm)
        with pytest.raises(AuthenticationError) as exc_info:
            get_current_user(_credentials(token), db_session)
        assert exc_info.value.code == "TOKEN_INVALID"

    def test_token_without_subject(self, db_session):
        token = jwt.encode({"username": "x"}, settings.secret_key, algorithm=settings.jwt_algorithm)
        with pytest.raises(AuthenticationError):
            get_current_user(_credentials(token), db_session)

    def test_deleted_user(self, db_session, test_user):
        token = create_access_token(test_user.id)
        db_session.delete(test_user)
        db_session.flush()
        with pytest.raises(AuthenticationError) as exc_info:
            get_current_user(_credentials(token), db_session)
        assert exc_info.value.code == "TOKEN_INVALID"


class TestOptionalUser:
    def test_anonymous_without_credentials(self, db_session):
        assert get_optional_user(None, db_session) is None

    def test_anonymous_with_bad_token(self, db_session):
        assert get_optional_user(_credentials("garbage"), db_session) is None

    def test_resolves_valid_token(self, db_session, test_user):
        token = create_access_token(test_user.id)
        assert get_optional_user(_credentials(token), db_session).id == test_user.id


def test_require_admin(test_user, admin_user):
    assert require_admin(admin_user) is admin_user
    with pytest.raises(AuthorizationError) as exc_info:
        require_admin(test_user)
    assert exc_info.value.status_code == 403


def test_page_params_offset():
    params = PageParams(page=3, limit=10)
    assert params.offset == 20
