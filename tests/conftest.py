# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Generator, Iterator
from datetime import timedelta
from itertools import count

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

from plantspace.core.security import create_access_token, hash_password
from plantspace.db.session import Base, enable_sqlite_foreign_keys
from plantspace.db.session import get_db as app_get_session
from plantspace.db.time import utcnow
from plantspace.main import app as fastapi_app
from plantspace.models import Post, User

TEST_DB_URL = "sqlite://"
TEST_PASSWORD = "Sprout!2024"

_POST_CLOCK = count(1)


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    event.listen(engine, "connect", enable_sqlite_foreign_keys)
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    connection = engine.connect()
    transaction = connection.begin()
    SessionLocal = sessionmaker(
        bind=connection,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )
    session = SessionLocal()
    session.begin_nested()

    @event.listens_for(session, "after_transaction_end")
    def restart_savepoint(sess: Session, trans) -> None:  # pragma: no cover - SQLAlchemy internals
        if trans.nested and not getattr(trans._parent, "nested", False):
            session.begin_nested()

    try:
        yield session
    finally:
        event.remove(session, "after_transaction_end", restart_savepoint)
        session.close()

        if transaction.is_active:
            transaction.rollback()
        connection.close()

        # Ensure each test sees a clean database even if commits occurred.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(app: FastAPI, db_session: Session) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


def make_user(db: Session, username: str, **overrides) -> User:
    """Persist a user with the shared test password."""
    fields = {
        "username": username,
        "email": f"{username}@example.com",
        "password_hash": hash_password(TEST_PASSWORD),
        "display_name": username.replace("_", " ").title(),
    }
    fields.update(overrides)
    user = User(**fields)
    db.add(user)
    db.flush()
    db.refresh(user)
    return user


def make_post(db: Session, author: User, text: str = "Tomatoes are ripening #garden", **overrides) -> Post:
    """Persist a post; each call is one second newer than the last."""
    fields = {
        "user_id": author.id,
        "text": text,
        "hashtags": [tag.lower() for tag in text.split() if tag.startswith("#")],
        "created_at": utcnow() + timedelta(seconds=next(_POST_CLOCK)),
    }
    fields.update(overrides)
    post = Post(**fields)
    db.add(post)
    db.flush()
    db.refresh(post)
    return post


def bearer(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture()
def test_user(db_session: Session) -> User:
    """Create and return a persisted test user."""
    return make_user(db_session, "fern_grower")


@pytest.fixture()
def other_user(db_session: Session) -> User:
    """Create and return a second persisted user."""
    return make_user(db_session, "moss_keeper")


@pytest.fixture()
def admin_user(db_session: Session) -> User:
    return make_user(db_session, "garden_admin", is_admin=True)


@pytest.fixture()
def auth_token(test_user: User) -> dict[str, str]:
    """Return authorization headers for the primary test user."""
    return bearer(test_user)


@pytest.fixture()
def other_auth_token(other_user: User) -> dict[str, str]:
    """Return authorization headers for the secondary test user."""
    return bearer(other_user)


@pytest.fixture()
def admin_auth_token(admin_user: User) -> dict[str, str]:
    return bearer(admin_user)


@pytest.fixture()
def test_post(db_session: Session, test_user: User) -> Post:
    """Create a baseline post for tests."""
    return make_post(db_session, test_user)


@pytest.fixture()
def user_factory(db_session: Session):
    """Return a callable creating extra users in the test session."""

    def _factory(username: str, **overrides) -> User:
        return make_user(db_session, username, **overrides)

    return _factory


@pytest.fixture()
def post_factory(db_session: Session):
    def _factory(author: User, text: str = "Compost turned today #soil", **overrides) -> Post:
        return make_post(db_session, author, text, **overrides)

    return _factory


@pytest.fixture()
def auth_headers():
    """Return a callable building bearer headers for any user."""
    return bearer
