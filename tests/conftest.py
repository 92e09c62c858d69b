# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from starlette.requests import Request

os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from gatehouse.core.settings import Settings
from gatehouse.db import Base, engine_options
from gatehouse.db import get_db as app_get_session
from gatehouse.main import create_app
from gatehouse.models import Role, User
from gatehouse.schemas.user import UserCreate
from gatehouse.services import user_service
from gatehouse.services.registry import GateServices
from gatehouse.services.session_provider import SESSION_COOKIE_NAME

TEST_DB_URL = "sqlite://"
TEST_SECRET_KEY = "test-secret-key-not-for-production"
PASSWORDS = {
    "user@example.com": "user123",
    "other@example.com": "other123",
    "admin@example.com": "admin123",
    "author@example.com": "author123",
}


class FakeClock:
    """Manually advanced time source in Unix seconds."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(TEST_DB_URL, **engine_options(TEST_DB_URL))
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
        join_transaction_mode="create_savepoint",
    )
    session = SessionLocal()

    try:
        yield session
    finally:
        session.close()

        if transaction.is_active:
            transaction.rollback()
        connection.close()

        # Ensure each test sees a clean database even if commits occurred.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """Settings for the test application; production semantics are off."""
    return Settings(secret_key=TEST_SECRET_KEY, environment="test", database_url=TEST_DB_URL)


@pytest.fixture()
def app(test_settings: Settings, db_session: Session) -> Iterator[FastAPI]:
    """A fresh application per test, so limiter and CSRF state never leak."""
    application = create_app(test_settings)

    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    application.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield application
    finally:
        application.dependency_overrides.clear()


@pytest.fixture()
def services(app: FastAPI) -> GateServices:
    return app.state.services


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app) as test_client:
        yield test_client


def _create_user(db: Session, email: str, password: str | None, role: Role, name: str) -> User:
    return user_service.create_user(
        db,
        UserCreate(email=email, name=name, password=password, role=role),
    )


@pytest.fixture()
def test_user(db_session: Session) -> User:
    """Create and return a persisted regular user (password ``user123``)."""
    return _create_user(db_session, "user@example.com", PASSWORDS["user@example.com"], Role.USER, "Regular User")


@pytest.fixture()
def other_user(db_session: Session) -> User:
    return _create_user(db_session, "other@example.com", PASSWORDS["other@example.com"], Role.USER, "Other User")


@pytest.fixture()
def admin_user(db_session: Session) -> User:
    """Create and return a persisted administrator (password ``admin123``)."""
    return _create_user(db_session, "admin@example.com", PASSWORDS["admin@example.com"], Role.ADMIN, "Administrator")


@pytest.fixture()
def moderator_user(db_session: Session) -> User:
    return _create_user(db_session, "author@example.com", PASSWORDS["author@example.com"], Role.MODERATOR, "Content Author")


@pytest.fixture()
def sign_in_as(client: TestClient) -> Callable[[User], str]:
    """Return a helper that signs ``user`` in through the credentials provider.

    The session cookie lands in the client's cookie jar.
    """

    def _sign_in(user: User) -> str:
        response = client.post(
            "/api/v1/auth/signin/credentials",
            json={"email": user.email, "password": PASSWORDS[user.email]},
        )
        assert response.status_code == 200, response.text
        return response.cookies[SESSION_COOKIE_NAME]

    return _sign_in


@pytest.fixture()
def csrf_headers(client: TestClient) -> Callable[[], dict[str, str]]:
    """Return a helper that fetches a CSRF token and builds the request header."""

    def _headers() -> dict[str, str]:
        response = client.get("/api/v1/auth/csrf")
        assert response.status_code == 200
        return {"X-CSRF-Token": response.json()["csrf_token"]}

    return _headers


@pytest.fixture()
def make_request() -> Callable[..., Request]:
    """Return a factory for bare Starlette requests with the given headers."""

    def _make(headers: dict[str, str] | None = None, method: str = "GET", **scope: Any) -> Request:
        raw_headers = [(key.lower().encode(), value.encode()) for key, value in (headers or {}).items()]
        return Request({"type": "http", "method": method, "path": "/", "headers": raw_headers, **scope})

    return _make


@pytest.fixture()
def legacy_login(client: TestClient) -> Callable[[User], str]:
    """Return a helper that logs ``user`` in through ``/auth/login``."""

    def _login(user: User) -> str:
        response = client.post(
            "/api/v1/auth/login",
            json={"email": user.email, "password": PASSWORDS[user.email]},
        )
        assert response.status_code == 200, response.text
        return response.json()["token"]

    return _login
