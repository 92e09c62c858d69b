# src/gatehouse/db/session.py
"""Engine, session factory and declarative base for the account store."""

from __future__ import annotations

from collections.abc import Generator
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

from gatehouse.core.settings import settings


class Base(DeclarativeBase):
    """Declarative base for users and contact messages."""


# Model modules register their tables on Base.metadata when imported.
import gatehouse.models  # noqa: E402,F401


def engine_options(database_url: str) -> dict[str, Any]:
    """Return ``create_engine`` keyword arguments suited to ``database_url``.

    SQLite connections are shared with the threadpool FastAPI runs sync
    dependencies on, and an in-memory database must stay on one connection
    or every session would see an empty schema.
    """
    url = make_url(database_url)
    if url.get_backend_name() != "sqlite":
        return {"pool_pre_ping": True}

    options: dict[str, Any] = {"connect_args": {"check_same_thread": False}}
    if url.database in (None, "", ":memory:"):
        options["poolclass"] = StaticPool
    return options


engine = create_engine(
    settings.database_url,
    echo=settings.sql_debug,
    **engine_options(settings.database_url),
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Yield a request-scoped session; routes commit their own writes."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables() -> None:
    """Create the account and contact tables without running migrations."""
    Base.metadata.create_all(bind=engine)
