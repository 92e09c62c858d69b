"""Account store: engine, sessions and the request dependency."""

from .session import Base, SessionLocal, create_tables, engine_options, get_db

__all__ = ["Base", "SessionLocal", "create_tables", "engine_options", "get_db"]
