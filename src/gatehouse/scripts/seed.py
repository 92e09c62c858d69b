# src/gatehouse/scripts/seed.py
"""Create the demo accounts used in development.

Existing accounts are left untouched, so the script can be run repeatedly.
"""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from gatehouse.db import SessionLocal, create_tables
from gatehouse.models.user import Role, User
from gatehouse.schemas.user import UserCreate
from gatehouse.services import user_service

logger = logging.getLogger(__name__)

DEMO_ACCOUNTS: tuple[UserCreate, ...] = (
    UserCreate(
        email="admin@example.com",
        name="Administrator",
        password="admin123",
        role=Role.ADMIN,
        bio="System administrator account",
    ),
    UserCreate(
        email="user@example.com",
        name="Regular User",
        password="user123",
        role=Role.USER,
        bio="A regular user account",
    ),
    UserCreate(
        email="author@example.com",
        name="Content Author",
        password="author123",
        role=Role.MODERATOR,
        bio="Writes and moderates blog content",
    ),
)


def seed_users(db: Session, accounts: tuple[UserCreate, ...] = DEMO_ACCOUNTS) -> list[User]:
    """Insert any missing demo accounts and return all of them."""
    users: list[User] = []
    for account in accounts:
        user = user_service.get_user_by_email(db, account.email)
        if user is None:
            user = user_service.create_user(db, account)
            logger.info("Created %s account %s", user.role.value, user.email)
        users.append(user)
    return users


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    create_tables()
    db = SessionLocal()
    try:
        seed_users(db)
    finally:
        db.close()


if __name__ == "__main__":
    main()
