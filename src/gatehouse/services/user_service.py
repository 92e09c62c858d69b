"""CRUD-style helpers for managing users."""
from __future__ import annotations

from typing import Sequence

from sqlalchemy.orm import Session

from gatehouse.core import security
from gatehouse.models.user import Role, User
from gatehouse.schemas.user import UserCreate, UserUpdate

__all__ = [
    "get_user",
    "get_user_by_email",
    "get_users",
    "count_users",
    "create_user",
    "update_user",
    "delete_user",
]


def _normalize_email(email: str) -> str:
    return email.strip().lower()


def get_user(db: Session, user_id: str) -> User | None:
    """Return a single user by primary key."""
    return db.query(User).filter(User.id == user_id).first()


def get_user_by_email(db: Session, email: str) -> User | None:
    """Return the user registered under ``email`` (case-insensitive)."""
    return db.query(User).filter(User.email == _normalize_email(email)).first()


def get_users(
    db: Session,
    skip: int = 0,
    limit: int = 100,
    role: Role | None = None,
) -> Sequence[User]:
    """Return users with simple offset-based pagination."""
    query = db.query(User)
    if role is not None:
        query = query.filter(User.role == role)
    return query.order_by(User.created_at.desc()).offset(skip).limit(limit).all()


def count_users(db: Session, role: Role | None = None) -> int:
    """Return the number of users, optionally restricted to one role."""
    query = db.query(User)
    if role is not None:
        query = query.filter(User.role == role)
    return query.count()


def create_user(db: Session, user: UserCreate) -> User:
    """Persist a new user, hashing the password when one is supplied.

    Federated accounts are created without a password and can only sign in
    through their identity provider.
    """
    hashed = security.hash_password(user.password) if user.password else None
    db_user = User(
        email=_normalize_email(user.email),
        name=user.name,
        avatar=user.avatar,
        bio=user.bio,
        password=hashed,
        role=user.role,
    )
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    return db_user


def update_user(db: Session, db_user: User, update_data: UserUpdate) -> User:
    """Apply partial updates to an existing user."""
    update_dict = update_data.model_dump(exclude_unset=True)
    password = update_dict.pop("password", None)
    for key, value in update_dict.items():
        setattr(db_user, key, value)
    if password:
        db_user.password = security.hash_password(password)

    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    return db_user


def delete_user(db: Session, db_user: User) -> User:
    """Remove a user from the database and return the deleted instance."""
    db.delete(db_user)
    db.commit()
    return db_user
