# src/gatehouse/models/user.py
"""SQLAlchemy models for user accounts and roles."""

from __future__ import annotations

import enum
import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Enum, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from gatehouse.core.clock import utcnow
from gatehouse.db.session import Base

if TYPE_CHECKING:
    from gatehouse.models.contact import Contact


class Role(str, enum.Enum):
    """Closed set of roles a user can hold."""

    ADMIN = "ADMIN"
    MODERATOR = "MODERATOR"
    USER = "USER"


NAME_MAX_LENGTH = 100


def _new_user_id() -> str:
    return uuid.uuid4().hex


class User(Base):
    """Local account, created by credential registration or federated sign-in."""

    __tablename__ = "user_account"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_user_id)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    name: Mapped[str | None] = mapped_column(String(NAME_MAX_LENGTH), nullable=True)
    avatar: Mapped[str | None] = mapped_column(Text, nullable=True)
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    # bcrypt hash; NULL for accounts provisioned through a federated provider.
    password: Mapped[str | None] = mapped_column(String(255), nullable=True)
    role: Mapped[Role] = mapped_column(
        Enum(Role, name="user_role"),
        nullable=False,
        default=Role.USER,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
    )

    contacts: Mapped[list[Contact]] = relationship("Contact", back_populates="user")

    @property
    def has_password(self) -> bool:
        """Return True if the account can sign in with a local password."""
        return bool(self.password)
