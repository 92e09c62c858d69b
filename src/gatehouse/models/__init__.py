# src/gatehouse/models/__init__.py
"""SQLAlchemy models for the Gatehouse service."""

from .contact import Contact, ContactStatus
from .user import Role, User

__all__ = [
    "Contact", "ContactStatus",
    "Role", "User",
]
