# src/gatehouse/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .auth import router as auth_router
from .contact import router as contact_router
from .protected import router as protected_router
from .system import router as system_router
from .users import router as users_router

__all__ = [
    "auth_router",
    "contact_router",
    "protected_router",
    "system_router",
    "users_router",
]
