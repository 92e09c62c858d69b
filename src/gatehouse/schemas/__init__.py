# src/gatehouse/schemas/__init__.py
"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .contact import ContactForm, ContactFormResponse, ContactListResponse
from .user import LoginRequest, LoginResponse, SessionResponse, UserCreate, UserResponse, UserUpdate

__all__ = [
    "ContactForm", "ContactFormResponse", "ContactListResponse",
    "LoginRequest", "LoginResponse", "SessionResponse",
    "UserCreate", "UserResponse", "UserUpdate",
]
