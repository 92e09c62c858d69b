"""Contact form Pydantic schemas."""
from __future__ import annotations

import re
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from gatehouse.models.contact import ContactStatus
from gatehouse.schemas.user import EMAIL_PATTERN

NAME_PATTERN = re.compile(r"^[一-龥a-zA-Z\s]+$")
CN_MOBILE_PATTERN = re.compile(r"^1[3-9]\d{9}$")
INTERNATIONAL_PHONE_PATTERN = re.compile(r"^\+\d{1,3}\d{10,14}$")


class ContactForm(BaseModel):
    """Validated contact form submission."""

    name: str = Field(..., min_length=2, max_length=50)
    email: str = Field(..., max_length=100)
    phone: str | None = None
    company: str | None = Field(None, max_length=100)
    subject: str = Field(..., min_length=5, max_length=100)
    message: str = Field(..., min_length=10, max_length=2000)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Names may only contain letters (Latin or CJK) and spaces."""
        if not NAME_PATTERN.match(v):
            raise ValueError("Name may only contain letters and spaces")
        return v

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        if not EMAIL_PATTERN.match(v):
            raise ValueError("Please enter a valid email address")
        return v

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: str | None) -> str | None:
        """Accept a mainland mobile number or a ``+``-prefixed international one."""
        if not v:
            return None
        if CN_MOBILE_PATTERN.match(v) or INTERNATIONAL_PHONE_PATTERN.match(v):
            return v
        raise ValueError("Please enter a valid phone number")


class ContactCreated(BaseModel):
    id: int
    created_at: datetime


class ContactFormResponse(BaseModel):
    """Envelope returned by the contact endpoint."""

    success: bool
    message: str
    data: ContactCreated | None = None
    errors: dict[str, list[str]] | None = None
    reset_time: str | None = None


class ContactRecord(BaseModel):
    """Stored contact message as shown to administrators."""

    id: int
    name: str
    email: str
    phone: str | None = None
    company: str | None = None
    subject: str
    message: str
    user_id: str | None = None
    status: ContactStatus
    is_read: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class ContactListResponse(BaseModel):
    success: bool = True
    data: list[ContactRecord]
    pagination: Pagination
