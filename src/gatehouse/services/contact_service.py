"""Contact form sanitization and persistence helpers."""
from __future__ import annotations

import re
from typing import Any, Sequence

from sqlalchemy.orm import Session

from gatehouse.models.contact import Contact, ContactStatus
from gatehouse.schemas.contact import ContactForm

_SCRIPT_TAG = re.compile(r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", re.IGNORECASE)
_HTML_TAG = re.compile(r"<[^>]*>")
_JS_PROTOCOL = re.compile(r"javascript:", re.IGNORECASE)
_EVENT_HANDLER = re.compile(r"on\w+\s*=", re.IGNORECASE)


def sanitize_input(value: str) -> str:
    """Strip markup, ``javascript:`` URLs and inline event handlers from ``value``."""
    value = value.strip()
    value = _SCRIPT_TAG.sub("", value)
    value = _HTML_TAG.sub("", value)
    value = _JS_PROTOCOL.sub("", value)
    return _EVENT_HANDLER.sub("", value)


def sanitize_payload(payload: Any) -> Any:
    """Recursively sanitize every string inside a decoded JSON document."""
    if isinstance(payload, str):
        return sanitize_input(payload)
    if isinstance(payload, dict):
        return {key: sanitize_payload(value) for key, value in payload.items()}
    if isinstance(payload, list):
        return [sanitize_payload(item) for item in payload]
    return payload


def create_contact(db: Session, form: ContactForm, user_id: str | None = None) -> Contact:
    """Store a validated submission, linking it to ``user_id`` when signed in."""
    contact = Contact(
        name=form.name,
        email=form.email,
        phone=form.phone or None,
        company=form.company or None,
        subject=form.subject,
        message=form.message,
        user_id=user_id,
        status=ContactStatus.PENDING,
        is_read=False,
    )
    db.add(contact)
    db.commit()
    db.refresh(contact)
    return contact


def list_contacts(
    db: Session,
    skip: int = 0,
    limit: int = 10,
    status: ContactStatus | None = None,
) -> tuple[Sequence[Contact], int]:
    """Return one page of submissions, newest first, and the filtered total."""
    query = db.query(Contact)
    if status is not None:
        query = query.filter(Contact.status == status)
    total = query.count()
    items = query.order_by(Contact.created_at.desc(), Contact.id.desc()).offset(skip).limit(limit).all()
    return items, total
