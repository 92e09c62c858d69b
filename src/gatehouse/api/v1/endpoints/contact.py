# src/gatehouse/api/v1/endpoints/contact.py
"""Public contact form endpoint and its administrator listing."""

from __future__ import annotations

import json
import logging
import math

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from pydantic import ValidationError

from gatehouse.api.v1.dependencies import (
    AdminSessionDep,
    OptionalSessionDep,
    SessionDep,
    contact_rate_limit,
    require_same_origin,
)
from gatehouse.models.contact import ContactStatus
from gatehouse.schemas.contact import (
    ContactCreated,
    ContactForm,
    ContactFormResponse,
    ContactListResponse,
    ContactRecord,
    Pagination,
)
from gatehouse.services import contact_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/contact", tags=["contact"])


def _field_errors(err: ValidationError) -> dict[str, list[str]]:
    errors: dict[str, list[str]] = {}
    for item in err.errors():
        field = ".".join(str(part) for part in item["loc"]) or "body"
        errors.setdefault(field, []).append(item["msg"].removeprefix("Value error, "))
    return errors


@router.post(
    "",
    summary="Submit the contact form",
    status_code=status.HTTP_201_CREATED,
    response_model=ContactFormResponse,
    # The origin check runs before the limiter records the request.
    dependencies=[Depends(require_same_origin), Depends(contact_rate_limit)],
)
async def submit_contact(
    request: Request,
    db: SessionDep,
    session: OptionalSessionDep,
) -> ContactFormResponse:
    """Sanitize, validate and store a contact message."""
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as err:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": "Invalid request format"},
        ) from err

    try:
        form = ContactForm.model_validate(contact_service.sanitize_payload(body))
    except ValidationError as err:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": "Form validation failed", "errors": _field_errors(err)},
        ) from err

    user_id = session.user.id if session else None
    contact = contact_service.create_contact(db, form, user_id=user_id)
    logger.info("Stored contact message %d (user=%s)", contact.id, user_id)

    return ContactFormResponse(
        success=True,
        message="Message received. We will get back to you soon.",
        data=ContactCreated(id=contact.id, created_at=contact.created_at),
    )


@router.get("", summary="List contact messages", response_model=ContactListResponse)
async def list_contacts(
    _admin: AdminSessionDep,
    db: SessionDep,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status_filter: str | None = Query(None, alias="status"),
) -> ContactListResponse:
    """Return stored messages, newest first. Unknown status filters are ignored."""
    contact_status = ContactStatus(status_filter) if status_filter in ContactStatus.__members__ else None
    items, total = contact_service.list_contacts(
        db,
        skip=(page - 1) * limit,
        limit=limit,
        status=contact_status,
    )
    return ContactListResponse(
        data=[ContactRecord.model_validate(item) for item in items],
        pagination=Pagination(page=page, limit=limit, total=total, pages=math.ceil(total / limit)),
    )
