# src/gatehouse/api/v1/endpoints/protected.py
"""Profile endpoints guarded by the legacy ``auth-token`` cookie."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, HTTPException, Query, status

from gatehouse.api.v1.dependencies import LegacyUserDep, SessionDep, enforce
from gatehouse.core.clock import utcnow
from gatehouse.models.user import Role
from gatehouse.schemas.user import ProfileResponse, ProfileUpdateRequest
from gatehouse.services import user_service
from gatehouse.services.authz import ADMIN_ONLY, check_owner_or_role

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/protected", tags=["profile"])

DEFAULT_PREFERENCES: dict[str, Any] = {
    "theme": "light",
    "language": "en",
    "notifications": True,
}


@router.get("/profile", response_model=ProfileResponse)
async def get_profile(claims: LegacyUserDep, db: SessionDep) -> ProfileResponse:
    """Return the caller's profile as described by their token."""
    user = user_service.get_user(db, claims.id)
    return ProfileResponse(
        id=claims.id,
        email=claims.email,
        name=user.name if user else claims.name,
        role=claims.role,
        preferences=dict(DEFAULT_PREFERENCES),
        last_login=utcnow(),
        updated_at=user.updated_at if user else None,
    )


@router.put("/profile", response_model=ProfileResponse)
async def update_profile(
    payload: ProfileUpdateRequest,
    claims: LegacyUserDep,
    db: SessionDep,
) -> ProfileResponse:
    """Update name and preferences.

    A role change is applied only when the caller is an administrator and is
    silently ignored otherwise. The stored role wins over the token's, which
    may predate a demotion.
    """
    name = payload.name or claims.name
    user = user_service.get_user(db, claims.id)
    role = user.role if user is not None else claims.role
    if payload.role is not None and role is Role.ADMIN:
        role = payload.role

    if user is not None:
        user.name = name
        if role is not user.role:
            user.role = role
            logger.info("Role of %s changed to %s", user.email, role.value)
        db.add(user)
        db.commit()
        db.refresh(user)

    return ProfileResponse(
        id=claims.id,
        email=claims.email,
        name=name,
        role=role,
        preferences=payload.preferences if payload.preferences is not None else dict(DEFAULT_PREFERENCES),
        updated_at=user.updated_at if user else utcnow(),
    )


@router.delete("/profile")
async def delete_profile(
    claims: LegacyUserDep,
    db: SessionDep,
    user_id: str | None = Query(None, alias="userId"),
) -> dict[str, object]:
    """Delete the caller's account, or ``userId`` when the caller is an administrator."""
    target_id = user_id or claims.id
    enforce(check_owner_or_role(claims, target_id, ADMIN_ONLY))

    user = user_service.get_user(db, target_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    user_service.delete_user(db, user)
    logger.info("Account %s deleted by %s", target_id, claims.email)

    return {
        "success": True,
        "message": "Account deleted",
        "deleted_user_id": target_id,
        "timestamp": utcnow(),
    }
