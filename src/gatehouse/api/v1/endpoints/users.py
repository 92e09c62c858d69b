# src/gatehouse/api/v1/endpoints/users.py
"""User management endpoints guarded by the provider session."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from sqlalchemy.orm import Session

from gatehouse.api.v1.dependencies import (
    ModeratorSessionDep,
    ServicesDep,
    SessionDep,
    SessionUserDep,
    api_rate_limit,
    enforce,
    require_csrf_token,
)
from gatehouse.models.user import Role, User
from gatehouse.schemas.user import UserListResponse, UserResponse, UserUpdate
from gatehouse.services import user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


def _get_user_or_404(db: Session, user_id: str) -> User:
    user = user_service.get_user(db, user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


@router.get(
    "",
    summary="List users",
    response_model=UserListResponse,
    dependencies=[Depends(api_rate_limit)],
)
async def list_users(
    _caller: ModeratorSessionDep,
    db: SessionDep,
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    role: Role | None = None,
) -> UserListResponse:
    """Return accounts, newest first. Requires an administrator or moderator."""
    users = user_service.get_users(db, skip=skip, limit=limit, role=role)
    return UserListResponse(
        items=[UserResponse.model_validate(user) for user in users],
        total=user_service.count_users(db, role=role),
        skip=skip,
        limit=limit,
    )


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: str, _caller: SessionUserDep, db: SessionDep) -> UserResponse:
    return UserResponse.model_validate(_get_user_or_404(db, user_id))


@router.patch(
    "/{user_id}",
    response_model=UserResponse,
    dependencies=[Depends(require_csrf_token)],
)
async def update_user(
    user_id: str,
    payload: UserUpdate,
    request: Request,
    services: ServicesDep,
    db: SessionDep,
) -> UserResponse:
    """Update an account. Owners may edit themselves; only administrators may change roles."""
    caller = enforce(services.session_guard.require_owner_or_admin(request, user_id))
    if payload.role is not None and caller.role is not Role.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only administrators can change roles",
        )

    user = _get_user_or_404(db, user_id)
    updated = user_service.update_user(db, user, payload)
    logger.info("User %s updated by %s", user_id, caller.email)
    return UserResponse.model_validate(updated)


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_csrf_token)],
)
async def delete_user(
    user_id: str,
    request: Request,
    services: ServicesDep,
    db: SessionDep,
) -> Response:
    caller = enforce(services.session_guard.require_owner_or_admin(request, user_id))
    user = _get_user_or_404(db, user_id)
    user_service.delete_user(db, user)
    logger.info("User %s deleted by %s", user_id, caller.email)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
