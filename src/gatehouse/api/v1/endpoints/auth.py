# src/gatehouse/api/v1/endpoints/auth.py
"""Authentication endpoints for the Gatehouse API.

Two session mechanisms coexist: the legacy ``auth-token`` cookie issued by
``/auth/login`` and the provider session cookie issued by
``/auth/signin/credentials``.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from gatehouse.api.v1.dependencies import (
    OptionalSessionDep,
    ServicesDep,
    SessionDep,
    api_rate_limit,
    require_csrf_token,
)
from gatehouse.core.clock import utcnow
from gatehouse.schemas.user import (
    AuthStatusResponse,
    CsrfTokenResponse,
    LoginRequest,
    LoginResponse,
    LogoutResponse,
    ProvidersResponse,
    SessionResponse,
    SessionUser,
    UserInfo,
    is_valid_email,
)
from gatehouse.services.errors import CredentialsError, MissingCredentialsError
from gatehouse.services.identity import session_fingerprint
from gatehouse.services.legacy_token import LEGACY_COOKIE_NAME
from gatehouse.services.session_provider import (
    SESSION_COOKIE_NAME,
    SessionData,
    authenticate_credentials,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["authentication"])


def _validate_login_payload(payload: LoginRequest) -> None:
    if not payload.email or not payload.password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=MissingCredentialsError().public_detail,
        )
    if not is_valid_email(payload.email):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid email format",
        )


def _credentials_failed(err: CredentialsError, email: str) -> HTTPException:
    logger.info("Credential sign-in rejected for %s: %s", email, err.reason)
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=err.public_detail,
    )


def _session_response(session: SessionData) -> SessionResponse:
    claims = session.user
    return SessionResponse(
        user=SessionUser(
            id=claims.id,
            email=claims.email,
            name=claims.name,
            image=claims.image,
            role=claims.role,
        ),
        expires=session.expires,
    )


@router.post(
    "/login",
    summary="Log in with email and password (legacy cookie)",
    response_model=LoginResponse,
)
async def login(
    payload: LoginRequest,
    response: Response,
    db: SessionDep,
    services: ServicesDep,
) -> LoginResponse:
    """Verify credentials and set the ``auth-token`` cookie."""
    _validate_login_payload(payload)
    try:
        user = authenticate_credentials(db, payload.email, payload.password)
    except CredentialsError as err:
        raise _credentials_failed(err, payload.email) from err

    token = services.legacy_tokens.issue(user)
    response.set_cookie(
        LEGACY_COOKIE_NAME,
        token,
        max_age=services.legacy_tokens.ttl_seconds,
        httponly=True,
        secure=services.settings.is_production,
        samesite="strict",
    )
    logger.info("Legacy login succeeded for %s", user.email)

    return LoginResponse(
        user=UserInfo(id=user.id, email=user.email, name=user.name, role=user.role),
        token=token,
        timestamp=utcnow(),
    )


@router.get(
    "/login",
    summary="Current legacy login state",
    response_model=AuthStatusResponse,
)
async def login_status(request: Request, services: ServicesDep) -> AuthStatusResponse:
    """Return the caller's legacy claims or 401 with a reason-specific message."""
    decision = services.legacy_guard.require_authenticated(request)
    if not decision.allowed or decision.claims is None:
        raise HTTPException(status_code=decision.status_code, detail=decision.detail)

    claims = decision.claims
    return AuthStatusResponse(
        user=UserInfo(id=claims.id, email=claims.email, name=claims.name, role=claims.role),
        timestamp=utcnow(),
    )


@router.post("/logout", response_model=LogoutResponse)
async def logout(response: Response) -> LogoutResponse:
    response.delete_cookie(LEGACY_COOKIE_NAME)
    return LogoutResponse(message="Logged out successfully", timestamp=utcnow())


@router.get("/logout", response_model=LogoutResponse)
async def logout_with_status(request: Request, response: Response) -> LogoutResponse:
    """Clear the legacy cookie and report whether one was present."""
    was_authenticated = bool(request.cookies.get(LEGACY_COOKIE_NAME))
    response.delete_cookie(LEGACY_COOKIE_NAME)
    return LogoutResponse(
        message="Logged out",
        was_authenticated=was_authenticated,
        timestamp=utcnow(),
    )


@router.get(
    "/csrf",
    summary="Issue an anti-forgery token",
    response_model=CsrfTokenResponse,
)
async def issue_csrf_token(request: Request, services: ServicesDep) -> CsrfTokenResponse:
    """Issue a token bound to the caller fingerprint, replacing any earlier one."""
    token = services.csrf_tokens.generate_token(session_fingerprint(request))
    return CsrfTokenResponse(csrf_token=token, expires_in=services.csrf_tokens.ttl_seconds)


@router.get("/providers", response_model=ProvidersResponse)
async def list_providers(services: ServicesDep) -> ProvidersResponse:
    return ProvidersResponse(providers=services.session_provider.providers())


@router.post(
    "/signin/credentials",
    summary="Sign in with the credentials provider",
    response_model=SessionResponse,
    dependencies=[Depends(api_rate_limit)],
)
async def sign_in_credentials(
    payload: LoginRequest,
    response: Response,
    db: SessionDep,
    services: ServicesDep,
) -> SessionResponse:
    """Verify credentials and set the provider session cookie."""
    _validate_login_payload(payload)
    provider = services.session_provider
    try:
        user = provider.authorize_credentials(db, payload.email, payload.password)
    except CredentialsError as err:
        raise _credentials_failed(err, payload.email) from err

    token = provider.encode_session(user)
    response.set_cookie(
        SESSION_COOKIE_NAME,
        token,
        max_age=provider.max_age_seconds,
        httponly=True,
        secure=services.settings.is_production,
        samesite="lax",
    )
    return _session_response(provider.read_session(token))


@router.get(
    "/session",
    summary="Current provider session",
    response_model=SessionResponse | dict[str, object],
)
async def get_session(session: OptionalSessionDep) -> SessionResponse | dict[str, object]:
    """Return the provider session, or an empty object when signed out."""
    if session is None:
        return {}
    return _session_response(session)


@router.post(
    "/signout",
    summary="Sign out of the provider session",
    response_model=LogoutResponse,
    dependencies=[Depends(require_csrf_token)],
)
async def sign_out(
    response: Response,
    session: OptionalSessionDep,
    services: ServicesDep,
) -> LogoutResponse:
    services.session_provider.sign_out(session)
    response.delete_cookie(SESSION_COOKIE_NAME)
    return LogoutResponse(
        message="Signed out",
        was_authenticated=session is not None,
        timestamp=utcnow(),
    )
