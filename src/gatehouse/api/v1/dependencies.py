"""Shared API dependencies for request gating.

These adapters translate the boolean and structured decisions of the gating
services into HTTP responses: 401/403 for authorization, 403 for CSRF and
429 for rate limiting.
"""

from collections.abc import Callable
from typing import Annotated

from fastapi import Depends, HTTPException, Request, Response, status
from sqlalchemy.orm import Session

from gatehouse.db import get_db
from gatehouse.services.authz import AuthDecision
from gatehouse.services.claims import SessionClaims
from gatehouse.services.errors import TokenError
from gatehouse.services.identity import identify, session_fingerprint
from gatehouse.services.registry import API_LIMITER, CONTACT_LIMITER, GateServices
from gatehouse.services.session_provider import SESSION_COOKIE_NAME, SessionData

CSRF_HEADER = "X-CSRF-Token"
CSRF_FAILURE_DETAIL = "Request origin verification failed"

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def get_services(request: Request) -> GateServices:
    """Return the gating services attached to the running application."""
    services: GateServices = request.app.state.services
    return services


ServicesDep = Annotated[GateServices, Depends(get_services)]


def enforce(decision: AuthDecision) -> SessionClaims:
    """Return the allowed claims or raise the matching HTTP error.

    Raises:
        HTTPException: 401 for unauthenticated callers, 403 for forbidden ones.
    """
    if decision.allowed and decision.claims is not None:
        return decision.claims
    raise HTTPException(status_code=decision.status_code, detail=decision.detail)


def rate_limited(limiter_name: str) -> Callable[..., None]:
    """Build a dependency enforcing the named sliding-window limiter.

    Accepted requests get ``X-RateLimit-Remaining``; rejected ones fail with 429
    and also carry ``X-RateLimit-Reset``.
    """

    def _dependency(request: Request, response: Response, services: ServicesDep) -> None:
        result = services.limiter(limiter_name).check(identify(request))
        if not result.success:
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail={"message": result.error, "reset_time": result.reset_time},
                headers={
                    "X-RateLimit-Remaining": "0",
                    "X-RateLimit-Reset": result.reset_time or "",
                },
            )
        response.headers["X-RateLimit-Remaining"] = str(result.remaining)

    return _dependency


contact_rate_limit = rate_limited(CONTACT_LIMITER)
api_rate_limit = rate_limited(API_LIMITER)


def require_same_origin(request: Request, services: ServicesDep) -> None:
    """Reject cross-origin form posts and disallowed content types."""
    if not services.origin_policy.simple_csrf_check(request):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=CSRF_FAILURE_DETAIL)


def require_csrf_token(request: Request, services: ServicesDep) -> None:
    """Require a valid ``X-CSRF-Token`` header on top of the origin check."""
    candidate = request.headers.get(CSRF_HEADER)
    if not services.origin_policy.check_origin(request) or not services.csrf_tokens.validate_token(
        session_fingerprint(request), candidate
    ):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=CSRF_FAILURE_DETAIL)


def get_legacy_user(request: Request, services: ServicesDep) -> SessionClaims:
    """Resolve the caller from the legacy ``auth-token`` cookie."""
    return enforce(services.legacy_guard.require_authenticated(request))


def get_session_user(request: Request, services: ServicesDep) -> SessionClaims:
    """Resolve the caller from the provider session cookie."""
    return enforce(services.session_guard.require_authenticated(request))


def get_optional_session(request: Request, services: ServicesDep) -> SessionData | None:
    """Return the provider session if one is present and valid."""
    try:
        return services.session_provider.read_session(request.cookies.get(SESSION_COOKIE_NAME))
    except TokenError:
        return None


def require_admin_session(request: Request, services: ServicesDep) -> SessionClaims:
    return enforce(services.session_guard.require_admin(request))


def require_moderator_session(request: Request, services: ServicesDep) -> SessionClaims:
    """Allow administrators and moderators."""
    return enforce(services.session_guard.require_moderator(request))


# Type aliases for caller dependencies
LegacyUserDep = Annotated[SessionClaims, Depends(get_legacy_user)]
SessionUserDep = Annotated[SessionClaims, Depends(get_session_user)]
OptionalSessionDep = Annotated[SessionData | None, Depends(get_optional_session)]
AdminSessionDep = Annotated[SessionClaims, Depends(require_admin_session)]
ModeratorSessionDep = Annotated[SessionClaims, Depends(require_moderator_session)]
