# tests/v1/test_dependencies.py
"""Tests for API dependencies module."""

import pytest
from fastapi import HTTPException, Response, status

from gatehouse.api.v1.dependencies import (
    enforce,
    get_optional_session,
    rate_limited,
    require_csrf_token,
    require_same_origin,
)
from gatehouse.models.user import Role
from gatehouse.services.authz import AuthDecision, DenyReason
from gatehouse.services.claims import SessionClaims
from gatehouse.services.identity import session_fingerprint
from gatehouse.services.registry import CONTACT_LIMITER
from gatehouse.services.session_provider import SESSION_COOKIE_NAME, SignInUser


class TestEnforce:
    """Test translation of authorization decisions into HTTP errors."""

    def test_allowed_decision_returns_claims(self):
        claims = SessionClaims(id="u1", email="u1@example.com", role=Role.USER)
        assert enforce(AuthDecision.allow(claims)) is claims

    @pytest.mark.parametrize(
        ("reason", "expected"),
        [
            (DenyReason.UNAUTHENTICATED, status.HTTP_401_UNAUTHORIZED),
            (DenyReason.FORBIDDEN, status.HTTP_403_FORBIDDEN),
        ],
    )
    def test_denied_decision_raises(self, reason, expected):
        with pytest.raises(HTTPException) as exc_info:
            enforce(AuthDecision.deny(reason, "nope"))
        assert exc_info.value.status_code == expected
        assert exc_info.value.detail == "nope"


class TestRateLimited:
    """Test the rate-limit dependency factory."""

    def test_sets_remaining_header_then_rejects(self, services, make_request):
        dependency = rate_limited(CONTACT_LIMITER)
        request = make_request({"x-forwarded-for": "1.2.3.4"})

        for expected in ("2", "1", "0"):
            response = Response()
            dependency(request, response, services)
            assert response.headers["X-RateLimit-Remaining"] == expected

        with pytest.raises(HTTPException) as exc_info:
            dependency(request, Response(), services)
        assert exc_info.value.status_code == status.HTTP_429_TOO_MANY_REQUESTS
        assert exc_info.value.headers["X-RateLimit-Remaining"] == "0"
        assert exc_info.value.headers["X-RateLimit-Reset"] == exc_info.value.detail["reset_time"]


class TestCsrfDependencies:
    """Test the origin and token checks."""

    def test_same_origin_rejects_foreign_origin(self, services, make_request):
        request = make_request({"host": "testserver", "origin": "https://evil.test"}, method="POST")
        with pytest.raises(HTTPException) as exc_info:
            require_same_origin(request, services)
        assert exc_info.value.status_code == status.HTTP_403_FORBIDDEN

    def test_csrf_token_bound_to_fingerprint(self, services, make_request):
        request = make_request({"host": "testserver", "user-agent": "a", "x-csrf-token": ""})
        token = services.csrf_tokens.generate_token(session_fingerprint(request))

        good = make_request({"host": "testserver", "user-agent": "a", "x-csrf-token": token})
        require_csrf_token(good, services)

        other_agent = make_request({"host": "testserver", "user-agent": "b", "x-csrf-token": token})
        with pytest.raises(HTTPException):
            require_csrf_token(other_agent, services)


class TestOptionalSession:
    """Test optional provider session resolution."""

    def test_returns_none_without_valid_cookie(self, services, make_request):
        assert get_optional_session(make_request(), services) is None
        garbage = make_request({"cookie": f"{SESSION_COOKIE_NAME}=garbage"})
        assert get_optional_session(garbage, services) is None

    def test_returns_session_for_valid_cookie(self, services, make_request):
        user = SignInUser(id="u1", email="u1@example.com", name=None, image=None, role=Role.ADMIN)
        token = services.session_provider.encode_session(user)
        session = get_optional_session(make_request({"cookie": f"{SESSION_COOKIE_NAME}={token}"}), services)
        assert session is not None
        assert session.user.role is Role.ADMIN
