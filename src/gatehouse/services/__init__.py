# src/gatehouse/services/__init__.py
"""Request-gating services for the Gatehouse application."""

from .authz import AuthDecision, AuthorizationGuard, DenyReason
from .csrf import CSRFTokenManager, OriginPolicy
from .legacy_token import LegacyTokenCodec
from .rate_limit import RateLimitResult, SlidingWindowRateLimiter
from .registry import GateServices, build_services
from .resolvers import LegacyCookieResolver, ProviderSessionResolver, SessionResolver
from .session_provider import SessionProvider

__all__ = [
    "AuthDecision", "AuthorizationGuard", "DenyReason",
    "CSRFTokenManager", "OriginPolicy",
    "LegacyTokenCodec",
    "RateLimitResult", "SlidingWindowRateLimiter",
    "GateServices", "build_services",
    "LegacyCookieResolver", "ProviderSessionResolver", "SessionResolver",
    "SessionProvider",
]
