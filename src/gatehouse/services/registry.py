"""Construction of the stateful gating services for one application instance."""

from __future__ import annotations

from dataclasses import dataclass, field

from gatehouse.core.settings import Settings
from gatehouse.services.authz import AuthorizationGuard
from gatehouse.services.csrf import CSRFTokenManager, OriginPolicy
from gatehouse.services.legacy_token import LegacyTokenCodec
from gatehouse.services.rate_limit import SlidingWindowRateLimiter
from gatehouse.services.resolvers import LegacyCookieResolver, ProviderSessionResolver
from gatehouse.services.session_provider import SessionProvider

CONTACT_LIMITER = "contact"
API_LIMITER = "api"


@dataclass
class GateServices:
    """Container handed to the request layer through ``app.state``.

    Each application builds its own instance, so tests get isolated state.
    """

    settings: Settings
    rate_limiters: dict[str, SlidingWindowRateLimiter]
    csrf_tokens: CSRFTokenManager
    origin_policy: OriginPolicy
    legacy_tokens: LegacyTokenCodec
    session_provider: SessionProvider
    legacy_guard: AuthorizationGuard = field(init=False)
    session_guard: AuthorizationGuard = field(init=False)

    def __post_init__(self) -> None:
        self.legacy_guard = AuthorizationGuard(LegacyCookieResolver(self.legacy_tokens))
        self.session_guard = AuthorizationGuard(ProviderSessionResolver(self.session_provider))

    def limiter(self, name: str) -> SlidingWindowRateLimiter:
        return self.rate_limiters[name]


def build_services(settings: Settings) -> GateServices:
    """Create fresh limiter, CSRF and session services from ``settings``."""
    rate_limiters = {
        CONTACT_LIMITER: SlidingWindowRateLimiter(
            settings.contact_rate_limit_window_ms,
            settings.contact_rate_limit_max,
            name=CONTACT_LIMITER,
        ),
        API_LIMITER: SlidingWindowRateLimiter(
            settings.api_rate_limit_window_ms,
            settings.api_rate_limit_max,
            name=API_LIMITER,
        ),
    }
    return GateServices(
        settings=settings,
        rate_limiters=rate_limiters,
        csrf_tokens=CSRFTokenManager(settings.csrf_token_ttl_seconds),
        origin_policy=OriginPolicy(
            (settings.app_url, settings.auth_url),
            production=settings.is_production,
        ),
        legacy_tokens=LegacyTokenCodec(
            settings.secret_key,
            algorithm=settings.jwt_algorithm,
            ttl_seconds=settings.legacy_token_ttl_seconds,
        ),
        session_provider=SessionProvider.from_settings(settings),
    )
