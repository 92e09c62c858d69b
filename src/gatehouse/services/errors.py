"""Exception types raised by the session and sign-in services."""

from __future__ import annotations


class TokenError(Exception):
    """Base class for failures to resolve a caller's credentials."""

    detail = "Could not validate credentials"

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(detail or self.detail)
        if detail:
            self.detail = detail


class NoTokenError(TokenError):
    """No token or session cookie was presented."""

    detail = "Not logged in"


class TokenExpiredError(TokenError):
    """The token was well formed but its expiry has passed."""

    detail = "Token expired"


class MalformedTokenError(TokenError):
    """The token could not be decoded, verified or interpreted."""

    detail = "Invalid token"


class CredentialsError(Exception):
    """Base class for credential sign-in failures.

    Subclasses record the specific reason for logging. Callers at the HTTP
    boundary should report :attr:`public_detail` to avoid account enumeration.
    """

    public_detail = "Invalid email or password"
    reason = "invalid_credentials"


class MissingCredentialsError(CredentialsError):
    reason = "missing_credentials"
    public_detail = "Email and password are required"


class UserNotFoundError(CredentialsError):
    reason = "user_not_found"


class NoPasswordSetError(CredentialsError):
    """The account was provisioned by a federated provider and has no password."""

    reason = "no_password_set"


class PasswordMismatchError(CredentialsError):
    reason = "password_mismatch"


class ProviderNotEnabledError(Exception):
    """A federated sign-in was attempted through a provider that is not configured."""

    def __init__(self, provider: str) -> None:
        super().__init__(f"Sign-in provider not enabled: {provider}")
        self.provider = provider
