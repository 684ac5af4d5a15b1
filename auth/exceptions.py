"""Typed exceptions for auth failures."""


class AuthError(Exception):
    """Base class for authentication/authorization errors."""


class AccountNotFoundError(AuthError):
    """No account is registered for the email (NOT_FOUND)."""


class AccountExistsError(AuthError):
    """Signup attempted for an email that already has an account (CONFLICT)."""


class InvalidCodeError(AuthError):
    """
    Verification code wrong, expired, or already consumed (BAD_REQUEST).

    The message is identical for every cause so callers cannot tell
    a stale code from a wrong one.
    """


class RateLimitedError(AuthError):
    """Too many attempts. Client should wait before retrying."""

    def __init__(self, retry_after_seconds: int):
        self.retry_after_seconds = retry_after_seconds
        super().__init__(f"Rate limited. Retry after {retry_after_seconds} seconds.")


class SessionExpiredError(AuthError):
    """
    Session token missing, malformed, forged, or past its expiry.

    All causes collapse into this one error; callers treat it as "no session".
    """


class NotAuthenticatedError(AuthError):
    """A protected operation was called without a valid session (UNAUTHORIZED)."""
