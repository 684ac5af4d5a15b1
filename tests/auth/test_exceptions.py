"""Tests for auth/exceptions.py - typed exceptions for auth failures."""

import pytest

from auth.exceptions import (
    AuthError,
    AccountExistsError,
    AccountNotFoundError,
    InvalidCodeError,
    NotAuthenticatedError,
    RateLimitedError,
    SessionExpiredError,
)


class TestExceptionInheritance:
    """All auth exceptions inherit from AuthError."""

    @pytest.mark.parametrize("exc_type", [
        AccountExistsError,
        AccountNotFoundError,
        InvalidCodeError,
        NotAuthenticatedError,
        RateLimitedError,
        SessionExpiredError,
    ])
    def test_inherits(self, exc_type):
        assert issubclass(exc_type, AuthError)


class TestRateLimitedError:

    def test_stores_retry_seconds(self):
        err = RateLimitedError(30)
        assert err.retry_after_seconds == 30

    def test_message_includes_seconds(self):
        err = RateLimitedError(45)
        assert "45" in str(err)

    def test_can_be_caught_as_auth_error(self):
        with pytest.raises(AuthError):
            raise RateLimitedError(10)
