"""Per-email throttling of code requests and code attempts.

Each hit restarts the window, so hammering the six-digit code space only
extends the lockout.
"""

import logging

from auth.config import AuthConfig
from auth.exceptions import RateLimitedError
from clients.valkey_client import ValkeyClient

logger = logging.getLogger(__name__)


class RateLimiter:
    """Attempt counter for one auth action ("code_request", "code_verify")."""

    KEY_PREFIX = "ratelimit:"

    def __init__(self, valkey: ValkeyClient, config: AuthConfig, action: str):
        self._valkey = valkey
        self._action = action
        self._limit = config.rate_limit_attempts
        self._window_seconds = config.rate_limit_window_minutes * 60

    def key_for(self, email: str) -> str:
        return f"{self.KEY_PREFIX}{self._action}:{email.lower()}"

    def hit(self, email: str) -> None:
        """
        Record an attempt.

        Raises:
            RateLimitedError: Once the attempt count passes the limit
        """
        count, seconds_left = self._valkey.incr_window(self.key_for(email), self._window_seconds)
        if count > self._limit:
            logger.info(f"{self._action} limit reached ({count} attempts in window)")
            raise RateLimitedError(retry_after_seconds=max(seconds_left, 1))

    def reset(self, email: str) -> None:
        self._valkey.clear(self.key_for(email))

    def remaining(self, email: str) -> int:
        """Attempts left in the current window."""
        return max(self._limit - self._valkey.read_count(self.key_for(email)), 0)
