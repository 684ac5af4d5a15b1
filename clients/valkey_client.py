"""
Valkey (Redis-compatible) counters for verification rate limiting.

Sessions are stateless JWTs, so the only state kept here is short-lived
attempt counters. Connection problems raise; there is no in-process fallback.
"""

import logging

import redis

logger = logging.getLogger(__name__)


class ValkeyClient:
    """
    Windowed counters on top of redis-py.

    Usage:
        client = ValkeyClient("redis://localhost:6379/0")
        count, seconds_left = client.incr_window("ratelimit:code_verify:owner@example.com", 900)
        client.clear("ratelimit:code_verify:owner@example.com")
    """

    def __init__(self, url: str):
        """
        Raises:
            redis.ConnectionError: If Valkey is unreachable
        """
        self._client = redis.from_url(url, decode_responses=True)
        self._client.ping()
        logger.info("ValkeyClient connected")

    def incr_window(self, key: str, window_seconds: int) -> tuple[int, int]:
        """
        Count one hit and restart the key's expiry.

        INCR, EXPIRE and TTL run in a single MULTI/EXEC so concurrent hits
        can't leave a counter without an expiry.

        Returns:
            (count after this hit, seconds until the window closes)
        """
        pipe = self._client.pipeline(transaction=True)
        pipe.incr(key)
        pipe.expire(key, window_seconds)
        pipe.ttl(key)
        count, _, seconds_left = pipe.execute()
        return count, seconds_left

    def read_count(self, key: str) -> int:
        """Current counter value, 0 when the window has lapsed."""
        value = self._client.get(key)
        return int(value) if value is not None else 0

    def clear(self, key: str) -> bool:
        """Drop a counter. True if it existed."""
        return self._client.delete(key) > 0

    def close(self) -> None:
        self._client.close()
        logger.info("ValkeyClient closed")
