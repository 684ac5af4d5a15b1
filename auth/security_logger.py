"""Security event trail for email-code sign-in.

Each event is appended to the security_events table and mirrored to the
application log at the level listed in EVENT_LEVELS.
"""

import logging
from enum import Enum
from typing import Any
from uuid import UUID

from psycopg2.extras import Json

from clients.postgres_client import PostgresClient
from utils.timezone import now_utc

logger = logging.getLogger(__name__)


class SecurityEvent(Enum):
    """Auth security event types."""

    ACCOUNT_CREATED = "account_created"
    CODE_REQUESTED = "code_requested"
    CODE_SENT = "code_sent"
    CODE_DELIVERY_FAILED = "code_delivery_failed"
    CODE_VERIFIED = "code_verified"
    CODE_REJECTED = "code_rejected"
    CODE_EXPIRED = "code_expired"
    BYPASS_CODE_USED = "bypass_code_used"
    SESSION_CREATED = "session_created"
    SESSION_DESTROYED = "session_destroyed"
    RATE_LIMITED = "rate_limited"


EVENT_LEVELS: dict[SecurityEvent, int] = {
    SecurityEvent.BYPASS_CODE_USED: logging.WARNING,
    SecurityEvent.CODE_DELIVERY_FAILED: logging.WARNING,
    SecurityEvent.RATE_LIMITED: logging.WARNING,
    SecurityEvent.CODE_REJECTED: logging.INFO,
    SecurityEvent.CODE_EXPIRED: logging.INFO,
}


class SecurityLogger:
    """Writes security_events rows. Rows are never updated or deleted."""

    def __init__(self, postgres: PostgresClient):
        self._db = postgres

    def log(
        self,
        event: SecurityEvent,
        email: str | None = None,
        user_id: UUID | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        logger.log(
            EVENT_LEVELS.get(event, logging.DEBUG),
            f"Security event {event.value}: email={email} ip={ip_address} details={details}",
        )

        self._db.execute(
            """INSERT INTO security_events
               (event_type, email, user_id, ip_address, user_agent, details, created_at)
               VALUES (%s, %s, %s, %s, %s, %s, %s)""",
            (
                event.value,
                email,
                user_id,
                ip_address,
                user_agent,
                Json(details) if details else None,
                now_utc(),
            ),
        )
