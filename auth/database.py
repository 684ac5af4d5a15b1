"""Database operations for authentication.

Uses the users table. Emails are matched exactly as stored; every code
request overwrites the previous code (last writer wins).
"""

from datetime import datetime
from uuid import UUID

import psycopg2.errors

from clients.postgres_client import PostgresClient
from auth.exceptions import AccountExistsError
from auth.types import Account
from utils.timezone import now_utc

_ACCOUNT_COLUMNS = """id, email, name, country, verification_code,
                      verification_code_expires, email_verified,
                      created_at, updated_at"""


class AccountDatabase:
    """Database operations for accounts and their pending verification codes."""

    def __init__(self, postgres: PostgresClient):
        self._db = postgres

    def get_account_by_email(self, email: str) -> Account | None:
        """Find account by email (exact match)."""
        row = self._db.execute_single(
            f"SELECT {_ACCOUNT_COLUMNS} FROM users WHERE email = %s",
            (email,),
        )
        return Account.model_validate(row) if row else None

    def get_account_by_id(self, account_id: UUID) -> Account | None:
        """Find account by ID."""
        row = self._db.execute_single(
            f"SELECT {_ACCOUNT_COLUMNS} FROM users WHERE id = %s",
            (account_id,),
        )
        return Account.model_validate(row) if row else None

    def create_account(
        self,
        email: str,
        name: str,
        country: str,
        code: str,
        code_expires: datetime,
    ) -> Account:
        """Create an unverified account holding its first verification code.

        Raises:
            AccountExistsError: If the email is already registered.
        """
        now = now_utc()
        try:
            rows = self._db.execute_returning(
                f"""INSERT INTO users (email, name, country, verification_code,
                                       verification_code_expires, email_verified,
                                       created_at, updated_at)
                    VALUES (%s, %s, %s, %s, %s, false, %s, %s)
                    RETURNING {_ACCOUNT_COLUMNS}""",
                (email, name, country, code, code_expires, now, now),
            )
        except psycopg2.errors.UniqueViolation:
            raise AccountExistsError("User with this email already exists")
        return Account.model_validate(rows[0])

    def store_verification_code(self, email: str, code: str, code_expires: datetime) -> bool:
        """Replace the pending code for email.

        Returns:
            True if the account exists and was updated.
        """
        rows = self._db.execute_returning(
            """UPDATE users
               SET verification_code = %s, verification_code_expires = %s, updated_at = %s
               WHERE email = %s
               RETURNING id""",
            (code, code_expires, now_utc(), email),
        )
        return len(rows) > 0

    def mark_email_verified(self, account_id: UUID) -> Account | None:
        """Consume the pending code: flag email verified and clear code + expiry."""
        rows = self._db.execute_returning(
            f"""UPDATE users
                SET email_verified = true,
                    verification_code = NULL,
                    verification_code_expires = NULL,
                    updated_at = %s
                WHERE id = %s
                RETURNING {_ACCOUNT_COLUMNS}""",
            (now_utc(), account_id),
        )
        return Account.model_validate(rows[0]) if rows else None
