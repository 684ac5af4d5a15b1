"""Authentication service - orchestrates the emailed-code login flow."""

import logging
from dataclasses import dataclass
from datetime import timedelta
from uuid import UUID

from starlette.responses import Response

from auth.codes import codes_match, generate_verification_code
from auth.config import AuthConfig
from auth.database import AccountDatabase
from auth.exceptions import (
    AccountExistsError,
    AccountNotFoundError,
    InvalidCodeError,
    RateLimitedError,
)
from auth.rate_limiter import RateLimiter
from auth.security_logger import SecurityLogger, SecurityEvent
from auth.session import SessionManager
from auth.types import AccountProfile, RequestCodeResult, VerifyCodeResult
from clients.email_client import EmailClient, EmailDeliveryError
from utils.timezone import now_utc

logger = logging.getLogger(__name__)

CODE_SENT_MESSAGE = "Verification code sent to your email"
INVALID_CODE_MESSAGE = "Invalid verification code"


@dataclass
class SessionLookup:
    """Result of resolving the caller's session."""

    user: AccountProfile | None
    clear_cookie: bool = False


class AuthService:
    """Orchestrates verification-code authentication.

    Handles:
    - Code requests (signup creates the account, login refreshes the code)
    - Code verification and session issuance
    - Session lookup and logout
    """

    def __init__(
        self,
        config: AuthConfig,
        account_db: AccountDatabase,
        session_manager: SessionManager,
        request_limiter: RateLimiter,
        verify_limiter: RateLimiter,
        email_client: EmailClient,
        security_logger: SecurityLogger,
    ):
        self._config = config
        self._account_db = account_db
        self._session_manager = session_manager
        self._request_limiter = request_limiter
        self._verify_limiter = verify_limiter
        self._email_client = email_client
        self._security_logger = security_logger

    def _check_limit(self, limiter: RateLimiter, email: str, ip_address: str | None) -> None:
        try:
            limiter.hit(email)
        except RateLimitedError as e:
            self._security_logger.log(
                SecurityEvent.RATE_LIMITED,
                email=email,
                ip_address=ip_address,
                details={"retry_after_seconds": e.retry_after_seconds},
            )
            raise

    def request_code(
        self,
        email: str,
        name: str | None = None,
        country: str | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> RequestCodeResult:
        """Issue a fresh code for email and deliver it.

        Signup mode when both name and country are given, login mode otherwise.

        Flow:
        1. Check per-email rate limit
        2. Signup: refuse existing email, create unverified account with code
           Login: refuse unknown email, overwrite the stored code
        3. Send email (failure propagates; the caller must not claim success)

        Raises:
            RateLimitedError: Too many requests for this email.
            AccountExistsError: Signup for a registered email.
            AccountNotFoundError: Login for an unknown email.
            EmailDeliveryError: Code could not be delivered.
        """
        email = email.strip()
        self._check_limit(self._request_limiter, email, ip_address)

        code = generate_verification_code()
        expires = now_utc() + timedelta(minutes=self._config.code_expiry_minutes)
        existing = self._account_db.get_account_by_email(email)

        if name and country:
            if existing is not None:
                raise AccountExistsError("User with this email already exists")

            account = self._account_db.create_account(email, name, country, code, expires)
            self._security_logger.log(
                SecurityEvent.ACCOUNT_CREATED,
                email=email,
                user_id=account.id,
                ip_address=ip_address,
                user_agent=user_agent,
                details={"country": country},
            )
            user_id = account.id
        else:
            if existing is None:
                raise AccountNotFoundError("No account found with this email")

            if not self._account_db.store_verification_code(email, code, expires):
                raise AccountNotFoundError("No account found with this email")
            user_id = existing.id

        self._security_logger.log(
            SecurityEvent.CODE_REQUESTED,
            email=email,
            user_id=user_id,
            ip_address=ip_address,
            user_agent=user_agent,
        )

        try:
            self._email_client.send_verification_code(
                email=email,
                code=code,
                expiry_minutes=self._config.code_expiry_minutes,
            )
        except EmailDeliveryError as e:
            self._security_logger.log(
                SecurityEvent.CODE_DELIVERY_FAILED,
                email=email,
                user_id=user_id,
                ip_address=ip_address,
                details={"error": str(e)},
            )
            raise

        self._security_logger.log(
            SecurityEvent.CODE_SENT,
            email=email,
            user_id=user_id,
            ip_address=ip_address,
        )

        return RequestCodeResult(success=True, message=CODE_SENT_MESSAGE)

    def verify_code(
        self,
        email: str,
        code: str,
        response: Response | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> VerifyCodeResult:
        """Check the submitted code, consume it and start a session.

        Flow:
        1. Check per-email attempt limit
        2. Lookup account
        3. Accept the bypass code (non-production, flag on) or an exact,
           unexpired match of the stored code
        4. Mark email verified and clear the code
        5. Issue session (sets cookie when a response is given)
        6. Reset rate limits

        Raises:
            RateLimitedError: Too many attempts for this email.
            AccountNotFoundError: No account for email.
            InvalidCodeError: Wrong, missing or expired code.
        """
        email = email.strip()
        self._check_limit(self._verify_limiter, email, ip_address)

        account = self._account_db.get_account_by_email(email)
        if account is None:
            raise AccountNotFoundError("No account found with this email")

        submitted = code.strip()
        used_bypass = self._config.bypass_enabled and submitted == self._config.bypass_code

        if not used_bypass:
            if not codes_match(submitted, account.verification_code):
                self._security_logger.log(
                    SecurityEvent.CODE_REJECTED,
                    email=email,
                    user_id=account.id,
                    ip_address=ip_address,
                    user_agent=user_agent,
                    details={"remaining_attempts": self._verify_limiter.remaining(email)},
                )
                raise InvalidCodeError(INVALID_CODE_MESSAGE)

            expires = account.verification_code_expires
            if expires is None or now_utc() >= expires:
                self._security_logger.log(
                    SecurityEvent.CODE_EXPIRED,
                    email=email,
                    user_id=account.id,
                    ip_address=ip_address,
                    user_agent=user_agent,
                )
                raise InvalidCodeError(INVALID_CODE_MESSAGE)
        else:
            logger.warning(f"Bypass verification code used for login: {email}")
            self._security_logger.log(
                SecurityEvent.BYPASS_CODE_USED,
                email=email,
                user_id=account.id,
                ip_address=ip_address,
                user_agent=user_agent,
            )

        verified = self._account_db.mark_email_verified(account.id)
        if verified is None:
            # Deleted between lookup and update
            raise AccountNotFoundError("No account found with this email")

        issued = self._session_manager.create_session(verified.id, verified.email, response)

        self._request_limiter.reset(email)
        self._verify_limiter.reset(email)

        self._security_logger.log(
            SecurityEvent.CODE_VERIFIED,
            email=email,
            user_id=verified.id,
            ip_address=ip_address,
            user_agent=user_agent,
        )
        self._security_logger.log(
            SecurityEvent.SESSION_CREATED,
            email=email,
            user_id=verified.id,
            ip_address=ip_address,
            user_agent=user_agent,
            details={"expires_at": issued.claims.expires_at.isoformat()},
        )
        logger.info(f"User logged in: {verified.email}")

        return VerifyCodeResult(success=True, session_token=issued.token, user=verified.profile())

    def get_session(self, token: str | None) -> SessionLookup:
        """Resolve a token to its account profile. Never raises.

        A valid token whose account no longer exists yields no user and asks
        the caller to clear the cookie.
        """
        claims = self._session_manager.read_session(token)
        if claims is None:
            return SessionLookup(user=None)

        account = self._account_db.get_account_by_id(claims.user_id)
        if account is None:
            return SessionLookup(user=None, clear_cookie=True)

        return SessionLookup(user=account.profile())

    def logout(
        self,
        token: str | None,
        response: Response,
        ip_address: str | None = None,
    ) -> None:
        """Clear the session cookie. Safe without a session."""
        claims = self._session_manager.read_session(token)
        self._session_manager.destroy_session(response)

        if claims is not None:
            self._security_logger.log(
                SecurityEvent.SESSION_DESTROYED,
                email=claims.email,
                user_id=claims.user_id,
                ip_address=ip_address,
            )

    def get_profile(self, user_id: UUID) -> AccountProfile:
        """Profile of an authenticated user.

        Raises:
            AccountNotFoundError: If the account was deleted after login.
        """
        account = self._account_db.get_account_by_id(user_id)
        if account is None:
            raise AccountNotFoundError("User not found")
        return account.profile()
