"""Stateless session tokens.

A session is an HS256-signed JWT carrying {userId, email, iat, exp}. Nothing
is stored server side: verification is a pure function of the token, the
signing secret and the current time. Transport is an HTTP-only cookie, with
the raw token also handed back for clients that persist it themselves.
"""

import logging
from datetime import timedelta
from uuid import UUID

import jwt
from starlette.requests import Request
from starlette.responses import Response

from auth.config import AuthConfig
from auth.exceptions import SessionExpiredError
from auth.types import IssuedSession, SessionClaims
from utils.timezone import now_utc, to_timestamp, from_timestamp

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
_REQUIRED_CLAIMS = ("userId", "email", "iat", "exp")


class SessionManager:
    """Mint, verify and transport signed session tokens.

    The signing secret is injected at construction; there is no module-level
    key. Expiry is checked against utils.timezone.now_utc rather than PyJWT's
    own clock, so a token is rejected from the exact second its exp arrives.
    """

    def __init__(self, secret: str, config: AuthConfig):
        if not secret:
            raise ValueError("secret is required")
        self._secret = secret
        self._config = config

    @property
    def cookie_name(self) -> str:
        return self._config.cookie_name

    def create_session(
        self,
        user_id: UUID,
        email: str,
        response: Response | None = None,
    ) -> IssuedSession:
        """Sign a token for user_id/email valid for session_expiry_days.

        If a response is given the token is also set as the session cookie.
        Without one (e.g. a caller decoupled from HTTP) the token is only
        returned, for the client to store.
        """
        issued_at = now_utc().replace(microsecond=0)
        expires_at = issued_at + timedelta(days=self._config.session_expiry_days)

        token = jwt.encode(
            {
                "userId": str(user_id),
                "email": email,
                "iat": to_timestamp(issued_at),
                "exp": to_timestamp(expires_at),
            },
            self._secret,
            algorithm=ALGORITHM,
        )

        claims = SessionClaims(
            user_id=user_id,
            email=email,
            issued_at=issued_at,
            expires_at=expires_at,
        )
        issued = IssuedSession(token=token, claims=claims)

        if response is not None:
            self.set_cookie(response, issued)
        else:
            logger.debug("No response available, session token returned for client-side storage")

        return issued

    def validate_session(self, token: str) -> SessionClaims:
        """Verify signature and expiry.

        Raises:
            SessionExpiredError: For any failure. Causes are not distinguished.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[ALGORITHM],
                options={"verify_exp": False, "verify_iat": False, "require": list(_REQUIRED_CLAIMS)},
            )
            claims = SessionClaims(
                user_id=UUID(payload["userId"]),
                email=payload["email"],
                issued_at=from_timestamp(payload["iat"]),
                expires_at=from_timestamp(payload["exp"]),
            )
        except (jwt.PyJWTError, ValueError, TypeError) as e:
            logger.debug(f"Rejected session token: {e}")
            raise SessionExpiredError("Invalid session")

        if now_utc() >= claims.expires_at:
            raise SessionExpiredError("Session expired")

        return claims

    def read_session(self, token: str | None) -> SessionClaims | None:
        """Claims for a valid token, None for absent or invalid ones. Never raises."""
        if not token:
            return None
        try:
            return self.validate_session(token)
        except SessionExpiredError:
            return None

    def token_from_request(self, request: Request) -> str | None:
        """Session cookie first, then an 'Authorization: Bearer' header."""
        token = request.cookies.get(self.cookie_name)
        if token:
            return token

        authorization = request.headers.get("Authorization", "")
        scheme, _, credentials = authorization.partition(" ")
        if scheme.lower() == "bearer" and credentials.strip():
            return credentials.strip()
        return None

    def set_cookie(self, response: Response, issued: IssuedSession) -> None:
        """HTTP-only, SameSite=Lax, site-wide cookie expiring with the token."""
        claims = issued.claims
        response.set_cookie(
            key=self.cookie_name,
            value=issued.token,
            max_age=int((claims.expires_at - claims.issued_at).total_seconds()),
            expires=claims.expires_at,
            path="/",
            secure=self._config.cookie_secure,
            httponly=True,
            samesite="lax",
        )

    def destroy_session(self, response: Response) -> None:
        """Remove the session cookie. Safe when no session exists."""
        response.delete_cookie(
            key=self.cookie_name,
            path="/",
            secure=self._config.cookie_secure,
            httponly=True,
            samesite="lax",
        )
