"""Session gate for the HTTP API: verifies the token and binds the owner's identity."""

import logging

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from api.base import error_json, ErrorCodes
from auth.exceptions import SessionExpiredError
from auth.session import SessionManager
from utils.user_context import set_current_identity, clear_current_identity

logger = logging.getLogger(__name__)


class AuthMiddleware(BaseHTTPMiddleware):
    """Rejects unauthenticated requests to protected routes before they run.

    The token comes from the session cookie, or a Bearer header for clients
    that keep it themselves. A verified token puts user_id and the session
    claims on request.state and sets the identity context var for services;
    the context is cleared when the request ends.

    A missing token and an invalid or expired one get the same 401.
    """

    PUBLIC_PATHS = frozenset({
        "/auth/request-code",
        "/auth/verify-code",
        "/auth/session",
        "/auth/logout",
        "/health",
        "/docs",
        "/openapi.json",
    })
    PUBLIC_PREFIXES = ("/menu/",)

    def __init__(self, app, session_manager: SessionManager):
        super().__init__(app)
        self._session_manager = session_manager

    def is_public(self, path: str) -> bool:
        return path in self.PUBLIC_PATHS or path.startswith(self.PUBLIC_PREFIXES)

    def _reject(self, request: Request):
        return error_json(request, 401, ErrorCodes.UNAUTHORIZED, "Authentication required")

    async def dispatch(self, request: Request, call_next):
        if self.is_public(request.url.path):
            return await call_next(request)

        token = self._session_manager.token_from_request(request)
        if not token:
            return self._reject(request)

        try:
            claims = self._session_manager.validate_session(token)
        except SessionExpiredError:
            logger.info(f"Rejected session for {request.method} {request.url.path}")
            return self._reject(request)

        set_current_identity(claims.user_id, claims.email)
        request.state.user_id = claims.user_id
        request.state.session = claims
        try:
            return await call_next(request)
        finally:
            clear_current_identity()
