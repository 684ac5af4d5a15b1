"""HTTP routes for email-code sign-in and sessions."""

import ipaddress

from fastapi import APIRouter, Request, Response

from api.base import respond
from auth.exceptions import NotAuthenticatedError
from auth.service import AuthService
from auth.session import SessionManager
from auth.types import RequestCodeRequest, VerifyCodeRequest


def _get_client_ip(request: Request) -> str | None:
    """Extract valid IP address from request, or None if invalid."""
    if not request.client:
        return None
    host = request.client.host
    try:
        ipaddress.ip_address(host)
        return host
    except ValueError:
        return None


def create_auth_router(auth_service: AuthService, session_manager: SessionManager) -> APIRouter:
    router = APIRouter(tags=["auth"])

    @router.post("/request-code")
    async def request_code(request: Request, body: RequestCodeRequest):
        """Email a verification code.

        Signup when name and country are both present (409 if the email is
        taken), login otherwise (404 if unknown).
        """
        result = auth_service.request_code(
            email=body.email,
            name=body.name,
            country=body.country,
            ip_address=_get_client_ip(request),
            user_agent=request.headers.get("User-Agent"),
        )
        return respond(request, result.model_dump())

    @router.post("/verify-code")
    async def verify_code(request: Request, response: Response, body: VerifyCodeRequest):
        """Verify the code and start a session.

        Sets the session cookie and also returns the token for clients that
        store it themselves.
        """
        result = auth_service.verify_code(
            email=body.email,
            code=body.code,
            response=response,
            ip_address=_get_client_ip(request),
            user_agent=request.headers.get("User-Agent"),
        )
        return respond(request, result.model_dump(mode="json", by_alias=True))

    @router.get("/session")
    async def get_session(request: Request, response: Response):
        """Current user or null. Never fails."""
        lookup = auth_service.get_session(session_manager.token_from_request(request))
        if lookup.clear_cookie:
            session_manager.destroy_session(response)

        user = lookup.user.model_dump(mode="json", by_alias=True) if lookup.user else None
        return respond(request, {"user": user})

    @router.post("/logout")
    async def logout(request: Request, response: Response):
        """Clear the session cookie. Succeeds without a session."""
        auth_service.logout(
            token=session_manager.token_from_request(request),
            response=response,
            ip_address=_get_client_ip(request),
        )
        return respond(request, {"success": True})

    @router.get("/me")
    async def get_current_user(request: Request):
        """Profile of the signed-in owner (AuthMiddleware sets request.state)."""
        if not hasattr(request.state, "user_id"):
            raise NotAuthenticatedError("Authentication required")

        profile = auth_service.get_profile(request.state.user_id)
        return respond(request, profile.model_dump(mode="json", include={"id", "email", "name", "country"}))

    return router
