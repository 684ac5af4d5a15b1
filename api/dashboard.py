"""Dashboard email endpoints: echo and confirm the signed-in email."""

import logging

from fastapi import APIRouter, Request
from pydantic import BaseModel, EmailStr

from api.base import respond
from utils.user_context import get_current_identity

logger = logging.getLogger(__name__)


class DashboardEmailRequest(BaseModel):
    email: EmailStr


def create_dashboard_router() -> APIRouter:
    router = APIRouter(tags=["dashboard"])

    @router.get("/email")
    async def get_email(request: Request):
        return respond(request, {"email": get_current_identity().email})

    @router.post("/email")
    async def confirm_email(request: Request, body: DashboardEmailRequest):
        identity = get_current_identity()
        if body.email.lower() != identity.email.lower():
            logger.info(f"Dashboard email mismatch for user {identity.user_id}")
            raise ValueError("Email does not match the signed-in account")
        return respond(request, {"success": True, "email": identity.email})

    return router
