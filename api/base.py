"""Response envelope shared by every endpoint, plus the error code vocabulary."""

from typing import Any
from datetime import datetime
from uuid import uuid4

from pydantic import BaseModel, Field
from starlette.requests import Request
from starlette.responses import JSONResponse

from utils.timezone import now_utc


class APIError(BaseModel):
    code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")


class APIMeta(BaseModel):
    timestamp: datetime = Field(..., description="Response timestamp (UTC)")
    request_id: str = Field(..., description="Request identifier, echoed in X-Request-ID")


class APIResponse(BaseModel):
    """
    {success, data, error, meta} - data on success, error on failure, meta always.
    """

    success: bool
    data: Any | None = None
    error: APIError | None = None
    meta: APIMeta


def _meta(request_id: str | None) -> APIMeta:
    return APIMeta(timestamp=now_utc(), request_id=request_id or str(uuid4()))


def success_response(data: Any, request_id: str | None = None) -> APIResponse:
    return APIResponse(success=True, data=data, meta=_meta(request_id))


def error_response(code: str, message: str, request_id: str | None = None) -> APIResponse:
    return APIResponse(success=False, error=APIError(code=code, message=message), meta=_meta(request_id))


def request_id_of(request: Request) -> str | None:
    """ID assigned by RequestIDMiddleware, if it ran."""
    return getattr(request.state, "request_id", None)


def respond(request: Request, data: Any) -> dict:
    """Success envelope as a JSON-ready dict for route handlers to return."""
    return success_response(data, request_id_of(request)).model_dump(mode="json")


def error_json(
    request: Request,
    status_code: int,
    code: str,
    message: str,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Error envelope for exception handlers and middleware."""
    return JSONResponse(
        status_code=status_code,
        headers=headers,
        content=error_response(code, message, request_id_of(request)).model_dump(mode="json"),
    )


class ErrorCodes:
    """Error codes the API emits, grouped by HTTP status family."""

    # 401 / 429
    UNAUTHORIZED = "UNAUTHORIZED"
    RATE_LIMITED = "RATE_LIMITED"

    # 404 / 409
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"

    # 400 / 422
    BAD_REQUEST = "BAD_REQUEST"
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # 5xx
    EMAIL_DELIVERY_FAILED = "EMAIL_DELIVERY_FAILED"
    INTERNAL_ERROR = "INTERNAL_ERROR"
