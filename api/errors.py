"""Maps domain exceptions to HTTP statuses and error envelopes."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError

from api.base import error_json, ErrorCodes
from auth.exceptions import (
    AccountExistsError,
    AccountNotFoundError,
    InvalidCodeError,
    NotAuthenticatedError,
    RateLimitedError,
    SessionExpiredError,
)
from clients.email_client import EmailDeliveryError
from core.exceptions import (
    InvalidMenuRequestError,
    ResourceConflictError,
    ResourceNotFoundError,
)

logger = logging.getLogger(__name__)

# exception type -> (HTTP status, error code); the exception text is the message
DOMAIN_ERRORS: dict[type[Exception], tuple[int, str]] = {
    AccountNotFoundError: (404, ErrorCodes.NOT_FOUND),
    ResourceNotFoundError: (404, ErrorCodes.NOT_FOUND),
    AccountExistsError: (409, ErrorCodes.CONFLICT),
    ResourceConflictError: (409, ErrorCodes.CONFLICT),
    InvalidCodeError: (400, ErrorCodes.BAD_REQUEST),
    InvalidMenuRequestError: (400, ErrorCodes.BAD_REQUEST),
    NotAuthenticatedError: (401, ErrorCodes.UNAUTHORIZED),
    SessionExpiredError: (401, ErrorCodes.UNAUTHORIZED),
}


async def domain_error_handler(request: Request, exc: Exception):
    status_code, code = next(
        DOMAIN_ERRORS[cls] for cls in type(exc).__mro__ if cls in DOMAIN_ERRORS
    )
    return error_json(request, status_code, code, str(exc))


async def rate_limited_handler(request: Request, exc: RateLimitedError):
    return error_json(
        request,
        429,
        ErrorCodes.RATE_LIMITED,
        f"Too many requests. Please wait {exc.retry_after_seconds} seconds.",
        headers={"Retry-After": str(exc.retry_after_seconds)},
    )


async def email_delivery_handler(request: Request, exc: EmailDeliveryError):
    return error_json(request, 502, ErrorCodes.EMAIL_DELIVERY_FAILED, "Failed to send verification email")


async def value_error_handler(request: Request, exc: ValueError):
    """Bad ids, unknown types/domains and model validation raised inside handlers."""
    message = str(exc)
    if "not found" in message.lower():
        return error_json(request, 404, ErrorCodes.NOT_FOUND, message)
    return error_json(request, 400, ErrorCodes.BAD_REQUEST, message)


async def request_validation_handler(request: Request, exc: RequestValidationError):
    return error_json(request, 422, ErrorCodes.VALIDATION_ERROR, str(exc.errors()))


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled exception on {request.method} {request.url.path}")
    return error_json(request, 500, ErrorCodes.INTERNAL_ERROR, "An internal error occurred")


def register_error_handlers(app: FastAPI) -> None:
    for exc_type in DOMAIN_ERRORS:
        app.add_exception_handler(exc_type, domain_error_handler)
    app.add_exception_handler(RateLimitedError, rate_limited_handler)
    app.add_exception_handler(EmailDeliveryError, email_delivery_handler)
    app.add_exception_handler(ValueError, value_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
