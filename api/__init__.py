"""HTTP layer: envelope, error mapping, middleware and the menu routers."""

from api.base import (
    APIError,
    APIMeta,
    APIResponse,
    success_response,
    error_response,
    error_json,
    request_id_of,
    respond,
    ErrorCodes,
)
from api.middleware import RequestIDMiddleware
