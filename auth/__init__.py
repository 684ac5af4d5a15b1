"""Authentication: email verification codes, signed sessions, route gating."""

from auth.exceptions import (
    AuthError,
    AccountNotFoundError,
    AccountExistsError,
    InvalidCodeError,
    RateLimitedError,
    SessionExpiredError,
    NotAuthenticatedError,
)
from auth.types import (
    Account,
    AccountProfile,
    SessionClaims,
    IssuedSession,
    RequestCodeRequest,
    VerifyCodeRequest,
    RequestCodeResult,
    VerifyCodeResult,
)
from auth.config import AuthConfig
from auth.codes import generate_verification_code, codes_match
from auth.database import AccountDatabase
from auth.rate_limiter import RateLimiter
from auth.security_logger import SecurityLogger, SecurityEvent
from auth.session import SessionManager
from auth.service import AuthService, SessionLookup
from auth.security_middleware import AuthMiddleware
from auth.api import create_auth_router
