"""
Application entry point.

Run with:
    uvicorn main:main --factory

Settings come from the environment (a local .env is loaded first). Secrets
(DATABASE_URL, VALKEY_URL, JWT_SECRET) fall back to Vault when unset.
"""

import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from pydantic import BaseModel

from api.actions import create_actions_router
from api.dashboard import create_dashboard_router
from api.data import create_data_router
from api.errors import register_error_handlers
from api.menu import create_menu_router
from api.middleware import RequestIDMiddleware
from auth.api import create_auth_router
from auth.config import AuthConfig
from auth.database import AccountDatabase
from auth.rate_limiter import RateLimiter
from auth.security_logger import SecurityLogger
from auth.security_middleware import AuthMiddleware
from auth.service import AuthService
from auth.session import SessionManager
from clients.email_client import EmailConfig, create_email_client
from clients.postgres_client import PostgresClient
from clients.valkey_client import ValkeyClient
from clients.vault_client import get_database_url, get_jwt_secret, get_valkey_url
from core.audit import AuditLogger
from core.database import MenuDatabase
from core.ownership import OwnershipGuard
from core.services.category_service import CategoryService
from core.services.dish_service import DishService
from core.services.restaurant_service import RestaurantService

logger = logging.getLogger(__name__)


class Settings(BaseModel):
    auth: AuthConfig
    email: EmailConfig
    log_level: str = "INFO"


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def load_settings() -> Settings:
    """Build settings from environment variables."""
    load_dotenv()

    auth_values = {
        "environment": os.getenv("ENVIRONMENT", "development"),
        "allow_bypass_code": _env_bool("ALLOW_BYPASS_CODE"),
        "cookie_secure": _env_bool("COOKIE_SECURE"),
    }
    optional = {
        "code_expiry_minutes": "CODE_EXPIRY_MINUTES",
        "bypass_code": "BYPASS_CODE",
        "session_expiry_days": "SESSION_EXPIRY_DAYS",
        "rate_limit_attempts": "RATE_LIMIT_ATTEMPTS",
        "rate_limit_window_minutes": "RATE_LIMIT_WINDOW_MINUTES",
        "app_base_url": "APP_BASE_URL",
    }
    for field, env_var in optional.items():
        if os.getenv(env_var):
            auth_values[field] = os.getenv(env_var)

    email_values = {
        "resend_api_key": os.getenv("RESEND_API_KEY"),
        "smtp_host": os.getenv("SMTP_HOST"),
        "smtp_user": os.getenv("SMTP_USER"),
        "smtp_password": os.getenv("SMTP_PASSWORD"),
        "mail_from": os.getenv("MAIL_FROM"),
    }
    if os.getenv("SMTP_PORT"):
        email_values["smtp_port"] = os.getenv("SMTP_PORT")

    return Settings(
        auth=AuthConfig(**auth_values),
        email=EmailConfig(**{k: v for k, v in email_values.items() if v is not None}),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )


def assemble_app(
    session_manager: SessionManager,
    auth_service: AuthService,
    services: dict,
    lifespan=None,
) -> FastAPI:
    """
    Wire routers, middleware and error handlers around ready-made services.

    services must provide "restaurant", "category" and "dish".
    """
    app = FastAPI(title="QR Menu API", lifespan=lifespan)

    # Last added runs first: request IDs exist before auth can reject.
    app.add_middleware(AuthMiddleware, session_manager=session_manager)
    app.add_middleware(RequestIDMiddleware)
    register_error_handlers(app)

    app.include_router(create_auth_router(auth_service, session_manager), prefix="/auth")
    app.include_router(create_data_router(services), prefix="/api")
    app.include_router(create_actions_router(services), prefix="/api")
    app.include_router(create_dashboard_router(), prefix="/api/dashboard")
    app.include_router(create_menu_router(services["restaurant"]), prefix="/menu")

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app


def create_app(settings: Settings | None = None) -> FastAPI:
    """Connect to PostgreSQL and Valkey and build the full application."""
    settings = settings or load_settings()

    postgres = PostgresClient(get_database_url())
    valkey = ValkeyClient(get_valkey_url())

    session_manager = SessionManager(get_jwt_secret(), settings.auth)
    auth_service = AuthService(
        config=settings.auth,
        account_db=AccountDatabase(postgres),
        session_manager=session_manager,
        request_limiter=RateLimiter(valkey, settings.auth, "code_request"),
        verify_limiter=RateLimiter(valkey, settings.auth, "code_verify"),
        email_client=create_email_client(settings.email),
        security_logger=SecurityLogger(postgres),
    )

    menu_db = MenuDatabase(postgres)
    guard = OwnershipGuard(menu_db)
    audit = AuditLogger(postgres)
    services = {
        "restaurant": RestaurantService(menu_db, guard, audit, base_url=settings.auth.app_base_url),
        "category": CategoryService(menu_db, guard, audit),
        "dish": DishService(menu_db, guard, audit),
    }

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        valkey.close()
        postgres.close()
        logger.info("Connections closed")

    if settings.auth.bypass_enabled:
        logger.warning("Verification bypass code is ENABLED. Never use this setting in production.")

    return assemble_app(session_manager, auth_service, services, lifespan=lifespan)


def main() -> FastAPI:
    settings = load_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return create_app(settings)

