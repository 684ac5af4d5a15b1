"""Shared test fixtures for the QR menu test suite."""

from unittest.mock import Mock
from uuid import UUID

import pytest

import clients.vault_client as vault_module
from auth.config import AuthConfig
from auth.security_logger import SecurityLogger
from auth.session import SessionManager
from core.audit import AuditLogger
from utils.user_context import user_context, clear_current_identity
from tests.fakes import FakeAccountDatabase, FakeMenuDatabase, FakeValkey, RecordingEmailClient


# =============================================================================
# TEST USER CONSTANTS
# =============================================================================

# Primary test owner - use for single-owner tests
TEST_USER_ID = UUID("00000000-0000-0000-0000-000000000001")
TEST_USER_EMAIL = "owner@example.com"

# Secondary test owner - use for ownership isolation tests
TEST_USER_B_ID = UUID("00000000-0000-0000-0000-000000000002")
TEST_USER_B_EMAIL = "owner-b@example.com"

TEST_JWT_SECRET = "test-secret-with-enough-length-for-hs256"


# =============================================================================
# CONTEXT FIXTURES
# =============================================================================


@pytest.fixture(autouse=True)
def reset_user_context():
    """Ensure clean identity context before and after each test."""
    clear_current_identity()
    yield
    clear_current_identity()


@pytest.fixture(autouse=True)
def reset_vault_cache():
    """Secrets resolved in one test must not leak into the next."""
    vault_module.reset_secret_cache()
    yield
    vault_module.reset_secret_cache()


@pytest.fixture
def test_user_id() -> UUID:
    return TEST_USER_ID


@pytest.fixture
def test_user_b_id() -> UUID:
    return TEST_USER_B_ID


@pytest.fixture
def as_test_user(test_user_id):
    """Act as the primary test owner."""
    with user_context(test_user_id, TEST_USER_EMAIL):
        yield test_user_id


@pytest.fixture
def as_test_user_b(test_user_b_id):
    """Act as the secondary test owner."""
    with user_context(test_user_b_id, TEST_USER_B_EMAIL):
        yield test_user_b_id


# =============================================================================
# CONFIG AND INFRASTRUCTURE FIXTURES
# =============================================================================


@pytest.fixture
def auth_config() -> AuthConfig:
    return AuthConfig()


@pytest.fixture
def session_manager(auth_config) -> SessionManager:
    return SessionManager(TEST_JWT_SECRET, auth_config)


@pytest.fixture
def account_db() -> FakeAccountDatabase:
    return FakeAccountDatabase()


@pytest.fixture
def menu_db() -> FakeMenuDatabase:
    return FakeMenuDatabase()


@pytest.fixture
def valkey() -> FakeValkey:
    return FakeValkey()


@pytest.fixture
def email_client() -> RecordingEmailClient:
    return RecordingEmailClient()


# =============================================================================
# APP FIXTURES
# =============================================================================


@pytest.fixture
def security_logger():
    return Mock(spec=SecurityLogger)


@pytest.fixture
def audit():
    return Mock(spec=AuditLogger)


@pytest.fixture
def auth_service(auth_config, account_db, session_manager, valkey, email_client, security_logger):
    from auth.rate_limiter import RateLimiter
    from auth.service import AuthService

    return AuthService(
        config=auth_config,
        account_db=account_db,
        session_manager=session_manager,
        request_limiter=RateLimiter(valkey, auth_config, "code_request"),
        verify_limiter=RateLimiter(valkey, auth_config, "code_verify"),
        email_client=email_client,
        security_logger=security_logger,
    )


@pytest.fixture
def services(menu_db, audit):
    from core.ownership import OwnershipGuard
    from core.services.category_service import CategoryService
    from core.services.dish_service import DishService
    from core.services.restaurant_service import RestaurantService

    guard = OwnershipGuard(menu_db)
    return {
        "restaurant": RestaurantService(menu_db, guard, audit, base_url="https://menu.example.com"),
        "category": CategoryService(menu_db, guard, audit),
        "dish": DishService(menu_db, guard, audit),
    }


@pytest.fixture
def app(session_manager, auth_service, services):
    """Fully wired application over in-memory fakes."""
    from main import assemble_app

    return assemble_app(session_manager, auth_service, services)


@pytest.fixture
def unauthed_client(app):
    """Test client with no session."""
    from fastapi.testclient import TestClient

    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def client(app, session_manager, account_db):
    """Test client signed in as the primary test owner."""
    from fastapi.testclient import TestClient

    account_db.add(TEST_USER_EMAIL, account_id=TEST_USER_ID, email_verified=True)
    issued = session_manager.create_session(TEST_USER_ID, TEST_USER_EMAIL)
    c = TestClient(app, raise_server_exceptions=False)
    c.cookies.set("session-token", issued.token)
    return c


@pytest.fixture
def client_b(app, session_manager):
    """Test client signed in as the secondary test owner."""
    from fastapi.testclient import TestClient

    issued = session_manager.create_session(TEST_USER_B_ID, TEST_USER_B_EMAIL)
    c = TestClient(app, raise_server_exceptions=False)
    c.cookies.set("session-token", issued.token)
    return c
