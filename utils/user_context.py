"""Propagate the authenticated owner's identity through the call stack."""

from contextvars import ContextVar
from contextlib import contextmanager
from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class Identity:
    """Who is making the current request, as resolved from the session token."""

    user_id: UUID
    email: str


_current_identity: ContextVar[Identity | None] = ContextVar("current_identity", default=None)


def get_current_identity() -> Identity:
    """
    Get the current identity from context.

    Raises RuntimeError if no identity is set. Owner-scoped code running
    outside an authenticated request is a bug, so fail fast.
    """
    identity = _current_identity.get()
    if identity is None:
        raise RuntimeError(
            "No user context set. This usually means you're calling "
            "owner-scoped code outside of an authenticated request."
        )
    return identity


def get_current_user_id() -> UUID:
    """Shortcut for the current identity's user id."""
    return get_current_identity().user_id


def set_current_identity(user_id: UUID, email: str) -> None:
    """Called by the auth middleware after the session token verified."""
    _current_identity.set(Identity(user_id=user_id, email=email))


def clear_current_identity() -> None:
    """
    Clear user context.

    Must be called in a finally block so identity never leaks between requests.
    """
    _current_identity.set(None)


@contextmanager
def user_context(user_id: UUID, email: str = ""):
    """
    Temporarily act as the given owner.

    Useful for tests and scripts that call services directly.

    Example:
        with user_context(owner_id, "owner@example.com"):
            restaurants = restaurant_service.list_for_owner()
    """
    previous = _current_identity.get()
    set_current_identity(user_id, email)
    try:
        yield
    finally:
        _current_identity.set(previous)
