"""Utility modules for cross-cutting concerns."""

from utils.timezone import now_utc, to_timestamp, from_timestamp
from utils.user_context import (
    Identity,
    get_current_identity,
    get_current_user_id,
    set_current_identity,
    clear_current_identity,
    user_context,
)
from utils.slugs import generate_slug, ensure_unique_slug
