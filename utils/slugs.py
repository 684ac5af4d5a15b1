"""URL slugs for public menu pages."""

import re
from typing import Callable

DEFAULT_SLUG = "restaurant"

_STRIP_CHARS = re.compile(r"[^\w\s-]")
_SEPARATORS = re.compile(r"[\s_-]+")


def generate_slug(name: str) -> str:
    """
    Turn a display name into a slug.

    "Joe's  Pizza & Grill" -> "joes-pizza-grill". Names that reduce to
    nothing get DEFAULT_SLUG so every restaurant stays addressable.
    """
    slug = name.lower().strip()
    slug = _STRIP_CHARS.sub("", slug)
    slug = _SEPARATORS.sub("-", slug)
    slug = slug.strip("-")
    return slug or DEFAULT_SLUG


def ensure_unique_slug(base_slug: str, is_taken: Callable[[str], bool]) -> str:
    """
    Append -1, -2, ... to base_slug until is_taken() reports it free.

    Args:
        base_slug: Slug produced by generate_slug()
        is_taken: Predicate answering whether a candidate is already in use
    """
    slug = base_slug
    counter = 1
    while is_taken(slug):
        slug = f"{base_slug}-{counter}"
        counter += 1
    return slug
