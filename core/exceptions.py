"""Typed exceptions for menu management failures."""


class MenuError(Exception):
    """Base class for restaurant, category and dish errors."""


class ResourceNotFoundError(MenuError):
    """
    Resource does not exist or belongs to another owner (NOT_FOUND).

    Both cases share this error so ownership never leaks existence.
    """


class ResourceConflictError(MenuError):
    """Uniqueness rule violated, e.g. duplicate category name (CONFLICT)."""


class InvalidMenuRequestError(MenuError):
    """Request is well-formed but not acceptable, e.g. foreign category ids (BAD_REQUEST)."""
