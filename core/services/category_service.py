"""
Category service for CRUD operations.

Category names are unique within a restaurant. Deleting a category unlinks
its dishes but keeps them.
"""

import logging
from uuid import UUID

from core.audit import AuditLogger
from core.database import CATEGORY_CONFLICT_MESSAGE, MenuDatabase
from core.exceptions import ResourceConflictError, ResourceNotFoundError
from core.models import Category, CategoryCreate, CategorySummary, CategoryUpdate
from core.ownership import OwnershipGuard

logger = logging.getLogger(__name__)


class CategoryService:
    """Service for category operations."""

    def __init__(self, menu_db: MenuDatabase, guard: OwnershipGuard, audit: AuditLogger):
        self.menu_db = menu_db
        self.guard = guard
        self.audit = audit

    def create(self, data: CategoryCreate) -> Category:
        """
        Create a category in one of the current owner's restaurants.

        Raises:
            ResourceNotFoundError: If the restaurant is not the owner's
            ResourceConflictError: If the name is already used in the restaurant
        """
        self.guard.restaurant(data.restaurant_id)

        if self.menu_db.get_category_by_name(data.restaurant_id, data.name) is not None:
            raise ResourceConflictError(CATEGORY_CONFLICT_MESSAGE)

        category = self.menu_db.insert_category(data.restaurant_id, data.name)

        self.audit.record_created("category", category)
        return category

    def list_for_restaurant(self, restaurant_id: UUID) -> list[CategorySummary]:
        """Categories ordered by name, with dish counts."""
        self.guard.restaurant(restaurant_id)
        return self.menu_db.list_categories(restaurant_id)

    def get(self, category_id: UUID) -> Category:
        category, _ = self.guard.category(category_id)
        return category

    def update(self, category_id: UUID, data: CategoryUpdate) -> Category:
        """
        Rename a category.

        Raises:
            ResourceNotFoundError: If missing or not owned by the current user
            ResourceConflictError: If another category in the restaurant has the name
        """
        current, _ = self.guard.category(category_id)

        if data.name is None or data.name == current.name:
            return current

        clash = self.menu_db.get_category_by_name(current.restaurant_id, data.name)
        if clash is not None and clash.id != category_id:
            raise ResourceConflictError(CATEGORY_CONFLICT_MESSAGE)

        updated = self.menu_db.rename_category(category_id, data.name)
        if updated is None:
            raise ResourceNotFoundError("Category not found")

        self.audit.record_updated("category", current, updated)
        return updated

    def delete(self, category_id: UUID) -> None:
        """
        Delete a category. Dishes stay, only the links go.

        Raises:
            ResourceNotFoundError: If missing or not owned by the current user
        """
        current, _ = self.guard.category(category_id)

        if not self.menu_db.delete_category(category_id):
            raise ResourceNotFoundError("Category not found")

        self.audit.record_deleted("category", current)
