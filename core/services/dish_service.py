"""
Dish service for CRUD operations.

A dish belongs to one restaurant and may sit in any number of that
restaurant's categories.
"""

import logging
from uuid import UUID

from core.audit import AuditLogger
from core.database import MenuDatabase
from core.exceptions import InvalidMenuRequestError, ResourceNotFoundError
from core.models import Dish, DishCreate, DishUpdate
from core.ownership import OwnershipGuard

logger = logging.getLogger(__name__)


class DishService:
    """Service for dish operations."""

    def __init__(self, menu_db: MenuDatabase, guard: OwnershipGuard, audit: AuditLogger):
        self.menu_db = menu_db
        self.guard = guard
        self.audit = audit

    def _check_categories(self, restaurant_id: UUID, category_ids: list[UUID]) -> None:
        """All category_ids must belong to restaurant_id."""
        unique_ids = list(dict.fromkeys(category_ids))
        if not unique_ids:
            return
        found = self.menu_db.count_categories_in_restaurant(restaurant_id, unique_ids)
        if found != len(unique_ids):
            logger.info(
                f"Rejected {len(unique_ids) - found} foreign category id(s) for restaurant {restaurant_id}"
            )
            raise InvalidMenuRequestError("One or more categories do not belong to this restaurant")

    def create(self, data: DishCreate) -> Dish:
        """
        Create a dish.

        Raises:
            ResourceNotFoundError: If the restaurant is not the owner's
            InvalidMenuRequestError: If a category id is not in the restaurant
        """
        self.guard.restaurant(data.restaurant_id)
        self._check_categories(data.restaurant_id, data.category_ids)

        fields = data.model_dump(include={"name", "description", "image", "spice_level"})
        dish = self.menu_db.insert_dish(data.restaurant_id, fields, data.category_ids)

        self.audit.record_created("dish", dish)
        return dish

    def list_for_restaurant(self, restaurant_id: UUID) -> list[Dish]:
        """Dishes newest first, each with its categories."""
        self.guard.restaurant(restaurant_id)
        return self.menu_db.list_dishes(restaurant_id)

    def get(self, dish_id: UUID) -> Dish:
        dish, _ = self.guard.dish(dish_id)
        return dish

    def update(self, dish_id: UUID, data: DishUpdate) -> Dish:
        """
        Update the fields present in data.

        image and spice_level sent as null are cleared. category_ids, when
        present, replaces the dish's whole category set.

        Raises:
            ResourceNotFoundError: If missing or not owned by the current user
            InvalidMenuRequestError: If a category id is not in the restaurant
        """
        current, _ = self.guard.dish(dish_id)

        updates = data.model_dump(exclude_unset=True)
        category_ids = updates.pop("category_ids", None)
        if not updates and category_ids is None:
            return current

        if category_ids is not None:
            self._check_categories(current.restaurant_id, category_ids)

        updated = self.menu_db.update_dish(dish_id, updates, category_ids)
        if updated is None:
            raise ResourceNotFoundError("Dish not found")

        self.audit.record_updated("dish", current, updated)
        return updated

    def delete(self, dish_id: UUID) -> None:
        """
        Delete a dish and its category links.

        Raises:
            ResourceNotFoundError: If missing or not owned by the current user
        """
        current, _ = self.guard.dish(dish_id)

        if not self.menu_db.delete_dish(dish_id):
            raise ResourceNotFoundError("Dish not found")

        self.audit.record_deleted("dish", current)
