"""
Ownership checks for owner-scoped menu resources.

Every operation on a restaurant, category or dish resolves the target through
OwnershipGuard first. A resource that does not exist and one that belongs to
another owner produce the same ResourceNotFoundError, so callers never learn
which ids exist.
"""

import logging
from uuid import UUID

from core.database import MenuDatabase
from core.exceptions import ResourceNotFoundError
from core.models import Category, Dish, Restaurant
from utils.user_context import get_current_user_id

logger = logging.getLogger(__name__)


class OwnershipGuard:
    """Resolve resources on behalf of the current owner."""

    def __init__(self, menu_db: MenuDatabase):
        self.menu_db = menu_db

    def restaurant(self, restaurant_id: UUID) -> Restaurant:
        """
        Restaurant owned by the current user.

        Raises:
            ResourceNotFoundError: If missing or owned by someone else
        """
        restaurant = self.menu_db.get_restaurant(restaurant_id)
        if restaurant is None or restaurant.owner_id != get_current_user_id():
            if restaurant is not None:
                logger.info(f"Denied access to restaurant {restaurant_id} for non-owner")
            raise ResourceNotFoundError("Restaurant not found")
        return restaurant

    def category(self, category_id: UUID) -> tuple[Category, Restaurant]:
        """Category and its restaurant, if the restaurant is the current user's."""
        category = self.menu_db.get_category(category_id)
        if category is None:
            raise ResourceNotFoundError("Category not found")
        try:
            restaurant = self.restaurant(category.restaurant_id)
        except ResourceNotFoundError:
            raise ResourceNotFoundError("Category not found")
        return category, restaurant

    def dish(self, dish_id: UUID) -> tuple[Dish, Restaurant]:
        """Dish and its restaurant, if the restaurant is the current user's."""
        dish = self.menu_db.get_dish(dish_id)
        if dish is None:
            raise ResourceNotFoundError("Dish not found")
        try:
            restaurant = self.restaurant(dish.restaurant_id)
        except ResourceNotFoundError:
            raise ResourceNotFoundError("Dish not found")
        return dish, restaurant
