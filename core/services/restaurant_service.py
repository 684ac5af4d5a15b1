"""
Restaurant service.

Handles the restaurant lifecycle for the current owner: create, list, detail,
update (re-slugging on rename), delete, plus the public menu lookup by slug
that backs the QR code.
"""

import logging
from uuid import UUID

from core.audit import AuditLogger
from core.database import MenuDatabase
from core.exceptions import ResourceNotFoundError
from core.models import (
    MenuCategory,
    PublicMenu,
    Restaurant,
    RestaurantCreate,
    RestaurantDetail,
    RestaurantSummary,
    RestaurantUpdate,
)
from core.ownership import OwnershipGuard
from utils.slugs import ensure_unique_slug, generate_slug
from utils.user_context import get_current_user_id

logger = logging.getLogger(__name__)

MENU_PATH_PREFIX = "/menu/"


def menu_path(slug: str) -> str:
    """Public path a restaurant's QR code points at."""
    return f"{MENU_PATH_PREFIX}{slug}"


class RestaurantService:
    """Service for restaurant operations."""

    def __init__(
        self,
        menu_db: MenuDatabase,
        guard: OwnershipGuard,
        audit: AuditLogger,
        base_url: str = "",
    ):
        self.menu_db = menu_db
        self.guard = guard
        self.audit = audit
        self.base_url = base_url.rstrip("/")

    def _unique_slug(self, name: str, restaurant_id: UUID | None = None) -> str:
        return ensure_unique_slug(
            generate_slug(name),
            lambda candidate: self.menu_db.slug_exists(candidate, exclude_id=restaurant_id),
        )

    def create(self, data: RestaurantCreate) -> Restaurant:
        """
        Create a restaurant owned by the current user.

        Args:
            data: Name and location; the slug is derived from the name

        Returns:
            Created restaurant
        """
        owner_id = get_current_user_id()
        slug = self._unique_slug(data.name)

        restaurant = self.menu_db.insert_restaurant(owner_id, data.name, data.location, slug)
        logger.info(f"Created restaurant {restaurant.id} with slug '{slug}'")

        self.audit.record_created("restaurant", restaurant)
        return restaurant

    def list_for_owner(self) -> list[RestaurantSummary]:
        """Current owner's restaurants, newest first, with menu counts."""
        return self.menu_db.list_restaurants(get_current_user_id())

    def get_detail(self, restaurant_id: UUID) -> RestaurantDetail:
        """
        Restaurant with its categories (by name) and dishes (newest first).

        Raises:
            ResourceNotFoundError: If missing or not owned by the current user
        """
        restaurant = self.guard.restaurant(restaurant_id)
        categories = self.menu_db.list_categories(restaurant_id)
        dishes = self.menu_db.list_dishes(restaurant_id)

        return RestaurantDetail(
            **restaurant.model_dump(),
            categories=[c.model_dump(exclude={"dish_count"}) for c in categories],
            dishes=dishes,
        )

    def update(self, restaurant_id: UUID, data: RestaurantUpdate) -> Restaurant:
        """
        Update name and/or location.

        A name change regenerates the slug, so the old public URL stops working.

        Raises:
            ResourceNotFoundError: If missing or not owned by the current user
        """
        current = self.guard.restaurant(restaurant_id)

        updates = data.model_dump(exclude_none=True)
        if not updates:
            return current

        if "name" in updates and updates["name"] != current.name:
            updates["slug"] = self._unique_slug(updates["name"], restaurant_id)

        updated = self.menu_db.update_restaurant(restaurant_id, updates)
        if updated is None:
            raise ResourceNotFoundError("Restaurant not found")

        self.audit.record_updated("restaurant", current, updated)
        return updated

    def delete(self, restaurant_id: UUID) -> None:
        """
        Delete a restaurant together with its categories and dishes.

        Raises:
            ResourceNotFoundError: If missing or not owned by the current user
        """
        current = self.guard.restaurant(restaurant_id)

        if not self.menu_db.delete_restaurant(restaurant_id):
            raise ResourceNotFoundError("Restaurant not found")
        logger.info(f"Deleted restaurant {restaurant_id}")

        self.audit.record_deleted("restaurant", current)

    def get_public_menu(self, slug: str) -> PublicMenu:
        """
        Menu document for a slug. No authentication involved.

        Categories come ordered by name, each carrying its dishes; the full
        dish list is included as well for menus that skip categories.

        Raises:
            ResourceNotFoundError: If no restaurant has this slug
        """
        restaurant = self.menu_db.get_restaurant_by_slug(slug)
        if restaurant is None:
            raise ResourceNotFoundError("Restaurant not found")

        categories = self.menu_db.list_categories(restaurant.id)
        dishes = self.menu_db.list_dishes(restaurant.id)

        path = menu_path(restaurant.slug)
        menu_categories = []
        for category in categories:
            in_category = [
                dish for dish in dishes
                if any(c.id == category.id for c in dish.categories)
            ]
            menu_categories.append(
                MenuCategory(**category.model_dump(exclude={"dish_count"}), dishes=in_category)
            )

        return PublicMenu(
            id=restaurant.id,
            name=restaurant.name,
            location=restaurant.location,
            slug=restaurant.slug,
            menu_path=path,
            menu_url=f"{self.base_url}{path}",
            categories=menu_categories,
            dishes=dishes,
        )
