"""
Database operations for restaurants, categories and dishes.

Pure persistence: no ownership rules here (see core.ownership) and no
business validation (see core.services). Dishes are linked to categories
through the dish_categories join table; deleting a restaurant cascades to
its categories and dishes, deleting either side of a link removes the link.
"""

from collections import defaultdict
from typing import Any
from uuid import UUID

import psycopg2.errors

from clients.postgres_client import PostgresClient, Transaction
from core.exceptions import ResourceConflictError
from core.models import Category, CategorySummary, Dish, Restaurant, RestaurantSummary
from utils.timezone import now_utc

CATEGORY_CONFLICT_MESSAGE = "Category with this name already exists"

# Valid columns that can be updated
_RESTAURANT_COLUMNS = {"name", "location", "slug"}
_DISH_COLUMNS = {"name", "description", "image", "spice_level"}


def _set_clause(fields: dict[str, Any], allowed: set[str]) -> tuple[str, list[Any]]:
    """SET fragment and params for the allowed subset of fields, plus updated_at."""
    unknown = set(fields) - allowed
    if unknown:
        raise ValueError(f"Cannot update column(s): {', '.join(sorted(unknown))}")

    set_parts = [f"{column} = %s" for column in fields]
    params = list(fields.values())
    set_parts.append("updated_at = %s")
    params.append(now_utc())
    return ", ".join(set_parts), params


class MenuDatabase:
    """Persistence for the menu hierarchy."""

    def __init__(self, postgres: PostgresClient):
        self._db = postgres

    # -------------------------------------------------------------------------
    # Restaurants
    # -------------------------------------------------------------------------

    def get_restaurant(self, restaurant_id: UUID) -> Restaurant | None:
        row = self._db.execute_single(
            "SELECT * FROM restaurants WHERE id = %s",
            (restaurant_id,),
        )
        return Restaurant.model_validate(row) if row else None

    def get_restaurant_by_slug(self, slug: str) -> Restaurant | None:
        row = self._db.execute_single(
            "SELECT * FROM restaurants WHERE slug = %s",
            (slug,),
        )
        return Restaurant.model_validate(row) if row else None

    def slug_exists(self, slug: str, exclude_id: UUID | None = None) -> bool:
        """True if another restaurant already uses slug."""
        row = self._db.execute_single(
            "SELECT id FROM restaurants WHERE slug = %s",
            (slug,),
        )
        if row is None:
            return False
        return exclude_id is None or row["id"] != exclude_id

    def list_restaurants(self, owner_id: UUID) -> list[RestaurantSummary]:
        """Owner's restaurants, newest first, with category and dish counts."""
        rows = self._db.execute(
            """
            SELECT r.*,
                   (SELECT count(*) FROM categories c WHERE c.restaurant_id = r.id) AS category_count,
                   (SELECT count(*) FROM dishes d WHERE d.restaurant_id = r.id) AS dish_count
            FROM restaurants r
            WHERE r.owner_id = %s
            ORDER BY r.created_at DESC
            """,
            (owner_id,),
        )
        return [RestaurantSummary.model_validate(row) for row in rows]

    def insert_restaurant(self, owner_id: UUID, name: str, location: str, slug: str) -> Restaurant:
        now = now_utc()
        row = self._db.execute_returning(
            """
            INSERT INTO restaurants (owner_id, name, location, slug, created_at, updated_at)
            VALUES (%s, %s, %s, %s, %s, %s)
            RETURNING *
            """,
            (owner_id, name, location, slug, now, now),
        )[0]
        return Restaurant.model_validate(row)

    def update_restaurant(self, restaurant_id: UUID, fields: dict[str, Any]) -> Restaurant | None:
        set_clause, params = _set_clause(fields, _RESTAURANT_COLUMNS)
        params.append(restaurant_id)
        rows = self._db.execute_returning(
            f"UPDATE restaurants SET {set_clause} WHERE id = %s RETURNING *",
            tuple(params),
        )
        return Restaurant.model_validate(rows[0]) if rows else None

    def delete_restaurant(self, restaurant_id: UUID) -> bool:
        rows = self._db.execute_returning(
            "DELETE FROM restaurants WHERE id = %s RETURNING id",
            (restaurant_id,),
        )
        return len(rows) > 0

    # -------------------------------------------------------------------------
    # Categories
    # -------------------------------------------------------------------------

    def get_category(self, category_id: UUID) -> Category | None:
        row = self._db.execute_single(
            "SELECT * FROM categories WHERE id = %s",
            (category_id,),
        )
        return Category.model_validate(row) if row else None

    def get_category_by_name(self, restaurant_id: UUID, name: str) -> Category | None:
        row = self._db.execute_single(
            "SELECT * FROM categories WHERE restaurant_id = %s AND name = %s",
            (restaurant_id, name),
        )
        return Category.model_validate(row) if row else None

    def list_categories(self, restaurant_id: UUID) -> list[CategorySummary]:
        """Categories ordered by name, with dish counts."""
        rows = self._db.execute(
            """
            SELECT c.*,
                   (SELECT count(*) FROM dish_categories dc WHERE dc.category_id = c.id) AS dish_count
            FROM categories c
            WHERE c.restaurant_id = %s
            ORDER BY c.name ASC
            """,
            (restaurant_id,),
        )
        return [CategorySummary.model_validate(row) for row in rows]

    def count_categories_in_restaurant(self, restaurant_id: UUID, category_ids: list[UUID]) -> int:
        """How many of category_ids belong to restaurant_id."""
        if not category_ids:
            return 0
        return self._db.execute_scalar(
            "SELECT count(*) FROM categories WHERE restaurant_id = %s AND id = ANY(%s::uuid[])",
            (restaurant_id, list(category_ids)),
        )

    def insert_category(self, restaurant_id: UUID, name: str) -> Category:
        """Raises ResourceConflictError on a duplicate name within the restaurant."""
        now = now_utc()
        try:
            row = self._db.execute_returning(
                """
                INSERT INTO categories (restaurant_id, name, created_at, updated_at)
                VALUES (%s, %s, %s, %s)
                RETURNING *
                """,
                (restaurant_id, name, now, now),
            )[0]
        except psycopg2.errors.UniqueViolation:
            raise ResourceConflictError(CATEGORY_CONFLICT_MESSAGE)
        return Category.model_validate(row)

    def rename_category(self, category_id: UUID, name: str) -> Category | None:
        """Raises ResourceConflictError on a duplicate name within the restaurant."""
        try:
            rows = self._db.execute_returning(
                "UPDATE categories SET name = %s, updated_at = %s WHERE id = %s RETURNING *",
                (name, now_utc(), category_id),
            )
        except psycopg2.errors.UniqueViolation:
            raise ResourceConflictError(CATEGORY_CONFLICT_MESSAGE)
        return Category.model_validate(rows[0]) if rows else None

    def delete_category(self, category_id: UUID) -> bool:
        rows = self._db.execute_returning(
            "DELETE FROM categories WHERE id = %s RETURNING id",
            (category_id,),
        )
        return len(rows) > 0

    # -------------------------------------------------------------------------
    # Dishes
    # -------------------------------------------------------------------------

    def _categories_for_dishes(self, dish_ids: list[UUID]) -> dict[UUID, list[Category]]:
        if not dish_ids:
            return {}
        rows = self._db.execute(
            """
            SELECT dc.dish_id, c.*
            FROM dish_categories dc
            JOIN categories c ON c.id = dc.category_id
            WHERE dc.dish_id = ANY(%s::uuid[])
            ORDER BY c.name ASC
            """,
            (list(dish_ids),),
        )
        by_dish: dict[UUID, list[Category]] = defaultdict(list)
        for row in rows:
            by_dish[row["dish_id"]].append(Category.model_validate(row))
        return by_dish

    def _with_categories(self, rows: list[dict[str, Any]]) -> list[Dish]:
        categories = self._categories_for_dishes([row["id"] for row in rows])
        return [
            Dish.model_validate({**row, "categories": categories.get(row["id"], [])})
            for row in rows
        ]

    def get_dish(self, dish_id: UUID) -> Dish | None:
        row = self._db.execute_single("SELECT * FROM dishes WHERE id = %s", (dish_id,))
        if row is None:
            return None
        return self._with_categories([row])[0]

    def list_dishes(self, restaurant_id: UUID) -> list[Dish]:
        """Dishes newest first, each with its categories."""
        rows = self._db.execute(
            "SELECT * FROM dishes WHERE restaurant_id = %s ORDER BY created_at DESC",
            (restaurant_id,),
        )
        return self._with_categories(rows)

    def _link_categories(self, tx: Transaction, dish_id: UUID, category_ids: list[UUID]) -> None:
        for category_id in dict.fromkeys(category_ids):
            tx.execute(
                "INSERT INTO dish_categories (dish_id, category_id) VALUES (%s, %s)",
                (dish_id, category_id),
            )

    def insert_dish(
        self,
        restaurant_id: UUID,
        fields: dict[str, Any],
        category_ids: list[UUID],
    ) -> Dish:
        """Create dish and its category links atomically."""
        now = now_utc()
        with self._db.transaction() as tx:
            row = tx.execute_single(
                """
                INSERT INTO dishes (restaurant_id, name, description, image, spice_level,
                                    created_at, updated_at)
                VALUES (%s, %s, %s, %s, %s, %s, %s)
                RETURNING id
                """,
                (
                    restaurant_id, fields["name"], fields["description"],
                    fields.get("image"), fields.get("spice_level"), now, now,
                ),
            )
            self._link_categories(tx, row["id"], category_ids)
        return self.get_dish(row["id"])

    def update_dish(
        self,
        dish_id: UUID,
        fields: dict[str, Any],
        category_ids: list[UUID] | None,
    ) -> Dish | None:
        """Update columns and, when category_ids is given, replace the category set."""
        set_clause, params = _set_clause(fields, _DISH_COLUMNS)
        params.append(dish_id)
        with self._db.transaction() as tx:
            row = tx.execute_single(
                f"UPDATE dishes SET {set_clause} WHERE id = %s RETURNING id",
                tuple(params),
            )
            if row is None:
                return None
            if category_ids is not None:
                tx.execute("DELETE FROM dish_categories WHERE dish_id = %s", (dish_id,))
                self._link_categories(tx, dish_id, category_ids)
        return self.get_dish(dish_id)

    def delete_dish(self, dish_id: UUID) -> bool:
        rows = self._db.execute_returning(
            "DELETE FROM dishes WHERE id = %s RETURNING id",
            (dish_id,),
        )
        return len(rows) > 0
