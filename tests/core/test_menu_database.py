"""Tests for MenuDatabase - SQL issued against a mocked PostgresClient."""

from contextlib import contextmanager
from unittest.mock import MagicMock, Mock
from uuid import uuid4

import psycopg2.errors
import pytest

from clients.postgres_client import PostgresClient, Transaction
from core.database import MenuDatabase
from core.exceptions import ResourceConflictError
from utils.timezone import now_utc


def _restaurant_row(**overrides):
    now = now_utc()
    row = {
        "id": uuid4(), "owner_id": uuid4(), "name": "Bistro", "location": "Main St",
        "slug": "bistro", "created_at": now, "updated_at": now,
    }
    row.update(overrides)
    return row


def _dish_row(**overrides):
    now = now_utc()
    row = {
        "id": uuid4(), "restaurant_id": uuid4(), "name": "Soup", "description": "Hot",
        "image": None, "spice_level": None, "created_at": now, "updated_at": now,
    }
    row.update(overrides)
    return row


@pytest.fixture
def postgres():
    return Mock(spec=PostgresClient)


@pytest.fixture
def tx(postgres):
    """Transaction mock handed out by postgres.transaction()."""
    tx = MagicMock(spec=Transaction)

    @contextmanager
    def transaction():
        yield tx

    postgres.transaction.side_effect = transaction
    return tx


@pytest.fixture
def menu_database(postgres):
    return MenuDatabase(postgres)


class TestRestaurants:

    def test_slug_exists_ignores_self(self, menu_database, postgres):
        row = _restaurant_row()
        postgres.execute_single.return_value = {"id": row["id"]}

        assert menu_database.slug_exists("bistro") is True
        assert menu_database.slug_exists("bistro", exclude_id=row["id"]) is False
        assert menu_database.slug_exists("bistro", exclude_id=uuid4()) is True

    def test_slug_free(self, menu_database, postgres):
        postgres.execute_single.return_value = None
        assert menu_database.slug_exists("free") is False

    def test_list_filters_by_owner(self, menu_database, postgres):
        owner_id = uuid4()
        postgres.execute.return_value = [_restaurant_row(category_count=2, dish_count=5)]

        summaries = menu_database.list_restaurants(owner_id)

        assert summaries[0].dish_count == 5
        query, params = postgres.execute.call_args.args
        assert "ORDER BY r.created_at DESC" in query
        assert params == (owner_id,)

    def test_update_rejects_unknown_columns(self, menu_database):
        with pytest.raises(ValueError, match="owner_id"):
            menu_database.update_restaurant(uuid4(), {"owner_id": uuid4()})

    def test_update_builds_set_clause(self, menu_database, postgres):
        restaurant_id = uuid4()
        postgres.execute_returning.return_value = [_restaurant_row(id=restaurant_id, name="New")]

        updated = menu_database.update_restaurant(restaurant_id, {"name": "New", "slug": "new"})

        assert updated.name == "New"
        query, params = postgres.execute_returning.call_args.args
        assert "name = %s, slug = %s, updated_at = %s" in query
        assert params[0:2] == ("New", "new")
        assert params[-1] == restaurant_id

    def test_delete_reports_missing(self, menu_database, postgres):
        postgres.execute_returning.return_value = []
        assert menu_database.delete_restaurant(uuid4()) is False


class TestCategories:

    def test_duplicate_name_conflicts(self, menu_database, postgres):
        postgres.execute_returning.side_effect = psycopg2.errors.UniqueViolation()

        with pytest.raises(ResourceConflictError):
            menu_database.insert_category(uuid4(), "Mains")

    def test_rename_duplicate_conflicts(self, menu_database, postgres):
        postgres.execute_returning.side_effect = psycopg2.errors.UniqueViolation()

        with pytest.raises(ResourceConflictError):
            menu_database.rename_category(uuid4(), "Mains")

    def test_count_skips_query_for_empty(self, menu_database, postgres):
        assert menu_database.count_categories_in_restaurant(uuid4(), []) == 0
        postgres.execute_scalar.assert_not_called()


class TestDishes:

    def test_get_dish_attaches_categories(self, menu_database, postgres):
        dish = _dish_row()
        category_id = uuid4()
        now = now_utc()
        postgres.execute_single.return_value = dish
        postgres.execute.return_value = [{
            "dish_id": dish["id"], "id": category_id, "restaurant_id": dish["restaurant_id"],
            "name": "Soups", "created_at": now, "updated_at": now,
        }]

        result = menu_database.get_dish(dish["id"])

        assert [c.id for c in result.categories] == [category_id]

    def test_insert_links_categories_in_one_transaction(self, menu_database, postgres, tx):
        dish = _dish_row()
        category_ids = [uuid4(), uuid4()]
        tx.execute_single.return_value = {"id": dish["id"]}
        postgres.execute_single.return_value = dish
        postgres.execute.return_value = []

        menu_database.insert_dish(
            dish["restaurant_id"], {"name": "Soup", "description": "Hot"}, category_ids + category_ids[:1]
        )

        link_calls = [c for c in tx.execute.call_args_list if "dish_categories" in c.args[0]]
        assert [c.args[1][1] for c in link_calls] == category_ids

    def test_update_replaces_category_set(self, menu_database, postgres, tx):
        dish = _dish_row()
        new_category = uuid4()
        tx.execute_single.return_value = {"id": dish["id"]}
        postgres.execute_single.return_value = dish
        postgres.execute.return_value = []

        menu_database.update_dish(dish["id"], {"spice_level": None}, [new_category])

        statements = [c.args[0] for c in tx.execute.call_args_list]
        assert statements[0].startswith("DELETE FROM dish_categories")
        assert "INSERT INTO dish_categories" in statements[1]

    def test_update_keeps_categories_when_not_given(self, menu_database, postgres, tx):
        dish = _dish_row()
        tx.execute_single.return_value = {"id": dish["id"]}
        postgres.execute_single.return_value = dish
        postgres.execute.return_value = []

        menu_database.update_dish(dish["id"], {"name": "Broth"}, None)

        tx.execute.assert_not_called()

    def test_update_missing_dish(self, menu_database, tx):
        tx.execute_single.return_value = None
        assert menu_database.update_dish(uuid4(), {"name": "x"}, [uuid4()]) is None
