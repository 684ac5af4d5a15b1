"""Tests for DishService."""

from uuid import uuid4

import pytest

from core.exceptions import InvalidMenuRequestError, ResourceNotFoundError
from core.models import DishCreate, DishUpdate


@pytest.fixture
def service(services):
    return services["dish"]


@pytest.fixture
def restaurant(menu_db, as_test_user):
    return menu_db.insert_restaurant(as_test_user, "Bistro", "Main St", "bistro")


@pytest.fixture
def mains(menu_db, restaurant):
    return menu_db.insert_category(restaurant.id, "Mains")


@pytest.fixture
def specials(menu_db, restaurant):
    return menu_db.insert_category(restaurant.id, "Specials")


def _create(service, restaurant_id, **fields):
    data = {"name": "Curry", "description": "Coconut and lime"}
    data.update(fields)
    return service.create(DishCreate(restaurant_id=restaurant_id, **data))


class TestCreate:

    def test_with_categories(self, service, restaurant, mains, specials):
        dish = _create(service, restaurant.id, spice_level=4, category_ids=[specials.id, mains.id])

        assert dish.spice_level == 4
        assert [c.name for c in dish.categories] == ["Mains", "Specials"]

    def test_without_categories(self, service, restaurant):
        dish = _create(service, restaurant.id)

        assert dish.categories == []
        assert dish.image is None

    def test_duplicate_category_ids_linked_once(self, service, restaurant, mains):
        dish = _create(service, restaurant.id, category_ids=[mains.id, mains.id])

        assert len(dish.categories) == 1

    def test_category_from_other_restaurant(self, service, menu_db, restaurant, as_test_user):
        other = menu_db.insert_restaurant(as_test_user, "Other", "Side St", "other")
        foreign = menu_db.insert_category(other.id, "Mains")

        with pytest.raises(InvalidMenuRequestError, match="do not belong"):
            _create(service, restaurant.id, category_ids=[foreign.id])
        assert menu_db.list_dishes(restaurant.id) == []

    def test_unknown_category(self, service, restaurant):
        with pytest.raises(InvalidMenuRequestError):
            _create(service, restaurant.id, category_ids=[uuid4()])

    def test_foreign_restaurant(self, service, menu_db, as_test_user, test_user_b_id):
        theirs = menu_db.insert_restaurant(test_user_b_id, "Theirs", "Far", "theirs")

        with pytest.raises(ResourceNotFoundError):
            _create(service, theirs.id)

    def test_audited(self, service, audit, restaurant):
        dish = _create(service, restaurant.id)

        audit.record_created.assert_called_once_with("dish", dish)


class TestList:

    def test_newest_first(self, service, restaurant):
        first = _create(service, restaurant.id, name="First")
        second = _create(service, restaurant.id, name="Second")

        assert [d.id for d in service.list_for_restaurant(restaurant.id)] == [second.id, first.id]


class TestUpdate:

    def test_partial(self, service, restaurant, mains):
        dish = _create(service, restaurant.id, image="https://img.example.com/curry.jpg",
                       category_ids=[mains.id])

        updated = service.update(dish.id, DishUpdate(name="Green Curry"))

        assert updated.name == "Green Curry"
        assert updated.image == dish.image
        assert [c.id for c in updated.categories] == [mains.id]

    def test_null_clears_optional_fields(self, service, restaurant):
        dish = _create(service, restaurant.id, image="https://img.example.com/c.jpg", spice_level=2)

        updated = service.update(dish.id, DishUpdate(image=None, spice_level=None))

        assert updated.image is None
        assert updated.spice_level is None

    def test_replaces_categories(self, service, restaurant, mains, specials):
        dish = _create(service, restaurant.id, category_ids=[mains.id])

        updated = service.update(dish.id, DishUpdate(category_ids=[specials.id]))

        assert [c.id for c in updated.categories] == [specials.id]

    def test_empty_category_list_unlinks_all(self, service, restaurant, mains):
        dish = _create(service, restaurant.id, category_ids=[mains.id])

        assert service.update(dish.id, DishUpdate(category_ids=[])).categories == []

    def test_rejects_foreign_category(self, service, menu_db, restaurant, mains, as_test_user):
        dish = _create(service, restaurant.id, category_ids=[mains.id])
        other = menu_db.insert_restaurant(as_test_user, "Other", "Side St", "other")
        foreign = menu_db.insert_category(other.id, "Mains")

        with pytest.raises(InvalidMenuRequestError):
            service.update(dish.id, DishUpdate(category_ids=[foreign.id]))
        assert [c.id for c in menu_db.get_dish(dish.id).categories] == [mains.id]

    def test_nothing_to_change(self, service, audit, restaurant):
        dish = _create(service, restaurant.id)
        audit.reset_mock()

        assert service.update(dish.id, DishUpdate()) == dish
        audit.record_updated.assert_not_called()

    def test_audits_changed_fields(self, service, audit, restaurant):
        dish = _create(service, restaurant.id)

        service.update(dish.id, DishUpdate(spice_level=5))

        entity_type, before, after = audit.record_updated.call_args.args
        assert entity_type == "dish"
        assert (before.spice_level, after.spice_level) == (None, 5)


class TestDelete:

    def test_deletes(self, service, menu_db, restaurant, mains):
        dish = _create(service, restaurant.id, category_ids=[mains.id])

        service.delete(dish.id)

        assert menu_db.get_dish(dish.id) is None
        assert menu_db.get_category(mains.id) is not None

    def test_foreign_dish(self, service, menu_db, as_test_user, test_user_b_id):
        theirs = menu_db.insert_restaurant(test_user_b_id, "Theirs", "Far", "theirs")
        dish = menu_db.insert_dish(theirs.id, {"name": "X", "description": "Y"}, [])

        with pytest.raises(ResourceNotFoundError, match="Dish not found"):
            service.delete(dish.id)
        assert menu_db.get_dish(dish.id) is not None
