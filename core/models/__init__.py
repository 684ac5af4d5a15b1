"""Core domain models."""

from core.models.category import Category, CategoryCreate, CategoryUpdate, CategorySummary
from core.models.dish import Dish, DishCreate, DishUpdate
from core.models.restaurant import (
    Restaurant,
    RestaurantCreate,
    RestaurantUpdate,
    RestaurantSummary,
    RestaurantDetail,
    MenuCategory,
    PublicMenu,
)

__all__ = [
    # Category
    "Category", "CategoryCreate", "CategoryUpdate", "CategorySummary",
    # Dish
    "Dish", "DishCreate", "DishUpdate",
    # Restaurant
    "Restaurant", "RestaurantCreate", "RestaurantUpdate", "RestaurantSummary",
    "RestaurantDetail", "MenuCategory", "PublicMenu",
]
