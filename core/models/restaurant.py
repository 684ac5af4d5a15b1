"""Restaurant domain models."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from core.models.category import Category
from core.models.dish import Dish


class RestaurantCreate(BaseModel):
    """Data required to create a restaurant. The slug is derived from the name."""

    model_config = {"str_strip_whitespace": True}

    name: str = Field(..., min_length=1, max_length=255)
    location: str = Field(..., min_length=1, max_length=500)


class RestaurantUpdate(BaseModel):
    """Fields that can change. Renaming regenerates the slug."""

    model_config = {"str_strip_whitespace": True}

    name: str | None = Field(None, min_length=1, max_length=255)
    location: str | None = Field(None, min_length=1, max_length=500)


class Restaurant(BaseModel):
    """Full restaurant entity as stored."""

    id: UUID
    owner_id: UUID
    name: str
    location: str
    slug: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class RestaurantSummary(Restaurant):
    """Dashboard list row with menu size."""

    category_count: int = 0
    dish_count: int = 0


class RestaurantDetail(Restaurant):
    """Owner view: categories by name, dishes newest first."""

    categories: list[Category] = []
    dishes: list[Dish] = []


class MenuCategory(Category):
    """Category on the public menu, carrying its dishes."""

    dishes: list[Dish] = []


class PublicMenu(BaseModel):
    """What a customer sees after scanning the QR code."""

    id: UUID
    name: str
    location: str
    slug: str
    menu_path: str
    menu_url: str
    categories: list[MenuCategory]
    dishes: list[Dish]
