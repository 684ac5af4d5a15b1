"""Dish domain models."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from core.models.category import Category


class DishCreate(BaseModel):
    """Data required to create a dish. category_ids must belong to the same restaurant."""

    model_config = {"str_strip_whitespace": True}

    restaurant_id: UUID
    name: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1, max_length=5000)
    image: str | None = Field(None, max_length=2048)
    spice_level: int | None = Field(None, ge=1, le=5)
    category_ids: list[UUID] = Field(default_factory=list)


class DishUpdate(BaseModel):
    """
    Partial update. Only fields present in the payload change.

    image and spice_level may be sent as null to clear them; category_ids
    replaces the whole set when present.
    """

    model_config = {"str_strip_whitespace": True}

    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, min_length=1, max_length=5000)
    image: str | None = Field(None, max_length=2048)
    spice_level: int | None = Field(None, ge=1, le=5)
    category_ids: list[UUID] | None = None

    @field_validator("name", "description", "category_ids")
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError("may be omitted but not null")
        return value


class Dish(BaseModel):
    """Full dish entity with its categories."""

    id: UUID
    restaurant_id: UUID
    name: str
    description: str
    image: str | None
    spice_level: int | None
    categories: list[Category] = []
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
