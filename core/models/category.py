"""Menu category domain models."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class CategoryCreate(BaseModel):
    """Category names are unique within a restaurant."""

    model_config = {"str_strip_whitespace": True}

    restaurant_id: UUID
    name: str = Field(..., min_length=1, max_length=255)


class CategoryUpdate(BaseModel):
    model_config = {"str_strip_whitespace": True}

    name: str | None = Field(None, min_length=1, max_length=255)


class Category(BaseModel):
    """Full category entity as stored."""

    id: UUID
    restaurant_id: UUID
    name: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class CategorySummary(Category):
    dish_count: int = 0
