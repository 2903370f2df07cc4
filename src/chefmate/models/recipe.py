"""Recipe data models."""

from __future__ import annotations

import math
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from chefmate.utils import generate_id, utcnow


def coerce_quantity(value: Any) -> float:
    """Coerce a raw quantity into a float, treating unparseable values as 0."""

    if isinstance(value, bool) or value is None:
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip().replace(",", "."))
        except ValueError:
            return 0.0
    return 0.0


def is_usable_quantity(value: float) -> bool:
    return math.isfinite(value) and value > 0


class Ingredient(BaseModel):
    """Single ingredient line owned by a recipe."""

    id: str = Field(default_factory=generate_id)
    name: str = Field(default="")
    quantity: float = Field(default=0.0)
    unit: str = Field(default="")

    model_config = ConfigDict(frozen=True)

    @field_validator("quantity", mode="before")
    @classmethod
    def _coerce_quantity(cls, value: Any) -> float:
        return coerce_quantity(value)

    @field_validator("name", "unit", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        return "" if value is None else str(value)


class Recipe(BaseModel):
    """Stored recipe; ``servings`` is the base scale for ingredient quantities."""

    id: str
    name: str
    course: str = Field(default="main")
    servings: int = Field(default=0)
    ingredients: list[Ingredient] = Field(default_factory=list)
    instructions: str = Field(default="")
    external_link: Optional[str] = Field(default=None)
    created_at: datetime = Field(default_factory=utcnow)

    model_config = ConfigDict(frozen=True)


class RecipeDraft(BaseModel):
    """User-edited recipe fields before the store assigns an id."""

    name: str = Field(min_length=1, max_length=255)
    course: Optional[str] = Field(default=None, max_length=64)
    servings: int = Field(default=2, ge=1)
    ingredients: list[Ingredient] = Field(default_factory=list)
    instructions: str = Field(default="", max_length=20000)
    external_link: Optional[str] = Field(default=None, max_length=2048)

    model_config = ConfigDict(frozen=True)


__all__ = ["Ingredient", "Recipe", "RecipeDraft", "coerce_quantity", "is_usable_quantity"]
