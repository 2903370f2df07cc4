"""Shopping list models."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from chefmate.engine.quantity import format_quantity


class ShoppingItem(BaseModel):
    """Single entry on the shopping list."""

    id: str
    name: str
    quantity: float = Field(default=0.0)
    unit: str = Field(default="")
    completed: bool = Field(default=False)
    from_recipe_id: Optional[str] = Field(default=None)

    model_config = ConfigDict(frozen=True)


class ShoppingCandidate(BaseModel):
    """Item proposed for the shopping list before it has been persisted."""

    name: str
    quantity: float
    unit: str = Field(default="")
    from_recipe_id: Optional[str] = Field(default=None)

    model_config = ConfigDict(frozen=True)


class ShoppingItemView(ShoppingItem):
    """Shopping item enriched with its display quantity."""

    display_quantity: str

    @classmethod
    def from_item(cls, item: ShoppingItem) -> "ShoppingItemView":
        return cls(**item.model_dump(), display_quantity=format_quantity(item.quantity))


class ScaledIngredientView(ShoppingCandidate):
    display_quantity: str

    @classmethod
    def from_candidate(cls, candidate: ShoppingCandidate) -> "ScaledIngredientView":
        return cls(**candidate.model_dump(), display_quantity=format_quantity(candidate.quantity))


__all__ = ["ShoppingItem", "ShoppingCandidate", "ShoppingItemView", "ScaledIngredientView"]
