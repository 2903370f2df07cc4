"""Pydantic models defining shared data contracts."""

from chefmate.models.recipe import Ingredient, Recipe, RecipeDraft
from chefmate.models.shopping import (
    ScaledIngredientView,
    ShoppingCandidate,
    ShoppingItem,
    ShoppingItemView,
)

__all__ = [
    "Ingredient",
    "Recipe",
    "RecipeDraft",
    "ShoppingCandidate",
    "ShoppingItem",
    "ShoppingItemView",
    "ScaledIngredientView",
]
