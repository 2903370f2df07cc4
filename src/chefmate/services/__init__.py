"""Stateful owners of the recipe collection and the shopping list."""

from chefmate.services.recipes import RecipeBook
from chefmate.services.shopping_list import ShoppingListService

__all__ = ["RecipeBook", "ShoppingListService"]
