"""Exception types raised by the ChefMate engine and its collaborators."""

from __future__ import annotations

from typing import Optional


class ChefMateError(Exception):
    """Base class for all ChefMate errors."""


class InvalidInputError(ChefMateError, ValueError):
    """Raised when a user-provided item cannot be turned into a shopping entry."""


class NoValidIngredientsError(ChefMateError):
    """Raised when scaling a recipe leaves no usable ingredients."""

    def __init__(self, recipe_id: Optional[str] = None) -> None:
        self.recipe_id = recipe_id
        super().__init__(f"Recipe {recipe_id or '<unsaved>'} has no valid ingredients")


class StoreError(ChefMateError):
    """Raised by persistence backends when a boundary call fails."""


class MissingRowError(StoreError):
    """A row the caller still holds is no longer in the store."""

    def __init__(self, row_id: str) -> None:
        self.row_id = row_id
        super().__init__(f"Row {row_id} no longer exists")


class PersistenceFailure(ChefMateError):
    """A user action was aborted because the persisted store rejected it.

    ``user_message`` is the single message shown for the whole action; the
    original :class:`StoreError` is chained as ``__cause__``.
    """

    def __init__(self, user_message: str, *, operation: str) -> None:
        self.user_message = user_message
        self.operation = operation
        super().__init__(f"{operation}: {user_message}")


class BatchInProgressError(ChefMateError):
    """Raised when a list mutation starts while another one is still in flight."""


class RecipeNotFoundError(ChefMateError, LookupError):
    def __init__(self, recipe_id: str) -> None:
        self.recipe_id = recipe_id
        super().__init__(f"Recipe {recipe_id} not found")


__all__ = [
    "ChefMateError",
    "InvalidInputError",
    "NoValidIngredientsError",
    "StoreError",
    "MissingRowError",
    "PersistenceFailure",
    "BatchInProgressError",
    "RecipeNotFoundError",
]
