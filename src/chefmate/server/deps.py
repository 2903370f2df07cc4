"""Dependency definitions for the ChefMate API server."""

from __future__ import annotations

from fastapi import Depends, HTTPException, Request, status

from chefmate.config import get_settings
from chefmate.services.recipes import RecipeBook
from chefmate.services.shopping_list import ShoppingListService


def get_recipe_book(request: Request) -> RecipeBook:
    """Return the application's recipe collection, loading it on first use."""

    book: RecipeBook = request.app.state.recipe_book
    book.ensure_loaded()
    return book


def get_shopping_list(request: Request) -> ShoppingListService:
    """Return the application's shopping list, loading it on first use."""

    service: ShoppingListService = request.app.state.shopping_list
    service.ensure_loaded()
    return service


def require_api_token(
    request: Request,
    settings = Depends(get_settings),
) -> None:
    """Ensure requests carry the configured API token when required."""

    token = settings.api_token
    if not token:
        return

    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.split("Bearer ")[-1].strip() == token:
        return

    if request.headers.get("X-API-Key") == token:
        return

    raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
