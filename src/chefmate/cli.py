"""Command-line interface for ChefMate."""

from __future__ import annotations

import json
from typing import Optional

import typer

from chefmate.config import get_settings
from chefmate.db.mapping import recipe_from_row
from chefmate.db.store import open_stores
from chefmate.engine.quantity import format_quantity
from chefmate.engine.scaler import scale_recipe
from chefmate.errors import ChefMateError, NoValidIngredientsError, PersistenceFailure, StoreError
from chefmate.logging_utils import configure_from_settings
from chefmate.services.recipes import RecipeBook
from chefmate.services.shopping_list import ShoppingListService

app = typer.Typer(help="ChefMate recipe scaling and shopping list commands.")


@app.callback()
def _configure(
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Override the log level."),
) -> None:
    configure_from_settings(get_settings(), level_override=log_level)


def _fail(message: str) -> None:
    typer.secho(message, fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1)


def _shopping_list() -> ShoppingListService:
    settings = get_settings()
    service = ShoppingListService(open_stores(settings).shopping_items, default_unit=settings.default_unit)
    service.load()
    return service


def _print_items(service: ShoppingListService) -> None:
    items = service.sorted_items()
    if not items:
        typer.echo("Shopping list is empty.")
        return
    for item in items:
        mark = "x" if item.completed else " "
        unit = f" {item.unit}" if item.unit else ""
        typer.echo(f"[{mark}] {item.name}: {format_quantity(item.quantity)}{unit}")


@app.command()
def scale(
    recipe_path: str,
    servings: int = typer.Option(..., "--servings", "-s", min=1, help="Desired serving count."),
    as_json: bool = typer.Option(False, "--json", help="Emit JSON instead of text."),
) -> None:
    """
    Scale a recipe stored as a JSON row to the requested serving count.
    """
    try:
        with open(recipe_path, "r", encoding="utf-8") as fh:
            payload = json.load(fh)
    except OSError as exc:
        _fail(f"Cannot read {recipe_path}: {exc.strerror or exc}")
        return
    except ValueError as exc:
        _fail(f"{recipe_path} is not valid JSON: {exc}")
        return
    if not isinstance(payload, dict):
        _fail(f"{recipe_path} must contain a JSON object")
        return
    payload.setdefault("id", "local")

    try:
        recipe = recipe_from_row(payload)
    except StoreError as exc:
        _fail(f"{recipe_path} is not a valid recipe: {exc}")
        return
    try:
        candidates = scale_recipe(recipe, servings)
    except NoValidIngredientsError:
        _fail(f"Recipe '{recipe.name}' has no valid ingredients.")
        return

    if as_json:
        typer.echo(json.dumps([candidate.model_dump() for candidate in candidates], indent=2))
        return
    for candidate in candidates:
        unit = f" {candidate.unit}" if candidate.unit else ""
        typer.echo(f"{candidate.name}: {format_quantity(candidate.quantity)}{unit}")


@app.command("list")
def list_items() -> None:
    """Show the shopping list, active items first."""

    try:
        _print_items(_shopping_list())
    except PersistenceFailure as exc:
        _fail(exc.user_message)


@app.command()
def add(
    recipe_id: str,
    servings: Optional[int] = typer.Option(None, "--servings", "-s", min=1, help="Desired serving count."),
) -> None:
    """Scale a stored recipe and add its ingredients to the shopping list."""

    settings = get_settings()
    stores = open_stores(settings)
    book = RecipeBook(stores.recipes, default_course=settings.default_course)
    service = ShoppingListService(stores.shopping_items, default_unit=settings.default_unit)
    try:
        book.load()
        service.load()
        recipe = book.get(recipe_id)
        service.add_recipe(recipe, servings or recipe.servings)
    except PersistenceFailure as exc:
        _fail(exc.user_message)
    except NoValidIngredientsError:
        _fail("The recipe has no valid ingredients.")
    except ChefMateError as exc:
        _fail(str(exc))
    _print_items(service)


@app.command("clear-completed")
def clear_completed() -> None:
    """Delete completed items from the shopping list."""

    try:
        removed = _shopping_list().clear_completed()
    except PersistenceFailure as exc:
        _fail(exc.user_message)
        return
    typer.echo(f"Removed {removed} completed item(s).")


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address."),
    port: Optional[int] = typer.Option(None, "--port", help="Bind port."),
) -> None:
    """Run the HTTP API."""

    from chefmate.server.run import main as run_server

    run_server(host=host, port=port)


def main(argv: Optional[list[str]] = None) -> None:
    """Entry point for the `chefmate` console script."""
    app(prog_name="chefmate", args=argv)


if __name__ == "__main__":
    main()
