"""Translate snake_case store rows into canonical entities and back."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from pydantic import ValidationError

from chefmate.config import get_settings
from chefmate.errors import InvalidInputError, StoreError
from chefmate.models.recipe import Ingredient, Recipe, RecipeDraft, coerce_quantity
from chefmate.models.shopping import ShoppingCandidate, ShoppingItem
from chefmate.utils import utcnow

logger = logging.getLogger(__name__)

Row = Dict[str, Any]


def _require_id(row: Mapping[str, Any], table: str) -> str:
    row_id = row.get("id")
    if row_id is None or str(row_id).strip() == "":
        raise StoreError(f"{table} row without id: {dict(row)!r}")
    return str(row_id)


def _coerce_int(value: Any) -> int:
    if isinstance(value, bool) or value is None:
        return 0
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return 0


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, str) and value.strip():
        try:
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            logger.debug("Unparseable created_at=%r, using current time", value)
            return utcnow()
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    return utcnow()


def _optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value)
    return text or None


def _ingredients_from_row(raw: Any, recipe_id: str) -> list[Ingredient]:
    if not isinstance(raw, list):
        return []
    ingredients: list[Ingredient] = []
    for entry in raw:
        if not isinstance(entry, Mapping):
            logger.debug("Skipping non-object ingredient recipe=%s entry=%r", recipe_id, entry)
            continue
        payload = {key: value for key, value in entry.items() if value is not None}
        try:
            ingredients.append(Ingredient.model_validate(payload))
        except ValidationError as exc:
            logger.debug("Skipping malformed ingredient recipe=%s errors=%s", recipe_id, exc.errors())
    return ingredients


def recipe_from_row(row: Mapping[str, Any], *, default_course: Optional[str] = None) -> Recipe:
    """Build a :class:`Recipe` from a stored row, filling every absent field."""

    recipe_id = _require_id(row, "recipes")
    course = str(row.get("course") or "").strip() or default_course or get_settings().default_course
    try:
        return Recipe(
            id=recipe_id,
            name=str(row.get("name") or ""),
            course=course,
            servings=_coerce_int(row.get("servings")),
            ingredients=_ingredients_from_row(row.get("ingredients"), recipe_id),
            instructions=str(row.get("instructions") or ""),
            external_link=_optional_text(row.get("external_link")),
            created_at=_parse_timestamp(row.get("created_at")),
        )
    except ValidationError as exc:
        raise StoreError(f"Malformed recipes row {recipe_id}: {exc}") from exc


def recipe_row_from_draft(draft: RecipeDraft, *, default_course: Optional[str] = None) -> Row:
    """Return the writable columns for a recipe draft.

    Ingredients with a blank name are dropped. Raises
    :class:`InvalidInputError` when the recipe name is blank.
    """

    name = draft.name.strip()
    if not name:
        raise InvalidInputError("Recipe name is required")
    course = (draft.course or "").strip() or default_course or get_settings().default_course
    return {
        "name": name,
        "course": course,
        "servings": draft.servings,
        "ingredients": [
            ingredient.model_dump()
            for ingredient in draft.ingredients
            if ingredient.name.strip()
        ],
        "instructions": draft.instructions,
        "external_link": (draft.external_link or "").strip() or None,
    }


def shopping_item_from_row(row: Mapping[str, Any]) -> ShoppingItem:
    """Build a :class:`ShoppingItem` from a stored row with coerced field types."""

    item_id = _require_id(row, "shopping_items")
    from_recipe_id = row.get("from_recipe_id")
    try:
        return ShoppingItem(
            id=item_id,
            name=str(row.get("name") or ""),
            quantity=coerce_quantity(row.get("quantity")),
            unit=str(row.get("unit") or ""),
            completed=bool(row.get("completed")),
            from_recipe_id=str(from_recipe_id) if from_recipe_id is not None else None,
        )
    except ValidationError as exc:
        raise StoreError(f"Malformed shopping_items row {item_id}: {exc}") from exc


def shopping_row_from_candidate(candidate: ShoppingCandidate) -> Row:
    return {
        "name": candidate.name,
        "quantity": candidate.quantity,
        "unit": candidate.unit,
        "completed": False,
        "from_recipe_id": candidate.from_recipe_id,
    }


__all__ = [
    "Row",
    "recipe_from_row",
    "recipe_row_from_draft",
    "shopping_item_from_row",
    "shopping_row_from_candidate",
]
