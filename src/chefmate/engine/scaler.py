"""Scale recipe ingredients to a requested serving count."""

from __future__ import annotations

import logging
from typing import List

from chefmate.errors import NoValidIngredientsError
from chefmate.models.recipe import Recipe, coerce_quantity, is_usable_quantity
from chefmate.models.shopping import ShoppingCandidate

logger = logging.getLogger(__name__)


def scale_factor(base_servings: int, desired_servings: int) -> float:
    """Return the multiplier turning ``base_servings`` into ``desired_servings``.

    A non-positive base is treated as one serving and the desired count is
    clamped to at least one.
    """

    base = base_servings if base_servings and base_servings > 0 else 1
    desired = max(1, desired_servings)
    return desired / base


def scale_recipe(recipe: Recipe, desired_servings: int) -> List[ShoppingCandidate]:
    """Return shopping candidates for ``recipe`` scaled to ``desired_servings``.

    Ingredients with a blank name or a quantity that is not a finite positive
    number are skipped. Raises :class:`NoValidIngredientsError` when nothing
    is left after filtering.
    """

    factor = scale_factor(recipe.servings, desired_servings)
    candidates: List[ShoppingCandidate] = []
    skipped = 0

    for ingredient in recipe.ingredients:
        name = (ingredient.name or "").strip()
        unit = (ingredient.unit or "").strip()
        quantity = coerce_quantity(ingredient.quantity)
        if not name or not is_usable_quantity(quantity):
            skipped += 1
            logger.debug(
                "Skipping invalid ingredient recipe=%s name=%r quantity=%r",
                recipe.id,
                ingredient.name,
                ingredient.quantity,
            )
            continue
        candidates.append(
            ShoppingCandidate(
                name=name,
                quantity=quantity * factor,
                unit=unit,
                from_recipe_id=recipe.id,
            )
        )

    if not candidates:
        raise NoValidIngredientsError(recipe.id)

    logger.debug(
        "Scaled recipe=%s servings=%s->%s factor=%.4f kept=%s skipped=%s",
        recipe.id,
        recipe.servings,
        desired_servings,
        factor,
        len(candidates),
        skipped,
    )
    return candidates


__all__ = ["scale_factor", "scale_recipe"]
