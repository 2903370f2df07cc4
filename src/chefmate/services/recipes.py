"""Recipe collection state owner."""

from __future__ import annotations

import logging
import threading
from typing import List, Optional

from chefmate.db.mapping import recipe_from_row, recipe_row_from_draft
from chefmate.db.store import TableStore
from chefmate.engine.reconciler import store_failures_as
from chefmate.errors import RecipeNotFoundError, StoreError
from chefmate.models.recipe import Recipe, RecipeDraft
from chefmate.services.guard import InFlightGuard

logger = logging.getLogger(__name__)

ALL_COURSES = "all"


class RecipeBook:
    """Owns the recipe collection, newest first."""

    def __init__(self, store: TableStore, *, default_course: str = "main") -> None:
        self._store = store
        self._default_course = default_course
        self._recipes: List[Recipe] = []
        self._loaded = False
        self._guard = InFlightGuard("recipe")
        self._load_lock = threading.Lock()

    @property
    def recipes(self) -> List[Recipe]:
        return list(self._recipes)

    def load(self) -> List[Recipe]:
        with self._guard.hold(), store_failures_as(
            "load_recipes", "Could not load the recipes. Check the connection to the store."
        ):
            rows = self._store.select_all()
            self._recipes = [
                recipe_from_row(row, default_course=self._default_course) for row in rows
            ]
            self._loaded = True
        logger.debug("Loaded %s recipe(s)", len(self._recipes))
        return self.recipes

    def ensure_loaded(self) -> None:
        if self._loaded:
            return
        with self._load_lock:
            if not self._loaded:
                self.load()

    def get(self, recipe_id: str) -> Recipe:
        for recipe in self._recipes:
            if recipe.id == recipe_id:
                return recipe
        raise RecipeNotFoundError(recipe_id)

    def courses(self) -> List[str]:
        """Return the distinct non-empty courses in first-seen order."""

        seen: dict[str, None] = {}
        for recipe in self._recipes:
            course = (recipe.course or "").strip()
            if course:
                seen.setdefault(course, None)
        return list(seen)

    def filter_by_course(self, course: Optional[str] = None) -> List[Recipe]:
        wanted = (course or "").strip().lower()
        if not wanted or wanted == ALL_COURSES:
            return self.recipes
        return [
            recipe for recipe in self._recipes if (recipe.course or "").strip().lower() == wanted
        ]

    def create(self, draft: RecipeDraft) -> Recipe:
        row = recipe_row_from_draft(draft, default_course=self._default_course)
        with self._guard.hold():
            with store_failures_as("create_recipe", "Could not save the recipe."):
                inserted = self._store.insert([row])
                if not inserted:
                    raise StoreError("Insert of recipe returned no row")
                recipe = recipe_from_row(inserted[0], default_course=self._default_course)
            self._recipes = [recipe, *self._recipes]
        logger.info("Created recipe id=%s name=%s", recipe.id, recipe.name)
        return recipe

    def update(self, recipe_id: str, draft: RecipeDraft) -> Recipe:
        row = recipe_row_from_draft(draft, default_course=self._default_course)
        with self._guard.hold():
            with store_failures_as("update_recipe", "Could not save the recipe."):
                updated_row = self._store.update(recipe_id, row)
                if updated_row is None:
                    self._recipes = [r for r in self._recipes if r.id != recipe_id]
                    raise RecipeNotFoundError(recipe_id)
                recipe = recipe_from_row(updated_row, default_course=self._default_course)
            if any(r.id == recipe_id for r in self._recipes):
                self._recipes = [recipe if r.id == recipe_id else r for r in self._recipes]
            else:
                self._recipes = [recipe, *self._recipes]
        logger.info("Updated recipe id=%s", recipe_id)
        return recipe

    def delete(self, recipe_id: str) -> None:
        with self._guard.hold():
            with store_failures_as("delete_recipe", "Could not delete the recipe."):
                self._store.delete(recipe_id)
            self._recipes = [recipe for recipe in self._recipes if recipe.id != recipe_id]


__all__ = ["ALL_COURSES", "RecipeBook"]
