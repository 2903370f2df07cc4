"""Shopping list state owner.

The service holds the list that is shown to the user. Every action computes
its change with the stateless engine, writes it through the table store and
only then replaces the in-memory list, so a failed write leaves the shown
list untouched.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Iterable, List, Optional

from chefmate.db.mapping import shopping_item_from_row
from chefmate.db.store import TableStore
from chefmate.engine.consolidator import consolidate
from chefmate.engine.reconciler import StoreReconciler, store_failures_as
from chefmate.engine.scaler import scale_recipe
from chefmate.errors import InvalidInputError, MissingRowError, PersistenceFailure
from chefmate.models.recipe import Recipe, coerce_quantity, is_usable_quantity
from chefmate.models.shopping import ShoppingCandidate, ShoppingItem
from chefmate.services.guard import InFlightGuard

logger = logging.getLogger(__name__)

LOAD_FAILED_MESSAGE = "Could not load the shopping list. Check the connection to the store."
TOGGLE_FAILED_MESSAGE = "Could not update the item."
DELETE_FAILED_MESSAGE = "Could not delete the item."
CLEAR_COMPLETED_FAILED_MESSAGE = "Could not delete the completed items."
CLEAR_ALL_FAILED_MESSAGE = "Could not empty the list."


class ShoppingListService:
    """Owns the displayed shopping list and applies engine plans to it."""

    def __init__(self, store: TableStore, *, default_unit: str = "db") -> None:
        self._store = store
        self._reconciler = StoreReconciler(store)
        self._default_unit = default_unit
        self._items: List[ShoppingItem] = []
        self._loaded = False
        self._guard = InFlightGuard("shopping list")
        self._load_lock = threading.Lock()

    @property
    def items(self) -> List[ShoppingItem]:
        return list(self._items)

    @property
    def busy(self) -> bool:
        return self._guard.busy

    def load(self) -> List[ShoppingItem]:
        """Replace the in-memory list with the store's rows."""

        with self._guard.hold(), store_failures_as("load_shopping_list", LOAD_FAILED_MESSAGE):
            rows = self._store.select_all()
            self._items = [shopping_item_from_row(row) for row in rows]
            self._loaded = True
        logger.debug("Loaded %s shopping item(s)", len(self._items))
        return self.items

    def ensure_loaded(self) -> None:
        """Load once; concurrent first callers wait for that load instead of failing."""

        if self._loaded:
            return
        with self._load_lock:
            if not self._loaded:
                self.load()

    def _forget(self, item_id: str) -> None:
        self._items = [item for item in self._items if item.id != item_id]

    def sorted_items(self) -> List[ShoppingItem]:
        """Return active items first, keeping the stored order within each group."""

        return sorted(self._items, key=lambda item: item.completed)

    def active_count(self) -> int:
        return sum(1 for item in self._items if not item.completed)

    def add_items(self, candidates: Iterable[ShoppingCandidate]) -> List[ShoppingItem]:
        """Consolidate a batch of candidates into the list."""

        with self._guard.hold():
            batch = list(candidates)
            plan = consolidate(self._items, batch)
            try:
                self._items = self._reconciler.apply(self._items, plan)
            except PersistenceFailure as exc:
                if isinstance(exc.__cause__, MissingRowError):
                    logger.info("Dropping shopping item %s deleted from the store", exc.__cause__.row_id)
                    self._forget(exc.__cause__.row_id)
                raise
        return self.items

    def add_recipe(self, recipe: Recipe, servings: int) -> List[ShoppingItem]:
        """Scale ``recipe`` to ``servings`` and add its ingredients to the list."""

        candidates = scale_recipe(recipe, servings)
        logger.info(
            "Adding recipe=%s servings=%s items=%s to shopping list",
            recipe.id,
            servings,
            len(candidates),
        )
        return self.add_items(candidates)

    def add_manual_item(
        self,
        name: str,
        quantity: Any = None,
        unit: Optional[str] = None,
    ) -> List[ShoppingItem]:
        """Add a single hand-entered item, merging it like a one-item batch.

        A missing or zero quantity counts as one; the unit defaults to the
        configured default unit.
        """

        clean_name = (name or "").strip()
        if not clean_name:
            raise InvalidInputError("Item name is required")
        value = coerce_quantity(quantity) or 1.0
        if not is_usable_quantity(value):
            raise InvalidInputError(f"Invalid quantity for '{clean_name}': {quantity!r}")
        clean_unit = (unit or "").strip() or self._default_unit
        return self.add_items([ShoppingCandidate(name=clean_name, quantity=value, unit=clean_unit)])

    def toggle_item(self, item_id: str) -> Optional[ShoppingItem]:
        """Flip the completion state of an item; unknown ids are ignored."""

        with self._guard.hold():
            index = next((i for i, item in enumerate(self._items) if item.id == item_id), None)
            if index is None:
                logger.debug("Toggle ignored for unknown shopping item %s", item_id)
                return None
            target = self._items[index]
            with store_failures_as("toggle_shopping_item", TOGGLE_FAILED_MESSAGE):
                row = self._store.update(item_id, {"completed": not target.completed})
                if row is None:
                    logger.info("Dropping shopping item %s deleted from the store", item_id)
                    self._forget(item_id)
                    return None
                updated = shopping_item_from_row(row)
            items = list(self._items)
            items[index] = updated
            self._items = items
        return updated

    def remove_item(self, item_id: str) -> None:
        with self._guard.hold():
            with store_failures_as("delete_shopping_item", DELETE_FAILED_MESSAGE):
                self._store.delete(item_id)
            self._forget(item_id)

    def clear_completed(self) -> int:
        """Delete every completed item and return how many were removed locally."""

        with self._guard.hold():
            with store_failures_as("clear_completed", CLEAR_COMPLETED_FAILED_MESSAGE):
                self._store.delete_completed()
            remaining = [item for item in self._items if not item.completed]
            removed = len(self._items) - len(remaining)
            self._items = remaining
        logger.info("Cleared %s completed shopping item(s)", removed)
        return removed

    def clear_all(self) -> int:
        with self._guard.hold():
            if not self._items:
                return 0
            ids = [item.id for item in self._items]
            with store_failures_as("clear_shopping_list", CLEAR_ALL_FAILED_MESSAGE):
                self._store.delete_ids(ids)
            self._items = []
        logger.info("Cleared %s shopping item(s)", len(ids))
        return len(ids)


__all__ = ["ShoppingListService"]
