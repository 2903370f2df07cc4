"""Apply consolidation plans through the persistence boundary."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Dict, Generator, List, Sequence

from chefmate import metrics
from chefmate.db.mapping import shopping_item_from_row, shopping_row_from_candidate
from chefmate.db.store import TableStore
from chefmate.engine.consolidator import ConsolidationPlan
from chefmate.errors import MissingRowError, PersistenceFailure, StoreError
from chefmate.models.shopping import ShoppingItem

logger = logging.getLogger(__name__)

SYNC_FAILED_MESSAGE = "Could not update the shopping list. Please try again."


@contextmanager
def store_failures_as(operation: str, user_message: str) -> Generator[None, None, None]:
    """Turn a :class:`StoreError` raised inside the block into a :class:`PersistenceFailure`."""

    try:
        yield
    except StoreError as exc:
        metrics.PERSISTENCE_FAILURES.labels(operation=operation).inc()
        logger.error(
            "Persistence failure during %s: %s",
            operation,
            exc,
            exc_info=True,
            extra={"operation": operation},
        )
        raise PersistenceFailure(user_message, operation=operation) from exc


class StoreReconciler:
    """Write a :class:`ConsolidationPlan` row by row and rebuild the list from the results.

    The list passed to :meth:`apply` is never modified. When any write fails,
    rows already written for the batch are put back, so both the store and
    the caller's list end up as they were before the batch.
    """

    def __init__(self, store: TableStore) -> None:
        self._store = store

    def apply(self, current: Sequence[ShoppingItem], plan: ConsolidationPlan) -> List[ShoppingItem]:
        if plan.is_empty:
            return list(current)

        previous = {item.id: item for item in current}
        replaced: Dict[str, ShoppingItem] = {}
        inserted: List[ShoppingItem] = []

        with store_failures_as("consolidate", SYNC_FAILED_MESSAGE):
            try:
                for update in plan.updates:
                    row = self._store.update(update.item_id, {"quantity": update.quantity})
                    if row is None:
                        raise MissingRowError(update.item_id)
                    replaced[update.item_id] = shopping_item_from_row(row)
                for candidate in plan.inserts:
                    rows = self._store.insert([shopping_row_from_candidate(candidate)])
                    if not rows:
                        raise StoreError(f"Insert of '{candidate.name}' returned no row")
                    inserted.extend(shopping_item_from_row(row) for row in rows)
            except StoreError:
                logger.warning(
                    "Shopping list batch aborted after %s of %s update(s) and %s of %s insert(s)",
                    len(replaced),
                    len(plan.updates),
                    len(inserted),
                    len(plan.inserts),
                )
                self._compensate([previous[item_id] for item_id in replaced], inserted)
                raise

        metrics.CONSOLIDATED_ITEMS.labels(outcome="merged").inc(plan.merged)
        metrics.CONSOLIDATED_ITEMS.labels(outcome="inserted").inc(len(inserted))
        logger.info(
            "Shopping list synced updated=%s inserted=%s merged=%s",
            len(replaced),
            len(inserted),
            plan.merged,
        )
        # Each insert is its own call, so the last one is the newest row.
        return list(reversed(inserted)) + [replaced.get(item.id, item) for item in current]

    def _compensate(self, restore: Sequence[ShoppingItem], inserted: Sequence[ShoppingItem]) -> None:
        for item in inserted:
            try:
                self._store.delete(item.id)
            except StoreError:
                logger.warning("Could not remove shopping item %s after failed batch", item.id, exc_info=True)
        for item in restore:
            try:
                self._store.update(item.id, {"quantity": item.quantity})
            except StoreError:
                logger.warning(
                    "Could not restore quantity of shopping item %s after failed batch",
                    item.id,
                    exc_info=True,
                )


__all__ = ["SYNC_FAILED_MESSAGE", "StoreReconciler", "store_failures_as"]
