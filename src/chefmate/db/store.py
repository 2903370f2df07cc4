"""Persistence boundary shared by every storage backend."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional, Protocol, Sequence

from chefmate.config import Settings, get_settings
from chefmate.db.mapping import Row

logger = logging.getLogger(__name__)

RECIPES_TABLE = "recipes"
SHOPPING_ITEMS_TABLE = "shopping_items"


class TableStore(Protocol):
    """CRUD access to one entity table.

    Implementations raise :class:`chefmate.errors.StoreError` for every
    failure. Calls addressing an id that does not exist are no-ops.
    """

    table: str

    def select_all(self) -> List[Row]:
        """Return every row, newest ``created_at`` first."""

    def insert(self, rows: Sequence[Mapping[str, Any]]) -> List[Row]:
        """Insert rows and return them with their assigned ``id`` and ``created_at``."""

    def update(self, row_id: str, fields: Mapping[str, Any]) -> Optional[Row]:
        """Apply ``fields`` to one row and return it, or ``None`` if it is absent."""

    def delete(self, row_id: str) -> None:
        ...

    def delete_completed(self) -> None:
        """Delete rows whose ``completed`` flag is set."""

    def delete_ids(self, row_ids: Iterable[str]) -> None:
        ...


@dataclass(frozen=True)
class Stores:
    recipes: TableStore
    shopping_items: TableStore


def open_stores(settings: Settings | None = None) -> Stores:
    """Build the table stores for the configured backend."""

    settings = settings or get_settings()
    backend = settings.store_backend.strip().lower()
    logger.debug("Opening %s stores", backend)

    if backend == "local":
        from chefmate.db.local_store import LocalBlobStore

        blob = LocalBlobStore(settings.local_store_path)
        return Stores(
            recipes=blob.table(RECIPES_TABLE),
            shopping_items=blob.table(SHOPPING_ITEMS_TABLE),
        )

    if backend == "rest":
        from chefmate.db.rest_store import RestTableStore

        if not settings.rest_base_url:
            raise RuntimeError("CHEFMATE_REST_URL must be set for the rest store backend.")
        if not settings.rest_api_key:
            logger.warning("CHEFMATE_REST_API_KEY is not set; table API requests are unauthenticated.")
        return Stores(
            recipes=RestTableStore(
                base_url=settings.rest_base_url,
                table=RECIPES_TABLE,
                api_key=settings.rest_api_key,
                timeout=settings.rest_timeout,
            ),
            shopping_items=RestTableStore(
                base_url=settings.rest_base_url,
                table=SHOPPING_ITEMS_TABLE,
                api_key=settings.rest_api_key,
                timeout=settings.rest_timeout,
            ),
        )

    if backend != "sql":
        raise RuntimeError(f"Unknown store backend '{settings.store_backend}'.")

    from chefmate.db.models import RecipeORM, ShoppingItemORM
    from chefmate.db.sql_store import SqlTableStore

    return Stores(recipes=SqlTableStore(RecipeORM), shopping_items=SqlTableStore(ShoppingItemORM))


__all__ = ["RECIPES_TABLE", "SHOPPING_ITEMS_TABLE", "Stores", "TableStore", "open_stores"]
