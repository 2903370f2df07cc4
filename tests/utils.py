"""Shared helpers for ChefMate tests."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from chefmate.errors import StoreError
from chefmate.models.shopping import ShoppingItem
from chefmate.utils import generate_id, utcnow


def shopping_item(name: str, quantity: float, unit: str = "g", **kwargs: Any) -> ShoppingItem:
    payload: Dict[str, Any] = {"id": generate_id(), "name": name, "quantity": quantity, "unit": unit}
    payload.update(kwargs)
    return ShoppingItem(**payload)


class MemoryTableStore:
    """In-memory table store that can be told to fail on a given call."""

    def __init__(self, table: str = "shopping_items", rows: Optional[Iterable[Mapping[str, Any]]] = None):
        self.table = table
        self.rows: List[Dict[str, Any]] = [dict(row) for row in rows or []]
        self.calls: List[str] = []
        self.fail_on: Optional[str] = None
        self.fail_after = 0

    def _record(self, operation: str) -> None:
        self.calls.append(operation)
        if self.fail_on == operation:
            if self.fail_after <= 0:
                raise StoreError(f"simulated {operation} failure")
            self.fail_after -= 1

    def select_all(self) -> List[Dict[str, Any]]:
        self._record("select_all")
        return [dict(row) for row in self.rows]

    def insert(self, rows: Sequence[Mapping[str, Any]]) -> List[Dict[str, Any]]:
        self._record("insert")
        created = [
            {**dict(row), "id": generate_id(), "created_at": utcnow().isoformat()} for row in rows
        ]
        self.rows = list(reversed(created)) + self.rows
        return [dict(row) for row in created]

    def update(self, row_id: str, fields: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
        self._record("update")
        for row in self.rows:
            if row["id"] == row_id:
                row.update(fields)
                return dict(row)
        return None

    def delete(self, row_id: str) -> None:
        self._record("delete")
        self.rows = [row for row in self.rows if row["id"] != row_id]

    def delete_completed(self) -> None:
        self._record("delete_completed")
        self.rows = [row for row in self.rows if not row.get("completed")]

    def delete_ids(self, row_ids: Iterable[str]) -> None:
        self._record("delete_ids")
        ids = set(row_ids)
        self.rows = [row for row in self.rows if row["id"] not in ids]
