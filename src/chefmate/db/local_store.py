"""Local table store persisted as a single JSON blob on disk."""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from chefmate.db.mapping import Row
from chefmate.errors import StoreError
from chefmate.utils import generate_id, utcnow

logger = logging.getLogger(__name__)


class LocalBlobStore:
    """Durable keyed blob holding one list of rows per table.

    Unlike the remote backends, ids and ``created_at`` timestamps are assigned
    here when rows are inserted. Every table list is kept newest first.
    """

    def __init__(self, path: Path) -> None:
        self._path = Path(path)
        self._lock = threading.RLock()

    @property
    def path(self) -> Path:
        return self._path

    def table(self, name: str) -> "LocalTableStore":
        return LocalTableStore(self, name)

    def read(self) -> Dict[str, List[Row]]:
        with self._lock:
            try:
                raw = self._path.read_text(encoding="utf-8")
            except FileNotFoundError:
                return {}
            except OSError as exc:
                raise StoreError(f"Unable to read {self._path}: {exc}") from exc
            if not raw.strip():
                return {}
            try:
                payload = json.loads(raw)
            except json.JSONDecodeError as exc:
                raise StoreError(f"Corrupt local store {self._path}: {exc}") from exc
            if not isinstance(payload, dict):
                raise StoreError(f"Corrupt local store {self._path}: expected an object")
            return {
                key: [row for row in rows if isinstance(row, dict)]
                for key, rows in payload.items()
                if isinstance(rows, list)
            }

    def write(self, payload: Mapping[str, List[Row]]) -> None:
        with self._lock:
            try:
                self._path.parent.mkdir(parents=True, exist_ok=True)
                fd, tmp_name = tempfile.mkstemp(
                    prefix=f".{self._path.name}.", suffix=".tmp", dir=self._path.parent
                )
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    json.dump(payload, handle, ensure_ascii=False, indent=2)
                os.replace(tmp_name, self._path)
            except (OSError, TypeError, ValueError) as exc:
                raise StoreError(f"Unable to write {self._path}: {exc}") from exc

    def lock(self) -> threading.RLock:
        return self._lock


class LocalTableStore:
    """One table view over a :class:`LocalBlobStore`."""

    def __init__(self, blob: LocalBlobStore, table: str) -> None:
        self._blob = blob
        self.table = table

    def _mutate(self, change) -> Any:
        with self._blob.lock():
            payload = self._blob.read()
            rows = payload.get(self.table, [])
            result, updated_rows = change(rows)
            if updated_rows is not None:
                payload[self.table] = updated_rows
                self._blob.write(payload)
            return result

    def select_all(self) -> List[Row]:
        return [dict(row) for row in self._blob.read().get(self.table, [])]

    def insert(self, rows: Sequence[Mapping[str, Any]]) -> List[Row]:
        created_at = utcnow().isoformat()
        new_rows = [
            {**dict(row), "id": generate_id(), "created_at": created_at}
            for row in rows
        ]

        def change(existing: List[Row]):
            return new_rows, list(reversed(new_rows)) + existing

        inserted = self._mutate(change)
        logger.debug("Inserted %s row(s) into local %s", len(inserted), self.table)
        return [dict(row) for row in inserted]

    def update(self, row_id: str, fields: Mapping[str, Any]) -> Optional[Row]:
        writable = {key: value for key, value in fields.items() if key not in {"id", "created_at"}}

        def change(existing: List[Row]):
            for index, row in enumerate(existing):
                if str(row.get("id")) == row_id:
                    updated = {**row, **writable}
                    rows = list(existing)
                    rows[index] = updated
                    return dict(updated), rows
            return None, None

        return self._mutate(change)

    def delete(self, row_id: str) -> None:
        self.delete_ids([row_id])

    def delete_completed(self) -> None:
        def change(existing: List[Row]):
            kept = [row for row in existing if not row.get("completed")]
            return None, kept if len(kept) != len(existing) else None

        self._mutate(change)

    def delete_ids(self, row_ids: Iterable[str]) -> None:
        ids = {str(row_id) for row_id in row_ids}
        if not ids:
            return

        def change(existing: List[Row]):
            kept = [row for row in existing if str(row.get("id")) not in ids]
            return None, kept if len(kept) != len(existing) else None

        self._mutate(change)


__all__ = ["LocalBlobStore", "LocalTableStore"]
