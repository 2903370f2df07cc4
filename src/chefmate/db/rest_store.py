"""Remote table store speaking the PostgREST table API (e.g. a Supabase project)."""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

import httpx

from chefmate.db.mapping import Row
from chefmate.errors import StoreError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


class RestTableStore:
    """Table store whose ids and timestamps are assigned by the remote server."""

    def __init__(
        self,
        *,
        base_url: str,
        table: str,
        api_key: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.table = table
        self._endpoint = f"{base_url.rstrip('/')}/rest/v1/{table}"
        self._api_key = api_key
        self._timeout = timeout

    def _headers(self) -> Dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "Prefer": "return=representation",
        }
        if self._api_key:
            headers["apikey"] = self._api_key
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    def _request(
        self,
        method: str,
        *,
        params: Optional[Dict[str, str]] = None,
        payload: Any = None,
    ) -> Any:
        try:
            with httpx.Client(timeout=self._timeout) as client:
                response = client.request(
                    method,
                    self._endpoint,
                    params=params,
                    json=payload,
                    headers=self._headers(),
                )
                response.raise_for_status()
        except httpx.HTTPError as exc:
            raise StoreError(f"{method} {self.table} failed: {exc}") from exc

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise StoreError(f"{method} {self.table} returned invalid JSON: {exc}") from exc

    def _rows(self, body: Any, method: str) -> List[Row]:
        if body is None:
            return []
        if not isinstance(body, list):
            raise StoreError(f"{method} {self.table} returned {type(body).__name__}, expected a list")
        return [dict(row) for row in body if isinstance(row, dict)]

    def select_all(self) -> List[Row]:
        body = self._request("GET", params={"select": "*", "order": "created_at.desc"})
        return self._rows(body, "GET")

    def insert(self, rows: Sequence[Mapping[str, Any]]) -> List[Row]:
        payload = [dict(row) for row in rows]
        if not payload:
            return []
        inserted = self._rows(self._request("POST", payload=payload), "POST")
        logger.debug("Inserted %s row(s) into remote %s", len(inserted), self.table)
        return inserted

    def update(self, row_id: str, fields: Mapping[str, Any]) -> Optional[Row]:
        rows = self._rows(
            self._request("PATCH", params={"id": f"eq.{row_id}"}, payload=dict(fields)),
            "PATCH",
        )
        return rows[0] if rows else None

    def delete(self, row_id: str) -> None:
        self._request("DELETE", params={"id": f"eq.{row_id}"})

    def delete_completed(self) -> None:
        self._request("DELETE", params={"completed": "eq.true"})

    def delete_ids(self, row_ids: Iterable[str]) -> None:
        ids = [str(row_id) for row_id in row_ids]
        if not ids:
            return
        self._request("DELETE", params={"id": f"in.({','.join(ids)})"})


__all__ = ["RestTableStore"]
