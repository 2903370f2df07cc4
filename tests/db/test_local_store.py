from __future__ import annotations

import json

import pytest

from chefmate.db.local_store import LocalBlobStore
from chefmate.errors import StoreError


@pytest.fixture()
def blob(tmp_path):
    return LocalBlobStore(tmp_path / "store" / "chefmate.json")


def test_missing_file_reads_as_empty(blob):
    assert blob.table("shopping_items").select_all() == []


def test_insert_persists_rows_newest_first(blob):
    table = blob.table("shopping_items")

    table.insert([{"name": "flour", "quantity": 200, "unit": "g"}])
    inserted = table.insert([{"name": "egg", "quantity": 2}, {"name": "milk", "quantity": 1}])

    assert all(row["id"] and row["created_at"] for row in inserted)
    assert [row["name"] for row in table.select_all()] == ["milk", "egg", "flour"]

    on_disk = json.loads(blob.path.read_text(encoding="utf-8"))
    assert [row["name"] for row in on_disk["shopping_items"]] == ["milk", "egg", "flour"]


def test_tables_are_independent(blob):
    blob.table("recipes").insert([{"name": "Soup"}])

    assert blob.table("shopping_items").select_all() == []
    assert [row["name"] for row in blob.table("recipes").select_all()] == ["Soup"]


def test_update_keeps_id_and_returns_none_when_missing(blob):
    table = blob.table("shopping_items")
    [row] = table.insert([{"name": "salt", "quantity": 1}])

    updated = table.update(row["id"], {"quantity": 5, "id": "other"})

    assert updated["id"] == row["id"]
    assert updated["quantity"] == 5
    assert table.update("missing", {"quantity": 1}) is None


def test_delete_operations(blob):
    table = blob.table("shopping_items")
    rows = table.insert(
        [
            {"name": "a", "completed": False},
            {"name": "b", "completed": True},
            {"name": "c", "completed": False},
        ]
    )
    ids = {row["name"]: row["id"] for row in rows}

    table.delete_completed()
    assert sorted(row["name"] for row in table.select_all()) == ["a", "c"]

    table.delete(ids["a"])
    table.delete_ids([ids["c"], "missing"])
    assert table.select_all() == []


def test_corrupt_file_raises_store_error(blob):
    blob.path.parent.mkdir(parents=True, exist_ok=True)
    blob.path.write_text("{not json", encoding="utf-8")

    with pytest.raises(StoreError):
        blob.table("shopping_items").select_all()
