from __future__ import annotations

import pytest
from sqlalchemy import text

from chefmate.db.models import RecipeORM, ShoppingItemORM
from chefmate.db.repository import session_scope
from chefmate.db.sql_store import SqlTableStore
from chefmate.errors import StoreError


def test_insert_assigns_ids_and_select_returns_newest_first():
    store = SqlTableStore(ShoppingItemORM)

    first = store.insert([{"name": "flour", "quantity": 200, "unit": "g"}])
    second = store.insert([{"name": "egg", "quantity": 2, "unit": "db"}])

    assert first[0]["id"] and second[0]["id"]
    assert first[0]["id"] != second[0]["id"]
    assert first[0]["created_at"]
    assert [row["name"] for row in store.select_all()] == ["egg", "flour"]


def test_insert_ignores_store_assigned_columns():
    store = SqlTableStore(ShoppingItemORM)

    [row] = store.insert([{"id": "mine", "seq": 99, "name": "salt", "bogus": 1}])

    assert row["id"] != "mine"
    assert "bogus" not in row
    assert "seq" not in row


def test_update_returns_row_or_none():
    store = SqlTableStore(ShoppingItemORM)
    [row] = store.insert([{"name": "milk", "quantity": 1, "unit": "l"}])

    updated = store.update(row["id"], {"quantity": 3, "completed": True})

    assert updated["quantity"] == 3
    assert updated["completed"] is True
    assert store.update("missing", {"quantity": 1}) is None


def test_delete_variants():
    store = SqlTableStore(ShoppingItemORM)
    rows = store.insert(
        [
            {"name": "a", "quantity": 1},
            {"name": "b", "quantity": 1, "completed": True},
            {"name": "c", "quantity": 1},
            {"name": "d", "quantity": 1},
        ]
    )
    ids = {row["name"]: row["id"] for row in rows}

    store.delete(ids["a"])
    store.delete("missing")
    store.delete_completed()
    assert sorted(row["name"] for row in store.select_all()) == ["c", "d"]

    store.delete_ids([ids["c"], "missing"])
    assert [row["name"] for row in store.select_all()] == ["d"]


def test_recipe_rows_round_trip_ingredients():
    store = SqlTableStore(RecipeORM)

    [row] = store.insert(
        [
            {
                "name": "Pancakes",
                "course": "breakfast",
                "servings": 2,
                "ingredients": [{"id": "i1", "name": "flour", "quantity": 200.0, "unit": "g"}],
            }
        ]
    )

    [stored] = store.select_all()
    assert stored["id"] == row["id"]
    assert stored["ingredients"][0]["name"] == "flour"
    assert stored["course"] == "breakfast"


def test_session_scope_translates_database_errors():
    with pytest.raises(StoreError) as excinfo:
        with session_scope("raw select") as session:
            session.execute(text("SELECT * FROM no_such_table"))

    assert "raw select failed" in str(excinfo.value)
