from __future__ import annotations

import pytest

from chefmate.engine.consolidator import QuantityUpdate, consolidate, merge_key
from chefmate.models.shopping import ShoppingCandidate
from tests.utils import shopping_item


def _candidate(name, quantity, unit="g"):
    return ShoppingCandidate(name=name, quantity=quantity, unit=unit)


def test_merge_key_ignores_case_and_whitespace():
    assert merge_key(_candidate(" Flour ", 1, "G ")) == merge_key(_candidate("flour", 1, "g"))
    assert merge_key(_candidate("flour", 1, "g")) != merge_key(_candidate("flour", 1, "kg"))


def test_merge_key_does_not_collide_on_concatenation():
    assert merge_key(_candidate("ab", 1, "c")) != merge_key(_candidate("a", 1, "bc"))


def test_empty_batch_produces_empty_plan():
    plan = consolidate([shopping_item("flour", 100)], [])

    assert plan.is_empty
    assert plan.merged == 0


def test_new_items_become_inserts_in_order():
    plan = consolidate([], [_candidate("flour", 100), _candidate("egg", 2, "db")])

    assert plan.updates == []
    assert [(c.name, c.quantity) for c in plan.inserts] == [("flour", 100), ("egg", 2)]


def test_matching_active_item_is_updated_with_sum():
    existing = shopping_item("Flour", 200, "g")

    plan = consolidate([existing], [_candidate("flour ", 400, "G")])

    assert plan.inserts == []
    assert plan.updates == [QuantityUpdate(existing.id, 600)]
    assert plan.merged == 1


def test_completed_items_are_never_merge_targets():
    done = shopping_item("flour", 200, completed=True)

    plan = consolidate([done], [_candidate("flour", 100)])

    assert plan.updates == []
    assert [(c.name, c.quantity) for c in plan.inserts] == [("flour", 100)]


def test_different_units_stay_separate():
    existing = shopping_item("milk", 1, "l")

    plan = consolidate([existing], [_candidate("milk", 2, "dl")])

    assert plan.updates == []
    assert len(plan.inserts) == 1


def test_duplicates_within_batch_collapse_into_one_insert():
    plan = consolidate([], [_candidate("sugar", 50), _candidate("Sugar", 25), _candidate("sugar", 5)])

    assert len(plan.inserts) == 1
    assert plan.inserts[0].name == "sugar"
    assert plan.inserts[0].quantity == pytest.approx(80)
    assert plan.merged == 2


def test_repeated_matches_produce_single_update_with_final_total():
    existing = shopping_item("egg", 2, "db")

    plan = consolidate([existing], [_candidate("egg", 3, "db"), _candidate("EGG", 1, "db")])

    assert plan.updates == [QuantityUpdate(existing.id, 6)]


def test_first_active_match_wins():
    first = shopping_item("salt", 1)
    second = shopping_item("salt", 5)

    plan = consolidate([first, second], [_candidate("salt", 2)])

    assert plan.updates == [QuantityUpdate(first.id, 3)]


def test_existing_list_is_not_modified():
    existing = [shopping_item("flour", 200)]
    snapshot = [item.model_dump() for item in existing]

    consolidate(existing, [_candidate("flour", 100)])

    assert [item.model_dump() for item in existing] == snapshot


def _apply(existing, plan):
    totals = dict(plan.updates)
    items = [item.model_copy(update={"quantity": totals.get(item.id, item.quantity)}) for item in existing]
    return [shopping_item(c.name, c.quantity, c.unit) for c in plan.inserts] + items


def _totals(items):
    return sorted((merge_key(item), item.quantity, item.completed) for item in items)


def test_splitting_a_batch_gives_the_same_totals():
    existing = [shopping_item("flour", 200), shopping_item("milk", 1, "l", completed=True)]
    batch = [
        _candidate("flour", 100),
        _candidate("egg", 2, "db"),
        _candidate("milk", 2, "l"),
        _candidate("Egg", 1, "DB"),
    ]

    at_once = _apply(existing, consolidate(existing, batch))
    first = _apply(existing, consolidate(existing, batch[:2]))
    in_two = _apply(first, consolidate(first, batch[2:]))

    assert _totals(at_once) == _totals(in_two)
