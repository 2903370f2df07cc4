"""Merge incoming shopping candidates into an existing list."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, NamedTuple, Optional, Protocol, Sequence

from chefmate.models.shopping import ShoppingCandidate, ShoppingItem

MERGE_KEY_SEPARATOR = "\u0000"


class _Keyed(Protocol):
    name: str
    unit: str


def merge_key(item: _Keyed) -> str:
    """Return the case-insensitive (name, unit) identity of a shopping entry."""

    name = (item.name or "").strip().lower()
    unit = (item.unit or "").strip().lower()
    return f"{name}{MERGE_KEY_SEPARATOR}{unit}"


class QuantityUpdate(NamedTuple):
    item_id: str
    quantity: float


@dataclass
class ConsolidationPlan:
    """Writes needed to fold a batch of candidates into the list."""

    updates: List[QuantityUpdate] = field(default_factory=list)
    inserts: List[ShoppingCandidate] = field(default_factory=list)
    merged: int = 0

    @property
    def is_empty(self) -> bool:
        return not self.updates and not self.inserts


@dataclass
class _Slot:
    key: str
    quantity: float
    completed: bool
    item_id: Optional[str] = None
    candidate: Optional[ShoppingCandidate] = None


def consolidate(
    existing: Sequence[ShoppingItem],
    incoming: Iterable[ShoppingCandidate],
) -> ConsolidationPlan:
    """Plan how ``incoming`` merges into ``existing``.

    Candidates are processed in order. Each one is added to the first active
    entry sharing its merge key, including entries created earlier in the same
    batch; otherwise it becomes a new entry. Completed entries are never merge
    targets. ``existing`` is not modified.
    """

    working = [
        _Slot(
            key=merge_key(item),
            quantity=item.quantity,
            completed=item.completed,
            item_id=item.id,
        )
        for item in existing
    ]
    pending: List[_Slot] = []
    touched: dict[str, _Slot] = {}
    merged = 0

    for candidate in incoming:
        key = merge_key(candidate)
        target = next(
            (slot for slot in working if not slot.completed and slot.key == key),
            None,
        )
        if target is None:
            slot = _Slot(key=key, quantity=candidate.quantity, completed=False, candidate=candidate)
            working.append(slot)
            pending.append(slot)
            continue

        target.quantity += candidate.quantity
        merged += 1
        if target.item_id is not None:
            touched[target.item_id] = target

    return ConsolidationPlan(
        updates=[QuantityUpdate(item_id, slot.quantity) for item_id, slot in touched.items()],
        inserts=[
            slot.candidate.model_copy(update={"quantity": slot.quantity})
            for slot in pending
            if slot.candidate is not None
        ],
        merged=merged,
    )


__all__ = ["MERGE_KEY_SEPARATOR", "ConsolidationPlan", "QuantityUpdate", "consolidate", "merge_key"]
