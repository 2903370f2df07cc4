"""SQLite table store backed by the SQLAlchemy ORM."""
# mypy: ignore-errors

from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable, List, Mapping, Optional, Sequence

from sqlalchemy import delete, select

from chefmate.db.mapping import Row
from chefmate.db.models import Base
from chefmate.db.repository import session_scope
from chefmate.errors import StoreError
from chefmate.utils import generate_id, utcnow

# Columns assigned by the store rather than by callers.
_ASSIGNED_COLUMNS = {"seq", "id", "created_at"}


class SqlTableStore:
    """Table store whose ids and timestamps are assigned on insert."""

    def __init__(self, orm_cls: type[Base]) -> None:
        self._orm = orm_cls
        self.table: str = orm_cls.__tablename__
        self._columns = {column.key for column in orm_cls.__table__.columns}

    def _to_row(self, instance: Base) -> Row:
        row: Row = {}
        for column in self._columns - {"seq"}:
            value = getattr(instance, column)
            row[column] = value.isoformat() if isinstance(value, datetime) else value
        return row

    def _writable(self, fields: Mapping[str, Any]) -> dict[str, Any]:
        return {
            key: value
            for key, value in fields.items()
            if key in self._columns and key not in _ASSIGNED_COLUMNS
        }

    def select_all(self) -> List[Row]:
        orm = self._orm
        with session_scope(f"select from {self.table}") as session:
            rows = (
                session.execute(select(orm).order_by(orm.created_at.desc(), orm.seq.desc()))
                .scalars()
                .all()
            )
            return [self._to_row(row) for row in rows]

    def insert(self, rows: Sequence[Mapping[str, Any]]) -> List[Row]:
        with session_scope(f"insert into {self.table}") as session:
            instances = [
                self._orm(id=generate_id(), created_at=utcnow(), **self._writable(row))
                for row in rows
            ]
            session.add_all(instances)
            session.flush()
            return [self._to_row(instance) for instance in instances]

    def update(self, row_id: str, fields: Mapping[str, Any]) -> Optional[Row]:
        orm = self._orm
        with session_scope(f"update of {self.table} {row_id}") as session:
            instance = session.execute(select(orm).where(orm.id == row_id)).scalar_one_or_none()
            if instance is None:
                return None
            for key, value in self._writable(fields).items():
                setattr(instance, key, value)
            session.flush()
            return self._to_row(instance)

    def delete(self, row_id: str) -> None:
        self.delete_ids([row_id])

    def delete_completed(self) -> None:
        orm = self._orm
        if "completed" not in self._columns:
            raise StoreError(f"{self.table} has no completed column")
        with session_scope(f"delete completed from {self.table}") as session:
            session.execute(delete(orm).where(orm.completed.is_(True)))

    def delete_ids(self, row_ids: Iterable[str]) -> None:
        orm = self._orm
        ids = [str(row_id) for row_id in row_ids]
        if not ids:
            return
        with session_scope(f"delete from {self.table}") as session:
            session.execute(delete(orm).where(orm.id.in_(ids)))


__all__ = ["SqlTableStore"]
