"""SQLAlchemy models representing ChefMate persistence tables."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import JSON, Boolean, DateTime, Float, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from chefmate.utils import generate_id, utcnow


class Base(DeclarativeBase):
    """Declarative base class for ChefMate ORM models."""


class RecipeORM(Base):
    """Recipe with its ingredient lines stored as a JSON array."""

    __tablename__ = "recipes"

    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False, default=generate_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    course: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    servings: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    ingredients: Mapped[Any] = mapped_column(JSON, nullable=False, default=list)
    instructions: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    external_link: Mapped[Optional[str]] = mapped_column(String(2048), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )


class ShoppingItemORM(Base):
    """Shopping list entry, optionally derived from a recipe."""

    __tablename__ = "shopping_items"

    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False, default=generate_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    quantity: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    unit: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    from_recipe_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )


__all__ = ["Base", "RecipeORM", "ShoppingItemORM"]
