"""Shared pytest fixtures for the ChefMate test suite."""

from __future__ import annotations

from typing import Generator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from chefmate.config import get_settings
from chefmate.db.repository import reset_repository_state
from chefmate.models.recipe import Ingredient, Recipe
from chefmate.server.app import create_app
from tests.utils import MemoryTableStore


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Ensure each test uses an isolated SQLite database and local store location."""

    monkeypatch.setenv("CHEFMATE_DATABASE_PATH", str(tmp_path / "test_chefmate.db"))
    monkeypatch.setenv("CHEFMATE_LOCAL_STORE_PATH", str(tmp_path / "test_chefmate.json"))
    monkeypatch.setenv("CHEFMATE_STORE_BACKEND", "sql")
    get_settings.cache_clear()
    reset_repository_state()
    yield
    reset_repository_state()
    get_settings.cache_clear()


@pytest.fixture()
def app() -> Generator[FastAPI, None, None]:
    """Create a new FastAPI app instance for each test and reset overrides."""

    application = create_app()
    yield application
    application.dependency_overrides.clear()


@pytest.fixture()
def client(app) -> TestClient:
    """Return a test client bound to the FastAPI app."""

    return TestClient(app)


@pytest.fixture()
def pancake_recipe() -> Recipe:
    """Two-serving recipe from the end-to-end scaling example."""

    return Recipe(
        id="recipe-pancakes",
        name="Pancakes",
        servings=2,
        ingredients=[
            Ingredient(name="flour", quantity=200, unit="g"),
            Ingredient(name="egg", quantity=2, unit="db"),
        ],
    )


@pytest.fixture()
def memory_store() -> MemoryTableStore:
    return MemoryTableStore()
