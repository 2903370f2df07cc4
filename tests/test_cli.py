from __future__ import annotations

import json

from typer.testing import CliRunner

from chefmate.cli import app
from chefmate.config import get_settings
from chefmate.db.store import open_stores

runner = CliRunner()


def _invoke(*args):
    return runner.invoke(app, ["--log-level", "WARNING", *args])


def _write_recipe(tmp_path, ingredients):
    path = tmp_path / "recipe.json"
    path.write_text(
        json.dumps({"name": "Pancakes", "servings": 2, "ingredients": ingredients}),
        encoding="utf-8",
    )
    return path


def test_scale_prints_display_quantities(tmp_path):
    path = _write_recipe(
        tmp_path,
        [{"name": "flour", "quantity": 200, "unit": "g"}, {"name": "milk", "quantity": 3, "unit": "dl"}],
    )

    result = _invoke("scale", str(path), "--servings", "3")

    assert result.exit_code == 0
    assert result.stdout.splitlines() == ["flour: 300 g", "milk: 4.50 dl"]


def test_scale_json_output(tmp_path):
    path = _write_recipe(tmp_path, [{"name": "egg", "quantity": 2, "unit": "db"}])

    result = _invoke("scale", str(path), "-s", "4", "--json")

    assert result.exit_code == 0
    [row] = json.loads(result.stdout)
    assert row["name"] == "egg"
    assert row["quantity"] == 4.0
    assert row["from_recipe_id"] == "local"


def test_scale_without_valid_ingredients_fails(tmp_path):
    path = _write_recipe(tmp_path, [{"name": "", "quantity": 2}])

    result = _invoke("scale", str(path), "-s", "4")

    assert result.exit_code == 1


def test_add_and_list_shopping_items():
    recipes = open_stores(get_settings()).recipes
    [row] = recipes.insert(
        [
            {
                "name": "Pancakes",
                "servings": 2,
                "ingredients": [{"name": "flour", "quantity": 200, "unit": "g"}],
            }
        ]
    )

    result = _invoke("add", row["id"], "--servings", "4")
    assert result.exit_code == 0
    assert "[ ] flour: 400 g" in result.stdout

    result = _invoke("list")
    assert result.exit_code == 0
    assert result.stdout.strip() == "[ ] flour: 400 g"


def test_add_unknown_recipe_fails():
    result = _invoke("add", "missing")

    assert result.exit_code == 1


def test_list_empty_and_clear_completed():
    result = _invoke("list")
    assert result.stdout.strip() == "Shopping list is empty."

    result = _invoke("clear-completed")
    assert result.exit_code == 0
    assert "Removed 0 completed item(s)." in result.stdout


def test_scale_missing_file_fails_cleanly(tmp_path):
    result = _invoke("scale", str(tmp_path / "nope.json"), "-s", "2")

    assert result.exit_code == 1
    assert not isinstance(result.exception, FileNotFoundError)


def test_scale_malformed_json_fails_cleanly(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")

    result = _invoke("scale", str(path), "-s", "2")

    assert result.exit_code == 1
    assert not isinstance(result.exception, ValueError)


def test_scale_rejects_non_object_json(tmp_path):
    path = tmp_path / "list.json"
    path.write_text("[1, 2]", encoding="utf-8")

    result = _invoke("scale", str(path), "-s", "2")

    assert result.exit_code == 1
