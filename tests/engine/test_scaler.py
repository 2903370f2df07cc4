from __future__ import annotations

import pytest

from chefmate.engine.scaler import scale_factor, scale_recipe
from chefmate.errors import NoValidIngredientsError
from chefmate.models.recipe import Ingredient, Recipe


def _recipe(servings, ingredients):
    return Recipe(id="r1", name="Test", servings=servings, ingredients=ingredients)


def test_scale_recipe_doubles_quantities(pancake_recipe):
    candidates = scale_recipe(pancake_recipe, 4)

    assert [(c.name, c.quantity, c.unit) for c in candidates] == [
        ("flour", pytest.approx(400.0), "g"),
        ("egg", pytest.approx(4.0), "db"),
    ]
    assert all(c.from_recipe_id == "recipe-pancakes" for c in candidates)


def test_scale_recipe_keeps_ingredient_order_and_trims_text():
    recipe = _recipe(
        3,
        [
            Ingredient(name="  salt ", quantity=3, unit=" g "),
            Ingredient(name="water", quantity="1,5", unit="l"),
        ],
    )

    candidates = scale_recipe(recipe, 1)

    assert [c.name for c in candidates] == ["salt", "water"]
    assert candidates[0].unit == "g"
    assert candidates[0].quantity == pytest.approx(1.0)
    assert candidates[1].quantity == pytest.approx(0.5)


@pytest.mark.parametrize("base", [0, -2])
def test_non_positive_base_counts_as_one_serving(base):
    recipe = _recipe(base, [Ingredient(name="rice", quantity=100, unit="g")])

    candidates = scale_recipe(recipe, 3)

    assert candidates[0].quantity == pytest.approx(300.0)


def test_desired_servings_clamped_to_one():
    assert scale_factor(4, 0) == pytest.approx(0.25)
    assert scale_factor(4, -5) == pytest.approx(0.25)
    assert scale_factor(0, 0) == pytest.approx(1.0)


def test_invalid_ingredients_are_skipped():
    recipe = _recipe(
        2,
        [
            Ingredient(name="", quantity=5, unit="g"),
            Ingredient(name="   ", quantity=5, unit="g"),
            Ingredient(name="zero", quantity=0, unit="g"),
            Ingredient(name="negative", quantity=-1, unit="g"),
            Ingredient(name="garbage", quantity="lots", unit="g"),
            Ingredient(name="infinite", quantity=float("inf"), unit="g"),
            Ingredient(name="milk", quantity=2, unit="dl"),
        ],
    )

    candidates = scale_recipe(recipe, 2)

    assert [c.name for c in candidates] == ["milk"]


def test_no_valid_ingredients_raises():
    recipe = _recipe(2, [Ingredient(name="", quantity=1), Ingredient(name="salt", quantity=0)])

    with pytest.raises(NoValidIngredientsError) as excinfo:
        scale_recipe(recipe, 4)

    assert excinfo.value.recipe_id == "r1"


def test_empty_recipe_raises():
    with pytest.raises(NoValidIngredientsError):
        scale_recipe(_recipe(2, []), 2)


def test_scaling_does_not_modify_recipe(pancake_recipe):
    before = pancake_recipe.model_dump()

    scale_recipe(pancake_recipe, 10)

    assert pancake_recipe.model_dump() == before


def test_scaling_to_base_servings_returns_original_quantities(pancake_recipe):
    candidates = scale_recipe(pancake_recipe, pancake_recipe.servings)

    assert [c.quantity for c in candidates] == [200.0, 2.0]


@pytest.mark.parametrize("desired", [1, 3, 7, 12])
def test_quantities_are_proportional(pancake_recipe, desired):
    candidates = scale_recipe(pancake_recipe, desired)

    originals = [i.quantity for i in pancake_recipe.ingredients]
    expected = [q * desired / max(pancake_recipe.servings, 1) for q in originals]
    assert [c.quantity for c in candidates] == pytest.approx(expected)
