"""
Tests for the ingredient list
"""

from chef.ingredients import DUPLICATE_INGREDIENT, EMPTY_INGREDIENT, IngredientList


def test_add_trims_and_keeps_order():
    ingredients = IngredientList()

    assert ingredients.add("  chicken ")
    assert ingredients.add("rice")

    assert ingredients.snapshot() == ["chicken", "rice"]
    assert ingredients.error_message == ""


def test_rejects_empty_and_case_insensitive_duplicates():
    ingredients = IngredientList(["Tomato"])

    assert not ingredients.add("   ")
    assert ingredients.error_message == EMPTY_INGREDIENT

    assert not ingredients.add("tomato")
    assert ingredients.error_message == DUPLICATE_INGREDIENT
    assert len(ingredients) == 1


def test_remove_and_clear():
    ingredients = IngredientList(["a", "b", "c"])

    ingredients.remove(1)
    ingredients.remove(10)
    assert list(ingredients) == ["a", "c"]

    ingredients.clear()
    assert ingredients.snapshot() == []


def test_snapshot_is_a_copy():
    ingredients = IngredientList(["egg"])
    snapshot = ingredients.snapshot()

    ingredients.add("milk")

    assert snapshot == ["egg"]
