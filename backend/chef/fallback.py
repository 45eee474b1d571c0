"""
Fallback Recipe Generator
Deterministic, ingredient-aware recipe synthesis that needs no network
"""

import random
import re
from typing import Optional

from chef.models import Recipe


FALLBACK_RECIPE_NAMES = [
    "Delicious Fusion Dish",
    "Chef's Special Creation",
    "Gourmet Masterpiece",
    "Flavorful Combination",
    "Culinary Delight",
]

MEAT_PATTERN = re.compile(r"meat|beef|chicken", re.IGNORECASE)
SPICE_PATTERN = re.compile(r"spice", re.IGNORECASE)
PASTA_PATTERN = re.compile(r"pasta|noodle", re.IGNORECASE)


def has_match(ingredients: list[str], pattern: re.Pattern) -> bool:
    """True if any ingredient matches the keyword pattern"""
    return any(pattern.search(ing) for ing in ingredients)


def join_first(ingredients: list[str], count: int = 3) -> str:
    """Join the leading ingredients for use inside an instruction"""
    return ", ".join(ingredients[:count]) or "your ingredients"


def generate_fallback_recipe(
    ingredients: list[str],
    rng: Optional[random.Random] = None
) -> Recipe:
    """Build a complete recipe from the ingredient list alone.

    Only the display name is random; every instruction is a template
    conditioned on the ingredients. Never raises and never does I/O.
    """
    ingredients = list(ingredients)
    chooser = rng or random
    name = chooser.choice(FALLBACK_RECIPE_NAMES)

    first = ingredients[0] if ingredients else "ingredients"

    if has_match(ingredients, MEAT_PATTERN):
        base_step = "Cook any meat ingredients first until browned, then remove from pan."
    else:
        base_step = "Start by sautéing your base ingredients."

    if has_match(ingredients, SPICE_PATTERN):
        seasoning_step = "Season with your spices and stir well."
    else:
        seasoning_step = "Add seasonings to taste."

    if has_match(ingredients, PASTA_PATTERN):
        finishing_step = "Cook pasta separately and combine with the sauce when ready."
    else:
        finishing_step = "Stir everything together until well combined."

    instructions = [
        f"Preheat your cooking surface and prepare your {first}.",
        "Heat a large pan or pot over medium heat.",
        base_step,
        f"Add {join_first(ingredients)} to the pan and cook until fragrant.",
        seasoning_step,
        "Combine all remaining ingredients and let simmer for 10-15 minutes.",
        finishing_step,
        "Taste and adjust seasoning as needed, then serve hot.",
    ]

    return Recipe(name=name, ingredients=ingredients, instructions=instructions)


# Public name for the inbound boundary
synthesize_fallback = generate_fallback_recipe
