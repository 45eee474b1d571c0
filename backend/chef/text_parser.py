"""
Generated Text Parser
Extracts a structured recipe (name, ingredients, instructions) from free-form
model output
"""

import logging
import re

from chef.fallback import has_match, join_first
from chef.models import Recipe

logger = logging.getLogger(__name__)


NAME_MARKER = re.compile(r"recipe name:", re.IGNORECASE)

COOKING_VERBS = [
    "add", "mix", "heat", "cook", "season", "serve", "stir", "combine",
    "preheat", "prepare", "chop", "dice", "slice", "sauté", "bake", "roast",
    "boil", "simmer", "garnish", "place", "put", "pour", "drizzle", "sprinkle",
]
VERB_START = re.compile(r"^(?:" + "|".join(COOKING_VERBS) + r")\b", re.IGNORECASE)

# "1." / "2)"
NUMBER_MARKER = re.compile(r"^\d+[.)]\s*")
# "-" / "*" / "•"
BULLET_MARKER = re.compile(r"^[-•*]\s*")
SENTENCE_SPLIT = re.compile(r"(?<=[.!?])\s+")

METADATA_LABELS = ("recipe name", "ingredients:")

MAX_NAME_CANDIDATE = 80
MAX_NAME_LENGTH = 60
MIN_NAME_LENGTH = 3
MIN_SENTENCE_LENGTH = 15
MAX_STEP_LENGTH = 200
MIN_STEP_LENGTH = 10
MAX_STEPS = 8
MIN_PARSED_STEPS = 3

# Broader keyword sets than the fallback generator; these only drive the
# synthesized steps when the parse is too thin to use
PARSER_MEAT = re.compile(r"meat|beef|chicken|pork|turkey|lamb|fish|salmon|tuna", re.IGNORECASE)
PARSER_PASTA = re.compile(r"pasta|noodle|spaghetti|penne|macaroni", re.IGNORECASE)
PARSER_SPICE = re.compile(r"spice|herb|oregano|basil|thyme|rosemary|paprika", re.IGNORECASE)


def default_recipe_name(ingredients: list[str]) -> str:
    """'Delicious <Ingredient> Dish' from the first ingredient"""
    main = ingredients[0].strip() if ingredients and ingredients[0].strip() else "ingredients"
    return f"Delicious {main[0].upper() + main[1:]} Dish"


def clean_recipe_name(name: str) -> str:
    name = re.sub(r"^\W*", "", name)
    name = re.sub(r"[^\w\s&-]", "", name)
    return name.strip()[:MAX_NAME_LENGTH].strip()


def extract_name(lines: list[str]) -> tuple[str, int]:
    """Find the raw name and the index of the marker line (-1 if none)"""
    for index, line in enumerate(lines):
        match = NAME_MARKER.search(line)
        if not match:
            continue

        inline = line[match.end():].strip()
        if inline:
            return inline, index

        for candidate in lines[index + 1:]:
            candidate = candidate.strip()
            if candidate and len(candidate) < MAX_NAME_CANDIDATE:
                return candidate, index
        return "", index

    return "", -1


def is_metadata(line: str) -> bool:
    lowered = line.lower()
    return any(label in lowered for label in METADATA_LABELS)


def extract_instructions(region: str) -> list[str]:
    """Pick lines that look like cooking steps, in order"""
    steps = []

    for raw_line in region.split("\n"):
        line = raw_line.strip()
        if not line or is_metadata(line):
            continue

        # numbered steps are kept at any length; "1. Heat oil." is a real step
        number = NUMBER_MARKER.match(line)
        if number:
            step = line[number.end():].strip()
            if step and len(step) < MAX_STEP_LENGTH:
                steps.append(step)
            continue

        # bullets are often ingredient lists, so they must read like a step
        bullet = BULLET_MARKER.match(line)
        if bullet:
            step = line[bullet.end():].strip()
            if (
                MIN_SENTENCE_LENGTH <= len(line) < MAX_STEP_LENGTH
                and len(step) >= MIN_STEP_LENGTH
            ):
                steps.append(step)
            continue

        for sentence in SENTENCE_SPLIT.split(line):
            sentence = sentence.strip()
            if not (MIN_SENTENCE_LENGTH <= len(sentence) < MAX_STEP_LENGTH):
                continue
            if VERB_START.match(sentence):
                steps.append(sentence)

        if len(steps) >= MAX_STEPS:
            break

    return steps[:MAX_STEPS]


def synthesize_instructions(ingredients: list[str]) -> list[str]:
    """Ingredient-conditioned steps used when the parse is unusable"""
    instructions = []

    if has_match(ingredients, PARSER_MEAT):
        instructions.append(
            "Cook the meat in a large pan over medium-high heat until browned, about 5-7 minutes."
        )
    else:
        instructions.append("Heat a large pan or pot over medium heat with a tablespoon of oil.")

    instructions.append(
        f"Add {join_first(ingredients)} and cook until fragrant, about 2-3 minutes."
    )

    if has_match(ingredients, PARSER_SPICE):
        instructions.append("Season with your spices and stir well to combine.")

    if has_match(ingredients, PARSER_PASTA):
        instructions.append("Meanwhile, cook pasta separately according to package directions.")
        instructions.append("Combine the pasta with the sauce when both are ready.")
    else:
        instructions.append("Add remaining ingredients and stir well.")
        instructions.append("Let everything simmer together for 10-15 minutes until well combined.")

    instructions.append("Taste and adjust seasoning as needed, then serve hot.")
    return instructions


def parse_recipe_text(raw_text: str, ingredients: list[str]) -> Recipe:
    """Turn free-form generated text into a Recipe.

    Never raises. When the text does not yield at least three usable steps
    the instructions are synthesized from the ingredients instead, so the
    result is always a valid recipe.
    """
    text = raw_text if isinstance(raw_text, str) else ""
    ingredients = list(ingredients)
    logger.debug("Parsing recipe from text: %s", text[:300])

    lines = text.split("\n")
    raw_name, marker_index = extract_name(lines)

    name = clean_recipe_name(raw_name)
    if len(name) < MIN_NAME_LENGTH:
        name = default_recipe_name(ingredients)

    if marker_index >= 0:
        marker_line = lines[marker_index]
        match = NAME_MARKER.search(marker_line)
        inline = marker_line[match.end():].strip()
        following = lines[marker_index + 1:]
        if not inline and raw_name:
            # the name sits on a later line; keep it out of the steps
            following = [line for line in following if line.strip() != raw_name]
        region = "\n".join(following)
    else:
        region = re.sub(re.escape(name), "", text, count=1, flags=re.IGNORECASE)

    instructions = extract_instructions(region)

    if len(instructions) < MIN_PARSED_STEPS:
        logger.debug(
            "Only %d usable steps in generated text, synthesizing instructions",
            len(instructions)
        )
        instructions = synthesize_instructions(ingredients)

    return Recipe(name=name, ingredients=ingredients, instructions=instructions)
