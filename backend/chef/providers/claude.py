"""
Claude Provider
Structured-JSON recipe generation via the Anthropic Messages API
"""

import json
import logging
import re
from typing import Optional

import httpx

from config import (
    CLAUDE_API_KEY,
    CLAUDE_API_URL,
    CLAUDE_MODEL,
    CLAUDE_MAX_TOKENS,
    ANTHROPIC_VERSION,
    CLAUDE_KEY_HINT,
    PROVIDER_TIMEOUT
)
from chef.cancellation import CancelToken
from chef.errors import MalformedResponse
from chef.models import Recipe
from chef.providers.base import AttemptBudget, RecipeProvider

logger = logging.getLogger(__name__)


RECIPE_PROMPT = """You are Chef Claude, a professional chef. Generate a delicious, creative recipe using these ingredients: {ingredients}.

Please provide:
1. An appealing recipe name (keep it concise, max 6 words)
2. A list of all ingredients needed (include the provided ingredients plus any common pantry staples like salt, pepper, oil if needed)
3. Clear, step-by-step cooking instructions (6-8 steps)

Format your response as JSON with this structure:
{{
    "name": "Recipe Name",
    "ingredients": ["ingredient 1", "ingredient 2", ...],
    "instructions": ["Step 1", "Step 2", ...]
}}"""

DEFAULT_NAME = "Chef's Special Creation"
FENCED_JSON = re.compile(r"```(?:json)?\s*(\{[\s\S]*\})\s*```")
BARE_JSON = re.compile(r"\{[\s\S]*\}")
NUMBERED_LINE = re.compile(r"^\d+\.")


def extract_json_object(content: str) -> Optional[dict]:
    """Find the recipe JSON in a fenced block or the outermost {...} span"""
    fenced = FENCED_JSON.search(content)
    if fenced:
        candidate = fenced.group(1)
    else:
        bare = BARE_JSON.search(content)
        candidate = bare.group(0) if bare else content

    try:
        data = json.loads(candidate)
    except (json.JSONDecodeError, TypeError):
        return None
    return data if isinstance(data, dict) else None


def recipe_from_lines(content: str, ingredients: list[str]) -> Recipe:
    """Best-effort structure when the reply is not valid JSON"""
    lines = [line.strip() for line in content.split("\n") if line.strip()]

    name = next(
        (line for line in lines if "name" in line or len(line) < 50),
        DEFAULT_NAME
    )

    instructions = [
        line for line in lines
        if NUMBERED_LINE.match(line)
        or "step" in line.lower()
        or (len(line) > 20 and ":" not in line)
    ][:8]
    instructions = [re.sub(r"^\d+\.\s*", "", line).strip() for line in instructions]

    return Recipe(name=name, ingredients=list(ingredients), instructions=instructions)


def parse_claude_content(content: str, ingredients: list[str]) -> Recipe:
    """Turn the model's text reply into a Recipe"""
    data = extract_json_object(content)
    if data is None:
        logger.info("Claude reply was not valid JSON, falling back to line extraction")
        return recipe_from_lines(content, ingredients)
    return Recipe.from_dict(data, default_ingredients=ingredients)


class ClaudeProvider(RecipeProvider):
    """Asks Claude for a JSON recipe"""

    provider_id = "claude"
    credential_hint = CLAUDE_KEY_HINT

    def __init__(
        self,
        api_key: Optional[str] = CLAUDE_API_KEY,
        model: str = CLAUDE_MODEL,
        max_tokens: int = CLAUDE_MAX_TOKENS,
        timeout: float = PROVIDER_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        super().__init__(api_key, timeout=timeout, transport=transport)
        self.model = model
        self.max_tokens = max_tokens

    async def call(
        self,
        ingredients: list[str],
        budget: AttemptBudget,
        cancel_token: CancelToken
    ) -> Recipe:
        self.require_credentials()

        headers = {
            "Content-Type": "application/json",
            "x-api-key": self.api_key,
            "anthropic-version": ANTHROPIC_VERSION
        }

        payload = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "messages": [
                {
                    "role": "user",
                    "content": RECIPE_PROMPT.format(ingredients=", ".join(ingredients))
                }
            ]
        }

        response = await self._post_with_retry(
            CLAUDE_API_URL, headers, payload, budget, cancel_token, label="Claude"
        )

        try:
            data = response.json()
            content = data["content"][0]["text"]
        except (ValueError, KeyError, IndexError, TypeError):
            raise MalformedResponse("Invalid JSON response from Claude API")

        if not isinstance(content, str) or not content.strip():
            raise MalformedResponse("Empty response from Claude API")

        recipe = parse_claude_content(content, ingredients)
        if not recipe.is_valid():
            raise MalformedResponse("Invalid recipe format received from Claude API")
        return recipe
