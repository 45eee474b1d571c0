"""
Hugging Face Provider
Free-text completion via the Hugging Face Inference API, parsed into a recipe
"""

import logging
from typing import Optional

import httpx

from config import (
    HUGGINGFACE_API_KEY,
    HUGGINGFACE_BASE_URL,
    HUGGINGFACE_MODELS,
    HUGGINGFACE_MAX_NEW_TOKENS,
    HUGGINGFACE_TEMPERATURE,
    HUGGINGFACE_TOP_P,
    HUGGINGFACE_KEY_HINT,
    PROVIDER_TIMEOUT
)
from chef.cancellation import CancelToken
from chef.errors import (
    Deprecated,
    MalformedResponse,
    ProviderError,
    RateLimited,
    UpstreamError
)
from chef.models import Recipe
from chef.providers.base import AttemptBudget, DEPRECATION_NOTICE, RecipeProvider
from chef.text_parser import parse_recipe_text

logger = logging.getLogger(__name__)


PRIMING_PROMPT = "Create a recipe with these ingredients: {ingredients}\n\nRecipe Name:"
PROBE_PAYLOAD = {"inputs": "test", "parameters": {"max_new_tokens": 5}}
MIN_GENERATED_LENGTH = 10


def extract_generated_text(data) -> str:
    """Handle the different response formats the inference API returns"""
    if isinstance(data, list) and data and isinstance(data[0], dict):
        first = data[0]
        for key in ("generated_text", "text", "summary_text"):
            if isinstance(first.get(key), str) and first[key]:
                return first[key]
        return ""
    if isinstance(data, dict) and isinstance(data.get("generated_text"), str):
        return data["generated_text"]
    return ""


class HuggingFaceProvider(RecipeProvider):
    """Tries a list of small text-generation models in order"""

    provider_id = "huggingface"
    credential_hint = HUGGINGFACE_KEY_HINT

    def __init__(
        self,
        api_key: Optional[str] = HUGGINGFACE_API_KEY,
        models: Optional[list[str]] = None,
        timeout: float = PROVIDER_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        super().__init__(api_key, timeout=timeout, transport=transport)
        self.models = list(models or HUGGINGFACE_MODELS)

    @property
    def headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json"
        }

    def model_url(self, model: str) -> str:
        return f"{HUGGINGFACE_BASE_URL}/{model}"

    async def check_deprecation(self, cancel_token: CancelToken) -> None:
        """Cheap probe so a shut-down API fails fast.

        Only an explicit 410 "no longer supported" counts; anything else,
        network errors included, is left for the real call to find out.
        """
        try:
            response = await self._post(
                self.model_url(self.models[0]), self.headers, PROBE_PAYLOAD, cancel_token
            )
        except UpstreamError as e:
            logger.debug("Hugging Face probe failed, continuing: %s", e)
            return

        if response.status_code == 410 and DEPRECATION_NOTICE in response.text:
            raise Deprecated(
                "Hugging Face free inference API has been deprecated. "
                "Using intelligent fallback recipe generation instead."
            )

    async def call(
        self,
        ingredients: list[str],
        budget: AttemptBudget,
        cancel_token: CancelToken
    ) -> Recipe:
        self.require_credentials()
        if not self.models:
            raise UpstreamError(None, "No Hugging Face models configured")

        await self.check_deprecation(cancel_token)

        prompt = PRIMING_PROMPT.format(ingredients=", ".join(ingredients))
        payload = {
            "inputs": prompt,
            "parameters": {
                "max_new_tokens": HUGGINGFACE_MAX_NEW_TOKENS,
                "return_full_text": False,
                "temperature": HUGGINGFACE_TEMPERATURE,
                "top_p": HUGGINGFACE_TOP_P,
                "do_sample": True
            }
        }

        last_error: ProviderError = UpstreamError(None, "No Hugging Face model produced a recipe")

        for model in self.models:
            cancel_token.raise_if_cancelled()
            logger.info("Trying Hugging Face model: %s", model)

            try:
                recipe = await self._generate_with_model(
                    model, prompt, payload, ingredients, budget, cancel_token
                )
            except (Deprecated, RateLimited):
                raise
            except ProviderError as e:
                logger.warning("Model %s failed: %s", model, e)
                last_error = e
                continue

            logger.info("Successfully generated recipe from %s", model)
            return recipe

        raise last_error

    async def _generate_with_model(
        self,
        model: str,
        prompt: str,
        payload: dict,
        ingredients: list[str],
        budget: AttemptBudget,
        cancel_token: CancelToken
    ) -> Recipe:
        response = await self._post_with_retry(
            self.model_url(model), self.headers, payload, budget, cancel_token, label=model
        )

        try:
            data = response.json()
        except ValueError:
            raise MalformedResponse(f"Failed to parse JSON from {model}")

        generated_text = extract_generated_text(data)
        if len(generated_text.strip()) < MIN_GENERATED_LENGTH:
            raise MalformedResponse(f"No valid text generated from {model}")

        recipe = parse_recipe_text(prompt + generated_text, ingredients)
        if not recipe.is_valid():
            raise MalformedResponse(f"Recipe from {model} didn't meet quality standards")
        return recipe
