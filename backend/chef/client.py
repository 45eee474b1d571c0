"""
Recipe API Client
Client side of the network boundary: calls the recipe service and maps its
responses onto generation outcomes
"""

import logging
from typing import Optional

import httpx

from config import RECIPE_API_URL, CLIENT_TIMEOUT
from chef.cancellation import CancelToken
from chef.errors import ErrorKind
from chef.models import FallbackSignal, Failure, GenerationOutcome, Recipe, Success

logger = logging.getLogger(__name__)


GENERATE_PATH = "/api/generate-recipe"
CONFIG_ERROR_MARKERS = ("API key", "not configured")


def error_payload(response: httpx.Response) -> dict:
    """FastAPI nests our error body under "detail"; accept both shapes"""
    try:
        data = response.json()
    except ValueError:
        return {}
    if not isinstance(data, dict):
        return {}
    detail = data.get("detail")
    if isinstance(detail, dict):
        return detail
    if isinstance(detail, str):
        return {"error": detail}
    return data


class RecipeApiClient:
    """Requests recipes from the backend service"""

    def __init__(
        self,
        base_url: str = RECIPE_API_URL,
        timeout: float = CLIENT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    async def _send(self, ingredients: list[str]) -> httpx.Response:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            return await client.post(
                f"{self.base_url}{GENERATE_PATH}",
                json={"ingredients": ingredients}
            )

    async def request_recipe(
        self,
        ingredients: list[str],
        cancel_token: Optional[CancelToken] = None
    ) -> GenerationOutcome:
        """POST the ingredients and translate the reply.

        Transport problems and unexpected replies become a FallbackSignal:
        the local generator can still serve the user. Only a configuration
        error is reported as a Failure.
        """
        cancel_token = cancel_token or CancelToken()
        ingredients = list(ingredients)

        try:
            response = await cancel_token.run(self._send(ingredients))
        except httpx.HTTPError as e:
            logger.warning("Recipe service unreachable: %s", e)
            return FallbackSignal(reason=f"Recipe service unreachable: {str(e)}")

        if not response.is_success:
            payload = error_payload(response)
            message = payload.get("error") or "Failed to generate recipe"
            if payload.get("error_kind") == ErrorKind.MISCONFIGURED.value or any(
                marker in message for marker in CONFIG_ERROR_MARKERS
            ):
                return Failure(
                    kind=ErrorKind.MISCONFIGURED,
                    message=f"API Configuration Error: {message}"
                )
            logger.warning("Recipe service error (%s): %s", response.status_code, message)
            return FallbackSignal(reason=message)

        try:
            data = response.json()
        except ValueError:
            return FallbackSignal(reason="Invalid JSON received from recipe service")

        if not isinstance(data, dict):
            return FallbackSignal(reason="Invalid recipe format received")

        if data.get("_fallback") or data.get("_useFallback"):
            return FallbackSignal(reason=data.get("reason", ""))

        recipe = Recipe.from_dict(data, default_ingredients=ingredients)
        if not recipe.is_valid():
            return FallbackSignal(reason="Invalid recipe format received")

        return Success(recipe=recipe, provider_id=data.get("provider", ""))
