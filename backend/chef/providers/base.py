"""
Provider Adapter Base
Shared calling convention for upstream recipe-generation services
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

import httpx

from config import (
    PLACEHOLDER_API_KEYS,
    PROVIDER_TIMEOUT,
    MODEL_LOADING_RETRIES,
    MODEL_LOADING_RETRY_DELAY
)
from chef.cancellation import CancelToken
from chef.errors import (
    Deprecated,
    MalformedResponse,
    ProviderError,
    RateLimited,
    Unconfigured,
    UpstreamError
)
from chef.models import Recipe

logger = logging.getLogger(__name__)

DEPRECATION_NOTICE = "no longer supported"


@dataclass
class AttemptBudget:
    """Retry allowance for a single generation request.

    Created fresh for every request so no retry state is shared between
    requests.
    """
    loading_retries: int = MODEL_LOADING_RETRIES
    retry_delay: float = MODEL_LOADING_RETRY_DELAY


@dataclass
class ProviderResult:
    """Either a recipe or the typed error that prevented one"""
    provider_id: str
    recipe: Optional[Recipe] = None
    error: Optional[ProviderError] = None

    @property
    def ok(self) -> bool:
        return self.recipe is not None and self.error is None


def extract_error_message(response: httpx.Response) -> str:
    """Pull a readable message out of the assorted error body formats"""
    try:
        data = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"

    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, str):
            return error
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if data.get("message"):
            return str(data["message"])
    return str(data)


def is_model_loading(response: httpx.Response, message: str) -> bool:
    return response.status_code == 503 or "loading" in message.lower()


class RecipeProvider(ABC):
    """One upstream service that can turn ingredients into a recipe"""

    provider_id: str = ""
    credential_hint: str = ""

    def __init__(
        self,
        api_key: Optional[str],
        timeout: float = PROVIDER_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.api_key = (api_key or "").strip()
        self.timeout = timeout
        self.transport = transport

    def is_configured(self) -> bool:
        return self.api_key not in PLACEHOLDER_API_KEYS

    def require_credentials(self) -> None:
        if not self.is_configured():
            raise Unconfigured(f"{self.provider_id} API key not configured. {self.credential_hint}")

    @abstractmethod
    async def call(
        self,
        ingredients: list[str],
        budget: AttemptBudget,
        cancel_token: CancelToken
    ) -> Recipe:
        """Generate a recipe or raise a ProviderError"""

    async def attempt(
        self,
        ingredients: list[str],
        budget: AttemptBudget,
        cancel_token: CancelToken
    ) -> ProviderResult:
        """Run ``call`` and return provider failures as values.

        GenerationCancelled is not a provider failure and propagates.
        """
        try:
            recipe = await self.call(ingredients, budget, cancel_token)
        except ProviderError as e:
            return ProviderResult(provider_id=self.provider_id, error=e)

        if not recipe.is_valid():
            return ProviderResult(
                provider_id=self.provider_id,
                error=MalformedResponse("Invalid recipe format received from API")
            )
        return ProviderResult(provider_id=self.provider_id, recipe=recipe)

    async def _post(
        self,
        url: str,
        headers: dict,
        payload: dict,
        cancel_token: CancelToken
    ) -> httpx.Response:
        """Single POST, abandoned if the request is cancelled mid-flight"""

        async def send() -> httpx.Response:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                return await client.post(url, headers=headers, json=payload)

        try:
            return await cancel_token.run(send())
        except httpx.TimeoutException:
            raise UpstreamError(None, f"Request timed out after {self.timeout} seconds")
        except httpx.RequestError as e:
            raise UpstreamError(None, f"Network error: {str(e)}")

    async def _post_with_retry(
        self,
        url: str,
        headers: dict,
        payload: dict,
        budget: AttemptBudget,
        cancel_token: CancelToken,
        label: str
    ) -> httpx.Response:
        """POST and apply the status policy shared by every provider.

        410 is permanent, 429 abandons the provider, a loading model gets
        ``budget.loading_retries`` more tries after ``budget.retry_delay``.
        """
        for attempt in range(budget.loading_retries + 1):
            if attempt > 0:
                logger.info("Retrying %s after waiting...", label)

            response = await self._post(url, headers, payload, cancel_token)
            logger.debug("%s response status: %s", label, response.status_code)
            logger.debug("%s response preview: %s", label, response.text[:200])

            if response.is_success:
                return response

            message = extract_error_message(response)

            if response.status_code == 410 or DEPRECATION_NOTICE in message:
                raise Deprecated(f"{label} is no longer available: {message}")

            if response.status_code == 429:
                raise RateLimited(f"Rate limited by {label}")

            if is_model_loading(response, message) and attempt < budget.loading_retries:
                logger.info("%s is loading, waiting %s seconds...", label, budget.retry_delay)
                await cancel_token.sleep(budget.retry_delay)
                continue

            raise UpstreamError(response.status_code, message)

        raise UpstreamError(None, f"{label} failed after multiple attempts")
