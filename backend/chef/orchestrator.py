"""
Provider Chain
Tries providers in priority order and decides between success, local
fallback, and a user-visible configuration error
"""

import logging
from typing import Optional

from config import PROVIDER_ORDER, MODEL_LOADING_RETRIES, MODEL_LOADING_RETRY_DELAY
from chef.cancellation import CancelToken
from chef.errors import ErrorKind
from chef.fallback import generate_fallback_recipe
from chef.models import FallbackSignal, Failure, GenerationOutcome, Recipe, Success
from chef.providers import AttemptBudget, RecipeProvider, build_providers

logger = logging.getLogger(__name__)


GENERIC_SETUP_HINT = "Add an API key for at least one recipe provider to your .env file."

# Expected conditions; the chain moves on without raising an alarm
SKIPPED_KINDS = {ErrorKind.UNCONFIGURED, ErrorKind.DEPRECATED}


def misconfigured_message(providers: list[RecipeProvider]) -> str:
    hints = [p.credential_hint for p in providers if p.credential_hint]
    guidance = " ".join(hints) if hints else GENERIC_SETUP_HINT
    return f"No recipe provider is configured. {guidance}"


async def orchestrate(
    ingredients: list[str],
    providers: list[RecipeProvider],
    budget: Optional[AttemptBudget] = None,
    cancel_token: Optional[CancelToken] = None
) -> GenerationOutcome:
    """Fold over ``providers`` until one returns a recipe.

    Unconfigured and deprecated providers are skipped quietly, failing ones
    are logged and skipped. Only when no provider is configured at all does
    this return a Failure; otherwise exhausting the chain yields a
    FallbackSignal. Raises GenerationCancelled if the request is superseded.
    """
    ingredients = list(ingredients)
    budget = budget or AttemptBudget()
    cancel_token = cancel_token or CancelToken()

    any_configured = False
    skipped = []

    for provider in providers:
        cancel_token.raise_if_cancelled()

        result = await provider.attempt(ingredients, budget, cancel_token)
        if result.ok:
            logger.info("Recipe generated by %s", result.provider_id)
            return Success(recipe=result.recipe, provider_id=result.provider_id)

        kind = result.error.kind
        if kind != ErrorKind.UNCONFIGURED:
            any_configured = True

        if kind in SKIPPED_KINDS:
            logger.info("Skipping %s (%s)", result.provider_id, kind.value)
        else:
            logger.warning("Provider %s failed: %s", result.provider_id, result.error)
        skipped.append(f"{result.provider_id}: {kind.value}")

    if not any_configured:
        message = misconfigured_message(providers)
        logger.error(message)
        return Failure(kind=ErrorKind.MISCONFIGURED, message=message)

    return FallbackSignal(
        reason="All recipe providers unavailable (" + ", ".join(skipped) + ")"
    )


class RecipeOrchestrator:
    """Inbound boundary of the generation core"""

    def __init__(
        self,
        providers: list[RecipeProvider],
        loading_retries: int = MODEL_LOADING_RETRIES,
        retry_delay: float = MODEL_LOADING_RETRY_DELAY
    ):
        self.providers = list(providers)
        self.loading_retries = loading_retries
        self.retry_delay = retry_delay

    @classmethod
    def from_config(cls) -> "RecipeOrchestrator":
        return cls(build_providers(PROVIDER_ORDER))

    def new_budget(self) -> AttemptBudget:
        return AttemptBudget(loading_retries=self.loading_retries, retry_delay=self.retry_delay)

    def configured_providers(self) -> dict[str, bool]:
        return {p.provider_id: p.is_configured() for p in self.providers}

    async def request_recipe(
        self,
        ingredients: list[str],
        cancel_token: Optional[CancelToken] = None
    ) -> GenerationOutcome:
        return await orchestrate(
            ingredients,
            self.providers,
            budget=self.new_budget(),
            cancel_token=cancel_token
        )

    def synthesize_fallback(self, ingredients: list[str]) -> Recipe:
        return generate_fallback_recipe(ingredients)
