"""
Request Controller
Client-side coordinator for recipe generation: keeps one request live,
cancels superseded ones, and turns outcomes into display state
"""

import itertools
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, Optional

from chef.cancellation import CancelToken
from chef.client import RecipeApiClient
from chef.errors import ErrorKind, GenerationCancelled
from chef.fallback import generate_fallback_recipe
from chef.models import FallbackSignal, Failure, GenerationOutcome, Recipe, Success

logger = logging.getLogger(__name__)


RequestRecipe = Callable[[list[str], CancelToken], Awaitable[GenerationOutcome]]

FALLBACK_MESSAGE = "AI services unavailable. Using intelligent fallback recipe generation."
UNAVAILABLE_MESSAGE = "AI service temporarily unavailable. Using local recipe generation."


class RequestState(str, Enum):
    IDLE = "idle"
    REQUESTING = "requesting"
    RESOLVED = "resolved"
    SUPERSEDED = "superseded"


class MessageLevel(str, Enum):
    """Banner style: info for a quiet fallback, warning for setup problems"""
    INFO = "info"
    WARNING = "warning"


_token_ids = itertools.count(1)


@dataclass
class RequestToken:
    """Identifies one generation attempt"""
    id: int = field(default_factory=lambda: next(_token_ids))
    cancel_token: CancelToken = field(default_factory=CancelToken)
    state: RequestState = RequestState.REQUESTING

    def supersede(self) -> None:
        self.state = RequestState.SUPERSEDED
        self.cancel_token.cancel("superseded")


class RequestController:
    """Owns the recipe panel state for one session"""

    def __init__(
        self,
        request_recipe: Optional[RequestRecipe] = None,
        fallback: Callable[[list[str]], Recipe] = generate_fallback_recipe
    ):
        self._request_recipe = request_recipe or RecipeApiClient().request_recipe
        self._fallback = fallback
        self._live: Optional[RequestToken] = None

        self.state = RequestState.IDLE
        self.recipe: Optional[Recipe] = None
        self.message = ""
        self.message_level: Optional[MessageLevel] = None
        self.recipe_shown = False
        self.loading = False
        self.provider_id = ""
        self.outcome: Optional[GenerationOutcome] = None

    @property
    def live_token(self) -> Optional[RequestToken]:
        return self._live

    def _is_live(self, token: RequestToken) -> bool:
        return self._live is token

    def _clear_message(self) -> None:
        self.message = ""
        self.message_level = None

    async def generate(self, ingredients: list[str]) -> Optional[GenerationOutcome]:
        """Start a new request, cancelling any request still in flight.

        Returns the applied outcome, or None when this request was superseded
        before it finished.
        """
        snapshot = list(ingredients)

        if self._live is not None:
            self._live.supersede()

        token = RequestToken()
        self._live = token
        self.state = RequestState.REQUESTING
        self.loading = True
        self.recipe_shown = True
        self._clear_message()

        try:
            outcome = await self._request_recipe(snapshot, token.cancel_token)
        except GenerationCancelled:
            if self._is_live(token):
                raise
            logger.debug("Request %d cancelled", token.id)
            return None
        except Exception as e:
            if not self._is_live(token):
                logger.debug("Ignoring error from superseded request %d: %s", token.id, e)
                return None
            logger.exception("Error fetching recipe")
            outcome = FallbackSignal(reason=str(e) or type(e).__name__)

        if not self._is_live(token):
            logger.debug("Discarding outcome of superseded request %d", token.id)
            return None

        self._apply(outcome, snapshot)
        token.state = RequestState.RESOLVED
        self._live = None
        return outcome

    def _apply(self, outcome: GenerationOutcome, ingredients: list[str]) -> None:
        self.outcome = outcome
        self.loading = False
        self.state = RequestState.RESOLVED

        if isinstance(outcome, Success):
            self.recipe = outcome.recipe
            self.provider_id = outcome.provider_id
            self._clear_message()
            return

        self.recipe = self._fallback(ingredients)
        self.provider_id = ""

        if isinstance(outcome, Failure) and outcome.kind == ErrorKind.MISCONFIGURED:
            self.message = outcome.message
            self.message_level = MessageLevel.WARNING
        elif isinstance(outcome, FallbackSignal):
            self.message = FALLBACK_MESSAGE
            self.message_level = MessageLevel.INFO
        else:
            logger.warning("Recipe generation failed: %s", outcome.message)
            self.message = UNAVAILABLE_MESSAGE
            self.message_level = MessageLevel.WARNING

    def close(self) -> None:
        """Hide the recipe and return to idle; no-op when already idle"""
        if self.state == RequestState.IDLE:
            return

        if self._live is not None:
            self._live.supersede()
            self._live = None

        self.state = RequestState.IDLE
        self.recipe = None
        self.recipe_shown = False
        self.loading = False
        self.provider_id = ""
        self.outcome = None
        self._clear_message()

    def reset(self) -> None:
        """Called when the ingredient list changes"""
        if self.recipe_shown:
            self.close()
