"""
Chef Core Module
Recipe generation: provider chain, text parsing, local fallback and the
client-side request controller
"""

from chef.errors import ErrorKind, ChefError, ProviderError, GenerationCancelled
from chef.models import Recipe, Success, FallbackSignal, Failure, GenerationOutcome
from chef.fallback import generate_fallback_recipe, synthesize_fallback
from chef.text_parser import parse_recipe_text
from chef.cancellation import CancelToken
from chef.orchestrator import orchestrate, RecipeOrchestrator
from chef.client import RecipeApiClient
from chef.controller import RequestController, RequestState, MessageLevel
from chef.ingredients import IngredientList

__all__ = [
    "ErrorKind",
    "ChefError",
    "ProviderError",
    "GenerationCancelled",
    "Recipe",
    "Success",
    "FallbackSignal",
    "Failure",
    "GenerationOutcome",
    "generate_fallback_recipe",
    "synthesize_fallback",
    "parse_recipe_text",
    "CancelToken",
    "orchestrate",
    "RecipeOrchestrator",
    "RecipeApiClient",
    "RequestController",
    "RequestState",
    "MessageLevel",
    "IngredientList",
]
