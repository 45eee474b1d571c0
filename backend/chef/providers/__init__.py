"""
Recipe Providers
Upstream services in the generation chain
"""

import logging

from chef.providers.base import AttemptBudget, ProviderResult, RecipeProvider
from chef.providers.claude import ClaudeProvider
from chef.providers.huggingface import HuggingFaceProvider

logger = logging.getLogger(__name__)


PROVIDER_REGISTRY: dict[str, type[RecipeProvider]] = {
    ClaudeProvider.provider_id: ClaudeProvider,
    HuggingFaceProvider.provider_id: HuggingFaceProvider,
}


def build_providers(order: list[str]) -> list[RecipeProvider]:
    """Instantiate providers from config, in priority order"""
    providers = []
    for name in order:
        provider_cls = PROVIDER_REGISTRY.get(name.lower())
        if provider_cls is None:
            logger.warning("Unknown provider %r in PROVIDER_ORDER, ignoring", name)
            continue
        providers.append(provider_cls())
    return providers


__all__ = [
    "AttemptBudget",
    "ProviderResult",
    "RecipeProvider",
    "ClaudeProvider",
    "HuggingFaceProvider",
    "PROVIDER_REGISTRY",
    "build_providers",
]
