"""
Tests for the provider chain
"""

import pytest

from chef.cancellation import CancelToken
from chef.errors import (
    Deprecated,
    ErrorKind,
    GenerationCancelled,
    MalformedResponse,
    RateLimited,
    Unconfigured,
    UpstreamError
)
from chef.models import FallbackSignal, Failure, Recipe, Success
from chef.orchestrator import RecipeOrchestrator, orchestrate
from chef.providers import AttemptBudget, RecipeProvider


class FakeProvider(RecipeProvider):
    """Provider that returns a canned recipe or raises a canned error"""

    def __init__(self, provider_id, recipe=None, error=None, hint=""):
        super().__init__(api_key="fake-key")
        self.provider_id = provider_id
        self.credential_hint = hint
        self.recipe = recipe
        self.error = error
        self.calls = []

    async def call(self, ingredients, budget, cancel_token):
        self.calls.append((list(ingredients), budget))
        if self.error is not None:
            raise self.error
        return self.recipe


def good_recipe(name="Provider Recipe") -> Recipe:
    return Recipe(name=name, ingredients=["egg"], instructions=["Whisk the egg.", "Cook it."])


async def test_skips_unconfigured_and_stops_at_first_success():
    a = FakeProvider("a", error=Unconfigured("no key"))
    b = FakeProvider("b", recipe=good_recipe("From B"))
    c = FakeProvider("c", recipe=good_recipe("From C"))

    outcome = await orchestrate(["egg"], [a, b, c])

    assert isinstance(outcome, Success)
    assert outcome.provider_id == "b"
    assert outcome.recipe.name == "From B"
    assert len(a.calls) == 1
    assert len(b.calls) == 1
    assert c.calls == []


async def test_failures_and_deprecation_give_fallback_signal():
    a = FakeProvider("a", error=UpstreamError(500, "boom"))
    b = FakeProvider("b", error=Deprecated("gone"))

    outcome = await orchestrate(["egg"], [a, b])

    assert isinstance(outcome, FallbackSignal)
    assert outcome.is_fallback
    assert "a: upstream_error" in outcome.reason
    assert "b: deprecated" in outcome.reason


@pytest.mark.parametrize("error", [
    UpstreamError(None, "timeout"),
    MalformedResponse("bad json"),
    RateLimited("429"),
])
async def test_single_failure_never_aborts_chain(error):
    a = FakeProvider("a", error=error)
    b = FakeProvider("b", recipe=good_recipe())

    outcome = await orchestrate(["egg"], [a, b])

    assert isinstance(outcome, Success)
    assert outcome.provider_id == "b"


async def test_no_providers_is_misconfigured():
    outcome = await orchestrate(["egg"], [])

    assert isinstance(outcome, Failure)
    assert outcome.kind == ErrorKind.MISCONFIGURED
    assert ".env" in outcome.message


async def test_all_unconfigured_is_misconfigured_with_guidance():
    a = FakeProvider("a", error=Unconfigured("no key"), hint="Set A_KEY in your .env file.")
    b = FakeProvider("b", error=Unconfigured("no key"), hint="Set B_KEY in your .env file.")

    outcome = await orchestrate(["egg"], [a, b])

    assert isinstance(outcome, Failure)
    assert outcome.kind == ErrorKind.MISCONFIGURED
    assert "Set A_KEY" in outcome.message
    assert "Set B_KEY" in outcome.message


async def test_unconfigured_plus_failure_is_fallback_not_failure():
    a = FakeProvider("a", error=Unconfigured("no key"))
    b = FakeProvider("b", error=UpstreamError(503, "busy"))

    outcome = await orchestrate(["egg"], [a, b])

    assert isinstance(outcome, FallbackSignal)


async def test_invalid_recipe_counts_as_malformed():
    a = FakeProvider("a", recipe=Recipe(name="", instructions=[]))
    b = FakeProvider("b", recipe=good_recipe())

    outcome = await orchestrate(["egg"], [a, b])

    assert isinstance(outcome, Success)
    assert outcome.provider_id == "b"


async def test_providers_receive_a_snapshot_and_the_budget():
    ingredients = ["egg", "milk"]
    budget = AttemptBudget(loading_retries=0, retry_delay=0)
    a = FakeProvider("a", recipe=good_recipe())

    await orchestrate(ingredients, [a], budget=budget)
    ingredients.append("flour")

    seen_ingredients, seen_budget = a.calls[0]
    assert seen_ingredients == ["egg", "milk"]
    assert seen_budget is budget


async def test_cancelled_request_stops_before_next_provider():
    token = CancelToken()

    class CancelsMidway(FakeProvider):
        async def call(self, ingredients, budget, cancel_token):
            token.cancel()
            raise UpstreamError(500, "boom")

    a = CancelsMidway("a")
    b = FakeProvider("b", recipe=good_recipe())

    with pytest.raises(GenerationCancelled):
        await orchestrate(["egg"], [a, b], cancel_token=token)
    assert b.calls == []


async def test_recipe_orchestrator_uses_fresh_budget_per_request():
    a = FakeProvider("a", recipe=good_recipe())
    orchestrator = RecipeOrchestrator([a], loading_retries=2, retry_delay=0.5)

    await orchestrator.request_recipe(["egg"])
    await orchestrator.request_recipe(["egg"])

    first_budget = a.calls[0][1]
    second_budget = a.calls[1][1]
    assert first_budget is not second_budget
    assert first_budget.loading_retries == 2
    assert first_budget.retry_delay == 0.5


def test_recipe_orchestrator_reports_configuration():
    configured = FakeProvider("a")
    missing = FakeProvider("b")
    missing.api_key = ""

    orchestrator = RecipeOrchestrator([configured, missing])

    assert orchestrator.configured_providers() == {"a": True, "b": False}
    assert orchestrator.synthesize_fallback(["egg"]).ingredients == ["egg"]
