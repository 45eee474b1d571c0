"""
Tests for the Claude and Hugging Face provider adapters
"""

import asyncio
import json

import httpx
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
from chef.providers import AttemptBudget, ClaudeProvider, HuggingFaceProvider, build_providers
from chef.providers.claude import extract_json_object, parse_claude_content


NO_WAIT = AttemptBudget(loading_retries=1, retry_delay=0)
INGREDIENTS = ["chicken", "rice", "broccoli"]

CLAUDE_RECIPE = {
    "name": "Chicken Rice Bowl",
    "ingredients": ["chicken", "rice", "broccoli", "soy sauce"],
    "instructions": ["Cook the rice.", "Sear the chicken.", "Steam the broccoli.", "Assemble."]
}

HF_COMPLETION = (
    " Broccoli Chicken Skillet\n"
    "1. Heat oil in a skillet over medium heat.\n"
    "2. Add the chicken and cook until browned.\n"
    "3. Stir in the rice and broccoli.\n"
    "4. Serve warm.\n"
)


def claude_envelope(text: str) -> dict:
    return {"content": [{"type": "text", "text": text}]}


class Recorder:
    """MockTransport handler that replays a list of responses"""

    def __init__(self, responses):
        self.responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.responses.pop(0)
        if callable(response):
            return response(request)
        return response

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


def claude(recorder: Recorder, api_key: str = "sk-test") -> ClaudeProvider:
    return ClaudeProvider(api_key=api_key, transport=recorder.transport)


def huggingface(recorder: Recorder, models=None) -> HuggingFaceProvider:
    return HuggingFaceProvider(
        api_key="hf-test",
        models=models or ["gpt2", "distilgpt2"],
        transport=recorder.transport
    )


# --- Claude -----------------------------------------------------------------

@pytest.mark.parametrize("api_key", ["", None, "your_api_key_here", "   "])
async def test_claude_without_key_is_unconfigured(api_key):
    recorder = Recorder([])
    provider = claude(recorder, api_key=api_key)

    assert not provider.is_configured()
    with pytest.raises(Unconfigured):
        await provider.call(INGREDIENTS, NO_WAIT, CancelToken())
    assert recorder.requests == []


async def test_claude_sends_key_model_and_prompt():
    recorder = Recorder([httpx.Response(200, json=claude_envelope(json.dumps(CLAUDE_RECIPE)))])

    recipe = await claude(recorder).call(INGREDIENTS, NO_WAIT, CancelToken())

    assert recipe.name == "Chicken Rice Bowl"
    assert recipe.ingredients == CLAUDE_RECIPE["ingredients"]
    assert len(recipe.instructions) == 4

    request = recorder.requests[0]
    assert request.headers["x-api-key"] == "sk-test"
    assert request.headers["anthropic-version"] == "2023-06-01"
    body = json.loads(request.content)
    assert body["model"] == "claude-3-5-sonnet-20241022"
    assert body["max_tokens"] == 2048
    assert "chicken, rice, broccoli" in body["messages"][0]["content"]


async def test_claude_reads_fenced_json():
    text = "Here you go!\n```json\n" + json.dumps(CLAUDE_RECIPE) + "\n```\nEnjoy."
    recorder = Recorder([httpx.Response(200, json=claude_envelope(text))])

    recipe = await claude(recorder).call(INGREDIENTS, NO_WAIT, CancelToken())

    assert recipe.name == "Chicken Rice Bowl"


def test_extract_json_from_surrounding_prose():
    data = extract_json_object('Sure: {"name": "X", "instructions": ["a"]} thanks')

    assert data == {"name": "X", "instructions": ["a"]}
    assert extract_json_object("no json here") is None


def test_non_json_reply_uses_line_heuristics():
    content = (
        "Garlic Noodles\n"
        "1. Boil the noodles until just tender.\n"
        "2. Fry the garlic in butter until golden.\n"
        "Toss the noodles through the garlic butter and serve\n"
    )

    recipe = parse_claude_content(content, ["noodles", "garlic"])

    assert recipe.name == "Garlic Noodles"
    assert recipe.ingredients == ["noodles", "garlic"]
    assert recipe.instructions == [
        "Boil the noodles until just tender.",
        "Fry the garlic in butter until golden.",
        "Toss the noodles through the garlic butter and serve",
    ]


def test_json_without_ingredient_list_keeps_supplied_ingredients():
    recipe = parse_claude_content('{"name": "Soup", "instructions": ["Simmer."]}', ["leek"])

    assert recipe.ingredients == ["leek"]


async def test_claude_invalid_recipe_is_malformed():
    body = claude_envelope(json.dumps({"name": "Nothing", "instructions": []}))
    recorder = Recorder([httpx.Response(200, json=body)])

    with pytest.raises(MalformedResponse):
        await claude(recorder).call(INGREDIENTS, NO_WAIT, CancelToken())


async def test_claude_unreadable_envelope_is_malformed():
    recorder = Recorder([httpx.Response(200, json={"unexpected": True})])

    with pytest.raises(MalformedResponse):
        await claude(recorder).call(INGREDIENTS, NO_WAIT, CancelToken())


async def test_claude_error_status_is_upstream_error():
    recorder = Recorder([
        httpx.Response(401, json={"error": {"message": "invalid x-api-key"}})
    ])

    with pytest.raises(UpstreamError) as excinfo:
        await claude(recorder).call(INGREDIENTS, NO_WAIT, CancelToken())

    assert excinfo.value.status == 401
    assert excinfo.value.message == "invalid x-api-key"


async def test_claude_rate_limit_is_not_retried():
    recorder = Recorder([httpx.Response(429, json={"error": "slow down"})])

    with pytest.raises(RateLimited):
        await claude(recorder).call(INGREDIENTS, NO_WAIT, CancelToken())
    assert len(recorder.requests) == 1


async def test_claude_overloaded_is_retried_once():
    recorder = Recorder([
        httpx.Response(503, json={"error": "overloaded"}),
        httpx.Response(200, json=claude_envelope(json.dumps(CLAUDE_RECIPE))),
    ])

    recipe = await claude(recorder).call(INGREDIENTS, NO_WAIT, CancelToken())

    assert recipe.name == "Chicken Rice Bowl"
    assert len(recorder.requests) == 2


async def test_claude_gives_up_after_one_retry():
    recorder = Recorder([
        httpx.Response(503, json={"error": "overloaded"}),
        httpx.Response(503, json={"error": "overloaded"}),
    ])

    with pytest.raises(UpstreamError):
        await claude(recorder).call(INGREDIENTS, NO_WAIT, CancelToken())
    assert len(recorder.requests) == 2


async def test_network_error_becomes_upstream_error():
    def fail(request):
        raise httpx.ConnectError("connection refused", request=request)

    recorder = Recorder([fail])

    with pytest.raises(UpstreamError) as excinfo:
        await claude(recorder).call(INGREDIENTS, NO_WAIT, CancelToken())
    assert excinfo.value.status is None


async def test_attempt_returns_errors_as_values():
    recorder = Recorder([httpx.Response(500, text="boom")])

    result = await claude(recorder).attempt(INGREDIENTS, NO_WAIT, CancelToken())

    assert not result.ok
    assert result.provider_id == "claude"
    assert result.error.kind == ErrorKind.UPSTREAM_ERROR


# --- Hugging Face -----------------------------------------------------------

def probe_ok() -> httpx.Response:
    return httpx.Response(200, json=[{"generated_text": "test ok"}])


async def test_huggingface_parses_completion():
    recorder = Recorder([
        probe_ok(),
        httpx.Response(200, json=[{"generated_text": HF_COMPLETION}]),
    ])

    recipe = await huggingface(recorder).call(INGREDIENTS, NO_WAIT, CancelToken())

    assert recipe.name == "Broccoli Chicken Skillet"
    assert recipe.instructions[0] == "Heat oil in a skillet over medium heat."
    assert len(recipe.instructions) == 4
    assert recipe.ingredients == INGREDIENTS

    probe, real = recorder.requests
    assert json.loads(probe.content) == {"inputs": "test", "parameters": {"max_new_tokens": 5}}
    body = json.loads(real.content)
    assert body["inputs"].endswith("Recipe Name:")
    assert body["parameters"]["max_new_tokens"] == 300
    assert body["parameters"]["do_sample"] is True
    assert real.headers["authorization"] == "Bearer hf-test"
    assert real.url.path.endswith("/gpt2")


async def test_huggingface_probe_detects_deprecation():
    recorder = Recorder([
        httpx.Response(410, text='{"error":"The requested model is no longer supported"}'),
    ])

    with pytest.raises(Deprecated):
        await huggingface(recorder).call(INGREDIENTS, NO_WAIT, CancelToken())
    assert len(recorder.requests) == 1


async def test_huggingface_probe_network_error_is_ignored():
    def fail(request):
        raise httpx.ConnectError("down", request=request)

    recorder = Recorder([
        fail,
        httpx.Response(200, json={"generated_text": HF_COMPLETION}),
    ])

    recipe = await huggingface(recorder).call(INGREDIENTS, NO_WAIT, CancelToken())

    assert recipe.name == "Broccoli Chicken Skillet"


async def test_huggingface_retries_loading_model_once():
    recorder = Recorder([
        probe_ok(),
        httpx.Response(503, json={"error": "Model gpt2 is currently loading"}),
        httpx.Response(200, json=[{"generated_text": HF_COMPLETION}]),
    ])

    recipe = await huggingface(recorder).call(INGREDIENTS, NO_WAIT, CancelToken())

    assert recipe.name == "Broccoli Chicken Skillet"
    assert [r.url.path.split("/")[-1] for r in recorder.requests] == ["gpt2", "gpt2", "gpt2"]


async def test_huggingface_moves_to_next_model_on_error():
    recorder = Recorder([
        probe_ok(),
        httpx.Response(500, json={"error": "internal"}),
        httpx.Response(200, json=[{"generated_text": HF_COMPLETION}]),
    ])

    recipe = await huggingface(recorder).call(INGREDIENTS, NO_WAIT, CancelToken())

    assert recipe.is_valid()
    assert recorder.requests[-1].url.path.endswith("/distilgpt2")


async def test_huggingface_short_output_moves_to_next_model():
    recorder = Recorder([
        probe_ok(),
        httpx.Response(200, json=[{"generated_text": "hi"}]),
        httpx.Response(200, json=[{"summary_text": HF_COMPLETION}]),
    ])

    recipe = await huggingface(recorder).call(INGREDIENTS, NO_WAIT, CancelToken())

    assert recipe.name == "Broccoli Chicken Skillet"


async def test_huggingface_rate_limit_abandons_provider():
    recorder = Recorder([
        probe_ok(),
        httpx.Response(429, json={"error": "Rate limit reached"}),
    ])

    with pytest.raises(RateLimited):
        await huggingface(recorder).call(INGREDIENTS, NO_WAIT, CancelToken())
    assert len(recorder.requests) == 2


async def test_huggingface_all_models_failing_reports_last_error():
    recorder = Recorder([
        probe_ok(),
        httpx.Response(500, json={"error": "first"}),
        httpx.Response(502, json={"error": "second"}),
    ])

    with pytest.raises(UpstreamError) as excinfo:
        await huggingface(recorder).call(INGREDIENTS, NO_WAIT, CancelToken())
    assert excinfo.value.status == 502


async def test_cancellation_during_retry_delay():
    recorder = Recorder([
        probe_ok(),
        httpx.Response(503, json={"error": "Model gpt2 is currently loading"}),
    ])
    token = CancelToken()
    slow_budget = AttemptBudget(loading_retries=1, retry_delay=10)

    task = asyncio.create_task(huggingface(recorder).call(INGREDIENTS, slow_budget, token))
    while len(recorder.requests) < 2:
        await asyncio.sleep(0)
    token.cancel()

    with pytest.raises(GenerationCancelled):
        await asyncio.wait_for(task, timeout=1)
    assert len(recorder.requests) == 2


async def test_cancelled_token_stops_before_network():
    recorder = Recorder([])
    token = CancelToken()
    token.cancel()

    with pytest.raises(GenerationCancelled):
        await huggingface(recorder).call(INGREDIENTS, NO_WAIT, token)
    assert recorder.requests == []


def test_build_providers_follows_order_and_skips_unknown():
    providers = build_providers(["huggingface", "nope", "claude"])

    assert [p.provider_id for p in providers] == ["huggingface", "claude"]
