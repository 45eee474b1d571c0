"""
Chef Assistant Backend - FastAPI Application
Main entry point for the recipe generation API
"""

import asyncio
import logging

from fastapi import FastAPI, HTTPException, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from config import CORS_ORIGINS, LOG_LEVEL, PORT
from chef.cancellation import CancelToken
from chef.errors import GenerationCancelled
from chef.models import FallbackSignal, Failure, Success
from chef.orchestrator import RecipeOrchestrator
from chef.fallback import synthesize_fallback


logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)

MISSING_INGREDIENTS = "Please provide a list of ingredients"
DISCONNECT_POLL_INTERVAL = 0.5
# nginx convention for "client closed request"
CLIENT_CLOSED_REQUEST = 499


# Initialize FastAPI app
app = FastAPI(
    title="Chef Assistant API",
    description="Recipe generation from your ingredients, with local fallback",
    version="1.0.0"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS + ["*"],  # Allow all in development
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

orchestrator = RecipeOrchestrator.from_config()


# Request/Response Models
class RecipeRequest(BaseModel):
    ingredients: list[str] = []


class RecipeResponse(BaseModel):
    name: str
    ingredients: list[str]
    instructions: list[str]
    provider: str = ""


class HealthResponse(BaseModel):
    status: str
    providers: dict[str, bool]


def clean_ingredients(request: RecipeRequest) -> list[str]:
    ingredients = [i.strip() for i in request.ingredients if i and i.strip()]
    if not ingredients:
        raise HTTPException(status_code=400, detail={"error": MISSING_INGREDIENTS})
    return ingredients


async def watch_disconnect(http_request: Request, cancel_token: CancelToken,
                           interval: float = DISCONNECT_POLL_INTERVAL) -> None:
    """Cancel the token once the client goes away"""
    while not cancel_token.cancelled:
        if await http_request.is_disconnected():
            cancel_token.cancel("client disconnected")
            return
        await asyncio.sleep(interval)


# API Endpoints
@app.get("/")
async def root():
    """Root endpoint"""
    return {"message": "Chef Assistant API is running", "version": "1.0.0"}


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint"""
    providers = orchestrator.configured_providers()
    status = "healthy" if any(providers.values()) else "unconfigured"
    return HealthResponse(status=status, providers=providers)


@app.post("/api/generate-recipe")
async def generate_recipe(request: RecipeRequest, http_request: Request):
    """
    Run the provider chain for the given ingredients.
    A chain that ran but produced nothing answers 200 with a fallback
    marker; only a missing configuration is reported as an error.
    """
    ingredients = clean_ingredients(request)
    cancel_token = CancelToken()
    watcher = asyncio.create_task(watch_disconnect(http_request, cancel_token))
    try:
        outcome = await orchestrator.request_recipe(ingredients, cancel_token)
    except GenerationCancelled:
        logger.info("Client disconnected, abandoned recipe generation")
        return Response(status_code=CLIENT_CLOSED_REQUEST)
    finally:
        watcher.cancel()

    if isinstance(outcome, Success):
        return RecipeResponse(
            **outcome.recipe.to_dict(),
            provider=outcome.provider_id
        )

    if isinstance(outcome, FallbackSignal):
        return {"_fallback": True, "reason": outcome.reason}

    if isinstance(outcome, Failure):
        logger.error("Recipe generation failed: %s", outcome.message)
        raise HTTPException(
            status_code=500,
            detail={"error": outcome.message, "error_kind": outcome.kind.value}
        )

    raise HTTPException(status_code=500, detail={"error": "Failed to generate recipe. Please try again."})


@app.post("/api/fallback-recipe", response_model=RecipeResponse)
async def fallback_recipe(request: RecipeRequest):
    """Local recipe synthesis, no network involved"""
    ingredients = clean_ingredients(request)
    return RecipeResponse(**synthesize_fallback(ingredients).to_dict(), provider="local")


# Startup event
@app.on_event("startup")
async def startup_event():
    """Report credential status on startup"""
    print(f"🚀 Chef Assistant backend running on port {PORT}")
    for provider_id, configured in orchestrator.configured_providers().items():
        if configured:
            print(f"✅ {provider_id} API key configured")
        else:
            print(f"⚠️  WARNING: {provider_id} API key not configured in .env file")

    if not any(orchestrator.configured_providers().values()):
        print("📝 To fix: 1. Create .env file in project root")
        print("📝         2. Add: CLAUDE_API_KEY=your_actual_api_key")
        print("📝         3. Get your key from: https://console.anthropic.com/")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=PORT)
