"""
Chef Assistant Backend Configuration
"""

import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Values shipped in the example .env that mean "not set"
PLACEHOLDER_API_KEYS = {"", "your_api_key_here"}

# Claude Configuration (structured JSON provider)
CLAUDE_API_KEY = os.getenv("CLAUDE_API_KEY", "")
CLAUDE_API_URL = "https://api.anthropic.com/v1/messages"
CLAUDE_MODEL = "claude-3-5-sonnet-20241022"
CLAUDE_MAX_TOKENS = 2048
ANTHROPIC_VERSION = "2023-06-01"
CLAUDE_KEY_HINT = (
    "Set CLAUDE_API_KEY in your .env file. "
    "Get your key from https://console.anthropic.com/"
)

# Hugging Face Configuration (free-text provider)
HUGGINGFACE_API_KEY = os.getenv("HUGGINGFACE_API_KEY", "")
HUGGINGFACE_BASE_URL = "https://api-inference.huggingface.co/models"
HUGGINGFACE_MODELS = [
    "gpt2",                   # most reliable, always available
    "distilgpt2",             # faster alternative
    "bigscience/bloom-560m",  # better for creative generation
]
HUGGINGFACE_MAX_NEW_TOKENS = 300
HUGGINGFACE_TEMPERATURE = 0.9
HUGGINGFACE_TOP_P = 0.95
HUGGINGFACE_KEY_HINT = (
    "Set HUGGINGFACE_API_KEY in your .env file. "
    "Get a token from https://huggingface.co/settings/tokens"
)

# Provider Chain Settings
PROVIDER_ORDER = [
    name.strip()
    for name in os.getenv("PROVIDER_ORDER", "claude,huggingface").split(",")
    if name.strip()
]
PROVIDER_TIMEOUT = 30
MODEL_LOADING_RETRIES = 1
MODEL_LOADING_RETRY_DELAY = float(os.getenv("MODEL_LOADING_RETRY_DELAY", "5"))

# Client Settings (RequestController -> recipe service)
RECIPE_API_URL = os.getenv("RECIPE_API_URL", "http://localhost:3001")
CLIENT_TIMEOUT = 60

# Server
PORT = int(os.getenv("PORT", "3001"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# CORS - Frontend URLs
CORS_ORIGINS = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    os.getenv("FRONTEND_URL", ""),  # Production frontend URL
]
# Filter empty strings
CORS_ORIGINS = [origin for origin in CORS_ORIGINS if origin]
