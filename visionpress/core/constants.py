"""Constants and default values for VisionPress."""

# Application metadata
APP_NAME = "VisionPress"
VERSION = "0.4.0"
__version__ = VERSION
__author__ = "VisionPress Contributors"
__license__ = "MIT"

# Default LLM settings
DEFAULT_LLM_PROVIDER = "gemini"
DEFAULT_MAX_TOKENS = 1500
DEFAULT_TEMPERATURE = 0.7

# Request timeouts (seconds)
LLM_TIMEOUT = 60
ASSET_FETCH_TIMEOUT = 30

# Retry defaults for AI generation
MAX_GENERATION_ATTEMPTS = 3
RETRY_DELAY_SECONDS = 1.0

# Environment variables checked for provider keys, in priority order
PROVIDER_ENV_VARS = {
    "gemini": ["GEMINI_API_KEY", "GOOGLE_API_KEY"],
    "openai": ["OPENAI_API_KEY"],
    "anthropic": ["ANTHROPIC_API_KEY"],
}
