"""AI text providers for VisionPress."""

from typing import Any, Dict, Optional

from .base import TextProvider
from .offline import OfflineProvider

# Cache for loaded provider instances
_PROVIDER_CACHE: Dict[str, TextProvider] = {}


def get_provider(name: str, config: Optional[Dict[str, Any]] = None, use_cache: bool = True) -> TextProvider:
    """
    Get a provider instance by name.

    Args:
        name: Provider id (gemini, openai, anthropic, offline)
        config: Provider configuration including API keys
        use_cache: If True, return cached provider if available

    Returns:
        Provider instance

    Raises:
        ValueError: If provider name is unknown
    """
    name = name.lower().strip()

    if use_cache and name in _PROVIDER_CACHE:
        cached = _PROVIDER_CACHE[name]
        if config and config.get("api_key"):
            cached.api_key = config["api_key"]
        return cached

    if name == "offline":
        provider: TextProvider = OfflineProvider(config or {})
    else:
        # Imported lazily so the offline path never loads LiteLLM
        from .litellm_provider import LiteLLMTextProvider
        provider = LiteLLMTextProvider(name, config or {})

    if use_cache:
        _PROVIDER_CACHE[name] = provider
    return provider


def clear_provider_cache():
    """Clear the provider cache."""
    _PROVIDER_CACHE.clear()


__all__ = [
    "TextProvider",
    "OfflineProvider",
    "get_provider",
    "clear_provider_cache",
]
