"""LiteLLM-backed text provider for Gemini, OpenAI and Anthropic models."""

import logging
from typing import Any, Dict, List, Optional, Tuple

import litellm

from ..core.constants import DEFAULT_MAX_TOKENS, DEFAULT_TEMPERATURE, LLM_TIMEOUT
from ..core.errors import ProviderError
from ..core.llm_models import LLM_PROVIDERS, litellm_model_name
from .base import TextProvider

logger = logging.getLogger(__name__)

litellm.drop_params = True  # Drop unsupported params per provider


class LiteLLMTextProvider(TextProvider):
    """Text generation through LiteLLM's unified completion API."""

    def __init__(self, provider_id: str, config: Dict[str, Any]):
        if provider_id not in LLM_PROVIDERS:
            raise ValueError(f"Unknown LLM provider: {provider_id}")
        super().__init__(config)
        self.provider_id = provider_id
        self.max_tokens = int(config.get("max_tokens") or DEFAULT_MAX_TOKENS)
        self.temperature = float(config.get("temperature", DEFAULT_TEMPERATURE))
        self.timeout = float(config.get("timeout") or LLM_TIMEOUT)

    def get_models(self) -> List[str]:
        return list(LLM_PROVIDERS[self.provider_id].models)

    def validate_auth(self) -> Tuple[bool, str]:
        if self.api_key:
            return True, f"{LLM_PROVIDERS[self.provider_id].display_name} API key configured"
        return False, f"No API key configured for {self.provider_id}"

    def prepare_request(self, prompt: str, model: Optional[str], max_tokens: Optional[int]) -> Dict[str, Any]:
        """Build the keyword arguments for ``litellm.acompletion``."""
        model = model or self.get_default_model()
        kwargs = {
            "model": litellm_model_name(self.provider_id, model),
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": max_tokens or self.max_tokens,
            "temperature": self.temperature,
            "timeout": self.timeout,
        }
        if self.api_key:
            kwargs["api_key"] = self.api_key
        return kwargs

    async def complete(self, prompt: str, model: Optional[str] = None,
                       max_tokens: Optional[int] = None, **kwargs) -> str:
        request = self.prepare_request(prompt, model, max_tokens)
        logger.debug(f"Calling {request['model']} (max_tokens={request['max_tokens']})")
        try:
            response = await litellm.acompletion(**request)
        except litellm.AuthenticationError as e:
            raise ProviderError(f"{self.provider_id} authentication failed: {e}",
                                provider=self.provider_id, retryable=False) from e
        except Exception as e:
            raise ProviderError(f"{self.provider_id} API error: {e}", provider=self.provider_id) from e

        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError, KeyError) as e:
            raise ProviderError(f"{self.provider_id} returned an unexpected response shape",
                                provider=self.provider_id) from e
        if not content or not content.strip():
            raise ProviderError(f"{self.provider_id} returned an empty response", provider=self.provider_id)
        return content
