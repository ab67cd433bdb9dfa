"""
Centralized LLM provider and model definitions, plus the routing table that
picks a provider for each kind of workbook content.

When adding new models or providers, update this file ONLY.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple
import logging

logger = logging.getLogger(__name__)


@dataclass
class LLMProvider:
    """Represents an LLM provider with available models and configuration."""
    id: str
    display_name: str
    models: List[str]
    requires_api_key: bool = True
    prefix: str = ''  # LiteLLM prefix (e.g., 'gemini/', 'anthropic/')


# Models are ordered from preferred to fallback
LLM_PROVIDERS = {
    'gemini': LLMProvider(
        id='gemini',
        display_name='Google',
        models=[
            'gemini-2.5-flash',
            'gemini-2.5-pro',
            'gemini-2.0-flash',
        ],
        prefix='gemini/'
    ),

    'openai': LLMProvider(
        id='openai',
        display_name='OpenAI',
        models=[
            'gpt-4o',
            'gpt-4.1',
            'gpt-4.1-mini',
        ],
        prefix=''  # No prefix for OpenAI
    ),

    'anthropic': LLMProvider(
        id='anthropic',
        display_name='Anthropic',
        models=[
            'claude-sonnet-4-5',
            'claude-opus-4-1',
            'claude-3-5-haiku',
        ],
        prefix='anthropic/'  # LiteLLM requires "anthropic/" prefix
    ),
}


def get_provider_models(provider_id: str) -> List[str]:
    """Get list of models for a provider."""
    provider = LLM_PROVIDERS.get(provider_id.lower())
    return provider.models if provider else []


def get_default_model(provider_id: str) -> Optional[str]:
    """Get the default (first) model for a provider."""
    models = get_provider_models(provider_id)
    return models[0] if models else None


def litellm_model_name(provider_id: str, model: str) -> str:
    """Prefix a model name the way LiteLLM expects for the provider."""
    provider = LLM_PROVIDERS.get(provider_id.lower())
    prefix = provider.prefix if provider else ''
    if prefix and not model.startswith(prefix):
        return f"{prefix}{model}"
    return model


@dataclass(frozen=True)
class RoutingRule:
    keywords: Tuple[str, ...]
    provider: str


@dataclass(frozen=True)
class RoutingTable:
    """
    Static content-kind to provider routing.

    Rules are checked in order; the first rule with a keyword contained in
    the content kind wins.
    """

    rules: Tuple[RoutingRule, ...] = field(default_factory=lambda: DEFAULT_ROUTING_RULES)
    default: str = 'gemini'

    def select(self, kind: str) -> str:
        kind = (kind or '').upper()
        for rule in self.rules:
            if any(keyword in kind for keyword in rule.keywords):
                return rule.provider
        return self.default


DEFAULT_ROUTING_RULES = (
    RoutingRule(('VISION', 'GALLERY'), 'gemini'),
    RoutingRule(('FINANCIAL', 'BUDGET', 'NET_WORTH', 'RETIREMENT'), 'openai'),
    RoutingRule(('REFLECTION', 'REVIEW', 'JOURNAL', 'PRAYER'), 'anthropic'),
)
