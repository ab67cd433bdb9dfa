"""Base provider interface for text generation."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple


class TextProvider(ABC):
    """Abstract base class for AI text providers."""

    provider_id = "base"

    def __init__(self, config: Dict[str, Any]):
        """
        Initialize the provider.

        Args:
            config: Provider configuration including API key and model settings
        """
        self.config = config
        self.api_key = config.get("api_key")

    @abstractmethod
    async def complete(
        self,
        prompt: str,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
        **kwargs
    ) -> str:
        """
        Generate text from a prompt.

        Args:
            prompt: Full prompt text
            model: Model to use (provider-specific)
            max_tokens: Output token limit

        Returns:
            Raw response text

        Raises:
            ProviderError: If the call fails
        """
        pass

    @abstractmethod
    def validate_auth(self) -> Tuple[bool, str]:
        """
        Validate authentication credentials.

        Returns:
            Tuple of (is_valid, status_message)
        """
        pass

    @abstractmethod
    def get_models(self) -> List[str]:
        """Get available models for this provider."""
        pass

    def get_default_model(self) -> Optional[str]:
        """Get the model used when none is requested."""
        models = self.get_models()
        return self.config.get("model") or (models[0] if models else None)
