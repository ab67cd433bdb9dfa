"""Provider used when no network generation is wanted."""

from typing import List, Optional, Tuple

from ..core.errors import ProviderError
from .base import TextProvider


class OfflineProvider(TextProvider):
    """Always fails without retrying, so callers fall back to template content."""

    provider_id = "offline"

    async def complete(self, prompt: str, model: Optional[str] = None,
                       max_tokens: Optional[int] = None, **kwargs) -> str:
        raise ProviderError("Offline mode: text generation disabled",
                            provider=self.provider_id, retryable=False)

    def validate_auth(self) -> Tuple[bool, str]:
        return True, "Offline mode needs no credentials"

    def get_models(self) -> List[str]:
        return []
