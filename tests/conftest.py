"""Shared fixtures for VisionPress tests."""

import json
from typing import List, Optional, Tuple

import pytest
from PIL import Image

from visionpress.core.ai_content import AIContentGenerator
from visionpress.core.config import WorkbookConfig
from visionpress.core.errors import ProviderError
from visionpress.core.retry import RetryPolicy
from visionpress.providers.base import TextProvider


async def no_sleep(delay: float) -> None:
    return None


class FakeProvider(TextProvider):
    """Returns canned JSON page content and records prompts."""

    provider_id = "fake"

    def __init__(self, response: Optional[str] = None):
        super().__init__({})
        self.response = response or json.dumps({
            "textBlocks": [
                {"role": "title", "content": "Generated Title"},
                {"role": "body", "content": "Generated body text."},
            ],
            "tableBlocks": [],
        })
        self.prompts: List[str] = []

    async def complete(self, prompt: str, model: Optional[str] = None,
                       max_tokens: Optional[int] = None, **kwargs) -> str:
        self.prompts.append(prompt)
        return self.response

    def validate_auth(self) -> Tuple[bool, str]:
        return True, "ok"

    def get_models(self) -> List[str]:
        return ["fake-model"]


class FailingProvider(TextProvider):
    """Raises a retryable error on every call."""

    provider_id = "failing"

    def __init__(self):
        super().__init__({})
        self.calls = 0

    async def complete(self, prompt: str, model: Optional[str] = None,
                       max_tokens: Optional[int] = None, **kwargs) -> str:
        self.calls += 1
        raise ProviderError("service unavailable", provider=self.provider_id)

    def validate_auth(self) -> Tuple[bool, str]:
        return False, "always fails"

    def get_models(self) -> List[str]:
        return []


@pytest.fixture
def config():
    # 72 dpi keeps rasterized test pages small
    return WorkbookConfig(dpi=72, retry_delay=0.0, max_concurrency=4)


@pytest.fixture
def retry_policy():
    return RetryPolicy(max_attempts=3, base_delay=0.5, sleep=no_sleep)


@pytest.fixture
def fake_provider():
    return FakeProvider()


@pytest.fixture
def failing_provider():
    return FailingProvider()


@pytest.fixture
def fake_generator(config, fake_provider, retry_policy):
    return AIContentGenerator(config, provider=fake_provider, retry_policy=retry_policy)


@pytest.fixture
def failing_generator(config, failing_provider, retry_policy):
    return AIContentGenerator(config, provider=failing_provider, retry_policy=retry_policy)


@pytest.fixture
def make_image(tmp_path):
    """Write a solid-color PNG of the given size and return its path as a string."""

    def _make(width: int, height: int, name: str = "image.png", color=(40, 90, 160)) -> str:
        path = tmp_path / name
        Image.new("RGB", (width, height), color).save(path)
        return str(path)

    return _make
