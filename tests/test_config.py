"""Tests for persisted configuration and provider lookup."""

import asyncio

import pytest

from visionpress.core.config import ConfigManager, WorkbookConfig
from visionpress.core.errors import ProviderError
from visionpress.providers import OfflineProvider, clear_provider_cache, get_provider


@pytest.fixture(autouse=True)
def no_env_keys(monkeypatch):
    for var in ("GEMINI_API_KEY", "GOOGLE_API_KEY", "OPENAI_API_KEY", "ANTHROPIC_API_KEY"):
        monkeypatch.delenv(var, raising=False)


class TestConfigManager:
    def test_save_and_reload(self, tmp_path):
        manager = ConfigManager(tmp_path)
        manager.set("dpi", 150)
        manager.set_api_key("openai", "sk-test")
        manager.save()

        reloaded = ConfigManager(tmp_path)
        assert reloaded.get("dpi") == 150
        assert reloaded.get_api_key("openai") == "sk-test"

    def test_api_key_from_environment(self, tmp_path, monkeypatch):
        monkeypatch.setenv("GOOGLE_API_KEY", "env-key")
        assert ConfigManager(tmp_path).get_api_key("gemini") == "env-key"
        assert ConfigManager(tmp_path).get_api_key("anthropic") is None

    def test_unreadable_config_is_ignored(self, tmp_path):
        (tmp_path / "config.json").write_text("{not json", encoding="utf-8")
        assert ConfigManager(tmp_path).config == {}


class TestWorkbookConfig:
    def test_from_config_manager(self, tmp_path):
        manager = ConfigManager(tmp_path)
        manager.set("dpi", 200)
        manager.set("retry_delay", 0.25)
        manager.set_provider_config("anthropic", {"api_key": "ak", "model": "claude-test", "max_tokens": 512})
        config = WorkbookConfig.from_config_manager(manager)
        assert config.dpi == 200
        assert config.retry_delay == 0.25
        settings = config.provider_settings("anthropic")
        assert settings.api_key == "ak"
        assert settings.to_config()["model"] == "claude-test"
        assert settings.max_tokens == 512

    def test_unknown_provider_gets_defaults(self):
        settings = WorkbookConfig().provider_settings("mistral")
        assert settings.provider_id == "mistral"
        assert settings.api_key is None

    def test_theme_fallbacks(self):
        config = WorkbookConfig()
        assert config.cover_theme("no-such-theme") == config.cover_theme("executive_dark")
        assert config.theme_pack("FAITH") == config.theme_pack("faith")
        assert config.theme_pack(None) == config.theme_pack("executive")

    def test_with_overrides_returns_a_copy(self):
        config = WorkbookConfig()
        changed = config.with_overrides(dpi=72)
        assert changed.dpi == 72
        assert config.dpi != 72


class TestProviders:
    def setup_method(self):
        clear_provider_cache()

    def teardown_method(self):
        clear_provider_cache()

    def test_offline_provider_is_cached(self):
        provider = get_provider("Offline")
        assert isinstance(provider, OfflineProvider)
        assert get_provider("offline") is provider
        assert get_provider("offline", use_cache=False) is not provider

    def test_offline_provider_refuses_without_retry(self):
        with pytest.raises(ProviderError) as excinfo:
            asyncio.run(get_provider("offline").complete("hello"))
        assert not excinfo.value.retryable
        assert get_provider("offline").validate_auth()[0]
