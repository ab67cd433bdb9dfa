"""Configuration management for VisionPress."""

import json
import logging
import os
import platform
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Optional

from .constants import (
    APP_NAME, ASSET_FETCH_TIMEOUT, DEFAULT_MAX_TOKENS, DEFAULT_TEMPERATURE,
    LLM_TIMEOUT, MAX_GENERATION_ATTEMPTS, PROVIDER_ENV_VARS, RETRY_DELAY_SECONDS,
)
from .llm_models import RoutingTable, get_default_model
from .print_specs import DPI
from .themes import COVER_THEMES, THEME_PACKS, CoverTheme, ThemePack

logger = logging.getLogger(__name__)


class ConfigManager:
    """Manages application configuration and persistence."""

    def __init__(self, config_dir: Optional[Path] = None):
        """
        Initialize configuration manager.

        Args:
            config_dir: Override for the configuration directory
        """
        self.config_dir = config_dir or self._get_config_dir()
        self.config_path = self.config_dir / "config.json"
        self.config = self._load_config()

    def _get_config_dir(self) -> Path:
        """Get platform-specific configuration directory."""
        system = platform.system()
        home = Path.home()

        if system == "Windows":
            base = Path(os.getenv("APPDATA", home / "AppData" / "Roaming"))
            return base / APP_NAME
        elif system == "Darwin":  # macOS
            return home / "Library" / "Application Support" / APP_NAME
        else:  # Linux/Unix
            base = Path(os.getenv("XDG_CONFIG_HOME", home / ".config"))
            return base / APP_NAME

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from disk."""
        if self.config_path.exists():
            try:
                return json.loads(self.config_path.read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError) as e:
                logger.warning(f"Ignoring unreadable config {self.config_path}: {e}")
                return {}
        return {}

    def save(self) -> None:
        """Save current configuration to disk."""
        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.config_path.write_text(
            json.dumps(self.config, indent=2),
            encoding="utf-8"
        )

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value."""
        return self.config.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Set configuration value."""
        self.config[key] = value

    def get_provider_config(self, provider: str) -> Dict[str, Any]:
        """Get provider-specific configuration."""
        providers = self.config.get("providers", {})
        return providers.get(provider, {})

    def set_provider_config(self, provider: str, config: Dict[str, Any]) -> None:
        """Set provider-specific configuration."""
        if "providers" not in self.config:
            self.config["providers"] = {}
        self.config["providers"][provider] = config

    def get_api_key(self, provider: str) -> Optional[str]:
        """Get API key for a provider, falling back to environment variables."""
        key = self.get_provider_config(provider).get("api_key")
        if key:
            return key
        for var in PROVIDER_ENV_VARS.get(provider, []):
            key = os.getenv(var)
            if key:
                return key
        return None

    def set_api_key(self, provider: str, api_key: str) -> None:
        """Set API key for a provider."""
        provider_config = self.get_provider_config(provider)
        provider_config["api_key"] = api_key
        self.set_provider_config(provider, provider_config)


@dataclass(frozen=True)
class ProviderSettings:
    """Settings for one LLM provider."""

    provider_id: str
    model: Optional[str] = None
    api_key: Optional[str] = None
    max_tokens: int = DEFAULT_MAX_TOKENS
    temperature: float = DEFAULT_TEMPERATURE
    timeout: float = LLM_TIMEOUT

    def to_config(self) -> Dict[str, Any]:
        """Provider constructor config dictionary."""
        return {
            "api_key": self.api_key,
            "model": self.model or get_default_model(self.provider_id),
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "timeout": self.timeout,
        }


@dataclass(frozen=True)
class WorkbookConfig:
    """
    Read-only configuration shared by the builder, generator, validator and
    renderer. Built once at startup and passed in explicitly.
    """

    dpi: int = DPI
    max_attempts: int = MAX_GENERATION_ATTEMPTS
    retry_delay: float = RETRY_DELAY_SECONDS
    asset_timeout: float = ASSET_FETCH_TIMEOUT
    max_concurrency: int = 8
    routing: RoutingTable = field(default_factory=RoutingTable)
    providers: Dict[str, ProviderSettings] = field(default_factory=dict)
    cover_themes: Dict[str, CoverTheme] = field(default_factory=lambda: dict(COVER_THEMES))
    theme_packs: Dict[str, ThemePack] = field(default_factory=lambda: dict(THEME_PACKS))

    @classmethod
    def default(cls) -> "WorkbookConfig":
        return cls()

    @classmethod
    def from_config_manager(cls, manager: ConfigManager) -> "WorkbookConfig":
        """Build settings from the persisted user configuration."""
        providers = {}
        for provider_id in ("gemini", "openai", "anthropic"):
            pconf = manager.get_provider_config(provider_id)
            providers[provider_id] = ProviderSettings(
                provider_id=provider_id,
                model=pconf.get("model"),
                api_key=manager.get_api_key(provider_id),
                max_tokens=int(pconf.get("max_tokens", DEFAULT_MAX_TOKENS)),
                temperature=float(pconf.get("temperature", DEFAULT_TEMPERATURE)),
                timeout=float(pconf.get("timeout", LLM_TIMEOUT)),
            )
        return cls(
            dpi=int(manager.get("dpi", DPI)),
            max_attempts=int(manager.get("max_attempts", MAX_GENERATION_ATTEMPTS)),
            retry_delay=float(manager.get("retry_delay", RETRY_DELAY_SECONDS)),
            asset_timeout=float(manager.get("asset_timeout", ASSET_FETCH_TIMEOUT)),
            providers=providers,
        )

    def provider_settings(self, provider_id: str) -> ProviderSettings:
        return self.providers.get(provider_id) or ProviderSettings(provider_id=provider_id)

    def with_overrides(self, **changes) -> "WorkbookConfig":
        return replace(self, **changes)

    def cover_theme(self, theme_id: Optional[str]) -> CoverTheme:
        return self.cover_themes.get(theme_id or "") or self.cover_themes["executive_dark"]

    def theme_pack(self, theme_id: Optional[str]) -> ThemePack:
        return self.theme_packs.get((theme_id or "").lower()) or self.theme_packs["executive"]
