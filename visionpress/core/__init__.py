"""Core functionality for VisionPress."""

from .config import ConfigManager, WorkbookConfig
from .constants import (
    APP_NAME,
    VERSION,
    __version__,
    __author__,
    __license__,
)
from .errors import (
    WorkbookError,
    MalformedPageError,
    ProviderError,
    AssetFetchError,
    PrintValidationError,
)
from .print_specs import BindingType, LayoutMeta, TrimSize, resolve_layout

__all__ = [
    "APP_NAME",
    "VERSION",
    "__version__",
    "__author__",
    "__license__",
    "ConfigManager",
    "WorkbookConfig",
    "WorkbookError",
    "MalformedPageError",
    "ProviderError",
    "AssetFetchError",
    "PrintValidationError",
    "BindingType",
    "LayoutMeta",
    "TrimSize",
    "resolve_layout",
]
