"""VisionPress - print-ready workbook generation."""

from .core.constants import VERSION, __version__

__all__ = ["VERSION", "__version__"]
