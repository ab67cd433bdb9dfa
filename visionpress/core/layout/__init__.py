"""Document model and page rendering."""

from .models import Document, Page, PageType
from .engine import RenderResult, WorkbookRenderer

__all__ = ["Document", "Page", "PageType", "RenderResult", "WorkbookRenderer"]
