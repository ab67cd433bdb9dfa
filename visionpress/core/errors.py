"""Exception types raised by the workbook pipeline."""


class WorkbookError(Exception):
    """Base class for all VisionPress errors."""


class MalformedPageError(WorkbookError):
    """A page was constructed with a payload that does not match its type."""


class ProviderError(WorkbookError):
    """An AI text provider call failed.

    Attributes:
        provider: Provider id the call was routed to
        retryable: Whether repeating the same call may succeed
    """

    def __init__(self, message: str, provider: str = "", retryable: bool = True):
        super().__init__(message)
        self.provider = provider
        self.retryable = retryable


class AssetFetchError(WorkbookError):
    """An image could not be fetched or decoded."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"Failed to load image {url}: {reason}")
        self.url = url
        self.reason = reason


class PrintValidationError(WorkbookError):
    """A document failed the print validation gate."""

    def __init__(self, errors):
        self.errors = list(errors)
        summary = "; ".join(self.errors) if self.errors else "unknown error"
        super().__init__(f"Document is not printable: {summary}")
