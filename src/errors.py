"""
Error types raised while loading the catalog and copying output.
"""

from typing import Optional


class CatalogError(Exception):
    """Base class for catalog errors."""


class SourceUnavailable(CatalogError):
    """A required source could not be read (missing file or non-success status)."""

    def __init__(self, source: str, status: Optional[int] = None, reason: str = ""):
        self.source = source
        self.status = status
        self.reason = reason
        message = f"Failed to load {source}"
        if status is not None:
            message += f": {status}"
        elif reason:
            message += f": {reason}"
        super().__init__(message)


class ClipboardWriteFailed(CatalogError):
    """Neither the clipboard command nor the fallback buffer accepted the text."""
