"""
Exception types raised by the Error Code Viewer core.
"""
from __future__ import annotations


class ViewerError(Exception):
    """Base class for recoverable viewer errors."""


class UnsupportedFormatError(ViewerError):
    """The declared format or file suffix is not one the adapters handle."""

    def __init__(self, declared_format: object, source_name: str = ""):
        self.declared_format = declared_format
        self.source_name = source_name
        where = f" ({source_name})" if source_name else ""
        super().__init__(f"Unsupported file format: {declared_format}{where}")


class MalformedSourceError(ViewerError):
    """The content cannot be decoded under its declared format."""


class SourceUnavailableError(ViewerError):
    """A file read or network fetch failed."""
