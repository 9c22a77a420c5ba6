"""Exceptions raised by the export engine.

Malformed markup is never an error: extraction absorbs it with defaults.
Callers only need to tell a bad format request apart from a failed render.
"""

from typing import Iterable, Optional


class ExportError(Exception):
    """Base exception for export errors."""
    pass


class UnsupportedFormatError(ExportError, ValueError):
    """Requested export format is not supported. Raised before any rendering."""

    def __init__(self, requested: Optional[str], valid_options: Iterable[str]):
        self.requested = requested
        self.valid_options = list(valid_options)
        super().__init__(
            f"Unsupported export format '{requested}'. "
            f"Valid options: {', '.join(self.valid_options)}"
        )


class RenderError(ExportError):
    """Rendering the binary document failed. Not retried."""

    def __init__(self, format: str, message: str):
        self.format = format
        super().__init__(f"Export to {format.upper()} failed: {message}")
