"""
Custom exceptions for blogkit.

Error philosophy:
  - FrontMatterError -> FAIL for the document: a single-post load propagates it,
    the metadata listing logs a warning and skips the post.
  - OSError on an existing document -> propagated unchanged to the caller.
  - Bad dates, malformed schema.json overrides, malformed Markdown and unsafe
    markup are recovered locally and never raised.
"""

from typing import Optional


class BlogKitError(Exception):
    """Base exception for all blogkit errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class FrontMatterError(BlogKitError):
    """Raised when a document's header block is present but is not valid YAML."""
