"""
Application-level exceptions.

External-source failures are contained by the sources and services that
call them; these types mark the failures that are allowed to propagate.
"""

from __future__ import annotations


class IndexerError(Exception):
    """Base class for wallet indexer domain errors."""


class MissingCredentialError(IndexerError, ValueError):
    """A required API credential is not configured."""

    def __init__(self, name: str) -> None:
        super().__init__(f"{name} is required but not set")
        self.name = name


class ProviderError(IndexerError):
    """Transfer-history provider returned an error payload or an unusable response."""

    def __init__(self, message: str, *, chain: str | None = None, code: int | None = None) -> None:
        super().__init__(message)
        self.chain = chain
        self.code = code


class InvalidCursorError(IndexerError, ValueError):
    """Pagination cursor is not a non-negative integer offset."""
