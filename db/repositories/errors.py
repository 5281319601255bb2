"""
Repository-layer exceptions.
"""

from __future__ import annotations


class RepositoryError(Exception):
    """Base exception for persistence failures."""


class StoreUnavailableError(RepositoryError):
    """Raised when the database cannot be reached at all."""


class RecordNotFoundError(RepositoryError, LookupError):
    """Raised when a referenced row does not exist."""
