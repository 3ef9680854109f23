"""
Error types raised by repositories and repository factories.
"""

from __future__ import annotations


class RepositoryError(Exception):
    """Base class for storage failures."""


class NotFoundError(RepositoryError):
    pass


class DuplicateKeyError(RepositoryError):
    """A unique field (e.g. username) already exists in the store."""


class BackendUnavailableError(RepositoryError):
    pass


class BackendConnectionError(Exception):
    """The factory could not open its backend. Fatal at startup."""


class InvalidIdError(RepositoryError):
    """A caller-supplied id is not a well-formed object-id."""
