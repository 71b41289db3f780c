"""Error taxonomy surfaced by the registration core."""

from __future__ import annotations


class UserServiceError(Exception):
    """Base class for errors that carry a caller-facing reason string."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason

    def __str__(self) -> str:
        return self.reason


class ValidationError(UserServiceError):
    """Raw input could not be turned into a value object."""


class ConflictError(UserServiceError):
    """Email or username is already held by another account."""


class DomainError(UserServiceError):
    """An account invariant was violated by the caller."""


class StoreError(UserServiceError):
    """The backing store failed (timeout, lost connection, ...)."""


class NotFoundError(UserServiceError):
    """The referenced account does not exist in the store."""
