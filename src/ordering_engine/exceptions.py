"""Exception hierarchy for the ordering engine."""

from __future__ import annotations

from typing import Hashable


class OrderingError(Exception):
    """Base exception for all ordering_engine errors."""


class NotFoundError(OrderingError, LookupError):
    """A referenced exercise, superset or item key does not exist in scope.

    Usually means the caller's snapshot is stale (two reorder events raced).
    """

    def __init__(self, message: str, key: Hashable | None = None) -> None:
        super().__init__(message)
        self.key = key


class InvalidOperationError(OrderingError, ValueError):
    """The operation cannot be applied to well-formed input as requested."""


class InvariantViolation(OrderingError, AssertionError):
    """An internal consistency check failed; signals a caller bug."""
