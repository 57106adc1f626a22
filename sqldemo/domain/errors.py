"""
Error types for the Basic SQL Demo.

`StoreError` is the single failure kind surfaced by data-access operations.
`RecordError` covers invariant violations on the in-memory record and never
involves the store.
"""

from __future__ import annotations

from typing import Optional


class StoreError(Exception):
    """
    Raised when the backing store rejects or cannot perform an operation.

    Attributes
    ----------
    operation : str
        Human-readable description of the attempted operation.
    cause : BaseException | None
        The underlying driver exception, kept for diagnostics.
    """

    def __init__(self, operation: str, cause: Optional[BaseException] = None) -> None:
        message = operation if cause is None else f"{operation}: {cause}"
        super().__init__(message)
        self.operation = operation
        self.cause = cause


class RecordError(ValueError):
    """Invalid use of a `Record`."""


class IdentityAlreadyAssignedError(RecordError):
    """Raised when assigning an identity to a record that already has one."""

    def __init__(self, current: int, attempted: Optional[int] = None) -> None:
        message = f"Record identity is already assigned (current={current}"
        if attempted is not None:
            message += f", attempted={attempted}"
        super().__init__(message + ")")
        self.current = current
        self.attempted = attempted


__all__ = ["StoreError", "RecordError", "IdentityAlreadyAssignedError"]
