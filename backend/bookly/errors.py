# backend/bookly/errors.py
"""
Error taxonomy shared by the engine, the stores and the HTTP layer.

- ValidationError: malformed input, rejected before touching the store
- NotFoundError: unknown room / booking
- ConflictError: range not free or misaligned (expected, frequent path)
- PermissionDeniedError: caller may not modify the booking
- StorageError: store unavailable or write failed
"""

from typing import Optional


class BooklyError(Exception):
    """Base class for all domain errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(BooklyError):
    def __init__(
        self,
        message: str = "Validation failed",
        field_errors: Optional[dict[str, list[str]]] = None,
    ):
        super().__init__(message)
        self.field_errors = field_errors or {}


class NotFoundError(BooklyError):
    pass


class ConflictError(BooklyError):
    def __init__(self, message: str = "range unavailable or misaligned", suggestions=None):
        super().__init__(message)
        self.suggestions = suggestions


class PermissionDeniedError(BooklyError):
    pass


class StorageError(BooklyError):
    pass
