"""Typed failures raised by the category lifecycle operations."""
from __future__ import annotations


class CategoryError(Exception):
    """Base class for category lifecycle failures."""

    code = "category_error"


class RecordNotFound(CategoryError):
    """Raised when a referenced person, application, scholar or record is missing."""

    code = "not_found"


class CategoryConflict(CategoryError):
    """Raised when an active record already occupies an at-most-one slot."""

    code = "conflict"

    def __init__(self, message: str, *, record=None):
        super().__init__(message)
        self.record = record


class InvalidCategoryState(CategoryError):
    """Raised when a record's category does not allow the requested operation."""

    code = "invalid_state"


class ProtectedRecordError(CategoryError):
    """Raised when something attempts to delete a protected (graduated) record."""

    code = "forbidden"


class InvalidRequest(CategoryError):
    """Raised for malformed input, such as a gate lookup without a key."""

    code = "bad_request"


__all__ = [
    "CategoryConflict",
    "CategoryError",
    "InvalidCategoryState",
    "InvalidRequest",
    "ProtectedRecordError",
    "RecordNotFound",
]
