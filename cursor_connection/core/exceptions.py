"""Pagination exceptions.

Every precondition failure is raised before any query is issued. Errors
coming from the data source itself (SQLAlchemy connectivity, timeouts,
constraint violations) are not wrapped and reach the caller unchanged.
"""

from __future__ import annotations

from typing import Any


class PaginationError(Exception):
    """Base exception for cursor pagination.

    Attributes:
        message: Error description
        details: Additional context about the error
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        """Initialize pagination error.

        Args:
            message: Error description
            details: Additional context about the error
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Format error message with details."""
        if self.details:
            details_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


class InvalidPaginationArguments(PaginationError, ValueError):
    """The pagination call itself is malformed.

    Raised for an empty or unparseable ``order``, both ``before`` and
    ``after``, both ``first`` and ``last``, neither of them, or a page
    size that is not a non-negative integer within the configured maximum.

    Attributes:
        argument: Name of the offending argument (if applicable)
    """

    def __init__(self, message: str, argument: str | None = None):
        self.argument = argument
        details = {"argument": argument} if argument else {}
        super().__init__(message, details=details)


class MalformedCursor(PaginationError, ValueError):
    """A ``before``/``after`` cursor cannot be compared against the order.

    Attributes:
        missing_key: The order field the cursor has no value for
    """

    def __init__(self, message: str, missing_key: str | None = None):
        self.missing_key = missing_key
        details = {"missing_key": missing_key} if missing_key else {}
        super().__init__(message, details=details)


class InvalidSchema(PaginationError):
    """The model has no primary key or unique group to make the order total.

    Without one, two records may share the same sort-key tuple and
    "strictly after the cursor" stops being well defined.

    Attributes:
        model_name: Name of the model being paginated (if known)
    """

    def __init__(self, message: str, model_name: str | None = None):
        self.model_name = model_name
        details = {"model": model_name} if model_name else {}
        super().__init__(message, details=details)


__all__ = [
    "InvalidPaginationArguments",
    "InvalidSchema",
    "MalformedCursor",
    "PaginationError",
]
