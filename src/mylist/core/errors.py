"""Error taxonomy for the saved-items list.

Every failure raised by the list engines carries an explicit ``ErrorKind``.
The HTTP layer maps the kind to a status code through a single table and
never inspects the message text.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Category of a list operation failure."""

    VALIDATION = "ValidationError"
    NOT_FOUND = "NotFound"
    ALREADY_EXISTS = "AlreadyExists"
    DEPENDENCY_UNAVAILABLE = "DependencyUnavailable"


class MyListError(Exception):
    """Base class for all list errors."""

    kind: ErrorKind = ErrorKind.VALIDATION

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(MyListError):
    """Malformed or missing input."""

    kind = ErrorKind.VALIDATION


class NotFoundError(MyListError):
    """Referenced content or membership is absent."""

    kind = ErrorKind.NOT_FOUND


class AlreadyExistsError(MyListError):
    """The owner already has this content in their list."""

    kind = ErrorKind.ALREADY_EXISTS


class DependencyUnavailableError(MyListError):
    """The durable store or the shared cache could not be reached in time."""

    kind = ErrorKind.DEPENDENCY_UNAVAILABLE

    def __init__(self, component: str, message: str):
        self.component = component
        super().__init__(message)
