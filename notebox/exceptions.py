"""
NoteBox: Exception Hierarchy & Error Policy
==============================================

What:  Application exceptions, the closed set of error kinds, and the
       mapping from each kind to an HTTP status code.
Why:   Route handlers and the Note Store raise typed errors; the global
       handlers registered in main.py turn them into responses. Nothing
       else decides status codes.
Who:   Raised by NoteStore and route handlers; caught by global handlers.

Exception Hierarchy:
    NoteBoxError (base)
    ├── ValidationError   → kind=validation  → 400 {"message": ...}
    ├── NotFoundError     → kind=not_found   → 500, or 404 when surfaced
    └── PersistenceError  → kind=persistence → 500, empty body

Why NotFoundError answers 500 by default:
    Update/delete of a missing id has always been reported to clients the
    same way as a database failure. Settings.surface_not_found switches the
    status to 404 for deployments that want to tell the two apart.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    """Every failure a client can observe falls into exactly one of these."""

    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    PERSISTENCE = "persistence"


class ErrorMessage(str, Enum):
    """Fixed client-facing messages."""

    NO_TITLE = "Title is required"
    NO_DESCRIPTION = "Description is required"
    NO_ID = "ID is required"
    INVALID_BODY = "Invalid request body"
    NOT_FOUND = "Not found"
    SERVER_ERROR = "Server error"


STATUS_BY_KIND: Dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.NOT_FOUND: 500,
    ErrorKind.PERSISTENCE: 500,
}


def status_for(kind: ErrorKind, surface_not_found: bool = False) -> int:
    """HTTP status for an error kind under the configured policy."""
    if kind is ErrorKind.NOT_FOUND and surface_not_found:
        return 404
    return STATUS_BY_KIND[kind]


class NoteBoxError(Exception):
    """
    Base exception for all NoteBox application errors.

    Attributes:
        message:  Human-readable description
        context:  Additional debug info (logged but NOT returned to client)
    """

    kind: ErrorKind = ErrorKind.PERSISTENCE

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(NoteBoxError):
    """
    A required request field is missing or blank, or the body is malformed.

    The message is returned to the client verbatim, so it must be one of
    the fixed ErrorMessage values.
    """

    kind = ErrorKind.VALIDATION

    def __init__(
        self,
        message: str = ErrorMessage.INVALID_BODY.value,
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class NotFoundError(NoteBoxError):
    """
    Update or delete matched no row.

    Raised from the single UPDATE/DELETE statement returning nothing; there
    is no separate existence check.
    """

    kind = ErrorKind.NOT_FOUND

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id is not None:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)
        self.resource_id = resource_id


class PersistenceError(NoteBoxError):
    """
    The database call failed (connection loss, constraint violation, bad query).

    The underlying driver or SQLAlchemy exception is chained as __cause__ and logged
    server-side with its traceback; clients only ever see an empty 500.
    """

    kind = ErrorKind.PERSISTENCE

    def __init__(
        self,
        operation: str = "query",
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["operation"] = operation
        super().__init__(message=f"Database operation '{operation}' failed", context=ctx)
        self.operation = operation
