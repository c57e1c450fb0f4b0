"""
Jotter — Custom Exception Hierarchy
====================================

What:  Application-specific exceptions for the three failure modes of a
       note request.
How:   Each exception carries a user-safe message and an optional context
       dict. Context is logged server-side and never rendered.
Who:   Raised by the repository and service layers; `ValidationError` is
       caught by the note routes, the rest by the global handlers in main.py.

Exception Hierarchy:
    JotterError (base)
    ├── ValidationError    → 422, form re-rendered with field messages
    ├── NotFoundError      → 404 error page
    └── PersistenceError   → 500 error page (not retried)
"""

from typing import Any, Dict, Optional


class JotterError(Exception):
    """
    Base exception for all Jotter application errors.

    Attributes:
        message:  User-facing error description (safe to render)
        context:  Additional debug info (logged, never rendered)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(JotterError):
    """
    Raised when submitted note input fails validation.

    Carries everything needed to re-render the form:
        errors: field name → message (e.g. {"title": "The title field is required."})
        values: field name → the text the user submitted
    """

    def __init__(
        self,
        message: str = "Validation failed",
        errors: Optional[Dict[str, str]] = None,
        values: Optional[Dict[str, str]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.errors = errors or {}
        self.values = values or {}
        ctx = context or {}
        if self.errors:
            ctx["fields"] = sorted(self.errors)
        super().__init__(message=message, context=ctx)


class NotFoundError(JotterError):
    """
    Raised when a requested note does not exist.

    SQLAlchemy returns None for missing rows; the repository converts that
    into this exception so the HTTP layer can answer 404.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id is not None:
            message = f"{resource.capitalize()} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)
        self.resource = resource
        self.resource_id = resource_id


class PersistenceError(JotterError):
    """
    Raised when the store is unavailable or a statement fails.

    The rendered message is always generic; the original error type and
    the operation are kept in `context` for the server log.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
