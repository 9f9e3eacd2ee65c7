"""
Blog API — Custom Exception Hierarchy
=====================================

What:  Application-specific exceptions for the failure modes of the API.
How:   Each exception carries a message and an optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return `{"message": ...}` JSON bodies with the right status code.
Who:   Raised by the post service, the router and the database handle.

Exception Hierarchy:
    BlogApiError (base)
    ├── ValidationError          → 400 Bad Request (client can fix)
    └── DatabaseError            → 500 Internal Server Error
        └── RecordNotFoundError  → 500 as well; lookups that miss are
                                   reported like any other storage failure
"""

from typing import Any, Dict, Optional


class BlogApiError(Exception):
    """
    Base exception for all Blog API application errors.

    Attributes:
        message:  Error description
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(BlogApiError):
    """
    Raised when the request body is missing something the endpoint needs.

    When:    Missing title/content/author on create, path/body id mismatch
             on update, or a body that does not parse into the request model.
    HTTP:    400 Bad Request, `message` is returned verbatim.
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class DatabaseError(BlogApiError):
    """
    Raised when a storage operation fails.

    What:    A query, insert, update or delete failed, or the database is
             not connected.
    HTTP:    500 Internal Server Error

    The message returned to the client is always the generic
    "Internal server error"; `message` and `context` go to the log only.
    """

    def __init__(
        self,
        message: str = "A database error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RecordNotFoundError(DatabaseError):
    """
    Raised when a lookup by id finds no blog post.

    Clients see the same 500 as any other storage failure. Mapping this
    class to 404 in main.py would change the public contract.
    """

    def __init__(
        self,
        resource: str = "blog post",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)
        self.resource_id = resource_id
