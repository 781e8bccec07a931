"""
Xync Backend — Custom Exception Hierarchy
=========================================

What:  Application-specific exceptions, one per failure class the API exposes.
How:   Each exception carries a client-safe message and an optional context
       dict. Global exception handlers (registered in main.py) map them to
       structured JSON error responses with the matching HTTP status.
Who:   Raised by services, the token/credential helpers and the auth middleware.

Exception Hierarchy:
    XyncError (base)
    ├── ValidationError              → 400 Bad Request
    ├── AuthenticationError          → 401 Unauthorized
    │   ├── InvalidCredentialsError      (login: unknown email OR wrong password)
    │   ├── MissingTokenError            (no / non-bearer Authorization header)
    │   ├── MalformedTokenError          (not a token, or missing claims)
    │   ├── InvalidTokenError            (signature does not verify)
    │   └── TokenExpiredError            (now >= exp)
    ├── NotFoundError                → 404 Not Found (missing OR owned by someone else)
    ├── ConflictError                → 409 Conflict
    ├── StorageUnavailableError      → 503 Service Unavailable (safe to retry)
    └── DatabaseError                → 500 Internal Server Error

The AuthenticationError subclasses exist for logging and tests. The HTTP
layer renders all of them with the same generic message.
"""

from typing import Any, Dict, Optional


class XyncError(Exception):
    """
    Base exception for all Xync application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, returned only where a handler opts in)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(XyncError):
    """
    Raised when client input breaks a business rule.

    When:    Cyclic category parent, reference to a category/tag the caller
             does not own, empty update payload for a required field.
    HTTP:    400 Bad Request

    Schema-level problems (wrong types, missing fields) are rejected earlier
    by FastAPI with 422.
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


class AuthenticationError(XyncError):
    """
    Raised when the caller's identity cannot be established.

    HTTP:    401 Unauthorized, always with the same generic body so a client
             cannot tell an expired token from a forged one, or an unknown
             email from a wrong password.
    """

    def __init__(
        self,
        message: str = "Authentication required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class InvalidCredentialsError(AuthenticationError):
    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message="Invalid email or password", context=context)


class MissingTokenError(AuthenticationError):
    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message="Authentication required", context=context)


class MalformedTokenError(AuthenticationError):
    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message="Malformed token", context=context)


class InvalidTokenError(AuthenticationError):
    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message="Invalid token", context=context)


class TokenExpiredError(AuthenticationError):
    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message="Token expired", context=context)


class NotFoundError(XyncError):
    """
    Raised when a requested resource does not exist for the caller.

    HTTP:    404 Not Found

    Rows that exist but belong to another user raise exactly this error with
    exactly this message. The message never echoes the requested id.
    """

    def __init__(
        self,
        resource: str = "resource",
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["resource"] = resource
        super().__init__(message=f"{resource.capitalize()} not found", context=ctx)
        self.resource = resource


class ConflictError(XyncError):
    """
    Raised when a write collides with a uniqueness constraint.

    When:    Duplicate email on registration, duplicate tag or category name
             for the same owner. Detected from the storage constraint, so it
             also fires when two concurrent requests race.
    HTTP:    409 Conflict
    """

    def __init__(
        self,
        message: str = "Resource already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class StorageUnavailableError(XyncError):
    """
    Raised when the database stays unreachable after the internal retry.

    When:    Connection/pool timeouts, statement timeouts, deadlock or
             serialization failures that persisted across all attempts.
    HTTP:    503 Service Unavailable with Retry-After
    """

    def __init__(
        self,
        message: str = "The storage backend is temporarily unavailable. Please retry.",
        retry_after: int = 1,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after


class DatabaseError(XyncError):
    """
    Raised when a database operation fails for a non-transient reason.

    HTTP:    500 Internal Server Error

    The client only ever sees a generic message. Driver error text, SQL and
    constraint names stay in the server log.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
