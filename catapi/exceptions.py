"""
Cat Registry API — Custom Exception Hierarchy
==============================================

What:  Defines application-specific exceptions for every failure the handlers can report.
Why:   Handlers raise and never format errors themselves; one boundary reporter
       (exception handlers registered in main.py) turns them into the error envelope.
How:   Each exception class carries a message, an optional context dict and the
       HTTP status code the boundary reporter should use.

Exception Hierarchy:
    CatApiError (base)               → 500
    ├── ValidationError              → 400 Bad Request (aggregated field messages)
    ├── AuthorizationError           → 400 Bad Request ("Not admin" / "No user")
    ├── AuthenticationError          → 401 Unauthorized (bad or expired token)
    ├── NotFoundError                → 404 Not Found
    ├── RateLimitExceededError       → 429 Too Many Requests
    ├── FileStorageError             → 500 Internal Server Error
    └── DatabaseError                → 500 Internal Server Error

Note that AuthorizationError uses 400, not 403. A DENY from the gate and
malformed input are reported the same way to the client; only a genuinely
absent record (or an owner-filtered query that matched nothing) is a 404.
"""

from typing import Any, Dict, Iterable, Optional


class CatApiError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:      User-facing error description (safe to return in API response)
        context:      Additional debug info (logged but NOT returned to client)
        status_code:  HTTP status the boundary reporter responds with
        error_code:   Machine-readable code placed in the envelope's `error` field
    """

    status_code: int = 500
    error_code: str = "server_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(CatApiError):
    """
    Raised when client input fails validation.

    When:    Missing required cat fields, bad coordinates, unsupported upload, duplicate email.
    HTTP:    400 Bad Request

    Several field errors are folded into one message with `from_field_errors`:
        "Field required: cat_name, Input should be greater than 0: weight"
    """

    status_code = 400
    error_code = "validation_error"

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

    @classmethod
    def from_field_errors(cls, errors: Iterable[Dict[str, Any]]) -> "ValidationError":
        """
        Build one aggregated error from pydantic-style error dicts.

        Each entry contributes "<msg>: <field>" where field is the last
        string element of its `loc` tuple.
        """
        parts = []
        fields = []
        for error in errors:
            loc = [str(item) for item in error.get("loc", ()) if isinstance(item, str)]
            field = loc[-1] if loc else "body"
            fields.append(field)
            parts.append(f"{error.get('msg', 'Invalid value')}: {field}")
        return cls(message=", ".join(parts), context={"fields": fields})


class AuthorizationError(CatApiError):
    """
    Raised when the authorization gate denies an operation.

    When:    No caller for an authenticated operation ("No user"),
             non-admin caller for an admin-only operation ("Not admin"),
             caller is not the owner of an explicitly supplied resource ("Not owner").
    HTTP:    400 Bad Request
    """

    status_code = 400
    error_code = "authorization_error"

    def __init__(
        self,
        message: str = "Not allowed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class AuthenticationError(CatApiError):
    """
    Raised when a bearer token is present but cannot be trusted, or login fails.

    HTTP:    401 Unauthorized (with WWW-Authenticate: Bearer)
    """

    status_code = 401
    error_code = "authentication_error"

    def __init__(
        self,
        message: str = "Invalid or expired token",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(CatApiError):
    """
    Raised when a requested resource does not exist.

    When:    GET /api/cats/{id} with an unknown id, or an owner-filtered
             update/delete that matched nothing.
    HTTP:    404 Not Found

    The store returns None for missing records; services convert None into
    this exception.
    """

    status_code = 404
    error_code = "not_found"

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        if message is None:
            message = f"No {resource} found"
            if resource_id:
                message = f"No {resource} found with id '{resource_id}'"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class FileStorageError(CatApiError):
    """
    Raised when file system operations fail.

    When:    Disk full, permission denied, directory not writable, I/O error.
    HTTP:    500 Internal Server Error
    """

    status_code = 500
    error_code = "server_error"

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(CatApiError):
    """
    Raised when database operations fail unexpectedly.

    HTTP:    500 Internal Server Error

    The message returned to the client is always generic; the original
    error is kept in `context` and logged server-side only.
    """

    status_code = 500
    error_code = "server_error"

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(CatApiError):
    """
    Raised when a client exceeds the per-IP request rate limit.

    HTTP:    429 Too Many Requests (with Retry-After header)
    """

    status_code = 429
    error_code = "rate_limit_exceeded"

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Rate limit exceeded. Please wait {retry_after} seconds before making more requests."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after
