"""
DevCamper Backend — Custom Exception Hierarchy
================================================

What:  Application-specific exceptions for each error scenario.
How:   Each exception carries a user-facing message and an optional context
       dict. The handlers registered in main.py catch these and render the
       `{"success": false, "error": ...}` envelope with the matching status.
Who:   Raised by services, auth dependencies and the file service.

Exception Hierarchy:
    DevCamperError (base)
    ├── ValidationError          → 400 Bad Request
    │   └── FileTooLargeError    → 413 Payload Too Large
    ├── AuthenticationError      → 401 Unauthorized
    ├── ForbiddenError           → 403 Forbidden
    ├── NotFoundError            → 404 Not Found
    ├── FileStorageError         → 500 Internal Server Error
    ├── DatabaseError            → 500 Internal Server Error
    ├── GeocodingError           → 503 Service Unavailable
    └── RateLimitExceededError   → 429 Too Many Requests

Route handlers never catch these. Every failure travels up to the single
translation step in main.register_exception_handlers().
"""

from typing import Any, Dict, Optional


class DevCamperError(Exception):
    """
    Base exception for all DevCamper application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    status_code = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(DevCamperError):
    """
    Raised when client input breaks a business rule.

    When:  Second bootcamp for a publisher, missing upload, non-image upload,
           duplicate name, malformed listing query.
    HTTP:  400 Bad Request
    """

    status_code = 400

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


class FileTooLargeError(ValidationError):
    """Uploaded file exceeds MAX_FILE_UPLOAD. HTTP 413."""

    status_code = 413

    def __init__(self, max_size: int, actual_size: Optional[int] = None):
        ctx: Dict[str, Any] = {"max_size": max_size}
        if actual_size is not None:
            ctx["actual_size"] = actual_size
        super().__init__(
            message=f"Please upload an image less than {max_size} bytes",
            field="file",
            context=ctx,
        )
        self.max_size = max_size


class AuthenticationError(DevCamperError):
    """
    Raised when the caller cannot be identified.

    When:  No bearer token, a token that fails verification, or a token
           whose subject no longer exists.
    HTTP:  401 Unauthorized
    """

    status_code = 401

    def __init__(
        self,
        message: str = "Not authorized to access this route",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ForbiddenError(DevCamperError):
    """
    Raised when an identified caller may not perform the action.

    When:  Role not allowed on the route, or the caller is neither the
           bootcamp owner nor an admin.
    HTTP:  403 Forbidden
    """

    status_code = 403

    def __init__(
        self,
        message: str = "Not authorized to perform this action",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(DevCamperError):
    """
    Raised when a requested resource does not exist.

    SQLAlchemy returns None for missing rows; services convert that None into
    this exception so the handler can answer 404 with a message naming the id.
    """

    status_code = 404

    def __init__(
        self,
        resource: str = "Resource",
        resource_id: Optional[str] = None,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        if message is None:
            message = f"{resource} not found"
            if resource_id:
                message = f"{resource} not found with id of {resource_id}"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class FileStorageError(DevCamperError):
    """
    Raised when writing an upload to the storage directory fails.

    When:  Disk full, permission denied, directory missing.
    HTTP:  500 Internal Server Error
    """

    status_code = 500

    def __init__(
        self,
        message: str = "Problem with file upload",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(DevCamperError):
    """
    Raised when a database operation fails unexpectedly.

    The message returned to the client is always generic; the SQL error is
    only logged.
    """

    status_code = 500

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class GeocodingError(DevCamperError):
    """
    Raised when the geocoding provider is unreachable or answers with an error.

    No retry is attempted; the first failure ends the request.
    HTTP:  503 Service Unavailable
    """

    status_code = 503

    def __init__(
        self,
        message: str = "Geocoding service is temporarily unavailable",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(DevCamperError):
    """
    Raised when a client exceeds the per-IP request rate limit.

    HTTP:  429 Too Many Requests, with a Retry-After header
    """

    status_code = 429

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"Too many requests. Please wait {retry_after} seconds before retrying."
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after
