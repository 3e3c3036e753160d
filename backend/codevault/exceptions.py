"""
CodeVault Backend — Custom Exception Hierarchy
===============================================

What:  Defines application-specific exceptions for each failure kind.
Why:   Handlers and services signal WHAT went wrong; the error pipeline in
       error_handlers.py alone decides how that looks on the wire.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers catch these and return a structured JSON
       body with the matching HTTP status code.
Who:   Raised by services, the auth gate and the storage layer.
When:  During request processing, whenever a request cannot complete.

Exception Hierarchy:
    CodeVaultError (base)
    ├── UnauthenticatedError   → 401 Unauthorized
    ├── ForbiddenError         → 403 Forbidden
    ├── ValidationError        → 400 Bad Request
    ├── NotFoundError          → 404 Not Found
    ├── ConflictError          → 409 Conflict
    └── StorageError           → 500 Internal Server Error

Token codec failures (TokenExpiredError, InvalidSignatureError,
MalformedTokenError) live in services/token_service.py. They never reach the
pipeline directly: the auth gate folds all of them into UnauthenticatedError.
"""

from typing import Any, Dict, Optional


class CodeVaultError(Exception):
    """
    Base exception for all CodeVault application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
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


class UnauthenticatedError(CodeVaultError):
    """
    Raised when a protected route is reached without a usable token.

    HTTP:    401 Unauthorized
    Context: `reason` holds the internal sub-reason (missing_token, expired,
             invalid_signature, malformed). It is logged only; the client
             always sees the same message so the gate cannot be used as an
             oracle for which check failed.
    """

    def __init__(
        self,
        message: str = "Unauthorized",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ForbiddenError(CodeVaultError):
    """
    Raised when an authenticated identity may not touch a resource.

    HTTP:    403 Forbidden
    When:    A non-admin identity reads, updates or deletes another user's code.
    """

    def __init__(
        self,
        message: str = "Forbidden",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ValidationError(CodeVaultError):
    """
    Raised when client input fails validation.

    HTTP:    400 Bad Request
    When:    A required field is missing or null, a code's owner does not exist.

    Example response:
        {"error": {"message": "Missing required field: email"}}
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


class NotFoundError(CodeVaultError):
    """
    Raised when a requested resource does not exist.

    HTTP:    404 Not Found
    When:    GET/PATCH/DELETE /users/{id} or /codes/{id} with an unknown id.

    The response message is always the generic "Not found"; resource name
    and id are kept in the context for the server log.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message="Not found", context=ctx)
        self.resource = resource
        self.resource_id = resource_id


class ConflictError(CodeVaultError):
    """
    Raised when a write would break a uniqueness rule.

    HTTP:    409 Conflict
    When:    POST /users or PATCH /users/{id} with an email that is already taken.
    """

    def __init__(
        self,
        message: str = "Resource already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class StorageError(CodeVaultError):
    """
    Raised when the storage collaborator fails unexpectedly.

    HTTP:    500 Internal Server Error
    When:    Connection lost mid-query, driver timeout, deadlock, etc.

    Security Note:
        The message returned to the client is always generic. The driver
        error is kept in the context and logged server-side only.
    """

    def __init__(
        self,
        message: str = "A storage error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
