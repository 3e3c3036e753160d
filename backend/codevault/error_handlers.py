"""
CodeVault Backend — Central Error Pipeline
===========================================

What:  Maps every failure kind to an HTTP status and a uniform JSON body.
Why:   This is the single place responses for failures are shaped. Routes,
       services, the auth gate and the store only ever raise.
How:   FastAPI's exception_handler registry intercepts each exception type.

Handler table:
    UnauthenticatedError    → 401  {"error": {"message": "Unauthorized"}}
    ForbiddenError          → 403  {"error": {"message": "Forbidden"}}
    ValidationError         → 400  {"error": {"message": "<field-level message>"}}
    RequestValidationError  → 400  (FastAPI body/query validation, same shape)
    NotFoundError           → 404  {"error": {"message": "Not found"}}
    ConflictError           → 409
    StorageError            → 500  generic message, detail logged only
    CodeVaultError (base)   → 500  generic message
    Unmatched route/method  → 404  {"error": "Not found"}
    Exception (fallback)    → 500  generic message, stack trace logged

Security: handlers NEVER expose internal details (driver errors, token
failure sub-reasons, stack traces). Details go to the log with the request id.
"""

import logging
from typing import Any, Dict, Optional, Sequence

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from codevault.exceptions import (
    CodeVaultError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    StorageError,
    UnauthenticatedError,
    ValidationError,
)
from codevault.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)

GENERIC_SERVER_ERROR = "An internal error occurred. Please try again later."


def error_response(
    status_code: int,
    message: str,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    """Build the standard failure body: {"error": {"message": ...}}."""
    return JSONResponse(
        status_code=status_code,
        content={"error": {"message": message}},
        headers=headers,
    )


def route_not_found_response() -> JSONResponse:
    return JSONResponse(status_code=404, content={"error": "Not found"})


def _describe_validation_error(errors: Sequence[Dict[str, Any]]) -> str:
    """Turn FastAPI's error list into one field-level message."""
    if not errors:
        return "Invalid request"
    first = errors[0]
    loc = [part for part in first.get("loc", ()) if part not in ("body", "query", "path")]
    reason = first.get("msg", "Invalid value")
    if loc and all(isinstance(part, str) for part in loc):
        return f"{'.'.join(loc)}: {reason}"
    return f"Invalid request body: {reason}"


def register_exception_handlers(app: FastAPI) -> None:
    """Register global exception handlers for consistent error responses."""

    @app.exception_handler(UnauthenticatedError)
    async def handle_unauthenticated(request: Request, exc: UnauthenticatedError):
        rid = request_id_var.get("")
        logger.info(
            "[%s] Unauthenticated %s %s: %s",
            rid, request.method, request.url.path, exc.context.get("reason", "unknown"),
        )
        return error_response(401, "Unauthorized", headers={"WWW-Authenticate": "Bearer"})

    @app.exception_handler(ForbiddenError)
    async def handle_forbidden(request: Request, exc: ForbiddenError):
        rid = request_id_var.get("")
        logger.warning("[%s] Forbidden: %s", rid, exc.context)
        return error_response(403, "Forbidden")

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        rid = request_id_var.get("")
        logger.warning("[%s] Validation error: %s", rid, exc.message)
        return error_response(400, exc.message)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        rid = request_id_var.get("")
        message = _describe_validation_error(exc.errors())
        logger.warning("[%s] Request validation error: %s", rid, message)
        return error_response(400, message)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        rid = request_id_var.get("")
        logger.info("[%s] Not found: %s", rid, exc.context)
        return error_response(404, "Not found")

    @app.exception_handler(ConflictError)
    async def handle_conflict(request: Request, exc: ConflictError):
        rid = request_id_var.get("")
        logger.warning("[%s] Conflict: %s | Context: %s", rid, exc.message, exc.context)
        return error_response(409, exc.message)

    @app.exception_handler(StorageError)
    async def handle_storage_error(request: Request, exc: StorageError):
        rid = request_id_var.get("")
        logger.error("[%s] Storage error: %s | Context: %s", rid, exc.message, exc.context)
        return error_response(500, GENERIC_SERVER_ERROR)

    @app.exception_handler(CodeVaultError)
    async def handle_app_error(request: Request, exc: CodeVaultError):
        rid = request_id_var.get("")
        logger.error(
            "[%s] Unclassified application error %s: %s | Context: %s",
            rid, type(exc).__name__, exc.message, exc.context,
        )
        return error_response(500, GENERIC_SERVER_ERROR)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        # No route matched the path (404) or the method (405)
        if exc.status_code in (404, 405):
            return route_not_found_response()
        return error_response(exc.status_code, str(exc.detail), headers=exc.headers)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return error_response(500, GENERIC_SERVER_ERROR)
