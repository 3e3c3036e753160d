"""
CodeVault Backend — Shared Schemas
===================================

What:  Response models shared across routers: errors, confirmations, auth, health.
"""

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field


# ══════════════════════════════════════════════════════════════════════════
# Error Response Models (produced only by error_handlers.py)
# ══════════════════════════════════════════════════════════════════════════


class ErrorDetail(BaseModel):
    message: str = Field(description="Human-readable error description")


class ErrorResponse(BaseModel):
    """
    Body of every failure response.

    Example:
        {"error": {"message": "Forbidden"}}
    """

    error: ErrorDetail


class RouteNotFoundResponse(BaseModel):
    """
    Body returned when no route matches the path or method.

    Example:
        {"error": "Not found"}
    """

    error: str = "Not found"


# ══════════════════════════════════════════════════════════════════════════
# Success Models
# ══════════════════════════════════════════════════════════════════════════


class ConfirmationResponse(BaseModel):
    """Returned by update and delete operations instead of the record."""

    message: str
    id: str


class TokenRequest(BaseModel):
    """Body of POST /auth/token."""

    email: EmailStr


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int = Field(description="Seconds until the token expires")


class IdentityResponse(BaseModel):
    """The decoded identity of the current request (GET /auth/me)."""

    subject_id: str
    role: str
    expires_at: datetime


class HealthResponse(BaseModel):
    """
    Health check response.

    status: healthy (200) when the store answers, unhealthy (503) otherwise.
    """

    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
