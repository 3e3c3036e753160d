"""
CodeVault Backend — User Request/Response Schemas
==================================================

What:  Typed request bodies and responses for the /users routes.
Why:   The decoded body reaches the service as a typed model, not an untyped map.

Why every request field is Optional:
    Which fields a Create must carry is configuration (USER_REQUIRED_FIELDS),
    enforced by UserService. The schema only checks types and formats, and
    silently drops unknown keys.
"""

from typing import Optional

from pydantic import BaseModel, EmailStr, Field


class UserCreate(BaseModel):
    """Body of POST /users. Unknown keys are ignored."""

    email: Optional[EmailStr] = Field(default=None, description="Unique email address")
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    age: Optional[int] = Field(default=None, ge=0, le=150)
    country: Optional[str] = Field(default=None, max_length=100)


class UserUpdate(BaseModel):
    """
    Body of PATCH /users/{id}.

    Only keys present in the body are applied (partial update). Sending
    null for a required field is rejected by the service.
    """

    email: Optional[EmailStr] = None
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    age: Optional[int] = Field(default=None, ge=0, le=150)
    country: Optional[str] = Field(default=None, max_length=100)


class UserResponse(BaseModel):
    """A stored user."""

    id: str = Field(description="Store-generated identifier")
    email: str
    name: str
    age: Optional[int] = None
    country: Optional[str] = None
