"""
CodeVault Backend — Code Request/Response Schemas
==================================================

What:  Typed request bodies and responses for the /codes routes.

Ownership:
    Neither request schema has an owner field. The owner of a new code is
    the authenticated identity, and ownership never changes afterwards, so
    an `owner_id` key in a body is dropped with the other unknown keys.
"""

from typing import Optional

from pydantic import BaseModel, Field


class CodeCreate(BaseModel):
    """Body of POST /codes."""

    language: Optional[str] = Field(default=None, min_length=1, max_length=50)
    body: Optional[str] = Field(default=None, description="Source text of the snippet")


class CodeUpdate(BaseModel):
    """Body of PATCH /codes/{id}. Only supplied keys are applied."""

    language: Optional[str] = Field(default=None, min_length=1, max_length=50)
    body: Optional[str] = None


class CodeResponse(BaseModel):
    """A stored code snippet."""

    id: str
    language: str
    body: str
    owner_id: str = Field(description="Identifier of the owning user")
