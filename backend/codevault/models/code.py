"""
CodeVault Backend — Code SQLAlchemy Model
==========================================

What:  ORM model representing the `codes` table: a snippet of source text
       tagged with its language and owned by a user.
Who:   Used by SQLDocumentStore for the "codes" entity and by Alembic.

Ownership:
    owner_id stores a User id by value. It is indexed (GET /codes?owner_id=
    filters on it) but not a foreign key: the store keeps document-store
    semantics, where deleting a user leaves its codes in place.
"""

import uuid

from sqlalchemy import String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from codevault.database import Base


class Code(Base):
    """A code snippet owned by one user."""

    __tablename__ = "codes"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    # Short tag such as "python" or "javascript"
    language: Mapped[str] = mapped_column(String(50), nullable=False)

    # Why TEXT: snippets have no natural length limit
    body: Mapped[str] = mapped_column(Text, nullable=False)

    owner_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<Code(id={self.id}, language='{self.language}', owner_id={self.owner_id})>"
