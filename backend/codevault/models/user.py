"""
CodeVault Backend — User SQLAlchemy Model
==========================================

What:  ORM model representing the `users` table.
Who:   Used by SQLDocumentStore for the "users" entity and by Alembic.

Table Design Rationale:
    - UUID primary key: Non-sequential, so ids cannot be enumerated
    - email: Unique; a duplicate insert surfaces as ConflictError (409)
    - age / country: Optional profile fields, NULL when not supplied
"""

import uuid
from typing import Optional

from sqlalchemy import Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from codevault.database import Base


class User(Base):
    """
    A registered user. Owns zero or more Code documents through Code.owner_id.

    Deleting a user does not touch its codes unless CASCADE_USER_DELETE is on;
    the two tables are not linked by a foreign key.
    """

    __tablename__ = "users"

    # Why Python-side default: works identically on PostgreSQL and SQLite
    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        index=True,
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    age: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    country: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}')>"
