# Storage package init
"""
CodeVault Backend — Storage Layer
==================================

What:  The storage collaborator: persistence for Users and Codes.
How:   Services depend on the abstract DocumentStore; routes obtain a concrete
       store per request through the get_store() dependency, which tests
       replace via app.dependency_overrides.

Inventory:
    - base.py:      DocumentStore (abstract), Entity, Record
    - sql_store.py: SQLDocumentStore (async SQLAlchemy)
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from codevault.database import get_db_session
from codevault.storage.base import DocumentStore, Entity, Record
from codevault.storage.sql_store import SQLDocumentStore

__all__ = ["DocumentStore", "Entity", "Record", "SQLDocumentStore", "get_store"]


def get_store(session: AsyncSession = Depends(get_db_session)) -> DocumentStore:
    """FastAPI dependency: a DocumentStore bound to the request's session."""
    return SQLDocumentStore(session)
