"""
CodeVault Backend — Abstract Document Store Interface
======================================================

What:  Abstract base class defining the contract for the storage collaborator.
Why:   Services only ever talk to this interface, so the SQL implementation can
       be swapped for another backend (or an in-memory fake in tests) without
       touching any handler logic.
How:   Concrete implementations inherit from DocumentStore and implement every
       abstract method. Records cross the boundary as plain dicts.
Who:   Called by UserService and CodeService.

Record shape:
    {"id": "<string id>", <field>: <value>, ...}
    Ids are always strings at this boundary, whatever the backend stores.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, List, Optional

Record = Dict[str, Any]


class Entity(str, Enum):
    """Collections known to the store."""

    USERS = "users"
    CODES = "codes"


class DocumentStore(ABC):
    """
    Abstract interface for CRUD persistence of Users and Codes.

    Contract:
        - Identifiers are generated by the store on insert
        - A malformed identifier behaves exactly like an unknown one
        - Unique-key violations raise ConflictError
        - Every other backend failure raises StorageError; raw driver
          exceptions never leave the store
    """

    @abstractmethod
    async def insert(self, entity: Entity, fields: Record) -> Record:
        """Persist a new record and return it, including its generated id."""
        ...

    @abstractmethod
    async def find_all(
        self, entity: Entity, filters: Optional[Record] = None
    ) -> List[Record]:
        """
        Return every record of `entity`, optionally narrowed by equality
        filters (e.g. {"owner_id": "..."} or {"email": "..."}).
        """
        ...

    @abstractmethod
    async def find_by_id(self, entity: Entity, record_id: str) -> Optional[Record]:
        """Return the record with `record_id`, or None when absent."""
        ...

    @abstractmethod
    async def update(
        self, entity: Entity, record_id: str, patch: Record
    ) -> Optional[Record]:
        """Apply `patch` to the record and return it, or None when absent."""
        ...

    @abstractmethod
    async def remove(self, entity: Entity, record_id: str) -> bool:
        """Delete the record. Returns False when it did not exist."""
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        """Lightweight connectivity probe used by GET /health."""
        ...
