"""
CodeVault Backend — SQLAlchemy Document Store
==============================================

What:  DocumentStore implementation over the `users` and `codes` tables.
How:   One instance wraps one AsyncSession (one request). Every operation runs
       inside `_guard`, which translates SQLAlchemy and driver failures into
       the application exception hierarchy.
Who:   Built per request by get_store(); used by the services.

Error Translation:
    Missing NOT NULL value → ValidationError (400), checked before the write
    IntegrityError         → ConflictError (409), e.g. duplicate email
    SQLAlchemyError        → StorageError (500), detail logged only
    asyncio.TimeoutError   → StorageError (500), command_timeout exceeded

Writes are flushed immediately. The transaction itself commits in
get_db_session, but a constraint violation must surface while the handler
is still running so the error pipeline can render it.
"""

import asyncio
import logging
import uuid
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional, Type

from sqlalchemy import inspect, select, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.types import Uuid

from codevault.database import Base
from codevault.exceptions import ConflictError, StorageError, ValidationError
from codevault.models.code import Code
from codevault.models.user import User
from codevault.storage.base import DocumentStore, Entity, Record

logger = logging.getLogger(__name__)

MODELS: Dict[Entity, Type[Base]] = {
    Entity.USERS: User,
    Entity.CODES: Code,
}

_NO_MATCH = object()


def _parse_uuid(value: Any) -> Optional[uuid.UUID]:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError, AttributeError):
        return None


class SQLDocumentStore(DocumentStore):
    """
    Document-style CRUD on top of an async SQLAlchemy session.

    Attributes:
        session: The request's AsyncSession (owned by get_db_session)
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    # ── Helpers ───────────────────────────────────────────────────────────

    @staticmethod
    def _model(entity: Entity) -> Type[Base]:
        return MODELS[Entity(entity)]

    @staticmethod
    def _to_record(instance: Base) -> Record:
        """Convert an ORM instance to a plain dict with string ids."""
        record: Record = {}
        for attr in inspect(instance).mapper.column_attrs:
            value = getattr(instance, attr.key)
            record[attr.key] = str(value) if isinstance(value, uuid.UUID) else value
        return record

    @staticmethod
    def _coerce(model: Type[Base], key: str, value: Any) -> Any:
        """
        Convert a filter/patch value to the column's Python type.

        Returns _NO_MATCH for a value that can never equal a stored one
        (a malformed UUID), so the caller can short-circuit.
        """
        column = inspect(model).columns.get(key)
        if column is None:
            raise StorageError(context={"reason": "unknown_field", "field": key})
        if isinstance(column.type, Uuid) and value is not None:
            parsed = _parse_uuid(value)
            return _NO_MATCH if parsed is None else parsed
        return value

    @staticmethod
    def _check_not_null(model: Type[Base], values: Record, partial: bool) -> None:
        """
        Reject None for NOT NULL columns before the database does.

        Required-field configuration may be narrower than the table.
        """
        for column in inspect(model).columns:
            if column.nullable or column.primary_key or column.default is not None:
                continue
            if partial:
                if column.key in values and values[column.key] is None:
                    raise ValidationError(
                        message=f"Field cannot be null: {column.key}", field=column.key
                    )
            elif values.get(column.key) is None:
                raise ValidationError(
                    message=f"Missing required field: {column.key}", field=column.key
                )

    async def _get(self, entity: Entity, record_id: str) -> Optional[Base]:
        key = _parse_uuid(record_id)
        if key is None:
            return None
        return await self.session.get(self._model(entity), key)

    @asynccontextmanager
    async def _guard(self, operation: str, entity: Entity) -> AsyncIterator[None]:
        try:
            yield
        except IntegrityError as e:
            await self.session.rollback()
            logger.warning(
                "Integrity violation during %s on %s: %s",
                operation, Entity(entity).value, e.orig,
            )
            raise ConflictError(
                message="A record with the same unique value already exists",
                context={"operation": operation, "entity": Entity(entity).value},
            )
        except (SQLAlchemyError, asyncio.TimeoutError) as e:
            logger.error(
                "Storage failure during %s on %s: %s",
                operation, Entity(entity).value, str(e),
                exc_info=True,
            )
            raise StorageError(
                context={
                    "operation": operation,
                    "entity": Entity(entity).value,
                    "error_type": type(e).__name__,
                },
            )

    # ── DocumentStore API ─────────────────────────────────────────────────

    async def insert(self, entity: Entity, fields: Record) -> Record:
        model = self._model(entity)
        values = {key: self._coerce(model, key, value) for key, value in fields.items()}
        if _NO_MATCH in values.values():
            raise StorageError(
                context={"reason": "malformed_reference", "entity": Entity(entity).value}
            )
        self._check_not_null(model, values, partial=False)
        async with self._guard("insert", entity):
            instance = model(**values)
            self.session.add(instance)
            await self.session.flush()
        logger.debug("Inserted %s %s", Entity(entity).value, instance.id)
        return self._to_record(instance)

    async def find_all(
        self, entity: Entity, filters: Optional[Record] = None
    ) -> List[Record]:
        model = self._model(entity)
        query = select(model)
        for key, value in (filters or {}).items():
            coerced = self._coerce(model, key, value)
            if coerced is _NO_MATCH:
                return []
            query = query.where(getattr(model, key) == coerced)
        async with self._guard("find_all", entity):
            result = await self.session.execute(query)
            instances = list(result.scalars().all())
        return [self._to_record(instance) for instance in instances]

    async def find_by_id(self, entity: Entity, record_id: str) -> Optional[Record]:
        async with self._guard("find_by_id", entity):
            instance = await self._get(entity, record_id)
        return None if instance is None else self._to_record(instance)

    async def update(
        self, entity: Entity, record_id: str, patch: Record
    ) -> Optional[Record]:
        model = self._model(entity)
        self._check_not_null(model, patch, partial=True)
        async with self._guard("update", entity):
            instance = await self._get(entity, record_id)
            if instance is None:
                return None
            for key, value in patch.items():
                coerced = self._coerce(model, key, value)
                if coerced is _NO_MATCH:
                    raise StorageError(context={"reason": "malformed_reference", "field": key})
                setattr(instance, key, coerced)
            await self.session.flush()
        return self._to_record(instance)

    async def remove(self, entity: Entity, record_id: str) -> bool:
        async with self._guard("remove", entity):
            instance = await self._get(entity, record_id)
            if instance is None:
                return False
            await self.session.delete(instance)
            await self.session.flush()
        return True

    async def health_check(self) -> bool:
        try:
            await self.session.execute(text("SELECT 1"))
            return True
        except (SQLAlchemyError, asyncio.TimeoutError, OSError) as e:
            logger.warning("Storage health check failed: %s", str(e))
            return False
