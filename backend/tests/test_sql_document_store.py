"""
CodeVault Backend — SQL Document Store Tests
=============================================

What:  Tests SQLDocumentStore against a real (in-memory SQLite) database.
Why:   The error translation and id handling only show up with a real engine.
How:   aiosqlite + StaticPool so every connection sees the same in-memory DB;
       tables come from Base.metadata, not from Alembic.

What we test:
    ✅ insert / find_by_id / find_all / update / remove round trips
    ✅ Malformed ids behave like unknown ids
    ✅ Duplicate email → ConflictError, driver failure → StorageError
    ✅ Unknown filter fields are rejected
    ✅ Missing or nulled NOT NULL columns → ValidationError, never a false 409
"""

from unittest.mock import AsyncMock
from uuid import uuid4

import pytest
import pytest_asyncio
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from codevault.database import Base
from codevault.exceptions import ConflictError, StorageError, ValidationError
from codevault.storage.base import Entity
from codevault.storage.sql_store import SQLDocumentStore


@pytest_asyncio.fixture
async def session():
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, expire_on_commit=False)
    async with factory() as db_session:
        yield db_session

    await engine.dispose()


@pytest.fixture
def store(session):
    return SQLDocumentStore(session)


class TestSQLDocumentStoreUsers:
    @pytest.mark.asyncio
    async def test_insert_and_find(self, store):
        created = await store.insert(Entity.USERS, {"email": "a@example.com", "name": "Ada"})

        assert isinstance(created["id"], str)
        found = await store.find_by_id(Entity.USERS, created["id"])
        assert found == {
            "id": created["id"],
            "email": "a@example.com",
            "name": "Ada",
            "age": None,
            "country": None,
        }

    @pytest.mark.asyncio
    async def test_find_unknown_and_malformed_ids(self, store):
        assert await store.find_by_id(Entity.USERS, str(uuid4())) is None
        assert await store.find_by_id(Entity.USERS, "not-a-uuid") is None

    @pytest.mark.asyncio
    async def test_find_all_with_filter(self, store):
        await store.insert(Entity.USERS, {"email": "a@example.com", "name": "Ada"})
        await store.insert(Entity.USERS, {"email": "b@example.com", "name": "Bob"})

        assert len(await store.find_all(Entity.USERS)) == 2
        matches = await store.find_all(Entity.USERS, {"email": "b@example.com"})
        assert [user["name"] for user in matches] == ["Bob"]

    @pytest.mark.asyncio
    async def test_update(self, store):
        created = await store.insert(Entity.USERS, {"email": "a@example.com", "name": "Ada"})

        updated = await store.update(Entity.USERS, created["id"], {"age": 36})

        assert updated["age"] == 36
        assert updated["name"] == "Ada"
        assert await store.update(Entity.USERS, "not-a-uuid", {"age": 1}) is None

    @pytest.mark.asyncio
    async def test_remove_twice(self, store):
        created = await store.insert(Entity.USERS, {"email": "a@example.com", "name": "Ada"})

        assert await store.remove(Entity.USERS, created["id"]) is True
        assert await store.remove(Entity.USERS, created["id"]) is False

    @pytest.mark.asyncio
    async def test_duplicate_email_conflicts(self, store):
        await store.insert(Entity.USERS, {"email": "a@example.com", "name": "Ada"})

        with pytest.raises(ConflictError):
            await store.insert(Entity.USERS, {"email": "a@example.com", "name": "Other"})

    @pytest.mark.asyncio
    async def test_unknown_filter_field(self, store):
        with pytest.raises(StorageError):
            await store.find_all(Entity.USERS, {"password": "x"})


class TestSQLDocumentStoreCodes:
    @pytest.mark.asyncio
    async def test_owner_filter(self, store):
        owner_id = str(uuid4())
        mine = await store.insert(
            Entity.CODES, {"language": "python", "body": "print(1)", "owner_id": owner_id}
        )
        await store.insert(
            Entity.CODES, {"language": "go", "body": "x", "owner_id": str(uuid4())}
        )

        found = await store.find_all(Entity.CODES, {"owner_id": owner_id})

        assert [code["id"] for code in found] == [mine["id"]]
        assert found[0]["owner_id"] == owner_id

    @pytest.mark.asyncio
    async def test_missing_not_null_column_is_validation_error(self, store):
        with pytest.raises(ValidationError) as exc_info:
            await store.insert(Entity.CODES, {"language": "py", "owner_id": str(uuid4())})

        assert exc_info.value.field == "body"
        assert await store.find_all(Entity.CODES) == []

    @pytest.mark.asyncio
    async def test_nulling_not_null_column_is_validation_error(self, store):
        created = await store.insert(
            Entity.CODES, {"language": "go", "body": "x", "owner_id": str(uuid4())}
        )

        with pytest.raises(ValidationError, match="Field cannot be null: body"):
            await store.update(Entity.CODES, created["id"], {"body": None})

        assert (await store.find_by_id(Entity.CODES, created["id"]))["body"] == "x"

    @pytest.mark.asyncio
    async def test_malformed_owner_filter_matches_nothing(self, store):
        await store.insert(
            Entity.CODES, {"language": "go", "body": "x", "owner_id": str(uuid4())}
        )

        assert await store.find_all(Entity.CODES, {"owner_id": "not-a-uuid"}) == []


class TestSQLDocumentStoreFailures:
    @pytest.mark.asyncio
    async def test_driver_failure_becomes_storage_error(self, store, session):
        session.execute = AsyncMock(
            side_effect=OperationalError("SELECT", {}, Exception("connection lost"))
        )

        with pytest.raises(StorageError) as exc_info:
            await store.find_all(Entity.USERS)

        assert exc_info.value.context["error_type"] == "OperationalError"
        assert "connection lost" not in exc_info.value.message

    @pytest.mark.asyncio
    async def test_health_check(self, store, session):
        assert await store.health_check() is True

        session.execute = AsyncMock(
            side_effect=OperationalError("SELECT 1", {}, Exception("down"))
        )
        assert await store.health_check() is False
