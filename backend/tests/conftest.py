"""
CodeVault Backend — Test Configuration (conftest.py)
=====================================================

What:  Shared pytest fixtures for the entire test suite.
Why:   Provides reusable test infrastructure (fake store, token codec, API client).
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixtures (function-scoped):
    ├── test_settings: Settings with a known signing secret
    ├── codec: TokenCodec built from test_settings
    ├── fake_store: In-memory DocumentStore that records every call
    ├── make_identity: Builds IdentityClaim objects for service tests
    ├── app: Fresh FastAPI app with get_store overridden by fake_store
    └── client: HTTPX AsyncClient bound to `app`
"""

import os
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional
from uuid import uuid4

# Override settings for testing BEFORE any codevault imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["JWT_SECRET"] = "test-secret-key-that-is-long-enough-for-hs256"
os.environ["LOG_LEVEL"] = "WARNING"

import jwt
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from codevault.config import Settings
from codevault.exceptions import ConflictError
from codevault.main import create_app
from codevault.services.token_service import IdentityClaim, TokenCodec, build_token_codec
from codevault.storage import get_store
from codevault.storage.base import DocumentStore, Entity, Record

TEST_SECRET = "test-secret-key-that-is-long-enough-for-hs256"


class FakeDocumentStore(DocumentStore):
    """
    Dict-backed DocumentStore for tests.

    Every call is appended to `calls` as (method, entity) so tests can
    assert the store was (or was not) touched. Emails are unique, like
    the real users table.
    """

    def __init__(self):
        self.collections: Dict[Entity, Dict[str, Record]] = {
            Entity.USERS: {},
            Entity.CODES: {},
        }
        self.calls: List[tuple] = []

    async def insert(self, entity: Entity, fields: Record) -> Record:
        entity = Entity(entity)
        self.calls.append(("insert", entity))
        if entity == Entity.USERS and any(
            user["email"] == fields.get("email") for user in self.collections[entity].values()
        ):
            raise ConflictError(message="A record with the same unique value already exists")
        record = {"id": str(uuid4()), **fields}
        self.collections[entity][record["id"]] = record
        return dict(record)

    async def find_all(self, entity: Entity, filters: Optional[Record] = None) -> List[Record]:
        entity = Entity(entity)
        self.calls.append(("find_all", entity))
        return [
            dict(record)
            for record in self.collections[entity].values()
            if all(record.get(key) == value for key, value in (filters or {}).items())
        ]

    async def find_by_id(self, entity: Entity, record_id: str) -> Optional[Record]:
        entity = Entity(entity)
        self.calls.append(("find_by_id", entity))
        record = self.collections[entity].get(record_id)
        return dict(record) if record else None

    async def update(self, entity: Entity, record_id: str, patch: Record) -> Optional[Record]:
        entity = Entity(entity)
        self.calls.append(("update", entity))
        record = self.collections[entity].get(record_id)
        if record is None:
            return None
        record.update(patch)
        return dict(record)

    async def remove(self, entity: Entity, record_id: str) -> bool:
        entity = Entity(entity)
        self.calls.append(("remove", entity))
        return self.collections[entity].pop(record_id, None) is not None

    async def health_check(self) -> bool:
        return True

    # ── Seeding helpers (not recorded as calls) ──────────────────────────

    def seed(self, entity: Entity, **fields: Any) -> Record:
        record = {"id": str(uuid4()), **fields}
        self.collections[Entity(entity)][record["id"]] = record
        return dict(record)


@pytest.fixture
def test_settings():
    """Settings with a fixed secret and default resource rules."""
    return Settings(
        jwt_secret=TEST_SECRET,
        database_url="sqlite+aiosqlite:///./test.db",
        admin_subject_ids="admin",
        log_level="WARNING",
    )


@pytest.fixture
def codec(test_settings) -> TokenCodec:
    return build_token_codec(test_settings)


@pytest.fixture
def expired_codec() -> TokenCodec:
    """Signs with the real secret but lives two hours in the past."""
    return TokenCodec(
        secret=TEST_SECRET,
        clock=lambda: datetime.now(timezone.utc) - timedelta(hours=2),
    )


@pytest.fixture
def fake_store() -> FakeDocumentStore:
    return FakeDocumentStore()


@pytest.fixture
def make_identity():
    """Factory for IdentityClaim objects: make_identity("user-1", role="admin")."""

    def _make(subject_id: str, role: str = "user") -> IdentityClaim:
        return IdentityClaim(
            subject_id=subject_id,
            role=role,
            expires_at=datetime.now(timezone.utc) + timedelta(hours=1),
        )

    return _make


@pytest.fixture
def app(test_settings, fake_store):
    """A fresh app per test, with storage replaced by the fake store."""
    application = create_app(test_settings)
    application.dependency_overrides[get_store] = lambda: fake_store
    return application


@pytest_asyncio.fixture
async def client(app):
    """
    HTTPX AsyncClient talking to the app without a running server.

    Usage:
        async def test_health(client):
            response = await client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client


def bearer(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def forge_token(raw_payload: bytes) -> str:
    """An HS256-shaped token with a hand-written payload and a junk signature."""
    segments = [b'{"alg":"HS256","typ":"JWT"}', raw_payload, b"\x00" * 32]
    return ".".join(jwt.utils.base64url_encode(segment).decode() for segment in segments)
