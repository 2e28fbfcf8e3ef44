"""
pytest configuration and shared fixtures for the SafeTrails API tests.

Tests must not require a live MongoDB. We achieve this by:
  1. Patching connect_to_mongo / close_mongo_connection to no-ops so
     FastAPI's lifespan doesn't try to reach a real database.
  2. Setting db_client.client = None (disconnected) so the health check
     reports "disconnected".
  3. Overriding the get_db dependency with an in-memory FakeDB for route
     tests that need persistence.
"""

import asyncio
import os
import re
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from bson import ObjectId
from httpx import ASGITransport, AsyncClient
from pymongo.errors import DuplicateKeyError

# Set env vars BEFORE importing the app so Settings picks them up correctly
os.environ.setdefault("ENVIRONMENT", "test")


# ── In-memory MongoDB emulator ─────────────────────────────────────────────────

def _match_ops(value, cond: dict) -> bool:
    for op, arg in cond.items():
        if op == "$options":
            continue
        if op == "$regex":
            flags = re.IGNORECASE if "i" in cond.get("$options", "") else 0
            if not isinstance(value, str) or not re.search(arg, value, flags):
                return False
        elif op == "$in":
            if value not in arg:
                return False
        elif op == "$gt":
            if value is None or not value > arg:
                return False
        else:
            raise NotImplementedError(op)
    return True


def _matches(doc: dict, query: dict) -> bool:
    for key, cond in query.items():
        if key == "$or":
            if not any(_matches(doc, sub) for sub in cond):
                return False
        elif isinstance(cond, dict) and any(k.startswith("$") for k in cond):
            if not _match_ops(doc.get(key), cond):
                return False
        elif doc.get(key) != cond:
            return False
    return True


class FakeCursor:
    """Chainable find() result supporting sort / skip / limit and async for."""

    def __init__(self, docs: list[dict]):
        self._docs = docs
        self._skip = 0
        self._limit = None

    def sort(self, key: str, direction: int = 1):
        self._docs = sorted(self._docs, key=lambda d: d.get(key), reverse=direction < 0)
        return self

    def skip(self, n: int):
        self._skip = n
        return self

    def limit(self, n: int):
        self._limit = n
        return self

    async def __aiter__(self):
        end = None if self._limit is None else self._skip + self._limit
        for doc in self._docs[self._skip:end]:
            yield doc


class FakeCollection:
    """
    Minimal async-compatible replica of a Motor collection.

    find_one() yields to the event loop before answering, so requests run
    with asyncio.gather interleave the way they can against a real server.
    *unique* lists the fields of a unique index, enforced on insert.
    """

    def __init__(self, unique: tuple[str, ...] = ()):
        self._docs: dict[str, dict] = {}
        self._unique = unique

    async def find_one(self, query: dict):
        await asyncio.sleep(0)
        for doc in self._docs.values():
            if _matches(doc, query):
                return doc
        return None

    def find(self, query: dict | None = None, projection: dict | None = None) -> FakeCursor:
        return FakeCursor([d for d in self._docs.values() if _matches(d, query or {})])

    async def count_documents(self, query: dict) -> int:
        return sum(1 for d in self._docs.values() if _matches(d, query))

    async def insert_one(self, doc: dict):
        if self._unique:
            key = {f: doc.get(f) for f in self._unique}
            if any(_matches(existing, key) for existing in self._docs.values()):
                raise DuplicateKeyError(f"E11000 duplicate key error: {key}")
        oid = doc.get("_id") or ObjectId()
        self._docs[str(oid)] = {**doc, "_id": oid}
        result = MagicMock()
        result.inserted_id = oid
        return result

    async def update_one(self, query: dict, update: dict, upsert: bool = False):
        result = MagicMock()
        result.modified_count = 0
        result.upserted_id = None
        for doc in self._docs.values():
            if _matches(doc, query):
                doc.update(update.get("$set", {}))
                for field, delta in update.get("$inc", {}).items():
                    doc[field] = (doc.get(field) or 0) + delta
                result.modified_count = 1
                return result
        if upsert:
            new_doc = {k: v for k, v in query.items() if not k.startswith("$")}
            new_doc.update(update.get("$setOnInsert", {}))
            new_doc.update(update.get("$set", {}))
            result.upserted_id = (await self.insert_one(new_doc)).inserted_id
        return result

    async def delete_many(self, query: dict):
        doomed = [key for key, doc in self._docs.items() if _matches(doc, query)]
        for key in doomed:
            del self._docs[key]
        result = MagicMock()
        result.deleted_count = len(doomed)
        return result

    async def delete_one(self, query: dict):
        result = MagicMock()
        result.deleted_count = 0
        for key, doc in list(self._docs.items()):
            if _matches(doc, query):
                del self._docs[key]
                result.deleted_count = 1
                break
        return result


class FakeDB:
    """Fake MongoDB database — lazily creates collections."""

    # Mirrors the unique indexes in safetrails.core.database.INDEXES
    _UNIQUE = {"likes": ("post_id", "user_id"), "profiles": ("user_id",)}

    def __init__(self):
        self._cols: dict[str, FakeCollection] = {}

    def __getitem__(self, name: str) -> FakeCollection:
        if name not in self._cols:
            self._cols[name] = FakeCollection(unique=self._UNIQUE.get(name, ()))
        return self._cols[name]


# ── Fixtures ──────────────────────────────────────────────────────────────────

@pytest.fixture(autouse=True)
async def mock_db():
    """
    Patch the MongoDB lifecycle for every test.

    - connect_to_mongo / close_mongo_connection → no-op AsyncMocks
    - db_client.client / db_client.db → None (disconnected)
    """
    with (
        patch("safetrails.core.database.connect_to_mongo", new_callable=AsyncMock),
        patch("safetrails.core.database.close_mongo_connection", new_callable=AsyncMock),
    ):
        import safetrails.core.database as db_module

        original_client = db_module.db_client.client
        original_db = db_module.db_client.db

        db_module.db_client.client = None
        db_module.db_client.db = None

        yield

        db_module.db_client.client = original_client
        db_module.db_client.db = original_db


@pytest.fixture(autouse=True)
def reset_rate_limits():
    """Clear in-memory rate-limit counters so tests stay independent."""
    from safetrails.core.rate_limit import limiter

    limiter.reset()
    yield


@pytest.fixture()
async def client(mock_db):  # noqa: ARG001 — mock_db must run first
    """HTTPX async test client wired to the FastAPI app (no DB)."""
    from safetrails.main import app

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture()
def fake_db():
    """Fresh in-memory DB for each test."""
    return FakeDB()


@pytest.fixture()
async def api_client(fake_db):
    """HTTPX client with get_db overridden to return the in-memory FakeDB."""
    from safetrails.core.database import get_db
    from safetrails.main import app

    app.dependency_overrides[get_db] = lambda: fake_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture()
async def no_db_client():
    """HTTPX client whose get_db dependency reports the database as down."""
    from safetrails.core.database import get_db
    from safetrails.main import app

    app.dependency_overrides[get_db] = lambda: None
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture()
def auth_headers():
    """Factory: Authorization header carrying a valid token for *user_id*."""
    from safetrails.core.security import create_access_token

    def _headers(user_id: str) -> dict:
        return {"Authorization": f"Bearer {create_access_token(user_id)}"}

    return _headers
