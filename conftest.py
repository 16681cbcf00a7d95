"""Pytest configuration: set test env before any package imports so DB and settings use test values."""

import os
import tempfile

import pytest
import pytest_asyncio

# Set before files_manager.db.session or files_manager.config are used
_tmp = tempfile.mkdtemp(prefix="files_manager_test_")
os.environ.setdefault("FILES_MANAGER_DB_PATH", os.path.join(_tmp, "test.db"))
os.environ.setdefault("FILES_MANAGER_FOLDER_PATH", os.path.join(_tmp, "blobs"))
os.environ.setdefault("FILES_MANAGER_RATE_LIMIT_ENABLED", "false")
# Bootstrap user for API tests (connect as test@example.com / testpass123)
os.environ.setdefault("FILES_MANAGER_ADMIN_EMAIL", "test@example.com")
os.environ.setdefault("FILES_MANAGER_ADMIN_INITIAL_PASSWORD", "testpass123")


@pytest_asyncio.fixture
async def db_session(tmp_path):
    """AsyncSession on a fresh SQLite file with all tables created."""
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

    from files_manager.db.session import Base
    from files_manager.files.models import FileEntry  # noqa: F401 - register with Base
    from files_manager.sessions.models import SessionEntry  # noqa: F401
    from files_manager.users.models import User  # noqa: F401

    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'unit.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session
    await engine.dispose()


class FakeSessionStore:
    """In-memory SessionStore that records the TTL of every set."""

    def __init__(self) -> None:
        self.data = {}
        self.ttls = {}

    async def set(self, key, value, ttl_seconds):
        self.data[key] = value
        self.ttls[key] = ttl_seconds

    async def get(self, key):
        return self.data.get(key)

    async def delete(self, key):
        self.data.pop(key, None)
        self.ttls.pop(key, None)


class FakeFileDocuments:
    """In-memory FileDocuments with auto-incrementing ids."""

    def __init__(self) -> None:
        self.rows = []
        self.fail_insert = False

    @staticmethod
    def _matches(doc, query):
        return all(doc.get(k) == v for k, v in query.items())

    async def find_one(self, query):
        for doc in self.rows:
            if self._matches(doc, query):
                return dict(doc)
        return None

    async def find(self, query, skip=0, limit=None):
        matches = [dict(d) for d in self.rows if self._matches(d, query)]
        end = None if limit is None else skip + limit
        for doc in matches[skip:end]:
            yield doc

    async def insert_one(self, document):
        if self.fail_insert:
            raise RuntimeError("database unavailable")
        doc = dict(document)
        doc["_id"] = len(self.rows) + 1
        self.rows.append(doc)
        return doc["_id"]

    async def find_one_and_update(self, query, changes):
        for doc in self.rows:
            if self._matches(doc, query):
                doc.update(changes)
                return dict(doc)
        return None


@pytest.fixture
def fake_sessions():
    return FakeSessionStore()


@pytest.fixture
def fake_documents():
    return FakeFileDocuments()
