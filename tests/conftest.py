"""Shared test fixtures and configuration."""
import os

import pytest
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from cms_admin.database import build_sessionmaker
from cms_admin.models import Base

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/15")


class FakeCache:
    """In-memory DistributedCache that records removals."""

    def __init__(self) -> None:
        self.store: dict[str, str] = {}
        self.removed: list[str] = []

    def get_key(self, *parts: object) -> str:
        return ":".join(["test", *(str(part) for part in parts)])

    async def get(self, key: str) -> str | None:
        return self.store.get(key)

    async def set(self, key: str, value: str, ttl_seconds: int | None = None) -> None:
        self.store[key] = value

    async def remove(self, key: str) -> None:
        self.removed.append(key)
        self.store.pop(key, None)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
async def engine():
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def session(engine):
    async with build_sessionmaker(engine)() as session:
        yield session


@pytest.fixture
def cache():
    return FakeCache()
