from collections.abc import AsyncGenerator, Generator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from tests.integration.models import Base, seed_objects

TEST_DATABASE_URL = "sqlite://"
TEST_ASYNC_DATABASE_URL = "sqlite+aiosqlite://"

engine = create_engine(TEST_DATABASE_URL, poolclass=StaticPool, connect_args={"check_same_thread": False})
SessionLocal = sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
def session() -> Generator[Session, None, None]:
    Base.metadata.create_all(engine)
    with SessionLocal() as db:
        db.add_all(seed_objects())
        db.commit()
        yield db
    Base.metadata.drop_all(engine)

@pytest.fixture
async def async_session() -> AsyncGenerator[AsyncSession, None]:
    # One engine per test: the aiosqlite connection is tied to the running event loop.
    async_engine = create_async_engine(TEST_ASYNC_DATABASE_URL, poolclass=StaticPool, echo=False)
    async with async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    async with async_sessionmaker(async_engine, expire_on_commit=False)() as db:
        db.add_all(seed_objects())
        await db.commit()
        yield db
    await async_engine.dispose()
