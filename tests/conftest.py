import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

import models  # noqa: F401
from database import Base


@pytest.fixture
async def session_factory(tmp_path):
    """Session factory bound to a fresh SQLite file with the schema created."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'books.db'}", poolclass=NullPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
async def session(session_factory):
    async with session_factory() as s:
        yield s
