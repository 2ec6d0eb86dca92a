"""Test configuration and fixtures for batchql."""

import os
from typing import AsyncGenerator, List

import pytest
from dotenv import load_dotenv
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession

from batchql.config import Settings
from batchql.db import create_engine, session_factory
from batchql.models import Base

# Try to load environment variables from .env file
load_dotenv()


class QueryCounter:
    """Collects SQL statements sent to the database (``before_cursor_execute``)."""

    def __init__(self):
        self.statements: List[str] = []

    def __call__(self, conn, cursor, statement, parameters, context, executemany):  # noqa: ANN001
        self.statements.append(statement)

    @property
    def selects(self) -> List[str]:
        return [s for s in self.statements if s.lstrip().upper().startswith("SELECT")]

    def reset(self) -> None:
        self.statements.clear()


@pytest.fixture(scope="function")
async def engine():
    """Create a test database engine for each test function."""
    # BATCHQL_TEST_DATABASE_URL points the suite at an external database
    test_db_url = os.getenv("BATCHQL_TEST_DATABASE_URL")
    if test_db_url:
        engine = create_engine(Settings(database_url=test_db_url))
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
            await conn.run_sync(Base.metadata.create_all)
        print(f"Using external database: {test_db_url}")
    else:
        engine = create_engine(Settings())
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    yield engine

    if test_db_url:
        try:
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.drop_all)
        except Exception as e:
            print(f"Failed to clean up external database: {e}")
    await engine.dispose()


@pytest.fixture(scope="function")
async def db_session(engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a new database session for each test function."""
    async with session_factory(engine)() as session:
        yield session


@pytest.fixture(scope="function")
def query_counter(engine):
    counter = QueryCounter()
    event.listen(engine.sync_engine, "before_cursor_execute", counter)
    yield counter
    event.remove(engine.sync_engine, "before_cursor_execute", counter)


# Import fixtures from fixtures module
from tests.fixtures import (  # noqa: E402,F401
    member_types,
    sample_users,
    sample_posts,
    sample_profiles,
    sample_subscriptions,
    populated_db,
)
