"""Engine/session setup, schema creation and reference-data seeding."""
from __future__ import annotations

import logging
from typing import Any, Dict, List

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from .config import Settings
from .models import Base, MemberType, MemberTypeId
from .store import Store

logger = logging.getLogger(__name__)

MEMBER_TYPES: List[Dict[str, Any]] = [
    {'id': MemberTypeId.basic, 'discount': 2.3, 'posts_limit_per_month': 20},
    {'id': MemberTypeId.business, 'discount': 7.7, 'posts_limit_per_month': 100},
]


def create_engine(settings: Settings) -> AsyncEngine:
    url = settings.database_url
    if url.startswith("sqlite") and ":memory:" in url:
        # one shared in-memory database for every connection
        engine = create_async_engine(
            url,
            echo=settings.sql_echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        engine = create_async_engine(url, echo=settings.sql_echo, pool_pre_ping=True)
    if engine.dialect.name == "sqlite":
        enable_sqlite_foreign_keys(engine)
    return engine


def enable_sqlite_foreign_keys(engine: AsyncEngine) -> None:
    """SQLite ignores ON DELETE CASCADE unless foreign keys are switched on per connection."""
    @event.listens_for(engine.sync_engine, "connect")
    def _fk_pragma(dbapi_conn, _record):  # noqa: ANN001
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # GraphQL nodes are built from rows after commit; keep them loaded
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def create_tables(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def seed_member_types(session: AsyncSession) -> int:
    added = await Store(session).ensure(MemberType, MEMBER_TYPES)
    if added:
        logger.info("seeded %d member type(s)", added)
    return added


__all__ = [
    'MEMBER_TYPES', 'create_engine', 'enable_sqlite_foreign_keys', 'session_factory',
    'create_tables', 'seed_member_types',
]
