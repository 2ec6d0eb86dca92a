"""FastAPI app exposing the GraphQL schema at /graphql.

Environment variables (see ``batchql.config``):
  BATCHQL_DATABASE_URL  SQLAlchemy async URL, defaults to a shared in-memory SQLite
  BATCHQL_SQL_ECHO      '1' to log SQL, 'debug' to include params
  BATCHQL_MAX_DEPTH     query depth limit (default 5)
  BATCHQL_SEED          '0' to skip seeding member types
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

from fastapi import Depends, FastAPI
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession
from strawberry.fastapi import GraphQLRouter

from .config import Settings
from .context import build_context
from .db import create_engine, create_tables, seed_member_types, session_factory
from .schema import create_schema

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if settings.sql_echo:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    engine = create_engine(settings)
    sessions = session_factory(engine)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        await create_tables(engine)
        if settings.seed:
            async with sessions() as session:
                await seed_member_types(session)
        logger.info("batchql ready (db=%s, max_depth=%d)", engine.url.render_as_string(hide_password=True), settings.max_depth)
        yield
        await engine.dispose()

    async def get_session() -> AsyncIterator[AsyncSession]:
        async with sessions() as session:
            yield session

    async def get_context(session: AsyncSession = Depends(get_session)) -> Dict[str, Any]:
        return build_context(session)

    app = FastAPI(title="batchql", lifespan=lifespan)
    app.state.settings = settings
    app.state.engine = engine
    app.state.sessions = sessions
    app.include_router(
        GraphQLRouter(create_schema(settings.max_depth), context_getter=get_context),
        prefix="/graphql",
    )

    @app.get("/")
    async def root() -> RedirectResponse:
        return RedirectResponse(url="/graphql")

    return app


__all__ = ['create_app', 'configure_logging']
