"""Seed the sample graph into an in-memory database and show how many SQL
statements a nested query costs.

Run from the repository root: ``python -m examples.batching_demo``
"""
from __future__ import annotations

import asyncio
import json
import logging

from sqlalchemy import event

from batchql.config import Settings
from batchql.context import build_context
from batchql.db import create_engine, create_tables, seed_member_types, session_factory
from batchql.schema import schema
from tests.fixtures import (  # reuse test seeding logic
    create_sample_posts,
    create_sample_profiles,
    create_sample_subscriptions,
    create_sample_users,
)

QUERY = """
query {
  users {
    name
    posts { title author { name } }
    profile { memberType { id discount } }
    userSubscribedTo { name }
  }
}
"""


async def main() -> None:
    logging.basicConfig(level=logging.INFO)
    engine = create_engine(Settings())
    await create_tables(engine)
    sessions = session_factory(engine)

    async with sessions() as session:
        await seed_member_types(session)
        users = await create_sample_users(session)
        await create_sample_posts(session, users)
        await create_sample_profiles(session, users)
        await create_sample_subscriptions(session, users)

    statements: list[str] = []

    @event.listens_for(engine.sync_engine, "before_cursor_execute")
    def _count(conn, cursor, statement, parameters, context, executemany):  # noqa: ANN001
        statements.append(statement)

    async with sessions() as session:
        result = await schema.execute(QUERY, context_value=build_context(session))

    print(json.dumps(result.data, indent=2))
    if result.errors:
        print("errors:", result.errors)
    print(f"{len(statements)} SQL statement(s) for {len(result.data['users'])} users")
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
