"""Database fixtures for batchql tests (shared).

Sample graph:

- alice: 3 posts, basic profile, subscribed to bob and carol
- bob: 1 post, business profile, subscribed to carol
- carol: no posts, no profile
- dave: no posts, no profile, no subscriptions
"""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from batchql.db import seed_member_types
from batchql.models import MemberTypeId, Post, Profile, SubscribersOnAuthors, User


@pytest.fixture(scope="function")
async def member_types(db_session: AsyncSession):
    return await seed_member_types(db_session)


async def create_sample_users(session: AsyncSession):
    """Create and commit the sample users used across tests."""
    users = [
        User(name="alice", balance=100.0),
        User(name="bob", balance=50.5),
        User(name="carol", balance=0.0),
        User(name="dave", balance=12.0),
    ]
    session.add_all(users)
    await session.flush()
    await session.commit()
    return users


@pytest.fixture(scope="function")
async def sample_users(db_session: AsyncSession):
    return await create_sample_users(db_session)


async def create_sample_posts(session: AsyncSession, users):
    alice, bob, _, _ = users
    posts = [
        Post(title="First Post", content="Hello world!", author_id=alice.id),
        Post(title="GraphQL is Great", content="I love GraphQL!", author_id=alice.id),
        Post(title="Batching", content="One query per field", author_id=alice.id),
        Post(title="SQLAlchemy Tips", content="Some useful tips...", author_id=bob.id),
    ]
    session.add_all(posts)
    await session.flush()
    await session.commit()
    return posts


@pytest.fixture(scope="function")
async def sample_posts(db_session: AsyncSession, sample_users):
    return await create_sample_posts(db_session, sample_users)


async def create_sample_profiles(session: AsyncSession, users):
    alice, bob, _, _ = users
    profiles = [
        Profile(is_male=False, year_of_birth=1990, user_id=alice.id, member_type_id=MemberTypeId.basic),
        Profile(is_male=True, year_of_birth=1985, user_id=bob.id, member_type_id=MemberTypeId.business),
    ]
    session.add_all(profiles)
    await session.flush()
    await session.commit()
    return profiles


@pytest.fixture(scope="function")
async def sample_profiles(db_session: AsyncSession, member_types, sample_users):
    return await create_sample_profiles(db_session, sample_users)


async def create_sample_subscriptions(session: AsyncSession, users):
    alice, bob, carol, _ = users
    edges = [
        SubscribersOnAuthors(subscriber_id=alice.id, author_id=bob.id),
        SubscribersOnAuthors(subscriber_id=alice.id, author_id=carol.id),
        SubscribersOnAuthors(subscriber_id=bob.id, author_id=carol.id),
    ]
    session.add_all(edges)
    await session.flush()
    await session.commit()
    return edges


@pytest.fixture(scope="function")
async def sample_subscriptions(db_session: AsyncSession, sample_users):
    return await create_sample_subscriptions(db_session, sample_users)


@pytest.fixture(scope="function")
async def populated_db(member_types, sample_users, sample_posts, sample_profiles, sample_subscriptions):
    alice, bob, carol, dave = sample_users
    return {
        'users': sample_users,
        'posts': sample_posts,
        'profiles': sample_profiles,
        'subscriptions': sample_subscriptions,
        'alice': alice,
        'bob': bob,
        'carol': carol,
        'dave': dave,
    }
