import pytest
from strawberry.extensions import SchemaExtension

from batchql.context import build_context, get_scope_registry_or_none, set_scope_registry
from batchql.schema import create_schema, schema
from batchql.scope import ScopeRegistry
from batchql.store import Store


async def run(db_session, query, variables=None, context=None):
    ctx = context if context is not None else build_context(db_session)
    return await schema.execute(query, variable_values=variables, context_value=ctx)


@pytest.mark.asyncio
async def test_posts_sharing_an_author_cost_one_author_query(db_session, populated_db, query_counter):
    query_counter.reset()
    res = await run(db_session, "query { posts { id title author { id name } } }")
    assert res.errors is None, res.errors

    posts = res.data['posts']
    assert len(posts) == 4
    alice_posts = [p for p in posts if p['author']['name'] == 'alice']
    assert len(alice_posts) == 3
    assert len({p['author']['id'] for p in alice_posts}) == 1
    # one for posts, one for all authors
    assert len(query_counter.selects) == 2


@pytest.mark.asyncio
async def test_nested_relations_issue_one_query_per_field_occurrence(db_session, populated_db, query_counter):
    query = """
    query {
      users {
        name
        posts { title author { name } }
        profile { yearOfBirth memberType { id discount } }
      }
    }
    """
    query_counter.reset()
    res = await run(db_session, query)
    assert res.errors is None, res.errors

    users = {u['name']: u for u in res.data['users']}
    assert len(users['alice']['posts']) == 3
    assert all(p['author']['name'] == 'alice' for p in users['alice']['posts'])
    assert users['alice']['profile']['memberType']['id'] == 'basic'
    assert users['bob']['profile']['memberType']['id'] == 'business'
    assert users['carol']['posts'] == []
    assert users['carol']['profile'] is None
    # users, posts, post authors, profiles, member types
    assert len(query_counter.selects) == 5


@pytest.mark.asyncio
async def test_subscription_edges_both_directions(db_session, populated_db, query_counter):
    query = """
    query {
      users {
        name
        userSubscribedTo { name }
        subscribedToUser { name }
      }
    }
    """
    query_counter.reset()
    res = await run(db_session, query)
    assert res.errors is None, res.errors

    users = {u['name']: u for u in res.data['users']}
    following = {n: sorted(x['name'] for x in u['userSubscribedTo']) for n, u in users.items()}
    followers = {n: sorted(x['name'] for x in u['subscribedToUser']) for n, u in users.items()}
    assert following == {'alice': ['bob', 'carol'], 'bob': ['carol'], 'carol': [], 'dave': []}
    assert followers == {'alice': [], 'bob': ['alice'], 'carol': ['alice', 'bob'], 'dave': []}
    assert len(query_counter.selects) == 3


@pytest.mark.asyncio
async def test_aliased_occurrences_get_their_own_batch(db_session, populated_db, query_counter):
    query_counter.reset()
    res = await run(db_session, "query { users { a: posts { id } b: posts { title } } }")
    assert res.errors is None, res.errors
    for u in res.data['users']:
        assert len(u['a']) == len(u['b'])
    assert len(query_counter.selects) == 3


@pytest.mark.asyncio
async def test_member_type_profiles_back_reference(db_session, populated_db):
    query = """
    query {
      memberTypes { id postsLimitPerMonth profiles { user { name } } }
    }
    """
    res = await run(db_session, query)
    assert res.errors is None, res.errors
    by_id = {m['id']: m for m in res.data['memberTypes']}
    assert by_id['basic']['postsLimitPerMonth'] == 20
    assert [p['user']['name'] for p in by_id['basic']['profiles']] == ['alice']
    assert [p['user']['name'] for p in by_id['business']['profiles']] == ['bob']


@pytest.mark.asyncio
async def test_root_lookups_return_null_when_missing(db_session, populated_db):
    query = """
    query ($id: UUID!) {
      user(id: $id) { name }
      post(id: $id) { title }
      profile(id: $id) { id }
    }
    """
    res = await run(db_session, query, {'id': '00000000-0000-0000-0000-000000000000'})
    assert res.errors is None, res.errors
    assert res.data == {'user': None, 'post': None, 'profile': None}


@pytest.mark.asyncio
async def test_root_subscription_queries(db_session, populated_db):
    carol = populated_db['carol']
    alice = populated_db['alice']
    query = """
    query ($carol: UUID!, $alice: UUID!) {
      subscribedToUser(id: $carol) { name }
      userSubscribedTo(id: $alice) { name }
    }
    """
    res = await run(db_session, query, {'carol': str(carol.id), 'alice': str(alice.id)})
    assert res.errors is None, res.errors
    assert sorted(u['name'] for u in res.data['subscribedToUser']) == ['alice', 'bob']
    assert sorted(u['name'] for u in res.data['userSubscribedTo']) == ['bob', 'carol']


@pytest.mark.asyncio
async def test_scope_registry_does_not_outlive_execution(db_session, populated_db):
    ctx = build_context(db_session)
    res = await run(db_session, "query { posts { author { id } } }", context=ctx)
    assert res.errors is None, res.errors
    assert 'scope_registry' not in ctx
    # a second execution on the same context batches from scratch
    res = await run(db_session, "query { posts { author { id } } }", context=ctx)
    assert res.errors is None, res.errors


@pytest.mark.asyncio
async def test_failing_relation_only_nulls_that_field(db_session, populated_db, monkeypatch):
    async def broken(self, *args, **kwargs):
        raise RuntimeError("edge table unavailable")

    monkeypatch.setattr(Store, 'find_through', broken)
    res = await run(db_session, "query { users { name userSubscribedTo { name } posts { title } } }")

    assert res.errors
    assert all('edge table unavailable' in e.message for e in res.errors)
    users = {u['name']: u for u in res.data['users']}
    assert set(users) == {'alice', 'bob', 'carol', 'dave'}
    assert all(u['userSubscribedTo'] is None for u in users.values())
    assert len(users['alice']['posts']) == 3


@pytest.mark.asyncio
async def test_query_depth_is_limited(db_session, populated_db):
    query = """
    query {
      users { posts { author { posts { author { posts { id } } } } } }
    }
    """
    res = await run(db_session, query)
    assert res.errors
    assert res.data is None


@pytest.mark.asyncio
async def test_outer_scope_registry_is_restored_after_execution(db_session, populated_db):
    outer = ScopeRegistry()
    ctx = build_context(db_session)
    set_scope_registry(ctx, outer)
    res = await run(db_session, "query { posts { author { id } } }", context=ctx)
    assert res.errors is None, res.errors
    assert get_scope_registry_or_none(ctx) is outer
    assert len(outer) == 0


def test_schema_extensions_are_built_per_execution():
    custom = create_schema(max_depth=2)
    assert not any(isinstance(ext, SchemaExtension) for ext in custom.extensions)


@pytest.mark.asyncio
async def test_custom_depth_limit_is_applied(db_session, populated_db):
    custom = create_schema(max_depth=2)
    ok = await custom.execute("query { posts { author { id } } }", context_value=build_context(db_session))
    assert ok.errors is None, ok.errors
    deep = await custom.execute("query { posts { author { posts { id } } } }", context_value=build_context(db_session))
    assert deep.errors
