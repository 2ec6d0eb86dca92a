"""Strawberry schema: member types, users, posts, profiles and subscriptions.

Scalar fields are copied from the row when a node is built; every relation
field goes through a batched ``RelationResolver`` so sibling objects at the
same depth share one store round trip per field occurrence.
"""
from __future__ import annotations

import logging
import uuid
from typing import Any, Callable, List, Optional

import strawberry
from strawberry.extensions import QueryDepthLimiter
from strawberry.types import Info

from . import loaders
from .context import get_store
from .extensions import BatchScopeExtension
from .input_types import (
    ChangePostInput,
    ChangeProfileInput,
    ChangeUserInput,
    CreatePostInput,
    CreateProfileInput,
    CreateUserInput,
    MemberTypeIdEnum,
    input_values,
    provided_values,
)
from .models import MemberType, Post, Profile, SubscribersOnAuthors, User
from .relations import register_node

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 5


@strawberry.type(name='MemberType')
class MemberTypeNode:
    id: MemberTypeIdEnum
    discount: float
    posts_limit_per_month: int

    @classmethod
    def from_row(cls, row: MemberType) -> 'MemberTypeNode':
        return cls(id=row.id, discount=row.discount, posts_limit_per_month=row.posts_limit_per_month)

    @strawberry.field
    async def profiles(self, info: Info) -> Optional[List[ProfileNode]]:
        return await loaders.member_type_profiles.resolve(info, self)


@strawberry.type(name='User')
class UserNode:
    id: uuid.UUID
    name: str
    balance: float

    @classmethod
    def from_row(cls, row: User) -> 'UserNode':
        return cls(id=row.id, name=row.name, balance=row.balance)

    @strawberry.field
    async def profile(self, info: Info) -> Optional[ProfileNode]:
        return await loaders.user_profile.resolve(info, self)

    @strawberry.field
    async def posts(self, info: Info) -> Optional[List[PostNode]]:
        return await loaders.user_posts.resolve(info, self)

    @strawberry.field(description='Authors this user is subscribed to')
    async def user_subscribed_to(self, info: Info) -> Optional[List[UserNode]]:
        return await loaders.user_subscribed_to.resolve(info, self)

    @strawberry.field(description='Users subscribed to this user')
    async def subscribed_to_user(self, info: Info) -> Optional[List[UserNode]]:
        return await loaders.subscribed_to_user.resolve(info, self)


@strawberry.type(name='Post')
class PostNode:
    id: uuid.UUID
    title: str
    content: str
    author_id: uuid.UUID

    @classmethod
    def from_row(cls, row: Post) -> 'PostNode':
        return cls(id=row.id, title=row.title, content=row.content, author_id=row.author_id)

    @strawberry.field
    async def author(self, info: Info) -> Optional[UserNode]:
        return await loaders.post_author.resolve(info, self)


@strawberry.type(name='Profile')
class ProfileNode:
    id: uuid.UUID
    is_male: bool
    year_of_birth: int
    user_id: uuid.UUID
    member_type_id: MemberTypeIdEnum

    @classmethod
    def from_row(cls, row: Profile) -> 'ProfileNode':
        return cls(
            id=row.id,
            is_male=row.is_male,
            year_of_birth=row.year_of_birth,
            user_id=row.user_id,
            member_type_id=row.member_type_id,
        )

    @strawberry.field
    async def member_type(self, info: Info) -> Optional[MemberTypeNode]:
        return await loaders.profile_member_type.resolve(info, self)

    @strawberry.field
    async def user(self, info: Info) -> Optional[UserNode]:
        return await loaders.profile_user.resolve(info, self)


register_node(MemberType, MemberTypeNode.from_row)
register_node(User, UserNode.from_row)
register_node(Post, PostNode.from_row)
register_node(Profile, ProfileNode.from_row)


@strawberry.type
class Query:
    @strawberry.field
    async def member_types(self, info: Info) -> List[MemberTypeNode]:
        return [MemberTypeNode.from_row(r) for r in await get_store(info).all(MemberType)]

    @strawberry.field
    async def member_type(self, info: Info, id: MemberTypeIdEnum) -> Optional[MemberTypeNode]:
        row = await get_store(info).get(MemberType, id)
        return MemberTypeNode.from_row(row) if row is not None else None

    @strawberry.field
    async def users(self, info: Info) -> List[UserNode]:
        return [UserNode.from_row(r) for r in await get_store(info).all(User)]

    @strawberry.field
    async def user(self, info: Info, id: uuid.UUID) -> Optional[UserNode]:
        row = await get_store(info).get(User, id)
        return UserNode.from_row(row) if row is not None else None

    @strawberry.field
    async def posts(self, info: Info) -> List[PostNode]:
        return [PostNode.from_row(r) for r in await get_store(info).all(Post)]

    @strawberry.field
    async def post(self, info: Info, id: uuid.UUID) -> Optional[PostNode]:
        row = await get_store(info).get(Post, id)
        return PostNode.from_row(row) if row is not None else None

    @strawberry.field
    async def profiles(self, info: Info) -> List[ProfileNode]:
        return [ProfileNode.from_row(r) for r in await get_store(info).all(Profile)]

    @strawberry.field
    async def profile(self, info: Info, id: uuid.UUID) -> Optional[ProfileNode]:
        row = await get_store(info).get(Profile, id)
        return ProfileNode.from_row(row) if row is not None else None

    @strawberry.field(description='Users subscribed to the given author')
    async def subscribed_to_user(self, info: Info, id: uuid.UUID) -> List[UserNode]:
        return await loaders.subscribed_to_user.load_direct(get_store(info), id)

    @strawberry.field(description='Authors the given user is subscribed to')
    async def user_subscribed_to(self, info: Info, id: uuid.UUID) -> List[UserNode]:
        return await loaders.user_subscribed_to.load_direct(get_store(info), id)


@strawberry.type
class Mutation:
    @strawberry.mutation
    async def create_user(self, info: Info, dto: CreateUserInput) -> UserNode:
        row = await get_store(info).create(User, **input_values(dto))
        return UserNode.from_row(row)

    @strawberry.mutation
    async def create_post(self, info: Info, dto: CreatePostInput) -> PostNode:
        store = get_store(info)
        await store.require(User, dto.author_id)
        row = await store.create(Post, **input_values(dto))
        return PostNode.from_row(row)

    @strawberry.mutation
    async def create_profile(self, info: Info, dto: CreateProfileInput) -> ProfileNode:
        store = get_store(info)
        await store.require(User, dto.user_id)
        await store.require(MemberType, dto.member_type_id)
        row = await store.create(Profile, **input_values(dto))
        return ProfileNode.from_row(row)

    @strawberry.mutation
    async def change_user(self, info: Info, id: uuid.UUID, dto: ChangeUserInput) -> UserNode:
        row = await get_store(info).update(User, id, provided_values(dto))
        return UserNode.from_row(row)

    @strawberry.mutation
    async def change_post(self, info: Info, id: uuid.UUID, dto: ChangePostInput) -> PostNode:
        row = await get_store(info).update(Post, id, provided_values(dto))
        return PostNode.from_row(row)

    @strawberry.mutation
    async def change_profile(self, info: Info, id: uuid.UUID, dto: ChangeProfileInput) -> ProfileNode:
        store = get_store(info)
        values = provided_values(dto)
        if 'member_type_id' in values:
            await store.require(MemberType, values['member_type_id'])
        row = await store.update(Profile, id, values)
        return ProfileNode.from_row(row)

    @strawberry.mutation
    async def delete_user(self, info: Info, id: uuid.UUID) -> uuid.UUID:
        return await get_store(info).delete(User, id)

    @strawberry.mutation
    async def delete_post(self, info: Info, id: uuid.UUID) -> uuid.UUID:
        return await get_store(info).delete(Post, id)

    @strawberry.mutation
    async def delete_profile(self, info: Info, id: uuid.UUID) -> uuid.UUID:
        return await get_store(info).delete(Profile, id)

    @strawberry.mutation(description='Subscribe user_id to author_id; returns the subscriber')
    async def subscribe_to(self, info: Info, user_id: uuid.UUID, author_id: uuid.UUID) -> UserNode:
        store = get_store(info)
        user = await store.require(User, user_id)
        await store.require(User, author_id)
        if await store.get(SubscribersOnAuthors, (user_id, author_id)) is None:
            await store.create(SubscribersOnAuthors, subscriber_id=user_id, author_id=author_id)
        return UserNode.from_row(user)

    @strawberry.mutation(description='Remove the subscription; returns the author id')
    async def unsubscribe_from(self, info: Info, user_id: uuid.UUID, author_id: uuid.UUID) -> uuid.UUID:
        await get_store(info).delete(SubscribersOnAuthors, (user_id, author_id))
        return author_id


def depth_limiter(max_depth: int) -> Callable[..., QueryDepthLimiter]:
    """Factory building a fresh ``QueryDepthLimiter`` for every execution."""
    def build(execution_context: Any = None) -> QueryDepthLimiter:
        return QueryDepthLimiter(max_depth=max_depth)
    return build


def create_schema(max_depth: int = DEFAULT_MAX_DEPTH) -> strawberry.Schema:
    return strawberry.Schema(
        query=Query,
        mutation=Mutation,
        extensions=[BatchScopeExtension, depth_limiter(max_depth)],
    )


schema = create_schema()
