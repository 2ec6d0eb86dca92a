"""GraphQL input objects for the mutation surface."""
from __future__ import annotations

import uuid
from typing import Any, Dict, Optional

import strawberry

from .models import MemberTypeId

MemberTypeIdEnum = strawberry.enum(MemberTypeId, name="MemberTypeId")


@strawberry.input
class CreateUserInput:
    name: str
    balance: float


@strawberry.input
class CreatePostInput:
    title: str
    content: str
    author_id: uuid.UUID


@strawberry.input
class CreateProfileInput:
    is_male: bool
    year_of_birth: int
    user_id: uuid.UUID
    member_type_id: MemberTypeIdEnum


@strawberry.input
class ChangeUserInput:
    name: Optional[str] = strawberry.UNSET
    balance: Optional[float] = strawberry.UNSET


@strawberry.input
class ChangePostInput:
    title: Optional[str] = strawberry.UNSET
    content: Optional[str] = strawberry.UNSET


@strawberry.input
class ChangeProfileInput:
    is_male: Optional[bool] = strawberry.UNSET
    year_of_birth: Optional[int] = strawberry.UNSET
    member_type_id: Optional[MemberTypeIdEnum] = strawberry.UNSET


def provided_values(dto: Any) -> Dict[str, Any]:
    """Fields the client actually set; omitted and null fields are left untouched."""
    return {
        name: value
        for name, value in vars(dto).items()
        if value is not strawberry.UNSET and value is not None
    }


def input_values(dto: Any) -> Dict[str, Any]:
    return dict(vars(dto))


__all__ = [
    'MemberTypeIdEnum', 'CreateUserInput', 'CreatePostInput', 'CreateProfileInput',
    'ChangeUserInput', 'ChangePostInput', 'ChangeProfileInput',
    'provided_values', 'input_values',
]
