"""Relational models backing the graph API."""
from __future__ import annotations

import enum
import uuid

from sqlalchemy import Boolean, Column, Float, ForeignKey, Integer, String
from sqlalchemy import Uuid as SA_Uuid
from sqlalchemy.orm import DeclarativeBase

from .enum_helpers import enum_column


class Base(DeclarativeBase):
    pass


class MemberTypeId(enum.Enum):
    basic = "basic"
    business = "business"


class MemberType(Base):
    """Membership tiers (static reference data)."""
    __tablename__ = 'member_types'

    id = enum_column(MemberTypeId, primary_key=True, nullable=False, constraint_name='ck_member_type_id')
    discount = Column(Float, nullable=False, comment='Discount in percent')
    posts_limit_per_month = Column(Integer, nullable=False, comment='Monthly post quota')


class User(Base):
    __tablename__ = 'users'

    id = Column(SA_Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    balance = Column(Float, nullable=False, default=0.0)


class Post(Base):
    __tablename__ = 'posts'

    id = Column(SA_Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    title = Column(String(255), nullable=False)
    content = Column(String(5000), nullable=False)
    author_id = Column(SA_Uuid(as_uuid=True), ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)


class Profile(Base):
    __tablename__ = 'profiles'

    id = Column(SA_Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    is_male = Column(Boolean, nullable=False)
    year_of_birth = Column(Integer, nullable=False)
    user_id = Column(SA_Uuid(as_uuid=True), ForeignKey('users.id', ondelete='CASCADE'), nullable=False, unique=True)
    member_type_id = enum_column(
        MemberTypeId,
        ForeignKey('member_types.id', ondelete='RESTRICT'),
        nullable=False,
        constraint_name='ck_profile_member_type_id',
    )


class SubscribersOnAuthors(Base):
    """Subscription edge: ``subscriber_id`` follows ``author_id``."""
    __tablename__ = 'subscribers_on_authors'

    subscriber_id = Column(SA_Uuid(as_uuid=True), ForeignKey('users.id', ondelete='CASCADE'), primary_key=True)
    author_id = Column(SA_Uuid(as_uuid=True), ForeignKey('users.id', ondelete='CASCADE'), primary_key=True, index=True)


__all__ = ['Base', 'MemberTypeId', 'MemberType', 'User', 'Post', 'Profile', 'SubscribersOnAuthors']
