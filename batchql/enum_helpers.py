"""Declare SQLAlchemy Enum columns that store the enum's string value.

``enum_column(MemberTypeId, ...)`` persists ``"basic"`` rather than the member
name, so rows stay readable and match the GraphQL enum values one to one.
"""
from __future__ import annotations

import enum as _enum
from typing import Callable, Iterable, Optional, Type

from sqlalchemy import Column
from sqlalchemy import Enum as SAEnum


def _storage_values(enum_cls: Type[_enum.Enum]) -> Callable[[Iterable[_enum.Enum]], list]:
    def _values(iterable: Iterable[_enum.Enum]) -> list:
        return [m.value if isinstance(m.value, str) else m.name for m in iterable]
    return _values


def sa_enum_type(
    enum_cls: Type[_enum.Enum],
    *,
    native_enum: bool = False,
    constraint_name: Optional[str] = None,
) -> SAEnum:
    """Build a non-native SAEnum with a named CHECK constraint."""
    return SAEnum(
        enum_cls,
        native_enum=native_enum,
        validate_strings=True,
        create_constraint=True,
        name=constraint_name,
        values_callable=_storage_values(enum_cls),
    )


def enum_column(
    enum_cls: Type[_enum.Enum],
    *args,
    nullable: bool = True,
    default: Optional[_enum.Enum] = None,
    constraint_name: Optional[str] = None,
    **column_kwargs,
) -> Column:
    """Column factory for enum-typed columns.

    Positional ``args`` (e.g. a ``ForeignKey``) are passed through to ``Column``.
    """
    type_ = sa_enum_type(enum_cls, constraint_name=constraint_name)
    return Column(type_, *args, nullable=nullable, default=default, **column_kwargs)


__all__ = ['sa_enum_type', 'enum_column']
