"""Thin async query layer over one ``AsyncSession``.

Relation resolvers only need two reads: "rows where column IN keys" and the
same through a join table. The CRUD surface needs get/list/create/update/
delete. Every statement goes through ``Store._execute`` which serialises
round trips on the session, since an ``AsyncSession`` refuses concurrent
operations while several batches may dispatch in the same loop iteration.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Type, Union

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .errors import EntityNotFound, MisuseError

logger = logging.getLogger(__name__)

ColumnRef = Union[str, Any]


def _column(model: Type[Any], col: ColumnRef) -> Any:
    if isinstance(col, str):
        try:
            return model.__table__.c[col]
        except KeyError:
            raise MisuseError(f"Unknown column {model.__name__}.{col}") from None
    return col


def _pk_column(model: Type[Any]) -> Any:
    pks = list(model.__table__.primary_key.columns)
    if len(pks) != 1:
        raise MisuseError(f"{model.__name__} has a composite primary key; pass the column explicitly")
    return pks[0]


class Store:
    def __init__(self, session: AsyncSession):
        if session is None:
            raise MisuseError("Store requires a database session")
        self.session = session
        self._lock = asyncio.Lock()
        self.round_trips = 0

    async def _execute(self, stmt: Any) -> Any:
        async with self._lock:
            self.round_trips += 1
            logger.debug("store round trip #%d: %s", self.round_trips, stmt)
            return await self.session.execute(stmt)

    # --- relation reads ---
    async def find_in(self, model: Type[Any], column: ColumnRef, keys: Sequence[Any], **equals: Any) -> List[Any]:
        """Rows of ``model`` whose ``column`` is one of ``keys``.

        Extra keyword arguments add equality filters on further columns.
        An empty key list returns ``[]`` without touching the database.
        """
        if not keys:
            return []
        stmt = select(model).where(_column(model, column).in_(list(keys)))
        for name, value in equals.items():
            stmt = stmt.where(_column(model, name) == value)
        res = await self._execute(stmt)
        return list(res.scalars().all())

    async def find_through(
        self,
        target: Type[Any],
        through: Type[Any],
        link: ColumnRef,
        group: ColumnRef,
        keys: Sequence[Any],
    ) -> List[Tuple[Any, Any]]:
        """``(group value, target row)`` pairs for target rows reachable through a join table.

        ``link`` is the join-table column pointing at ``target``'s primary key,
        ``group`` the join-table column filtered by ``keys`` (and returned so
        callers can regroup rows per key).
        """
        if not keys:
            return []
        group_col = _column(through, group)
        stmt = (
            select(group_col, target)
            .select_from(target)
            .join(through, _column(through, link) == _pk_column(target))
            .where(group_col.in_(list(keys)))
        )
        res = await self._execute(stmt)
        return [(row[0], row[1]) for row in res.all()]

    # --- CRUD ---
    async def get(self, model: Type[Any], key: Any) -> Optional[Any]:
        async with self._lock:
            self.round_trips += 1
            return await self.session.get(model, key)

    async def require(self, model: Type[Any], key: Any) -> Any:
        obj = await self.get(model, key)
        if obj is None:
            raise EntityNotFound(model.__name__, key)
        return obj

    async def all(self, model: Type[Any], *where: Any) -> List[Any]:
        stmt = select(model)
        if where:
            stmt = stmt.where(*where)
        res = await self._execute(stmt)
        return list(res.scalars().all())

    async def create(self, model: Type[Any], **values: Any) -> Any:
        obj = model(**values)
        async with self._lock:
            self.session.add(obj)
            await self._flush_commit()
        logger.info("created %s %s", model.__name__, _identity(obj))
        return obj

    async def update(self, model: Type[Any], key: Any, values: Dict[str, Any]) -> Any:
        obj = await self.require(model, key)
        async with self._lock:
            for name, value in values.items():
                setattr(obj, name, value)
            await self._flush_commit()
        logger.info("updated %s %s fields=%s", model.__name__, key, sorted(values))
        return obj

    async def delete(self, model: Type[Any], key: Any) -> Any:
        """Delete one row by primary key (a tuple for composite keys) and return the key."""
        obj = await self.require(model, key)
        async with self._lock:
            await self.session.delete(obj)
            await self._flush_commit()
        logger.info("deleted %s %s", model.__name__, key)
        return key

    async def ensure(self, model: Type[Any], rows: Iterable[Dict[str, Any]]) -> int:
        """Insert the given rows unless a row with the same primary key exists."""
        added = 0
        for values in rows:
            pk = _pk_column(model)
            if await self.get(model, values[pk.key]) is None:
                self.session.add(model(**values))
                added += 1
        if added:
            await self._commit()
        return added

    async def _commit(self) -> None:
        async with self._lock:
            await self._flush_commit()

    async def _flush_commit(self) -> None:
        # caller holds the lock
        try:
            await self.session.flush()
            await self.session.commit()
        except Exception:
            logger.warning("rolling back failed write", exc_info=True)
            await self.session.rollback()
            raise


def _identity(obj: Any) -> Any:
    return getattr(obj, 'id', None)


__all__ = ['Store']
