"""Relation descriptors and their batched resolvers.

A ``RelationDescriptor`` says how parent keys join to child rows; a
``RelationResolver`` turns all keys enqueued for one field occurrence into a
single store query and regroups the rows per key:

- direct relations filter ``target.<lookup> IN keys`` and group on that column
- through relations (many-to-many) join the link table, filter
  ``through.<lookup> IN keys`` and group on the link table's column, so one
  target row may belong to several parent keys
"""
from __future__ import annotations

import functools
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Hashable, List, Mapping, Optional, Sequence, Tuple, Type

from .batcher import KeyBatcher
from .context import get_scope_registry, get_store, scope_handle
from .errors import MisuseError

logger = logging.getLogger(__name__)

# model class -> callable building the GraphQL object for one row
_NODE_TYPES: Dict[type, Callable[[Any], Any]] = {}


def register_node(model: type, factory: Callable[[Any], Any]) -> Callable[[], None]:
    """Register the GraphQL node factory for ``model``; returns a callable undoing it."""
    previous = _NODE_TYPES.get(model)
    _NODE_TYPES[model] = factory

    def unregister() -> None:
        if _NODE_TYPES.get(model) is factory:
            if previous is None:
                del _NODE_TYPES[model]
            else:
                _NODE_TYPES[model] = previous
    return unregister


def node_factory(model: type) -> Callable[[Any], Any]:
    try:
        return _NODE_TYPES[model]
    except KeyError:
        raise MisuseError(f"No GraphQL node type registered for {model.__name__}") from None


@dataclass(frozen=True)
class RelationDescriptor:
    """Static description of one relationship.

    Attributes:
        name: label used for batcher names and log records.
        target: model class of the child rows.
        parent_key: attribute of the parent object holding the key.
        lookup: column matched against the keys (on ``through`` when set,
            otherwise on ``target``).
        single: to-one relation (``None`` when nothing matches) instead of a list.
        through: link-table model for many-to-many relations.
        through_link: link-table column pointing at ``target``'s primary key.
        include_nested: wrap rows into their registered GraphQL node type so
            nested relation fields resolve on them; plain rows otherwise.
    """
    name: str
    target: Type[Any]
    parent_key: str
    lookup: str
    single: bool = False
    through: Optional[Type[Any]] = None
    through_link: Optional[str] = None
    include_nested: bool = True

    def __post_init__(self) -> None:
        if (self.through is None) != (self.through_link is None):
            raise MisuseError(f"Relation {self.name}: 'through' and 'through_link' go together")

    def empty(self) -> Any:
        return None if self.single else []


def align(keys: Sequence[Hashable], grouped: Mapping[Hashable, List[Any]], single: bool) -> List[Any]:
    """Project grouped rows onto ``keys``: one entry per key, same order."""
    if single:
        return [grouped[k][0] if grouped.get(k) else None for k in keys]
    return [list(grouped.get(k, ())) for k in keys]


class RelationResolver:
    def __init__(self, descriptor: RelationDescriptor):
        if not isinstance(descriptor, RelationDescriptor):
            raise MisuseError("RelationResolver requires a RelationDescriptor")
        self.descriptor = descriptor

    def __repr__(self) -> str:
        return f"<RelationResolver {self.descriptor.name}>"

    def key_of(self, parent: Any) -> Any:
        attr = self.descriptor.parent_key
        if isinstance(parent, Mapping):
            return parent.get(attr)
        return getattr(parent, attr, None)

    def _wrapper(self) -> Callable[[Any], Any]:
        if not self.descriptor.include_nested:
            return lambda row: row
        factory = node_factory(self.descriptor.target)
        wrapped: Dict[int, Any] = {}

        # one node per row object so every parent sharing the row gets the same node
        def wrap(row: Any) -> Any:
            node = wrapped.get(id(row))
            if node is None:
                node = wrapped[id(row)] = factory(row)
            return node
        return wrap

    async def _pairs(self, store: Any, keys: List[Any]) -> List[Tuple[Any, Any]]:
        d = self.descriptor
        if d.through is None:
            rows = await store.find_in(d.target, d.lookup, keys)
            return [(getattr(row, d.lookup), row) for row in rows]
        return await store.find_through(d.target, d.through, d.through_link, d.lookup, keys)

    async def fetch(self, store: Any, keys: List[Any]) -> List[Any]:
        """Bulk fetch: one store query for ``keys``, aligned 1:1 with them."""
        wrap = self._wrapper()
        grouped: Dict[Any, List[Any]] = {}
        for key, row in await self._pairs(store, keys):
            grouped.setdefault(key, []).append(wrap(row))
        logger.debug("relation %s: %d key(s) matched %d", self.descriptor.name, len(keys), len(grouped))
        return align(keys, grouped, self.descriptor.single)

    def batcher(self, info: Any) -> KeyBatcher:
        """The batcher of the field occurrence ``info`` belongs to."""
        registry = get_scope_registry(info)
        store = get_store(info)
        return registry.get_or_create(
            scope_handle(info),
            lambda: KeyBatcher(functools.partial(self.fetch, store), name=self.descriptor.name),
        )

    async def resolve(self, info: Any, parent: Any) -> Any:
        key = self.key_of(parent)
        if key is None:
            return self.descriptor.empty()
        if self.descriptor.include_nested:
            node_factory(self.descriptor.target)
        return await self.batcher(info).enqueue(key)

    async def load_direct(self, store: Any, key: Any) -> Any:
        """Resolve a single key without batching (root-level lookups)."""
        return (await self.fetch(store, [key]))[0]


__all__ = ['RelationDescriptor', 'RelationResolver', 'align', 'register_node', 'node_factory']
