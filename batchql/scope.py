from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterator, Tuple

from .batcher import KeyBatcher
from .errors import MisuseError

logger = logging.getLogger(__name__)


class ScopeRegistry:
    """Per-execution map from a field occurrence to its ``KeyBatcher``.

    Handles are compared by identity, not equality: two aliased (or otherwise
    distinct) occurrences of the same relation get independent batchers even
    when their AST nodes compare equal, while the one occurrence evaluated for
    many sibling parents always maps to the same batcher.

    The registry keeps a reference to each handle so ``id()`` cannot be reused
    while it is alive. It is meant to be created at execution start and
    dropped at execution end (see ``BatchScopeExtension``).
    """

    def __init__(self) -> None:
        self._entries: Dict[int, Tuple[Any, KeyBatcher]] = {}

    def get_or_create(self, handle: Any, factory: Callable[[], KeyBatcher]) -> KeyBatcher:
        if handle is None:
            raise MisuseError("Scope handle must not be None")
        entry = self._entries.get(id(handle))
        if entry is not None and entry[0] is handle:
            return entry[1]
        batcher = factory()
        if not isinstance(batcher, KeyBatcher):
            raise MisuseError(f"Scope factory must return a KeyBatcher, got {type(batcher).__name__}")
        self._entries[id(handle)] = (handle, batcher)
        logger.debug("scope registry: new batcher %s (%d scopes)", batcher.name, len(self._entries))
        return batcher

    def get(self, handle: Any) -> KeyBatcher | None:
        entry = self._entries.get(id(handle))
        if entry is not None and entry[0] is handle:
            return entry[1]
        return None

    def __contains__(self, handle: Any) -> bool:
        return self.get(handle) is not None

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[KeyBatcher]:
        return iter([b for _, b in self._entries.values()])

    def clear(self) -> None:
        self._entries.clear()


__all__ = ['ScopeRegistry']
