"""Execution-context helpers.

The GraphQL context is a plain dict (or any object exposing the same keys as
attributes). It carries:

- ``db_session``: the request's ``AsyncSession``
- ``store``: a ``Store`` wrapping that session
- ``scope_registry``: the ``ScopeRegistry`` of the running execution,
  installed and removed by ``BatchScopeExtension``
"""
from __future__ import annotations

from typing import Any, Dict, Optional

from .errors import MisuseError
from .scope import ScopeRegistry
from .store import Store

SCOPE_REGISTRY_KEY = 'scope_registry'
STORE_KEY = 'store'


def _context(info_or_ctx: Any) -> Any:
    # Strawberry Info -> .context; plain dict/object passes through
    return getattr(info_or_ctx, 'context', info_or_ctx)


def _lookup(ctx: Any, key: str) -> Any:
    if ctx is None:
        return None
    if isinstance(ctx, dict):
        return ctx.get(key)
    get = getattr(ctx, 'get', None)
    if callable(get):
        try:
            return get(key)
        except (KeyError, TypeError):
            pass
    return getattr(ctx, key, None)


def _assign(ctx: Any, key: str, value: Any) -> None:
    if isinstance(ctx, dict):
        if value is None:
            ctx.pop(key, None)
        else:
            ctx[key] = value
    else:
        setattr(ctx, key, value)


def get_db_session(info_or_ctx: Any) -> Any | None:
    """Find the AsyncSession in the context under ``db_session``, ``db`` or ``session``."""
    ctx = _context(info_or_ctx)
    for key in ('db_session', 'db', 'session'):
        value = _lookup(ctx, key)
        if value is not None:
            return value
    return None


def get_store(info_or_ctx: Any) -> Store:
    """Return the context's ``Store``, creating one around the session on first use."""
    ctx = _context(info_or_ctx)
    store = _lookup(ctx, STORE_KEY)
    if store is not None:
        return store
    session = get_db_session(ctx)
    if session is None:
        raise MisuseError("GraphQL context has neither a store nor a db_session")
    store = Store(session)
    _assign(ctx, STORE_KEY, store)
    return store


def get_scope_registry_or_none(info_or_ctx: Any) -> Optional[ScopeRegistry]:
    return _lookup(_context(info_or_ctx), SCOPE_REGISTRY_KEY)


def get_scope_registry(info_or_ctx: Any) -> ScopeRegistry:
    registry = get_scope_registry_or_none(info_or_ctx)
    if registry is None:
        raise MisuseError("No scope registry in context; is BatchScopeExtension installed on the schema?")
    return registry


def set_scope_registry(ctx: Any, registry: Optional[ScopeRegistry]) -> None:
    _assign(ctx, SCOPE_REGISTRY_KEY, registry)


def scope_handle(info: Any) -> Any:
    """Reference-stable token for the field occurrence being resolved.

    graphql-core hands every sibling parent of one field occurrence the same
    ``FieldNode`` object, while aliases and repeated selections are distinct
    nodes.
    """
    raw = getattr(info, '_raw_info', info)
    nodes = getattr(raw, 'field_nodes', None)
    if not nodes:
        raise MisuseError("Resolver info carries no field nodes to scope batching on")
    return nodes[0]


def build_context(session: Any, **extra: Any) -> Dict[str, Any]:
    """Context dict for one request: session plus a store bound to it."""
    ctx: Dict[str, Any] = {'db_session': session, STORE_KEY: Store(session)}
    ctx.update(extra)
    return ctx


__all__ = [
    'get_db_session', 'get_store', 'get_scope_registry', 'get_scope_registry_or_none', 'set_scope_registry',
    'scope_handle', 'build_context',
]
