"""batchql public API.

The batching core (``KeyBatcher``, ``ScopeRegistry``, relation descriptors and
resolvers) is imported eagerly; the Strawberry schema and the FastAPI app are
resolved lazily so the core can be used without building the schema.

Exposes:
- KeyBatcher, ScopeRegistry, RelationDescriptor, RelationResolver
- errors: BatchQLError, MisuseError, BatchContractError, BulkFetchFailure, EntityNotFound
- lazy: create_schema, create_app, Settings, Store, build_context
"""
from __future__ import annotations

from .batcher import KeyBatcher
from .errors import BatchContractError, BatchQLError, BulkFetchFailure, EntityNotFound, MisuseError
from .relations import RelationDescriptor, RelationResolver
from .scope import ScopeRegistry

__version__ = "0.1.0"


def __getattr__(name: str):  # PEP 562 lazy exports
    import importlib as _importlib
    if name == 'create_schema':
        return getattr(_importlib.import_module(__name__ + '.schema'), name)
    if name == 'create_app':
        return getattr(_importlib.import_module(__name__ + '.app'), name)
    if name == 'Settings':
        return getattr(_importlib.import_module(__name__ + '.config'), name)
    if name == 'Store':
        return getattr(_importlib.import_module(__name__ + '.store'), name)
    if name == 'build_context':
        return getattr(_importlib.import_module(__name__ + '.context'), name)
    raise AttributeError(name)


__all__ = [
    'KeyBatcher', 'ScopeRegistry', 'RelationDescriptor', 'RelationResolver',
    'BatchQLError', 'MisuseError', 'BatchContractError', 'BulkFetchFailure', 'EntityNotFound',
    'create_schema', 'create_app', 'Settings', 'Store', 'build_context',
]
