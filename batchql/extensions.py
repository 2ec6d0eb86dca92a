from __future__ import annotations

import logging
from typing import Iterator

from strawberry.extensions import SchemaExtension

from .context import get_scope_registry_or_none, set_scope_registry
from .scope import ScopeRegistry

logger = logging.getLogger(__name__)


class BatchScopeExtension(SchemaExtension):
    """Give every execution its own ``ScopeRegistry``.

    The registry is put into the context when execution starts and taken out
    (and cleared) when it ends, so batchers never leak across requests or
    across executions that happen to reuse a context object.
    """

    def on_execute(self) -> Iterator[None]:
        ctx = self.execution_context.context
        if ctx is None:
            yield
            return
        previous = get_scope_registry_or_none(ctx)
        registry = ScopeRegistry()
        set_scope_registry(ctx, registry)
        try:
            yield
        finally:
            logger.debug("execution finished with %d batch scope(s)", len(registry))
            registry.clear()
            set_scope_registry(ctx, previous)


__all__ = ['BatchScopeExtension']
