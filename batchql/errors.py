"""Exception types raised by the batched data-fetch layer and the CRUD surface."""
from __future__ import annotations

from typing import Any, Optional, Sequence


class BatchQLError(Exception):
    """Base class for all batchql errors."""


class MisuseError(BatchQLError):
    """Programming error surfaced at the call site (never deferred to dispatch)."""


class BatchContractError(MisuseError):
    """A bulk fetch returned something that cannot be aligned with its keys."""

    def __init__(self, message: str, keys: Optional[Sequence[Any]] = None):
        super().__init__(message)
        self.keys = list(keys or [])


class BulkFetchFailure(BatchQLError):
    """The store round trip behind one batch failed.

    The same instance is delivered to every caller whose key was part of the
    batch; the underlying exception is available as ``__cause__``.
    """

    def __init__(self, keys: Sequence[Any], cause: BaseException):
        super().__init__(f"Bulk fetch failed for {len(keys)} key(s): {cause}")
        self.keys = list(keys)
        self.cause = cause


class EntityNotFound(BatchQLError):
    """A mutation addressed a row that does not exist."""

    def __init__(self, entity: str, key: Any):
        super().__init__(f"{entity} not found: {key}")
        self.entity = entity
        self.key = key


__all__ = [
    'BatchQLError', 'MisuseError', 'BatchContractError', 'BulkFetchFailure', 'EntityNotFound',
]
