"""Key batcher: coalesce per-tick key lookups into one bulk fetch.

A ``KeyBatcher`` collects every key enqueued while the event loop is busy with
the current round of runnable callbacks and, once the loop gets a turn
(``loop.call_soon``), hands the ordered, de-duplicated keys to a bulk-fetch
function. Each distinct key owns one future; duplicate requests within the
same batch share it, so all callers of a key observe the identical value.

Nothing is cached between batches: the first ``enqueue`` after a dispatch
opens a new batch and hits the store again.

Example:

    async def load_users(keys):
        rows = await store.find_in(User, User.id, keys)
        by_id = {r.id: r for r in rows}
        return [by_id.get(k) for k in keys]

    batcher = KeyBatcher(load_users, name='user')
    a, b = await asyncio.gather(batcher.enqueue(u1), batcher.enqueue(u2))
"""
from __future__ import annotations

import asyncio
import inspect
import logging
from dataclasses import dataclass, field as dc_field
from typing import Any, Awaitable, Callable, Dict, Hashable, List, Optional, Sequence, Union

from .errors import BatchContractError, BulkFetchFailure, MisuseError

logger = logging.getLogger(__name__)

BulkFetch = Callable[[List[Any]], Union[Awaitable[Sequence[Any]], Sequence[Any]]]


@dataclass
class Batch:
    """Keys (first-enqueue order) and their pending futures for one tick."""
    keys: List[Hashable] = dc_field(default_factory=list)
    futures: Dict[Hashable, 'asyncio.Future[Any]'] = dc_field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.keys)

    def resolve(self, values: Sequence[Any]) -> None:
        for key, value in zip(self.keys, values):
            fut = self.futures[key]
            if not fut.done():
                fut.set_result(value)

    def fail(self, exc: BaseException) -> None:
        for fut in self.futures.values():
            if not fut.done():
                fut.set_exception(exc)


def _check_key(key: Any) -> None:
    if key is None or (isinstance(key, str) and not key):
        raise MisuseError(f"Cannot enqueue an empty key: {key!r}")
    try:
        hash(key)
    except TypeError as e:
        raise MisuseError(f"Batch keys must be hashable, got {type(key).__name__}") from e


class KeyBatcher:
    """Per-scope batching primitive.

    Args:
        fetch: bulk-fetch callable receiving the ordered list of distinct keys
            and returning (or awaiting to) a sequence of the same length and
            order. Plain functions are accepted as well as coroutines.
        name: label used in log records.
    """

    def __init__(self, fetch: BulkFetch, *, name: Optional[str] = None):
        if not callable(fetch):
            raise MisuseError("KeyBatcher requires a callable bulk fetch")
        self._fetch = fetch
        self.name = name or getattr(fetch, '__name__', 'batcher')
        self._pending: Optional[Batch] = None
        self._inflight: Optional['asyncio.Task[None]'] = None
        self.dispatch_count = 0

    def __repr__(self) -> str:
        pending = len(self._pending) if self._pending is not None else 0
        return f"<KeyBatcher {self.name} pending={pending} dispatched={self.dispatch_count}>"

    @property
    def pending_keys(self) -> tuple:
        """Keys waiting in the currently open batch (empty when none is open)."""
        return tuple(self._pending.keys) if self._pending is not None else ()

    def enqueue(self, key: Hashable) -> 'asyncio.Future[Any]':
        """Register ``key`` in the open batch and return its future.

        Must be called while an event loop is running. A key already present in
        the open batch returns the very same future object.
        """
        _check_key(key)
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError as e:
            raise MisuseError("KeyBatcher.enqueue() requires a running event loop") from e
        batch = self._pending
        if batch is None:
            batch = self._open(loop)
        fut = batch.futures.get(key)
        if fut is None:
            fut = loop.create_future()
            batch.keys.append(key)
            batch.futures[key] = fut
        return fut

    def load_many(self, keys: Sequence[Hashable]) -> 'asyncio.Future[List[Any]]':
        """Enqueue several keys at once; resolves to values in ``keys`` order."""
        return asyncio.gather(*[self.enqueue(k) for k in keys])

    # --- batch lifecycle ---
    def _open(self, loop: asyncio.AbstractEventLoop) -> Batch:
        batch = Batch()
        self._pending = batch
        loop.call_soon(self._close, batch, loop)
        return batch

    def _close(self, batch: Batch, loop: asyncio.AbstractEventLoop) -> None:
        if self._pending is batch:
            self._pending = None
        task = loop.create_task(self._dispatch(batch, self._inflight))
        self._inflight = task
        task.add_done_callback(self._release)

    def _release(self, task: 'asyncio.Task[None]') -> None:
        if self._inflight is task:
            self._inflight = None

    async def _dispatch(self, batch: Batch, previous: Optional['asyncio.Task[None]']) -> None:
        # Batches of one scope run strictly one after another.
        if previous is not None and not previous.done():
            await asyncio.wait([previous])
        keys = list(batch.keys)
        self.dispatch_count += 1
        logger.debug("batch %s #%d dispatching %d key(s)", self.name, self.dispatch_count, len(keys))
        try:
            result = self._fetch(keys)
            if inspect.isawaitable(result):
                result = await result
        except asyncio.CancelledError:
            for fut in batch.futures.values():
                fut.cancel()
            raise
        except Exception as e:
            failure = BulkFetchFailure(keys, e)
            failure.__cause__ = e
            logger.warning("batch %s failed for %d key(s): %s", self.name, len(keys), e)
            batch.fail(failure)
            return
        try:
            values = list(result)
        except TypeError:
            batch.fail(BatchContractError(
                f"Bulk fetch for {self.name} must return a sequence, got {type(result).__name__}", keys))
            return
        if len(values) != len(keys):
            batch.fail(BatchContractError(
                f"Bulk fetch for {self.name} returned {len(values)} value(s) for {len(keys)} key(s)", keys))
            return
        batch.resolve(values)


__all__ = ['Batch', 'BulkFetch', 'KeyBatcher']
