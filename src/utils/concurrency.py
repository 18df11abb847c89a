"""Keyed request coalescing ("single-flight") for async loaders.

When several coroutines ask for the same expensive value at once (the grant
registry on a cold cache), only the first caller should do the work; the
others await the same in-flight task.
The entry is removed as soon as the task settles, whether it succeeded,
raised, or was cancelled, so a failed load is retried by the next caller
instead of being cached.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Generic, Hashable, TypeVar

import structlog

_T = TypeVar("_T")

logger = structlog.get_logger(logger_name=__name__)


class SingleFlight(Generic[_T]):
    """Coalesce concurrent calls that share a key into one awaitable.

    Usage::

        flight: SingleFlight[list[GrantRecord]] = SingleFlight()
        records = await flight.do("registry", provider.fetch_all_records)
    """

    def __init__(self) -> None:
        self._inflight: dict[Hashable, asyncio.Task[_T]] = {}

    async def do(self, key: Hashable, factory: Callable[[], Awaitable[_T]]) -> _T:
        """Run *factory* for *key*, or join the call already in flight."""
        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(factory())
            self._inflight[key] = task
            task.add_done_callback(lambda _t, k=key: self._forget(k, _t))
        else:
            logger.debug("single_flight_joined", key=str(key))
        # shield() keeps one impatient caller's cancellation from cancelling
        # the shared task under everyone else.
        return await asyncio.shield(task)

    def cancel(self, key: Hashable) -> bool:
        """Cancel the in-flight call for *key*; returns ``False`` if none."""
        task = self._inflight.get(key)
        if task is None or task.done():
            return False
        task.cancel()
        return True

    def in_flight(self, key: Hashable) -> bool:
        return key in self._inflight

    def _forget(self, key: Hashable, task: asyncio.Task[_T]) -> None:
        if self._inflight.get(key) is task:
            del self._inflight[key]
