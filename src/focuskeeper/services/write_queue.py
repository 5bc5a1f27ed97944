"""Sequential persistence queue.

Writes are executed one at a time in submission order. Submitting a write
for a key that still has a write waiting replaces the waiting one, and the
merged write moves to the back of the queue; callers of both submissions
receive the outcome of the newer write. A write already in flight is never
interrupted.
"""

from __future__ import annotations

import asyncio
from collections import OrderedDict
from collections.abc import Awaitable, Callable, Hashable

from focuskeeper.utils.logger import get_logger

WriteFn = Callable[[], Awaitable[None]]


class SequentialWriter:
    """Serialize asynchronous writes with newest-wins coalescing per key."""

    def __init__(self):
        self._pending: OrderedDict[Hashable, tuple[WriteFn, list[asyncio.Future]]] = (
            OrderedDict()
        )
        self._worker: asyncio.Task | None = None
        self._in_flight: Hashable | None = None

    @property
    def pending_keys(self) -> list[Hashable]:
        """Keys waiting to be written, in execution order."""
        return list(self._pending)

    @property
    def busy(self) -> bool:
        return self._worker is not None and not self._worker.done()

    def submit(self, key: Hashable, write: WriteFn) -> asyncio.Future:
        """Queue *write* under *key* and return a future for its outcome.

        The future may be awaited or ignored; failures of ignored futures
        do not surface as unretrieved-exception warnings.
        """
        loop = asyncio.get_running_loop()
        future: asyncio.Future = loop.create_future()
        future.add_done_callback(_consume_exception)

        waiters: list[asyncio.Future] = []
        if key in self._pending:
            _, waiters = self._pending.pop(key)
            get_logger("writes").debug("write for %r superseded by a newer snapshot", key)
        waiters.append(future)
        self._pending[key] = (write, waiters)

        if not self.busy:
            self._worker = loop.create_task(self._run())
        return future

    async def drain(self) -> None:
        """Wait until every queued write has finished."""
        while self.busy:
            await asyncio.shield(self._worker)

    async def _run(self) -> None:
        while self._pending:
            key, (write, waiters) = self._pending.popitem(last=False)
            self._in_flight = key
            try:
                await write()
            except asyncio.CancelledError:
                for waiter in waiters:
                    if not waiter.done():
                        waiter.cancel()
                raise
            except Exception as e:  # pylint: disable=broad-exception-caught
                get_logger("writes").warning("write for %r failed: %s", key, e)
                for waiter in waiters:
                    if not waiter.done():
                        waiter.set_exception(e)
            else:
                for waiter in waiters:
                    if not waiter.done():
                        waiter.set_result(None)
            finally:
                self._in_flight = None


def _consume_exception(future: asyncio.Future) -> None:
    if not future.cancelled():
        future.exception()
