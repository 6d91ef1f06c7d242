"""Cancellation tokens tied to a view's lifetime."""

from __future__ import annotations

import asyncio
import logging
import weakref
from typing import Any, Awaitable, TypeVar

from errors import Cancelled

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


class CancellationToken:
    """Abort signal passed down from a view to every request it starts.

    Cancelling a token cancels all of its children. Awaiting work through
    ``run`` abandons it as soon as the token is cancelled, so a result that
    arrives afterwards is dropped instead of being delivered.
    """

    def __init__(self, parent: CancellationToken | None = None) -> None:
        self._event = asyncio.Event()
        self._children: weakref.WeakSet[CancellationToken] = weakref.WeakSet()
        if parent is not None:
            parent._children.add(self)
            if parent.cancelled:
                self.cancel()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        if self._event.is_set():
            return
        self._event.set()
        for child in list(self._children):
            child.cancel()

    def child(self) -> CancellationToken:
        return CancellationToken(parent=self)

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise Cancelled()

    async def run(self, awaitable: Awaitable[T]) -> T:
        """Await ``awaitable`` unless the token is cancelled first."""
        if self.cancelled:
            _discard(awaitable)
            raise Cancelled()

        task = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(self._event.wait())
        try:
            await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            task.cancel()
            waiter.cancel()
            raise

        waiter.cancel()
        if self.cancelled:
            if task.done():
                if not task.cancelled() and task.exception() is not None:
                    LOGGER.debug("Dropping failure that arrived after cancellation: %s", task.exception())
            else:
                task.cancel()
            raise Cancelled()
        return task.result()


def _discard(awaitable: Any) -> None:
    # Close un-awaited coroutines so they do not warn on garbage collection.
    close = getattr(awaitable, "close", None)
    if asyncio.iscoroutine(awaitable) and close is not None:
        close()
    elif isinstance(awaitable, asyncio.Future):
        awaitable.cancel()
