"""Work Queue — drains a list of items through a handler, one at a time.

WHY
───
Some work arrives as a flat list of opaque items (file paths, message
ids, URLs) that must be handled strictly one after another while the list
keeps growing. ``WorkQueue`` owns the sequencing; the handler owns the
pacing: it calls :meth:`WorkQueue.advance` when it is finished with its
item, which may be immediately or after its own I/O completes.

ARCHITECTURE
────────────
::

    WorkQueue(items, handler, check)
      ├── .advance()            ─ take the next item, or signal drained
      ├── .enqueue(items, at_front)
      ├── .clear()              ─ drop pending items (in-flight item unaffected)
      ├── .paused               ─ flag, blocks advancing while True
      ├── .add_done_callback()  ─ called each time the queue drains
      └── .join()               ─ await until idle

    advance() ──► paused / check() false ──► retry after poll_interval
        │                                   (stalls after max_polls)
        ▼
    pop front ──► current = item ──► loop.call_soon(handler, item)
        │
        └── nothing left ──► current = None ──► done callbacks

Example::

    async def main():
        seen = []

        def handle(item):
            seen.append(item)
            queue.advance()

        queue = WorkQueue([1, 2, 3], handle)
        await queue.join()          # seen == [1, 2, 3]

The queue must be created inside a running event loop and starts draining
immediately.
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Callable, Iterable
from typing import Any, Generic, TypeVar

from worklane.core.errors import categorize_error
from worklane.core.logging import get_logger
from worklane.core.settings import get_settings

logger = get_logger(__name__)

T = TypeVar("T")

DoneCallback = Callable[["WorkQueue[Any]"], Any]


class WorkQueue(Generic[T]):
    """Self-draining single-lane queue.

    Parameters
    ----------
    items : list
        Pending items. The list object itself is consumed, so it is empty
        once the queue has drained. ``None`` starts an empty queue; any other
        non-list raises ``TypeError``.
    handler : callable
        Called with each item. May be a coroutine function; its coroutine is
        scheduled as a task. Must eventually call :meth:`advance`.
    check : callable, optional
        Admission check evaluated before every dequeue; while it returns
        false the queue polls instead of advancing. Non-callable values are
        ignored.
    poll_interval : float, optional
        Seconds between admission retries (default from settings).
    max_polls : int, optional
        Retries before the queue stalls; ``None`` polls forever (default
        from settings).
    """

    def __init__(
        self,
        items: list[T] | None,
        handler: Callable[[T], Any],
        check: Callable[[], bool] | None = None,
        *,
        poll_interval: float | None = None,
        max_polls: int | None = None,
    ) -> None:
        if items is not None and not isinstance(items, list):
            raise TypeError(f"WorkQueue items must be a list, got {type(items).__name__}")
        settings = get_settings()
        self.items: list[T] = items if items is not None else []
        self.handler = handler
        self.check = check if callable(check) else None
        self.paused = False
        self.current: T | None = None
        self.stalled = False
        self.poll_interval = settings.queue_poll_interval if poll_interval is None else poll_interval
        self.max_polls = settings.queue_max_polls if max_polls is None else max_polls

        self._loop = asyncio.get_running_loop()
        self._in_flight = False
        self._polls = 0
        self._retry: asyncio.TimerHandle | None = None
        self._done_callbacks: list[DoneCallback] = []
        self._idle_waiters: list[asyncio.Future[None]] = []
        self._tasks: set[asyncio.Task[Any]] = set()

        self.advance()

    # ── State ────────────────────────────────────────────────────────

    @property
    def idle(self) -> bool:
        """True when no item is in flight and none is pending."""
        return not self._in_flight and not self.items

    def __len__(self) -> int:
        return len(self.items)

    # ── Advancing ────────────────────────────────────────────────────

    def advance(self) -> None:
        """Hand the next item to the handler, or signal that the queue drained."""
        self._cancel_retry()
        self._polls = 0
        self.stalled = False
        self._step()

    def _step(self) -> None:
        self._retry = None
        if not self.items:
            self._drain()
            return

        if self.paused or (self.check is not None and not self.check()):
            self._schedule_retry()
            return

        item = self.items.pop(0)
        self.current = item
        self._in_flight = True
        logger.debug("queue.consume", item=item, remaining=len(self.items))
        self._loop.call_soon(self._dispatch, item)

    def _dispatch(self, item: T) -> None:
        outcome = self.handler(item)
        if inspect.isawaitable(outcome):
            task = asyncio.ensure_future(outcome)
            self._tasks.add(task)
            task.add_done_callback(self._handler_finished)

    def _handler_finished(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(
                "queue.handler_failed",
                category=categorize_error(exc).value,
                error=str(exc),
                exc_info=exc,
            )

    def _schedule_retry(self) -> None:
        if self.max_polls is not None and self._polls >= self.max_polls:
            self.stalled = True
            logger.warning(
                "queue.poll_limit_reached",
                polls=self._polls,
                pending=len(self.items),
                paused=self.paused,
            )
            return
        self._polls += 1
        self._retry = self._loop.call_later(self.poll_interval, self._step)

    def _cancel_retry(self) -> None:
        if self._retry is not None:
            self._retry.cancel()
            self._retry = None

    # ── Draining ─────────────────────────────────────────────────────

    def _drain(self) -> None:
        self.current = None
        self._in_flight = False
        logger.debug("queue.drained")
        self._loop.call_soon(self._notify_drained)

    def _notify_drained(self) -> None:
        for callback in list(self._done_callbacks):
            callback(self)
        if self.idle:
            waiters, self._idle_waiters = self._idle_waiters, []
            for waiter in waiters:
                if not waiter.done():
                    waiter.set_result(None)

    def add_done_callback(self, callback: DoneCallback) -> None:
        """Call ``callback(queue)`` every time the queue drains."""
        self._done_callbacks.append(callback)

    def remove_done_callback(self, callback: DoneCallback) -> int:
        """Remove every registration of ``callback``; return how many were removed."""
        before = len(self._done_callbacks)
        self._done_callbacks = [cb for cb in self._done_callbacks if cb != callback]
        return before - len(self._done_callbacks)

    async def join(self) -> None:
        """Wait until the queue is idle."""
        if self.idle:
            return
        waiter: asyncio.Future[None] = self._loop.create_future()
        self._idle_waiters.append(waiter)
        await waiter

    # ── Mutation ─────────────────────────────────────────────────────

    def clear(self) -> None:
        """Drop all pending items. The in-flight item is not affected."""
        self.items.clear()

    def enqueue(self, items: Iterable[T], at_front: bool = False) -> None:
        """Add items at the back, or ahead of pending items when ``at_front``.

        Draining resumes on its own when the queue was idle (or stalled)
        before the call; otherwise the items wait their turn.
        """
        items = list(items)
        resume = self.idle or self.stalled
        if at_front:
            self.items[:0] = items
        else:
            self.items.extend(items)
        logger.debug("queue.enqueue", count=len(items), at_front=at_front, resume=resume)
        if resume:
            self.advance()

    def __repr__(self) -> str:
        return (
            f"WorkQueue(pending={len(self.items)}, in_flight={self._in_flight}, "
            f"paused={self.paused}, stalled={self.stalled})"
        )


__all__ = ["WorkQueue"]
