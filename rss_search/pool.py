"""Shared worker pool and the completion barriers that gate feed and article tasks."""

from __future__ import annotations

import logging
import sys
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Optional

LOGGER = logging.getLogger(__name__)


class WorkerPool:
    """Thread pool shared by feed-level and article-level tasks.

    ``max_workers <= 0`` means no bound: a new thread is started whenever no
    idle thread is available. Otherwise at most ``max_workers`` tasks run at
    once and the rest wait in the queue.
    """

    def __init__(self, max_workers: int = 0) -> None:
        self.max_workers = max_workers
        limit = max_workers if max_workers > 0 else sys.maxsize
        self._executor = ThreadPoolExecutor(max_workers=limit, thread_name_prefix="rss-search")

    @property
    def bounded(self) -> bool:
        return self.max_workers > 0

    def submit(self, fn: Callable[..., Any], *args: Any) -> Future:
        return self._executor.submit(fn, *args)

    def shutdown(self, cancel: bool = False) -> None:
        """Stop accepting work; with ``cancel`` queued tasks are dropped too."""

        if cancel:
            self._executor.shutdown(wait=False, cancel_futures=True)
        else:
            self._executor.shutdown(wait=True)

    def __enter__(self) -> "WorkerPool":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown(cancel=exc_type is not None)


class CompletionBarrier:
    """Releases once ``count`` units of work have each called :meth:`arrive`.

    ``on_complete`` runs exactly once, in the thread of the last arrival, so a
    feed can report its own completion without holding a worker thread while
    its articles are fetched.
    """

    def __init__(self, count: int, on_complete: Optional[Callable[[], None]] = None) -> None:
        if count < 0:
            raise ValueError("count must be non-negative")
        self._remaining = count
        self._on_complete = on_complete
        self._condition = threading.Condition()
        if count == 0:
            self._fire()

    @property
    def remaining(self) -> int:
        with self._condition:
            return self._remaining

    def arrive(self, n: int = 1) -> None:
        with self._condition:
            if self._remaining == 0:
                LOGGER.warning("Ignoring arrival at an already released barrier")
                return
            self._remaining = max(0, self._remaining - n)
            released = self._remaining == 0
            if released:
                self._condition.notify_all()
        if released:
            self._fire()

    def _fire(self) -> None:
        callback, self._on_complete = self._on_complete, None
        if callback is not None:
            callback()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until released; False if ``timeout`` expired first."""

        with self._condition:
            return self._condition.wait_for(lambda: self._remaining == 0, timeout=timeout)
