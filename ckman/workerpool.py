"""A blocking thread pool whose submissions wait when every worker is busy."""

from __future__ import annotations

import logging
import os
import queue
import threading
from collections.abc import Callable

from ckman.mathutil import max_int

logger = logging.getLogger(__name__)

MAX_WORKERS_DEFAULT = max_int(2 * (os.cpu_count() or 1), 10)


class WorkerPoolStopped(RuntimeError):
    """Raised when submitting to a stopped pool."""

    def __init__(self) -> None:
        super().__init__("WorkerPool already stopped")


class WorkerPool:
    """Fixed-size pool of daemon worker threads fed through a bounded queue."""

    def __init__(self, max_workers: int = MAX_WORKERS_DEFAULT, queue_size: int = 0) -> None:
        self._max_workers = max_workers
        # A zero-sized queue would be unbounded; the smallest bound is the closest match.
        self._queue: queue.Queue[Callable[[], None]] = queue.Queue(maxsize=max(queue_size, 1))
        self._cond = threading.Condition()
        self._in = 0
        self._out = 0
        self._current = 0
        self._stopped = False
        for _ in range(max_workers):
            self._spawn()

    def _spawn(self) -> None:
        threading.Thread(target=self._worker, daemon=True).start()

    def _worker(self) -> None:
        with self._cond:
            self._current += 1
        while True:
            fn = self._queue.get()
            try:
                fn()
            except Exception:
                logger.exception("task failed")
            with self._cond:
                self._out += 1
                if self._in == self._out:
                    self._cond.notify_all()
                if self._current > self._max_workers:
                    self._current -= 1
                    return

    def resize(self, max_workers: int) -> None:
        """Change the worker count; surplus workers leave after their next task."""
        with self._cond:
            for _ in range(max_workers - self._max_workers):
                self._spawn()
            self._max_workers = max_workers

    def submit(self, fn: Callable[[], None]) -> None:
        """Queue ``fn``; blocks while the queue is full."""
        if self._stopped:
            raise WorkerPoolStopped()
        with self._cond:
            self._in += 1
        self._queue.put(fn)

    def stop_wait(self) -> None:
        """Refuse new tasks and wait for all queued tasks to finish."""
        self._stopped = True
        self.wait()

    def wait(self) -> None:
        with self._cond:
            self._cond.wait_for(lambda: self._in == self._out)

    def restart(self) -> None:
        self._stopped = False

    def pending(self) -> int:
        """Number of submitted tasks that have not finished."""
        with self._cond:
            return self._in - self._out