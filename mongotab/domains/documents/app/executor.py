"""Execution contexts for driver operations."""

from __future__ import annotations

import itertools
import logging
import threading
from collections.abc import Callable
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class Executor(Protocol):
    def submit(self, fn: Callable[..., Any], /, *args: Any) -> Any:
        ...

    def shutdown(self, wait: bool = True, *, cancel_futures: bool = False) -> None:
        ...


class ThreadExecutor:
    """Runs every job on its own daemon thread.

    A job that never returns holds only its own thread, so one tab's hung
    query cannot starve another tab's operations.
    """

    def __init__(self, name: str = "mongotab-op") -> None:
        self._name = name
        self._counter = itertools.count(1)
        self._lock = threading.Lock()
        self._threads: set[threading.Thread] = set()
        self._closed = False

    @property
    def active(self) -> int:
        with self._lock:
            return len(self._threads)

    def submit(self, fn: Callable[..., Any], /, *args: Any) -> threading.Thread:
        with self._lock:
            if self._closed:
                raise RuntimeError("cannot submit after shutdown")
            thread = threading.Thread(
                target=self._work,
                args=(fn, args),
                name=f"{self._name}-{next(self._counter)}",
                daemon=True,
            )
            self._threads.add(thread)
        thread.start()
        return thread

    def _work(self, fn: Callable[..., Any], args: tuple[Any, ...]) -> None:
        try:
            fn(*args)
        except Exception:
            logger.exception("Job on %s failed", threading.current_thread().name)
        finally:
            with self._lock:
                self._threads.discard(threading.current_thread())

    def shutdown(self, wait: bool = True, *, cancel_futures: bool = False) -> None:
        # Jobs start immediately, so there is nothing queued to cancel.
        with self._lock:
            self._closed = True
            threads = list(self._threads)
        if wait:
            for thread in threads:
                thread.join()


class ManualExecutor:
    """Executor for tests: jobs run only when the test says so, in any order."""

    def __init__(self) -> None:
        self.pending: list[Callable[[], Any]] = []
        self.submitted = 0

    def submit(self, fn: Callable[..., Any], /, *args: Any) -> None:
        self.submitted += 1
        self.pending.append(lambda: fn(*args))

    def run(self, index: int = 0) -> None:
        job = self.pending.pop(index)
        job()

    def run_last(self) -> None:
        self.run(len(self.pending) - 1)

    def run_all(self) -> int:
        count = 0
        while self.pending:
            self.run(0)
            count += 1
        return count

    def shutdown(self, wait: bool = True, *, cancel_futures: bool = False) -> None:
        self.pending.clear()
