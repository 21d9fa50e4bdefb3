"""Thread pool fan-out with a fan-in barrier."""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Callable, Sequence, TypeVar

T = TypeVar("T")
R = TypeVar("R")


class ThreadPoolManager:
    """Run one task per item concurrently and wait for all of them."""

    def __init__(self, max_workers: int | None = None, thread_name_prefix: str = "twtfeed") -> None:
        # None sizes each batch to its number of tasks.
        self.max_workers = max_workers
        self.thread_name_prefix = thread_name_prefix

    def fan_out(self, func: Callable[[T], R], items: Sequence[T]) -> list[R]:
        """Apply ``func`` to every item concurrently; results keep ``items`` order.

        Every task runs to completion before results are collected. An
        exception raised by a task propagates from here, so tasks that must
        not abort the batch report failures in their return value.
        """

        if not items:
            return []
        workers = self.max_workers or len(items)
        with ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix=self.thread_name_prefix
        ) as executor:
            futures: list[Future[R]] = [executor.submit(func, item) for item in items]
            wait(futures)
        return [future.result() for future in futures]


__all__ = ["ThreadPoolManager"]
