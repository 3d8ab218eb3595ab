"""Parallel execution helpers for the normal map pipeline."""
from __future__ import annotations

import concurrent.futures
import logging
from typing import Callable, Optional, Sequence, TypeVar


LOGGER = logging.getLogger("normalmap_pipeline.parallel")

T = TypeVar("T")
R = TypeVar("R")


def create_thread_pool(max_workers: Optional[int] = None) -> concurrent.futures.ThreadPoolExecutor:
    """Create a thread pool executor with sane defaults."""

    return concurrent.futures.ThreadPoolExecutor(max_workers=max_workers)


def run_parallel(function: Callable[[T], R], items: Sequence[T], *, max_workers: Optional[int] = None) -> list[R]:
    """Run *function* for each element in *items* concurrently.

    Results are returned in the order of *items*. The first worker exception
    is re-raised once every submitted task has finished.
    """

    if not items:
        return []
    if max_workers == 1 or len(items) == 1:
        return [function(item) for item in items]
    LOGGER.debug("Starting thread pool with up to %s workers for %d items", max_workers, len(items))
    with create_thread_pool(max_workers=max_workers) as executor:
        futures = [executor.submit(function, item) for item in items]
        concurrent.futures.wait(futures)
    return [future.result() for future in futures]


def split_range(length: int, parts: int) -> list[tuple[int, int]]:
    """Split ``range(length)`` into at most *parts* contiguous ``(start, stop)`` spans."""

    parts = max(1, min(int(parts), length))
    if length <= 0:
        return []
    base, extra = divmod(length, parts)
    spans = []
    start = 0
    for index in range(parts):
        stop = start + base + (1 if index < extra else 0)
        spans.append((start, stop))
        start = stop
    return spans
