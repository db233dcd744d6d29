# File: index_scout/batch.py
"""index_scout.batch: Chunked execution of an async task with bounded concurrency."""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, List, Optional, Sequence, TypeVar

__all__ = ["DEFAULT_BATCH_SIZE", "BatchCallback", "chunked", "run_batches"]

T = TypeVar("T")
R = TypeVar("R")

DEFAULT_BATCH_SIZE = 50

BatchCallback = Callable[[int, int], None]


def chunked(items: Sequence[T], size: int) -> List[Sequence[T]]:
    """Split ``items`` into consecutive chunks of at most ``size`` elements."""
    if size < 1:
        raise ValueError("batch size must be >= 1")
    return [items[i : i + size] for i in range(0, len(items), size)]


async def run_batches(
    task: Callable[[T], Awaitable[R]],
    items: Sequence[T],
    batch_size: int = DEFAULT_BATCH_SIZE,
    on_batch_complete: Optional[BatchCallback] = None,
) -> List[R]:
    """
    Run ``task`` over ``items`` one chunk at a time.

    All items of a chunk run concurrently and the next chunk starts only after
    every task of the current one has settled. ``on_batch_complete`` receives
    the 0-based chunk index and the total number of chunks.

    The first failing task aborts the run: its siblings in the chunk are
    cancelled, the exception propagates and no further chunks are started.

    Returns the task results in the order of ``items``.
    """
    chunks = chunked(items, batch_size)
    batch_count = len(chunks)
    results: List[R] = []

    for index, chunk in enumerate(chunks):
        pending = [asyncio.ensure_future(task(item)) for item in chunk]
        try:
            results.extend(await asyncio.gather(*pending))
        except BaseException:
            for fut in pending:
                fut.cancel()
            await asyncio.gather(*pending, return_exceptions=True)
            raise
        if on_batch_complete is not None:
            on_batch_complete(index, batch_count)

    return results
