# File: index_scout/reconciler.py
"""index_scout.reconciler: Cache-backed lookup of indexing statuses for candidate URLs."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from pathlib import Path
from typing import Awaitable, Callable, Collection, Dict, List, Optional, Sequence, Tuple, Union

from index_scout.batch import DEFAULT_BATCH_SIZE, BatchCallback, run_batches
from index_scout.cache import (
    DEFAULT_CACHE_TTL,
    StatusMapping,
    StatusRecord,
    load_status_cache,
    save_status_cache,
    should_recheck,
    utcnow,
)
from index_scout.logger import logger

__all__ = ["INDEXABLE_STATUSES", "PageStatusFetcher", "ReconcileResult", "StatusReconciler"]

#: Coverage states worth (re-)submitting for indexing.
INDEXABLE_STATUSES: Tuple[str, ...] = (
    "Discovered - currently not indexed",
    "Crawled - currently not indexed",
    "URL is unknown to Google",
    "Forbidden",
    "Error",
    "Excluded by ‘noindex’ tag",
    "Excluded by 'noindex' tag",
)

PageStatusFetcher = Callable[[str], Awaitable[str]]


@dataclass(slots=True)
class ReconcileResult:
    """URLs grouped by resolved status plus the derived indexable list."""

    buckets: Dict[str, List[str]] = field(default_factory=dict)
    indexable: List[str] = field(default_factory=list)
    fetched: int = 0
    cached: int = 0


class StatusReconciler:
    """
    Resolve the status of every candidate URL, consulting the cache first.

    A URL with a trustworthy cached record keeps its status; any other URL is
    fetched through ``fetch_status`` and its record is replaced. The whole
    mapping is written back once all batches have run.
    """

    def __init__(
        self,
        fetch_status: PageStatusFetcher,
        cache_path: Union[str, Path],
        *,
        indexable_statuses: Collection[str] = INDEXABLE_STATUSES,
        ttl: timedelta = DEFAULT_CACHE_TTL,
        batch_size: int = DEFAULT_BATCH_SIZE,
        clock: Callable[[], datetime] = utcnow,
        on_batch_complete: Optional[BatchCallback] = None,
    ) -> None:
        self.fetch_status = fetch_status
        self.cache_path = Path(cache_path)
        self.indexable_statuses = frozenset(indexable_statuses)
        self.ttl = ttl
        self.batch_size = batch_size
        self.clock = clock
        self.on_batch_complete = on_batch_complete

    async def reconcile(self, urls: Sequence[str]) -> ReconcileResult:
        mapping: StatusMapping = load_status_cache(self.cache_path)
        result = ReconcileResult()

        async def resolve(url: str) -> str:
            record = mapping.get(url)
            if record is not None and not should_recheck(
                record, self.indexable_statuses, self.ttl, now=self.clock()
            ):
                result.cached += 1
                return record.status

            status = await self.fetch_status(url)
            logger.debug("%s -> %s", url, status)
            # each task owns exactly one key, so no lock is needed
            mapping[url] = StatusRecord(status=status, last_checked_at=self.clock())
            result.fetched += 1
            return status

        def on_batch(index: int, count: int) -> None:
            logger.info("Batch %d of %d complete", index + 1, count)
            if self.on_batch_complete is not None:
                self.on_batch_complete(index, count)

        try:
            statuses = await run_batches(resolve, urls, self.batch_size, on_batch)
        except BaseException:
            # keep what was resolved before the failure
            save_status_cache(self.cache_path, mapping)
            logger.warning(
                "Reconciliation aborted; saved %d statuses to %s", len(mapping), self.cache_path
            )
            raise

        save_status_cache(self.cache_path, mapping)

        for url, status in zip(urls, statuses):
            result.buckets.setdefault(status, []).append(url)
        result.indexable = [
            url
            for status, bucket in result.buckets.items()
            if status in self.indexable_statuses
            for url in bucket
        ]
        logger.info(
            "Reconciled %d URLs (%d fetched, %d cached), %d indexable",
            len(urls),
            result.fetched,
            result.cached,
            len(result.indexable),
        )
        return result
