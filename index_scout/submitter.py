# File: index_scout/submitter.py
"""index_scout.submitter: Sequential submission of indexing requests."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, Dict, Iterable, Optional

from index_scout.errors import RateLimitError, TransientAPIError
from index_scout.logger import logger

__all__ = [
    "IndexRequester",
    "IndexRequestSubmitter",
    "PublishMetadataFetcher",
    "SubmissionOutcome",
    "SubmissionReport",
]

PublishMetadataFetcher = Callable[[str], Awaitable[int]]
IndexRequester = Callable[[str], Awaitable[int]]

ProgressCallback = Callable[[str, "SubmissionOutcome"], None]


class SubmissionOutcome(str, Enum):
    REQUESTED = "requested"
    ALREADY_REQUESTED = "already_requested"
    SKIPPED = "skipped"


@dataclass(slots=True)
class SubmissionReport:
    """Per-URL outcomes in processing order; ``rate_limit`` is set if the run was halted."""

    outcomes: Dict[str, SubmissionOutcome] = field(default_factory=dict)
    rate_limit: Optional[RateLimitError] = None

    @property
    def halted(self) -> bool:
        return self.rate_limit is not None

    def count(self, outcome: SubmissionOutcome) -> int:
        return sum(1 for o in self.outcomes.values() if o is outcome)


class IndexRequestSubmitter:
    """
    Walk the indexable URLs strictly one at a time.

    For each URL the publish metadata is read first: ``404`` means Google has
    never been notified, so an indexing request is sent; any other ``< 400``
    code means a request was already made. A ``429`` from either call stops
    the loop and is returned in the report instead of being raised.
    """

    def __init__(
        self,
        get_publish_metadata: PublishMetadataFetcher,
        request_indexing: IndexRequester,
        on_outcome: Optional[ProgressCallback] = None,
    ) -> None:
        self.get_publish_metadata = get_publish_metadata
        self.request_indexing = request_indexing
        self.on_outcome = on_outcome

    async def submit(self, urls: Iterable[str]) -> SubmissionReport:
        report = SubmissionReport()
        for url in urls:
            if url in report.outcomes:
                logger.debug("Duplicate url, already processed: %s", url)
                continue
            logger.info("Processing url: %s", url)
            try:
                outcome = await self._process(url)
            except RateLimitError as exc:
                logger.error("%s (at %s)", exc, url)
                report.rate_limit = exc
                break
            except TransientAPIError as exc:
                logger.warning("Skipping %s: %s", url, exc)
                outcome = SubmissionOutcome.SKIPPED

            report.outcomes[url] = outcome
            if self.on_outcome is not None:
                self.on_outcome(url, outcome)

        logger.info(
            "Submission finished: %d requested, %d already requested, %d skipped%s",
            report.count(SubmissionOutcome.REQUESTED),
            report.count(SubmissionOutcome.ALREADY_REQUESTED),
            report.count(SubmissionOutcome.SKIPPED),
            " (halted by rate limit)" if report.halted else "",
        )
        return report

    async def _process(self, url: str) -> SubmissionOutcome:
        status = await self.get_publish_metadata(url)

        if status == 404:
            indexing_status = await self.request_indexing(url)
            if indexing_status < 400:
                return SubmissionOutcome.REQUESTED
            if indexing_status == 429:
                raise RateLimitError("publish", url)
            logger.warning("Indexing request for %s failed with HTTP %s", url, indexing_status)
            return SubmissionOutcome.SKIPPED

        if status < 400:
            return SubmissionOutcome.ALREADY_REQUESTED
        if status == 429:
            raise RateLimitError("read", url)

        logger.warning("Publish metadata for %s returned HTTP %s", url, status)
        return SubmissionOutcome.SKIPPED
