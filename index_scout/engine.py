# File: index_scout/engine.py
"""index_scout.engine: Orchestration layer: discovery, status reconciliation and submission."""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import partial
from typing import Callable, Dict, List, Optional

from aiohttp import ClientSession, ClientTimeout

from index_scout.batch import BatchCallback
from index_scout.config import IndexerConfig
from index_scout.errors import NoSitemapsError
from index_scout.gsc.auth import TokenProvider
from index_scout.gsc.client import SearchConsoleClient
from index_scout.logger import logger
from index_scout.reconciler import StatusReconciler
from index_scout.sitemap import SitemapSource
from index_scout.submitter import IndexRequestSubmitter, SubmissionOutcome, SubmissionReport
from index_scout.utils import read_csv_urls

__all__ = ["Engine", "RunReport"]

ClientFactory = Callable[[ClientSession, str], SearchConsoleClient]
OutcomeCallback = Callable[[str, SubmissionOutcome], None]
DiscoveryCallback = Callable[[int, int], None]


@dataclass(slots=True)
class RunReport:
    """Everything a run produced, for the CLI summary and the JSON report."""

    target: str
    site_url: Optional[str] = None
    sitemaps: List[str] = field(default_factory=list)
    buckets: Dict[str, List[str]] = field(default_factory=dict)
    indexable: List[str] = field(default_factory=list)
    submission: SubmissionReport = field(default_factory=SubmissionReport)

    @property
    def ok(self) -> bool:
        return not self.submission.halted


class Engine:
    """Фасад для CLI и тестов: токен, сессия, сверка статусов и отправка запросов."""

    def __init__(
        self,
        config: IndexerConfig,
        *,
        token_provider: Optional[TokenProvider] = None,
        client_factory: Optional[ClientFactory] = None,
        on_indexable: Optional[Callable[[RunReport], None]] = None,
        on_discovered: Optional[DiscoveryCallback] = None,
        on_batch_complete: Optional[BatchCallback] = None,
        on_outcome: Optional[OutcomeCallback] = None,
    ) -> None:
        self.config = config
        self.token_provider = token_provider or TokenProvider()
        self.client_factory = client_factory or self._default_client
        self.on_indexable = on_indexable
        self.on_discovered = on_discovered
        self.on_batch_complete = on_batch_complete
        self.on_outcome = on_outcome

    def _default_client(self, session: ClientSession, token: str) -> SearchConsoleClient:
        return SearchConsoleClient(session, token, retry_times=self.config.retry_times)

    async def run(self) -> RunReport:
        """Run the whole workflow; fatal conditions are raised, a rate limit halts the report."""
        cfg = self.config
        report = RunReport(target=cfg.target)
        token = await self.token_provider.get_access_token(cfg.credentials)

        async with ClientSession(timeout=ClientTimeout(total=cfg.timeout)) as session:
            client = self.client_factory(session, token)

            if cfg.is_csv:
                report.indexable = read_csv_urls(cfg.target)
                logger.info("Loaded %d URLs from %s", len(report.indexable), cfg.target)
            else:
                await self._reconcile(client, report)

            if self.on_indexable is not None:
                self.on_indexable(report)

            submitter = IndexRequestSubmitter(
                client.get_publish_metadata, client.request_indexing, on_outcome=self.on_outcome
            )
            report.submission = await submitter.submit(report.indexable)

        return report

    async def _reconcile(self, client: SearchConsoleClient, report: RunReport) -> None:
        cfg = self.config
        site_url = cfg.site_url
        report.site_url = site_url
        logger.info("Processing site: %s", site_url)

        sitemaps, pages = await SitemapSource(client).get_sitemap_pages(site_url)
        if not sitemaps:
            raise NoSitemapsError(site_url)
        report.sitemaps = sitemaps
        logger.info("Found %d URLs in %d sitemap(s)", len(pages), len(sitemaps))
        if self.on_discovered is not None:
            self.on_discovered(len(pages), len(sitemaps))

        reconciler = StatusReconciler(
            partial(client.get_page_indexing_status, site_url),
            cfg.cache_path,
            indexable_statuses=cfg.indexable_statuses,
            ttl=cfg.cache_ttl,
            batch_size=cfg.batch_size,
            on_batch_complete=self.on_batch_complete,
        )
        result = await reconciler.reconcile(pages)
        report.buckets = result.buckets
        report.indexable = result.indexable
