# File: index_scout/sitemap.py
"""index_scout.sitemap: Candidate URLs from the sitemaps registered in Search Console."""

from __future__ import annotations

from typing import List, Set, Tuple

from index_scout.errors import TransientAPIError
from index_scout.gsc.client import SearchConsoleClient
from index_scout.logger import logger
from index_scout.parser.sitemap_parser import parse_sitemap
from index_scout.utils import remove_duplicates

__all__ = ["SitemapSource"]


class SitemapSource:
    """Lists the property's sitemaps and expands them into page URLs."""

    def __init__(self, client: SearchConsoleClient, max_depth: int = 3) -> None:
        self.client = client
        self.max_depth = max_depth

    async def get_sitemap_pages(self, site_url: str) -> Tuple[List[str], List[str]]:
        """Return ``(sitemaps, pages)``; pages are de-duplicated in discovery order."""
        sitemaps = await self.client.list_sitemaps(site_url)
        pages: List[str] = []
        seen: Set[str] = set()
        for sitemap in sitemaps:
            pages.extend(await self._expand(sitemap, 0, seen))
        return sitemaps, remove_duplicates(pages)

    async def _expand(self, sitemap_url: str, depth: int, seen: Set[str]) -> List[str]:
        if sitemap_url in seen:
            return []
        seen.add(sitemap_url)
        try:
            body = await self.client.download(sitemap_url)
        except TransientAPIError as exc:
            logger.warning("Не удалось загрузить sitemap %s: %s", sitemap_url, exc)
            return []

        entries = parse_sitemap(body)
        pages = list(entries.pages)
        if entries.sitemaps:
            if depth >= self.max_depth:
                logger.warning("Sitemap index %s nested too deep, skipping children", sitemap_url)
            else:
                for child in entries.sitemaps:
                    pages.extend(await self._expand(child, depth + 1, seen))
        logger.debug("Sitemap %s: %d URLs", sitemap_url, len(pages))
        return pages
