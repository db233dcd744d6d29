# index_scout/gsc/client.py
"""
Async client for the Search Console, URL Inspection and Indexing APIs.

Handles bearer authorization and retry/backoff on 5xx and connection errors.
``429`` is never retried.
"""
from __future__ import annotations

import asyncio
import json
import random
from typing import Any, Dict, List, Optional, Sequence, Tuple
from urllib.parse import quote

from aiohttp import ClientError, ClientSession

from index_scout.errors import ConfigError, RateLimitError, TransientAPIError
from index_scout.logger import logger

__all__ = ["SearchConsoleClient"]

INSPECTION_API = "https://searchconsole.googleapis.com/v1"
WEBMASTERS_API = "https://www.googleapis.com/webmasters/v3"
INDEXING_API = "https://indexing.googleapis.com/v3"


class SearchConsoleClient:
    """Thin wrapper over the Google endpoints used by a reconciliation run."""

    _RETRY_STATUS: Sequence[int] = tuple(range(500, 600))

    def __init__(
        self,
        session: ClientSession,
        access_token: str,
        *,
        retry_times: int = 2,
        backoff: float = 1.0,
        inspection_api: str = INSPECTION_API,
        webmasters_api: str = WEBMASTERS_API,
        indexing_api: str = INDEXING_API,
    ) -> None:
        self.session = session
        self.access_token = access_token
        self.retry_times = retry_times
        self.backoff = backoff
        self.inspection_api = inspection_api.rstrip("/")
        self.webmasters_api = webmasters_api.rstrip("/")
        self.indexing_api = indexing_api.rstrip("/")

    async def list_sitemaps(self, site_url: str) -> List[str]:
        """Paths of all sitemaps registered for the property."""
        endpoint = f"{self.webmasters_api}/sites/{quote(site_url, safe='')}/sitemaps"
        status, body = await self._request("GET", endpoint, target=site_url)
        if status == 403:
            raise ConfigError(f"This service account doesn't have access to {site_url}")
        if status == 429:
            raise RateLimitError("read", site_url)
        if status >= 300:
            raise TransientAPIError(site_url, "failed to list sitemaps", status)
        data = self._json(body)
        return [entry["path"] for entry in data.get("sitemap", []) if entry.get("path")]

    async def get_page_indexing_status(self, site_url: str, url: str) -> str:
        """Coverage state of ``url`` as reported by URL Inspection."""
        status, body = await self._request(
            "POST",
            f"{self.inspection_api}/urlInspection/index:inspect",
            target=url,
            payload={"inspectionUrl": url, "siteUrl": site_url},
        )
        if status == 403:
            logger.error("This service account doesn't have access to %s", site_url)
            return "Forbidden"
        if status == 429:
            raise RateLimitError("inspection", url)
        if status >= 300:
            logger.error("Failed to get indexing status of %s: HTTP %s %s", url, status, body[:200])
            return "Error"

        data = self._json(body)
        coverage = (
            data.get("inspectionResult", {}).get("indexStatusResult", {}).get("coverageState")
        )
        if not coverage:
            logger.warning("No coverage state in inspection result for %s", url)
            return "Error"
        return coverage

    async def get_publish_metadata(self, url: str) -> int:
        """HTTP status of the Indexing API metadata lookup (404 = never notified)."""
        status, body = await self._request(
            "GET",
            f"{self.indexing_api}/urlNotifications/metadata",
            target=url,
            params={"url": url},
        )
        if status == 403:
            logger.error("This service account doesn't have access to %s", url)
        elif status >= 500:
            logger.warning("Publish metadata for %s: HTTP %s %s", url, status, body[:200])
        return status

    async def request_indexing(self, url: str) -> int:
        """Notify Google that ``url`` was updated; returns the HTTP status."""
        status, body = await self._request(
            "POST",
            f"{self.indexing_api}/urlNotifications:publish",
            target=url,
            payload={"url": url, "type": "URL_UPDATED"},
        )
        if status == 403:
            logger.error("This service account doesn't have access to %s", url)
        elif status >= 300 and status != 429:
            logger.warning("Indexing request for %s: HTTP %s %s", url, status, body[:200])
        return status

    async def download(self, url: str) -> str:
        """Plain unauthenticated GET, used for sitemap files."""
        status, body = await self._request("GET", url, target=url, authorized=False)
        if status >= 300:
            raise TransientAPIError(url, "download failed", status)
        return body

    async def _request(
        self,
        method: str,
        endpoint: str,
        *,
        target: str,
        authorized: bool = True,
        payload: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, str]] = None,
    ) -> Tuple[int, str]:
        headers = {"Authorization": f"Bearer {self.access_token}"} if authorized else {}
        attempts = 0
        while True:
            try:
                async with self.session.request(
                    method, endpoint, headers=headers, json=payload, params=params
                ) as resp:
                    text = await resp.text()
                    if resp.status in self._RETRY_STATUS and attempts < self.retry_times:
                        raise ClientError(f"retryable status {resp.status}")
                    return resp.status, text
            except (ClientError, asyncio.TimeoutError) as exc:
                attempts += 1
                if attempts > self.retry_times:
                    raise TransientAPIError(target, str(exc) or type(exc).__name__) from exc
                delay = min(60.0, self.backoff * (2**attempts + random.random()))
                logger.debug(
                    "Retry %d/%d for %s %s after %.2f s", attempts, self.retry_times, method, endpoint, delay
                )
                await asyncio.sleep(delay)

    @staticmethod
    def _json(body: str) -> Dict[str, Any]:
        try:
            data = json.loads(body) if body else {}
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}
