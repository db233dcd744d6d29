# File: index_scout/errors.py
"""index_scout.errors: Иерархия исключений IndexScout."""

from __future__ import annotations

from pathlib import Path
from typing import Literal, Union

RateLimitKind = Literal["read", "publish", "inspection"]

_QUOTAS: dict[str, str] = {
    "read": "60/second",
    "publish": "200/day",
    "inspection": "2000/day",
}


class IndexScoutError(Exception):
    """Base exception for IndexScout."""


class ConfigError(IndexScoutError):
    """Missing or invalid argument, configuration or credentials."""


class NoSitemapsError(ConfigError):
    """The Search Console property has no sitemaps registered."""

    def __init__(self, site_url: str):
        self.site_url = site_url
        super().__init__(
            f"No sitemaps found for {site_url}, add them to Google Search Console and try again."
        )


class CacheCorruptError(IndexScoutError):
    """Status cache file exists but cannot be parsed."""

    def __init__(self, path: Union[str, Path], reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Corrupt status cache {self.path}: {reason}")


class RateLimitError(IndexScoutError):
    """An API quota was exhausted; the run must stop."""

    def __init__(self, kind: RateLimitKind, url: str | None = None):
        self.kind = kind
        self.url = url
        self.quota = _QUOTAS.get(kind, "unknown")
        super().__init__(
            f"{kind.capitalize()} rate limit reached ({self.quota}). Try again later."
        )


class TransientAPIError(IndexScoutError):
    """Network failure or retries exhausted on a Google API call."""

    def __init__(self, url: str, detail: str, status: int | None = None):
        self.url = url
        self.detail = detail
        self.status = status
        msg = f"API call for {url} failed: {detail}"
        if status is not None:
            msg += f" (HTTP {status})"
        super().__init__(msg)


__all__ = [
    "IndexScoutError",
    "ConfigError",
    "NoSitemapsError",
    "CacheCorruptError",
    "RateLimitError",
    "RateLimitKind",
    "TransientAPIError",
]
