# File: index_scout/gsc/__init__.py
"""index_scout.gsc: Клиенты Google Search Console и Indexing API."""

from index_scout.gsc.auth import TokenProvider
from index_scout.gsc.client import SearchConsoleClient
from index_scout.gsc.status import convert_to_site_url, get_emoji_for_status

__all__ = [
    "SearchConsoleClient",
    "TokenProvider",
    "convert_to_site_url",
    "get_emoji_for_status",
]
