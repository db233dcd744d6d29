# File: index_scout/gsc/status.py
"""index_scout.gsc.status: Property identifiers and status presentation helpers."""

from __future__ import annotations

from typing import Dict

__all__ = ["convert_to_site_url", "get_emoji_for_status"]

_STATUS_EMOJI: Dict[str, str] = {
    "Submitted and indexed": "✅",
    "Duplicate without user-selected canonical": "😵",
    "Crawled - currently not indexed": "👀",
    "Discovered - currently not indexed": "👀",
    "Page with redirect": "🔀",
    "URL is unknown to Google": "❓",
}


def convert_to_site_url(value: str) -> str:
    """Return the Search Console property for a domain or a site URL.

    URL-prefix properties keep their scheme and end with ``/``; a bare
    domain becomes a ``sc-domain:`` property.
    """
    value = value.strip()
    if value.startswith(("http://", "https://")):
        return value if value.endswith("/") else value + "/"
    return f"sc-domain:{value}"


def get_emoji_for_status(status: str) -> str:
    return _STATUS_EMOJI.get(status, "❌")
