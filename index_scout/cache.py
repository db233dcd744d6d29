# File: index_scout/cache.py
"""index_scout.cache: Persistent per-site cache of URL indexing statuses.

One JSON file per Search Console property maps every URL to its last known
coverage state and the moment it was observed::

    {
      "https://example.com/a": {"status": "Submitted and indexed",
                                "lastCheckedAt": "2024-05-01T10:00:00Z"}
    }

The file is read once before reconciliation and rewritten in full afterwards.
"""

from __future__ import annotations

import json
import os
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Collection, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from index_scout.errors import CacheCorruptError
from index_scout.logger import logger

__all__ = [
    "DEFAULT_CACHE_TTL",
    "StatusRecord",
    "StatusMapping",
    "utcnow",
    "site_cache_key",
    "cache_path_for_site",
    "load_status_cache",
    "should_recheck",
    "save_status_cache",
]

DEFAULT_CACHE_TTL = timedelta(days=14)


class StatusRecord(BaseModel):
    """Last observed coverage state of one URL."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    status: str
    last_checked_at: datetime = Field(alias="lastCheckedAt")


StatusMapping = Dict[str, StatusRecord]

_MAPPING_ADAPTER: TypeAdapter[StatusMapping] = TypeAdapter(StatusMapping)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # timestamps written without an offset are treated as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def site_cache_key(site_url: str) -> str:
    """Turn a property identifier into a filesystem-safe file stem.

    ``https://example.com/`` → ``https_example.com_``,
    ``sc-domain:example.com`` → ``sc-domain_example.com``.
    """
    key = site_url.replace("http://", "http_").replace("https://", "https_")
    return key.replace("/", "_").replace(":", "_")


def cache_path_for_site(cache_dir: Union[str, Path], site_url: str) -> Path:
    return Path(cache_dir) / f"{site_cache_key(site_url)}.json"


def load_status_cache(path: Union[str, Path]) -> StatusMapping:
    """Read the cache file; an absent file is an empty mapping.

    Raises :class:`CacheCorruptError` if the file exists but is not a valid
    URL → record mapping. A damaged file is never discarded silently.
    """
    p = Path(path)
    if not p.exists():
        logger.debug("No status cache at %s, starting empty", p)
        return {}

    try:
        raw = json.loads(p.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise CacheCorruptError(p, f"invalid JSON: {exc}") from exc
    except UnicodeDecodeError as exc:
        raise CacheCorruptError(p, f"not UTF-8 text: {exc}") from exc

    if not isinstance(raw, dict):
        raise CacheCorruptError(p, f"top level must be an object, got {type(raw).__name__}")

    try:
        mapping = _MAPPING_ADAPTER.validate_python(raw)
    except ValidationError as exc:
        raise CacheCorruptError(p, str(exc)) from exc

    logger.debug("Loaded %d cached statuses from %s", len(mapping), p)
    return mapping


def should_recheck(
    record: StatusRecord,
    recheckable_statuses: Collection[str],
    ttl: timedelta = DEFAULT_CACHE_TTL,
    now: Optional[datetime] = None,
) -> bool:
    """True if the record has a recheckable status OR is at least ``ttl`` old."""
    if record.status in recheckable_statuses:
        return True
    current = _as_utc(now) if now is not None else utcnow()
    return current - _as_utc(record.last_checked_at) >= ttl


def save_status_cache(path: Union[str, Path], mapping: StatusMapping) -> Path:
    """Overwrite the cache file with ``mapping`` via a temp file and rename."""
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)

    data = _MAPPING_ADAPTER.dump_python(mapping, mode="json", by_alias=True)
    tmp = p.with_name(p.name + ".tmp")
    with tmp.open("w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)
    os.replace(tmp, p)

    logger.debug("Saved %d statuses to %s", len(mapping), p)
    return p
