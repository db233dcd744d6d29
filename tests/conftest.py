# File: tests/conftest.py
import asyncio
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

import pytest

T0 = datetime(2024, 5, 1, 10, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: datetime = T0):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class StubStatusFetcher:
    """Async status fetcher backed by a dict; records every call."""

    def __init__(self, statuses: Dict[str, str], delays: Optional[Dict[str, float]] = None):
        self.statuses = statuses
        self.delays = delays or {}
        self.calls: List[str] = []

    async def __call__(self, url: str) -> str:
        self.calls.append(url)
        delay = self.delays.get(url)
        if delay:
            await asyncio.sleep(delay)
        return self.statuses[url]


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def cache_file(tmp_path):
    return tmp_path / "cache" / "https_example.com_.json"


@pytest.fixture()
def make_fetcher():
    """Factory for :class:`StubStatusFetcher`."""
    return StubStatusFetcher
