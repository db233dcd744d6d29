# File: tests/test_client.py
"""Tests for SearchConsoleClient against a local aiohttp application."""
from __future__ import annotations

from collections import Counter
from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from aiohttp import ClientSession, web
from index_scout.errors import ConfigError, RateLimitError, TransientAPIError
from index_scout.gsc.client import SearchConsoleClient

TOKEN = "test-token"


async def _serve_app(app: web.Application, port: int) -> AsyncIterator[str]:
    """Start *app* on *port*, yield base URL, ensure cleanup."""
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "127.0.0.1", port)
    await site.start()
    try:
        yield f"http://127.0.0.1:{port}"
    finally:
        await runner.cleanup()


def _authorized(request: web.Request) -> bool:
    return request.headers.get("Authorization") == f"Bearer {TOKEN}"


@pytest.fixture()
def hits() -> Counter:
    return Counter()


@pytest_asyncio.fixture
async def gsc_server(unused_tcp_port: int, hits: Counter) -> AsyncIterator[str]:
    app = web.Application()
    published = []
    app["published"] = published

    async def inspect(request):
        if not _authorized(request):
            return web.Response(status=401)
        body = await request.json()
        url = body["inspectionUrl"]
        hits[url] += 1
        assert body["siteUrl"] == "sc-domain:example.com"
        if url.endswith("/forbidden"):
            return web.Response(status=403, text="no access")
        if url.endswith("/limited"):
            return web.Response(status=429)
        if url.endswith("/broken"):
            return web.Response(status=500)
        if url.endswith("/flaky") and hits[url] < 3:
            return web.Response(status=503)
        if url.endswith("/empty"):
            return web.json_response({"inspectionResult": {}})
        return web.json_response(
            {"inspectionResult": {"indexStatusResult": {"coverageState": "Submitted and indexed"}}}
        )

    async def metadata(request):
        if not _authorized(request):
            return web.Response(status=401)
        url = request.query["url"]
        hits[url] += 1
        if url.endswith("/new"):
            return web.json_response({"error": {"code": 404}}, status=404)
        if url.endswith("/limited"):
            return web.Response(status=429)
        return web.json_response({"url": url, "latestUpdate": {"type": "URL_UPDATED"}})

    async def publish(request):
        if not _authorized(request):
            return web.Response(status=401)
        body = await request.json()
        published.append(body)
        if body["url"].endswith("/limited"):
            return web.Response(status=429)
        return web.json_response({"urlNotificationMetadata": {"url": body["url"]}})

    async def sitemaps(request):
        if not _authorized(request):
            return web.Response(status=401)
        site = request.match_info["site"]
        if site == "sc-domain:denied.com":
            return web.Response(status=403)
        if site == "sc-domain:empty.com":
            return web.json_response({})
        return web.json_response(
            {"sitemap": [{"path": "https://example.com/sitemap.xml"}, {"path": "https://example.com/news.xml"}]}
        )

    app.router.add_post("/v1/urlInspection/index:inspect", inspect)
    app.router.add_get("/v3/urlNotifications/metadata", metadata)
    app.router.add_post("/v3/urlNotifications:publish", publish)
    app.router.add_get("/webmasters/v3/sites/{site}/sitemaps", sitemaps)

    async for url in _serve_app(app, unused_tcp_port):
        yield url


def make_client(session: ClientSession, base: str, **kwargs) -> SearchConsoleClient:
    return SearchConsoleClient(
        session,
        TOKEN,
        backoff=0.001,
        inspection_api=f"{base}/v1",
        webmasters_api=f"{base}/webmasters/v3",
        indexing_api=f"{base}/v3",
        **kwargs,
    )


@pytest.mark.asyncio()
@pytest.mark.parametrize(
    "path,expected",
    [
        ("/page", "Submitted and indexed"),
        ("/forbidden", "Forbidden"),
        ("/broken", "Error"),
        ("/empty", "Error"),
    ],
)
async def test_page_indexing_status(gsc_server, path, expected):
    async with ClientSession() as session:
        client = make_client(session, gsc_server)
        status = await client.get_page_indexing_status("sc-domain:example.com", f"https://example.com{path}")
    assert status == expected


@pytest.mark.asyncio()
async def test_server_errors_are_retried(gsc_server, hits):
    async with ClientSession() as session:
        client = make_client(session, gsc_server, retry_times=2)
        flaky = await client.get_page_indexing_status("sc-domain:example.com", "https://example.com/flaky")
        broken = await client.get_page_indexing_status("sc-domain:example.com", "https://example.com/broken")

    assert flaky == "Submitted and indexed"
    assert hits["https://example.com/flaky"] == 3
    assert broken == "Error"
    assert hits["https://example.com/broken"] == 3


@pytest.mark.asyncio()
async def test_inspection_rate_limit_is_not_retried(gsc_server, hits):
    async with ClientSession() as session:
        client = make_client(session, gsc_server, retry_times=3)
        with pytest.raises(RateLimitError) as excinfo:
            await client.get_page_indexing_status("sc-domain:example.com", "https://example.com/limited")

    assert excinfo.value.kind == "inspection"
    assert hits["https://example.com/limited"] == 1


@pytest.mark.asyncio()
async def test_publish_metadata_and_request(gsc_server):
    async with ClientSession() as session:
        client = make_client(session, gsc_server)
        assert await client.get_publish_metadata("https://example.com/new") == 404
        assert await client.get_publish_metadata("https://example.com/old") == 200
        assert await client.get_publish_metadata("https://example.com/limited") == 429
        assert await client.request_indexing("https://example.com/new") == 200
        assert await client.request_indexing("https://example.com/limited") == 429


@pytest.mark.asyncio()
async def test_request_indexing_payload(unused_tcp_port):
    received = []

    async def publish(request):
        received.append((request.headers.get("Authorization"), await request.json()))
        return web.json_response({})

    app = web.Application()
    app.router.add_post("/v3/urlNotifications:publish", publish)
    async for base in _serve_app(app, unused_tcp_port):
        async with ClientSession() as session:
            await make_client(session, base).request_indexing("https://example.com/x")

    assert received == [(f"Bearer {TOKEN}", {"url": "https://example.com/x", "type": "URL_UPDATED"})]


@pytest.mark.asyncio()
async def test_list_sitemaps(gsc_server):
    async with ClientSession() as session:
        client = make_client(session, gsc_server)
        assert await client.list_sitemaps("sc-domain:example.com") == [
            "https://example.com/sitemap.xml",
            "https://example.com/news.xml",
        ]
        assert await client.list_sitemaps("sc-domain:empty.com") == []
        with pytest.raises(ConfigError):
            await client.list_sitemaps("sc-domain:denied.com")


@pytest.mark.asyncio()
async def test_connection_error_raises_transient(unused_tcp_port):
    # nothing listens on the port
    base = f"http://127.0.0.1:{unused_tcp_port}"
    async with ClientSession() as session:
        client = make_client(session, base, retry_times=1)
        with pytest.raises(TransientAPIError) as excinfo:
            await client.get_publish_metadata("https://example.com/a")
    assert excinfo.value.url == "https://example.com/a"
