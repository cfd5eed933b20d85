# File: tests/conftest.py
import asyncio
from collections import Counter
from collections.abc import AsyncIterator, Awaitable, Callable, Mapping
from typing import Union

import pytest
import pytest_asyncio
from aiohttp import web

from site_mapper.config import CrawlerConfig
from site_mapper.errors import FetchError

#: body of a test page, or a handler producing the response
PageBody = Union[str, Callable[[web.Request], Awaitable[web.StreamResponse]]]


def pytest_configure(config):
    """Register custom markers so that `--strict-markers` does not fail."""
    config.addinivalue_line(
        "markers",
        "slow: marks tests as slow (deselect with '-m \"not slow\"')",
    )


class FakeFetcher:
    """
    In-memory stand-in for :class:`site_mapper.crawler.fetcher.Fetcher`.

    ``pages`` maps a full URL to HTML, or to an exception instance to raise.
    Unknown URLs raise :class:`FetchError`. ``delays`` adds per-URL latency.
    """

    def __init__(self, pages: Mapping[str, Union[str, Exception]], delays: Mapping[str, float] | None = None):
        self.pages = dict(pages)
        self.delays = dict(delays or {})
        self.calls: Counter[str] = Counter()
        self.in_flight = 0
        self.max_in_flight = 0

    async def fetch(self, url: str) -> bytes:
        self.calls[url] += 1
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delays.get(url, 0))
            body = self.pages.get(url)
            if body is None:
                raise FetchError(f"connection refused: {url}")
            if isinstance(body, Exception):
                raise body
            return body.encode("utf-8")
        finally:
            self.in_flight -= 1


@pytest.fixture()
def fake_fetcher() -> Callable[..., FakeFetcher]:
    """Factory for in-memory fetchers: ``fake_fetcher({url: html}, delays={url: sec})``."""
    return FakeFetcher


@pytest.fixture()
def fast_config() -> CrawlerConfig:
    """Config with short timeouts for crawler tests."""
    return CrawlerConfig(timeout=2.0, wait_timeout=2.0, user_agent="TestAgent/1.0")


@pytest_asyncio.fixture
async def serve_site(unused_tcp_port_factory) -> AsyncIterator[Callable]:
    """
    Factory fixture: ``base, hits = await serve_site({"/": "<a href='/x'>x</a>"})``.

    Every path is served as ``text/html``; ``hits`` counts requests per path.
    """
    runners: list[web.AppRunner] = []

    async def _serve(pages: Mapping[str, PageBody]) -> tuple[str, Counter]:
        app = web.Application()
        hits: Counter[str] = Counter()

        def make_handler(path: str, body: PageBody):
            async def handler(request: web.Request) -> web.StreamResponse:
                hits[path] += 1
                if callable(body):
                    return await body(request)
                return web.Response(text=body, content_type="text/html")

            return handler

        for path, body in pages.items():
            app.router.add_get(path, make_handler(path, body))

        port = unused_tcp_port_factory()
        runner = web.AppRunner(app)
        await runner.setup()
        site = web.TCPSite(runner, "127.0.0.1", port)
        await site.start()
        runners.append(runner)
        return f"http://127.0.0.1:{port}", hits

    yield _serve

    for runner in runners:
        await runner.cleanup()
