# site_mapper/crawler/fetcher.py
"""
Fetcher module: one HTTP GET per page, bounded by a concurrency semaphore.
"""
from __future__ import annotations

import asyncio

from aiohttp import ClientError, ClientSession, ClientTimeout

from site_mapper.config import CrawlerConfig
from site_mapper.errors import FetchError
from site_mapper.logger import logger


def open_session(config: CrawlerConfig) -> ClientSession:
    """Session shared by every fetch of one crawl, identifying itself with ``user_agent``."""
    return ClientSession(
        timeout=ClientTimeout(total=config.timeout),
        headers={"User-Agent": config.user_agent},
        raise_for_status=False,
    )


class Fetcher:
    """Issues GET requests and returns response bodies."""

    def __init__(self, session: ClientSession, config: CrawlerConfig) -> None:
        self.session = session
        self.config = config
        self._semaphore = asyncio.Semaphore(config.max_concurrency)

    async def fetch(self, url: str) -> bytes:
        """
        GET *url* and return the raw body.

        Any HTTP status is accepted; only transport and protocol failures
        raise :class:`FetchError`.
        """
        async with self._semaphore:
            logger.info("request: %s", url)
            try:
                async with self.session.get(url) as resp:
                    body = await resp.read()
                    logger.debug("%s -> HTTP %s (%d bytes)", url, resp.status, len(body))
                    return body
            except asyncio.TimeoutError as exc:
                raise FetchError(f"timed out after {self.config.timeout}s: {url}") from exc
            except (ClientError, OSError, ValueError) as exc:
                raise FetchError(f"{type(exc).__name__}: {exc}") from exc
