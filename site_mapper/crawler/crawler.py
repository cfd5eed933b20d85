# === FILE: site_mapper/crawler/crawler.py ===
from __future__ import annotations

import asyncio
from typing import List, Optional, Sequence, Set, Union

from aiohttp import ClientSession

from site_mapper.config import CrawlerConfig
from site_mapper.crawler.fetcher import Fetcher, open_session
from site_mapper.crawler.link_extractor import canonical_seed, request_url, resolve_url, same_host
from site_mapper.crawler.models import Page, iter_pages
from site_mapper.crawler.registry import PageRegistry
from site_mapper.errors import CrawlError, LinkError, RootFetchError
from site_mapper.logger import logger
from site_mapper.parser.html_parser import scan_html

__all__ = ("SiteCrawler",)


class SiteCrawler:
    """
    Maps every page of one host reachable from a seed URL.

    Each discovered page gets its own task: fetch and parse under the page
    lock, then fan out to the page's links and wait (up to
    ``config.wait_timeout``) for them. A timed-out wait does not stop the
    children; they run until the crawl ends, and ``crawl()`` cancels whatever
    is still running before it returns. Every ``crawl()`` starts from an
    empty registry.
    """

    def __init__(self, config: Optional[CrawlerConfig] = None, fetcher: Optional[Fetcher] = None) -> None:
        self.config = config or CrawlerConfig()
        self.registry = PageRegistry()
        self.fetcher = fetcher
        self.session: Optional[ClientSession] = None
        self._tasks: Set[asyncio.Task[None]] = set()

    async def __aenter__(self) -> SiteCrawler:
        self.registry.start()
        if self.fetcher is None:
            self.session = open_session(self.config)
            self.fetcher = Fetcher(self.session, self.config)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self._cancel_stragglers()
        await self.registry.close()
        if self.session and not self.session.closed:
            await self.session.close()

    # ------------------------------------------------------------------ #
    # Driver
    # ------------------------------------------------------------------ #

    async def crawl(self, seed: str) -> Page:
        """
        Crawl from *seed* and return the root page.

        Raises :class:`SeedError` for an unusable seed and
        :class:`RootFetchError` when the root page itself fails; no partial
        graph is returned in either case.
        """
        root_url = canonical_seed(seed)
        await self._reset_registry()
        logger.info("Starting crawl: %s", root_url)
        root = Page(root_url)
        await self.registry.put(root_url, root)

        async with root.lock:
            try:
                await self.fetch_and_parse(root)
            except CrawlError as exc:
                root.error = exc
                logger.error("Unable to crawl root document %s: %s", root_url, exc)
                raise RootFetchError(root_url, exc) from exc

        await self.recurse(root)
        await self._cancel_stragglers()

        known = await self.registry.snapshot()
        reachable = list(iter_pages(root))
        logger.info(
            "Crawl finished: %d pages known, %d reachable, %d parsed, %d failed",
            len(known),
            len(reachable),
            sum(1 for p in reachable if p.parsed),
            sum(1 for p in reachable if p.error is not None),
        )
        return root

    # ------------------------------------------------------------------ #
    # Fetch and parse
    # ------------------------------------------------------------------ #

    async def fetch_and_parse(self, page: Page) -> None:
        """One parse pass; the caller must hold ``page.lock``."""
        if self.fetcher is None:
            raise RuntimeError("SiteCrawler must be used as 'async with SiteCrawler(...)'")
        body = await self.fetcher.fetch(request_url(page.url))
        await self.parse(page, body)

    async def parse(self, page: Page, markup: Union[str, bytes]) -> None:
        """Fill *page* from *markup*: title, same-host links, ``parsed`` flag."""
        doc = scan_html(markup)
        links = await self._register_links(page, doc.hrefs)
        if doc.title:
            logger.debug("(%s) title=%r", page.url, doc.title)
        page.title = doc.title
        page.links = links
        page.parsed = True

    async def _register_links(self, page: Page, hrefs: Sequence[Optional[str]]) -> List[Page]:
        links: List[Page] = []
        for href in hrefs:
            if href is None:
                logger.debug("(%s) anchor without href, ignoring", page.url)
                continue
            try:
                target = resolve_url(page.url, href)
            except LinkError as exc:
                logger.warning("(%s) recoverable error while resolving a link, ignoring: %s", page.url, exc)
                continue
            if not same_host(target, page.url):
                continue

            known = await self.registry.get(target)
            if known is None:
                # another task may have registered it since the get
                known = await self.registry.setdefault(target, Page(target))
                logger.debug("(%s) href=%s stored as new page", page.url, target)
            else:
                logger.debug("(%s) href=%s already discovered", page.url, target)
            links.append(known)
        return links

    # ------------------------------------------------------------------ #
    # Traversal
    # ------------------------------------------------------------------ #

    async def fetch_and_recurse(self, page: Page) -> None:
        async with page.lock:
            if page.settled:
                logger.debug("%s settled by another task, ignoring", page.url)
                return
            try:
                await self.fetch_and_parse(page)
            except CrawlError as exc:
                page.error = exc
                logger.warning("Failed to parse %s: %s", page.url, exc)
        await self.recurse(page)

    async def recurse(self, page: Page) -> None:
        """Spawn a task per unsettled link of *page* and wait for them."""
        spawned: List[asyncio.Task[None]] = []
        seen: Set[int] = set()
        for link in page.links:
            if id(link) in seen:
                continue
            seen.add(id(link))
            # cheap pre-check only; fetch_and_recurse re-checks under the lock
            async with link.lock:
                settled = link.settled
            if settled:
                logger.debug("%s already parsed, ignoring", link.url)
                continue
            logger.debug("%s not yet parsed, parsing", link.url)
            spawned.append(self._spawn(link))

        if not spawned:
            return
        _, pending = await asyncio.wait(spawned, timeout=self.config.wait_timeout)
        if pending:
            logger.warning(
                "%s: %.1fs timeout! (waiting for %d of %d task(s))",
                page.url,
                self.config.wait_timeout,
                len(pending),
                len(spawned),
            )

    def _spawn(self, page: Page) -> asyncio.Task[None]:
        task = asyncio.create_task(self.fetch_and_recurse(page), name=f"crawl {page.url}")
        self._tasks.add(task)
        task.add_done_callback(self._task_done)
        return task

    def _task_done(self, task: asyncio.Task[None]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Crawl task %s crashed: %r", task.get_name(), exc)

    async def _reset_registry(self) -> None:
        # pages from a previous crawl must not leak into this one
        await self._cancel_stragglers()
        await self.registry.close()
        self.registry = PageRegistry()
        self.registry.start()

    async def _cancel_stragglers(self) -> None:
        while self._tasks:
            stragglers = list(self._tasks)
            logger.warning("Cancelling %d unfinished crawl task(s)", len(stragglers))
            for task in stragglers:
                task.cancel()
            await asyncio.gather(*stragglers, return_exceptions=True)
            self._tasks.difference_update(stragglers)
