# site_mapper/crawler/registry.py
"""
Page registry: the single owner of the canonical URL → :class:`Page` map.

Every read and write is a message posted to the registry's mailbox and served,
one at a time and in arrival order, by a dedicated worker task. The worker is
the only code that touches the dict, so concurrent parse passes always agree
on which ``Page`` object represents a URL.

``put`` always overwrites. ``setdefault`` stores a page only if the URL is
still free and answers with whichever page ended up stored, so callers that
saw "absent" at the same time still converge on one object.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Dict, Optional, Union

from site_mapper.crawler.models import Page
from site_mapper.logger import logger

__all__ = ("PageRegistry",)


@dataclass(slots=True)
class _GetRequest:
    url: str
    reply: asyncio.Future = field(default_factory=lambda: asyncio.get_running_loop().create_future())


@dataclass(slots=True)
class _PutRequest:
    url: str
    page: Page
    reply: asyncio.Future = field(default_factory=lambda: asyncio.get_running_loop().create_future())


@dataclass(slots=True)
class _SetDefaultRequest:
    url: str
    page: Page
    reply: asyncio.Future = field(default_factory=lambda: asyncio.get_running_loop().create_future())


@dataclass(slots=True)
class _SnapshotRequest:
    reply: asyncio.Future = field(default_factory=lambda: asyncio.get_running_loop().create_future())


_Request = Union[_GetRequest, _PutRequest, _SetDefaultRequest, _SnapshotRequest]


class PageRegistry:
    """Actor-style URL → Page store scoped to one crawl."""

    def __init__(self) -> None:
        self._pages: Dict[str, Page] = {}
        self._mailbox: asyncio.Queue[_Request] = asyncio.Queue()
        self._worker: Optional[asyncio.Task[None]] = None

    async def __aenter__(self) -> PageRegistry:
        self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    @property
    def running(self) -> bool:
        return self._worker is not None and not self._worker.done()

    def start(self) -> None:
        if self.running:
            return
        self._worker = asyncio.create_task(self._serve(), name="page-registry")

    async def close(self) -> None:
        if self._worker is None:
            return
        self._worker.cancel()
        try:
            await self._worker
        except asyncio.CancelledError:
            pass
        self._worker = None
        # fail anything still queued so no caller waits forever
        while not self._mailbox.empty():
            request = self._mailbox.get_nowait()
            if not request.reply.done():
                request.reply.set_exception(RuntimeError("page registry closed"))

    async def get(self, url: str) -> Optional[Page]:
        """Stored page for *url*, or ``None`` if nobody has registered it yet."""
        return await self._ask(_GetRequest(url))

    async def put(self, url: str, page: Page) -> bool:
        """Store *page* under *url*, replacing any previous entry."""
        return await self._ask(_PutRequest(url, page))

    async def setdefault(self, url: str, page: Page) -> Page:
        """Store *page* unless *url* is taken; return the page stored for *url*."""
        return await self._ask(_SetDefaultRequest(url, page))

    async def snapshot(self) -> Dict[str, Page]:
        """Copy of the whole mapping, taken in mailbox order."""
        return await self._ask(_SnapshotRequest())

    async def _ask(self, request: _Request):
        if not self.running:
            raise RuntimeError("page registry is not running")
        await self._mailbox.put(request)
        return await request.reply

    async def _serve(self) -> None:
        while True:
            request = await self._mailbox.get()
            if request.reply.cancelled():
                continue
            if isinstance(request, _GetRequest):
                request.reply.set_result(self._pages.get(request.url))
            elif isinstance(request, _PutRequest):
                self._pages[request.url] = request.page
                logger.debug("registry: stored %s", request.url)
                request.reply.set_result(True)
            elif isinstance(request, _SetDefaultRequest):
                stored = self._pages.setdefault(request.url, request.page)
                request.reply.set_result(stored)
            else:
                request.reply.set_result(dict(self._pages))
