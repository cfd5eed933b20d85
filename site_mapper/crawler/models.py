"""
Data models for the SiteMapper crawler.
"""
from __future__ import annotations

import asyncio
from collections import deque
from dataclasses import dataclass, field
from typing import Iterator, List, Optional


@dataclass(eq=False)
class Page:
    """
    Crawl record for one canonical URL.

    Pages compare and hash by identity: the registry guarantees a single
    object per URL, and the page graph may contain cycles.

    ``title``, ``parsed``, ``error`` and ``links`` are written only by the
    task holding ``lock``, all at once at the end of a parse pass.
    """

    url: str
    title: str = ""
    parsed: bool = False
    error: Optional[Exception] = None
    links: List[Page] = field(default_factory=list)
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    @property
    def settled(self) -> bool:
        """True once the page is parsed or has failed; settled pages are never fetched again."""
        return self.parsed or self.error is not None

    def __repr__(self) -> str:
        state = "parsed" if self.parsed else ("errored" if self.error is not None else "pending")
        return f"Page({self.url!r}, {state}, links={len(self.links)})"


def iter_pages(root: Page) -> Iterator[Page]:
    """Yield every page reachable from *root* once, breadth first."""
    seen = {id(root)}
    queue = deque([root])
    while queue:
        page = queue.popleft()
        yield page
        for link in page.links:
            if id(link) not in seen:
                seen.add(id(link))
                queue.append(link)
