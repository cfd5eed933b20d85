# site_mapper/errors.py
"""
Exception hierarchy for SiteMapper.

Fatal errors (:class:`SeedError`, :class:`RootFetchError`) abort the whole crawl.
:class:`CrawlError` subclasses are recorded on the page they concern and never
leave the task that produced them. :class:`LinkError` only skips one anchor.
"""
from __future__ import annotations

__all__ = (
    "SiteMapperError",
    "SeedError",
    "LinkError",
    "CrawlError",
    "FetchError",
    "ParseError",
    "RootFetchError",
)


class SiteMapperError(Exception):
    """Base class for every error raised by the package."""


class SeedError(SiteMapperError, ValueError):
    """The seed domain/URL cannot be turned into a crawlable URL."""


class LinkError(SiteMapperError, ValueError):
    """An anchor href is missing, empty or cannot be parsed."""


class CrawlError(SiteMapperError):
    """A single page could not be fetched or parsed."""


class FetchError(CrawlError):
    """Transport-level failure (DNS, connection, timeout, protocol)."""


class ParseError(CrawlError):
    """The response body could not be turned into a document tree."""


class RootFetchError(SiteMapperError):
    """The seed page failed, so there is nothing to map."""

    def __init__(self, url: str, cause: CrawlError) -> None:
        super().__init__(f"unable to crawl root document {url}: {cause}")
        self.url = url
        self.cause = cause
