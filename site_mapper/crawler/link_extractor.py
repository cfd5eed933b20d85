"""
URL normalization and resolution utilities for SiteMapper.

A canonical URL is the absolute URL with its fragment removed. It is the
registry key and the identity of a :class:`~site_mapper.crawler.models.Page`.
Trailing slashes, default ports and letter case are *not* folded, so
``http://a.test/x`` and ``http://a.test/x/`` are two pages.
"""
from __future__ import annotations

from typing import Optional
from urllib.parse import urldefrag, urljoin, urlsplit

from site_mapper.errors import LinkError, SeedError

__all__ = ("normalize_url", "resolve_url", "request_url", "same_host", "canonical_seed")

DEFAULT_SCHEME = "https"


def normalize_url(url: str) -> str:
    """Drop the ``#fragment``; scheme, host, path and query are left as is."""
    return urldefrag(url).url


def resolve_url(base: str, href: Optional[str]) -> str:
    """
    Turn an anchor *href* into a canonical absolute URL relative to *base*.

    Raises :class:`LinkError` when *href* is absent, blank or unparsable.
    """
    if href is None or not href.strip():
        raise LinkError("target URL is missing or empty")
    href = href.strip()
    try:
        if urlsplit(href).scheme:
            return normalize_url(href)
        return normalize_url(urljoin(base, href))
    except ValueError as exc:
        raise LinkError(f"cannot resolve {href!r}: {exc}") from exc


def request_url(url: str) -> str:
    """URL to put on the wire: *url* with ``https`` assumed when it has no scheme."""
    if urlsplit(url).scheme:
        return url
    if url.startswith("//"):
        return f"{DEFAULT_SCHEME}:{url}"
    return f"{DEFAULT_SCHEME}://{url}"


def same_host(url: str, other: str) -> bool:
    return urlsplit(url).netloc == urlsplit(other).netloc


def canonical_seed(seed: str) -> str:
    """
    Canonical URL for the crawl root.

    Accepts bare domains (``example.com``, ``localhost:8000``), which get the
    default scheme.
    Raises :class:`SeedError` if no host can be derived.
    """
    raw = (seed or "").strip()
    if not raw:
        raise SeedError("seed URL is empty")
    if "://" not in raw:
        # "host:port" parses as a scheme, so do not ask urlsplit here
        raw = f"{DEFAULT_SCHEME}:{raw}" if raw.startswith("//") else f"{DEFAULT_SCHEME}://{raw}"
    try:
        parts = urlsplit(raw)
    except ValueError as exc:
        raise SeedError(f"cannot parse seed URL {seed!r}: {exc}") from exc
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise SeedError(f"seed URL {seed!r} has no http(s) host")
    return normalize_url(raw)
