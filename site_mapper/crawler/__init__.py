"""site_mapper.crawler: concurrent crawl engine (registry, pages, traversal)."""

from site_mapper.crawler.crawler import SiteCrawler
from site_mapper.crawler.models import Page, iter_pages
from site_mapper.crawler.registry import PageRegistry

__all__ = ["SiteCrawler", "Page", "PageRegistry", "iter_pages"]
