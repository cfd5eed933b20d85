# File: site_mapper/engine.py
"""site_mapper.engine: слой оркестрации для запуска обхода сайта."""

from __future__ import annotations

from site_mapper.config import CrawlerConfig
from site_mapper.crawler.crawler import SiteCrawler
from site_mapper.crawler.models import Page
from site_mapper.logger import logger

__all__ = ["start_crawl"]


async def start_crawl(config: CrawlerConfig, seed: str) -> Page:
    """Обходит сайт начиная с seed и возвращает корневую страницу графа."""
    logger.info("Starting crawl of %s…", seed)
    async with SiteCrawler(config) as crawler:
        return await crawler.crawl(seed)
