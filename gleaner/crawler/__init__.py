"""Crawler package: smart crawling, deduplication, and source orchestration."""

from gleaner.crawler.dedup import content_fingerprint, is_known
from gleaner.crawler.gate import SingleFlight, crawl_gate
from gleaner.crawler.pipeline import (
    CrawlOutcome,
    CrawlSummary,
    crawl_active_sources,
    crawl_source,
)
from gleaner.crawler.smart import crawl_feed, smart_crawl

__all__ = [
    "content_fingerprint",
    "is_known",
    "smart_crawl",
    "crawl_feed",
    "crawl_source",
    "crawl_active_sources",
    "CrawlOutcome",
    "CrawlSummary",
    "SingleFlight",
    "crawl_gate",
]
