"""Scraper package: fetch, classify, and extract web content."""

from gleaner.scraper.classifier import classify_page
from gleaner.scraper.extractor import extract_article, parse_article
from gleaner.scraper.fetcher import FetchError, fetch_url
from gleaner.scraper.links import extract_child_links
from gleaner.scraper.models import (
    ArticleContent,
    MultiArticleResult,
    PageAnalysis,
    PageType,
    RawPage,
)

__all__ = [
    "fetch_url",
    "FetchError",
    "classify_page",
    "extract_child_links",
    "extract_article",
    "parse_article",
    "RawPage",
    "PageType",
    "PageAnalysis",
    "ArticleContent",
    "MultiArticleResult",
]
