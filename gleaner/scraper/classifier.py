"""Heuristic page classification: single article vs. listing page.

``classify_page`` measures structural features of a page and evaluates an
ordered rule table against them.  The first rule that matches decides the
verdict.  List-like rules sit above prose-density rules so that search-result
pages carrying long boilerplate text are not mistaken for articles.

Rule table
----------
==  ===========================================================  =======  ====
#   Condition                                                    Verdict  Conf
==  ===========================================================  =======  ====
1   search / pagination vocabulary, or card layout               list     0.80
2   > 20 links and fewer than 50 text chars per link             list     0.70
3   > 10 list items and < 5 paragraphs                           list     0.75
4   ``<article>`` present, or main container and > 5 paragraphs  article  0.85
5   > 1000 text chars and > 5 paragraphs                         article  0.80
6   author and date signals and > 3 paragraphs                   article  0.90
==  ===========================================================  =======  ====

Anything else is ``unknown`` with confidence 0.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable

from bs4 import BeautifulSoup

from gleaner.scraper.links import extract_child_links
from gleaner.scraper.models import PageAnalysis, PageType

logger = logging.getLogger(__name__)

_CHROME_TAGS = ["script", "style", "nav", "header", "footer"]

# Matched against the raw markup, before any stripping.
_SEARCH_RE = re.compile(r"search|results?|query", re.IGNORECASE)
_PAGINATION_RE = re.compile(r"page|next|prev|previous|\d+\s*of\s*\d+", re.IGNORECASE)

_CARD_SELECTOR = ".card, .item, .entry, .post, .article-item"
_MAIN_CONTENT_SELECTOR = "main, article, .content, .post-content, #content"
_AUTHOR_SELECTOR = '[class*="author"], [class*="byline"]'
_DATE_SELECTOR = '[class*="date"], [class*="time"], time'

_WHITESPACE_RE = re.compile(r"\s+")


@dataclass(frozen=True)
class PageFeatures:
    link_count: int
    unique_links: int
    paragraph_count: int
    heading_count: int
    list_item_count: int
    article_tags: int
    text_length: int
    has_search_results: bool
    has_pagination: bool
    has_card_layout: bool
    has_main_content: bool
    has_author: bool
    has_publish_date: bool


@dataclass(frozen=True)
class _Rule:
    applies: Callable[[PageFeatures], bool]
    page_type: PageType
    confidence: float
    reason: str


_RULES: list[_Rule] = [
    _Rule(
        lambda f: f.has_search_results or f.has_pagination or f.has_card_layout,
        PageType.LIST,
        0.8,
        "search results, pagination or card layout detected",
    ),
    _Rule(
        lambda f: f.link_count > 20 and f.text_length / f.link_count < 50,
        PageType.LIST,
        0.7,
        "high link density with sparse text",
    ),
    _Rule(
        lambda f: f.list_item_count > 10 and f.paragraph_count < 5,
        PageType.LIST,
        0.75,
        "many list items and few paragraphs",
    ),
    _Rule(
        lambda f: f.article_tags > 0 or (f.has_main_content and f.paragraph_count > 5),
        PageType.ARTICLE,
        0.85,
        "article tag or main content area detected",
    ),
    _Rule(
        lambda f: f.text_length > 1000 and f.paragraph_count > 5,
        PageType.ARTICLE,
        0.8,
        "text-rich page",
    ),
    _Rule(
        lambda f: f.has_author and f.has_publish_date and f.paragraph_count > 3,
        PageType.ARTICLE,
        0.9,
        "author and publish date present",
    ),
]


def strip_chrome(soup: BeautifulSoup, tags: list[str] | None = None) -> None:
    """Remove navigation/script chrome from *soup* in place."""
    for tag in soup(tags or _CHROME_TAGS):
        tag.decompose()


def normalized_text(node) -> str:  # type: ignore[no-untyped-def]
    """Return the whitespace-collapsed text content of a tag."""
    if node is None:
        return ""
    return _WHITESPACE_RE.sub(" ", node.get_text(separator=" ")).strip()


def measure_features(raw_html: str, soup: BeautifulSoup) -> PageFeatures:
    """Compute :class:`PageFeatures` from an already-stripped *soup*."""
    hrefs = [a.get("href") for a in soup.select("a[href]")]
    body = soup.body or soup
    return PageFeatures(
        link_count=len(hrefs),
        unique_links=len(set(map(str, hrefs))),
        paragraph_count=len(soup.find_all("p")),
        heading_count=len(soup.find_all(["h1", "h2", "h3"])),
        list_item_count=len(soup.find_all("li")),
        article_tags=len(soup.find_all("article")),
        text_length=len(normalized_text(body)),
        has_search_results=bool(_SEARCH_RE.search(raw_html)),
        has_pagination=bool(_PAGINATION_RE.search(raw_html)),
        has_card_layout=len(soup.select(_CARD_SELECTOR)) > 3,
        has_main_content=soup.select_one(_MAIN_CONTENT_SELECTOR) is not None,
        has_author=soup.select_one(_AUTHOR_SELECTOR) is not None,
        has_publish_date=soup.select_one(_DATE_SELECTOR) is not None,
    )


def classify_page(url: str, html: str) -> PageAnalysis:
    """Classify *html* (fetched from *url*) as an article, a list, or unknown.

    Never raises: any parser failure yields an ``unknown`` verdict with zero
    confidence.  For ``list`` verdicts the child links are extracted from the
    stripped tree and attached to the result.
    """
    try:
        soup = BeautifulSoup(html or "", "html.parser")
        strip_chrome(soup)
        features = measure_features(html or "", soup)
    except Exception as exc:  # noqa: BLE001
        logger.warning("[classify] could not parse %s: %s", url, exc)
        return PageAnalysis(PageType.UNKNOWN, 0.0, f"unparsable markup: {exc}")

    for rule in _RULES:
        if not rule.applies(features):
            continue
        child_links = None
        if rule.page_type is PageType.LIST:
            child_links = extract_child_links(url, soup) or None
        return PageAnalysis(rule.page_type, rule.confidence, rule.reason, child_links)

    return PageAnalysis(PageType.UNKNOWN, 0.0, "no structural signal matched")
