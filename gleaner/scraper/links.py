"""Child-link harvesting for list/index pages."""

from __future__ import annotations

import re
from typing import List
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup

from gleaner.config import settings

# Tried in order; earlier selectors are better article-link signals.
_LINK_SELECTORS = [
    "article a[href]",
    ".post a[href]",
    ".entry a[href]",
    ".item a[href]",
    ".card a[href]",
    ".result a[href]",
    "h2 a[href]",
    "h3 a[href]",
    ".title a[href]",
    '[class*="article"] a[href]',
    '[class*="post"] a[href]',
]

_EXCLUDE_PATTERNS = [
    re.compile(r"/(login|signin|signup|register|auth)", re.IGNORECASE),
    re.compile(r"/(search|filter|sort|category|tag)", re.IGNORECASE),
    re.compile(r"/(about|contact|privacy|terms|help|faq)", re.IGNORECASE),
    re.compile(r"/(comment|reply|share)", re.IGNORECASE),
    re.compile(r"\.(jpg|jpeg|png|gif|pdf|zip|mp3|mp4)$", re.IGNORECASE),
    re.compile(r"#"),
    re.compile(r"javascript:", re.IGNORECASE),
    re.compile(r"mailto:", re.IGNORECASE),
]


def _is_excluded(url: str) -> bool:
    return any(pattern.search(url) for pattern in _EXCLUDE_PATTERNS)


def _same_site(base_host: str, link_host: str) -> bool:
    """Loose same-site check that tolerates ``www.`` and other subdomains."""
    return link_host in base_host or base_host in link_host


def _resolve(base_url: str, href: str) -> str | None:
    """Return the absolute http(s) URL for *href*, or ``None``."""
    href = href.strip()
    if not href:
        return None
    try:
        absolute = urljoin(base_url, href)
        parsed = urlparse(absolute)
    except ValueError:
        return None
    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        return None
    return absolute


def extract_child_links(base_url: str, soup: BeautifulSoup) -> List[str]:
    """Harvest candidate article links from a list page.

    Selectors are scanned in priority order and scanning stops once
    ``settings.max_link_candidates`` unique candidates have accumulated.  Only
    the first ``settings.max_child_links`` survivors are returned, in
    discovery order.

    Args:
        base_url: URL the page was fetched from; relative hrefs resolve
            against it.
        soup: Parsed page, usually with navigation chrome already removed.

    Returns:
        Unique absolute URLs on the same site as *base_url*.
    """
    base_host = urlparse(base_url).hostname or ""
    if not base_host:
        return []

    seen: set[str] = set()
    links: List[str] = []

    for selector in _LINK_SELECTORS:
        for anchor in soup.select(selector):
            href = anchor.get("href")
            if not isinstance(href, str):
                continue
            absolute = _resolve(base_url, href)
            if absolute is None or _is_excluded(absolute):
                continue
            link_host = urlparse(absolute).hostname or ""
            if not _same_site(base_host, link_host):
                continue
            if absolute not in seen:
                seen.add(absolute)
                links.append(absolute)

        if len(links) >= settings.max_link_candidates:
            break

    return links[: settings.max_child_links]
