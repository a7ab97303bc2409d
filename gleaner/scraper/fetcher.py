"""HTTP fetcher used for every page the crawler touches."""

from __future__ import annotations

import httpx

from gleaner.config import settings
from gleaner.scraper.models import RawPage


class FetchError(RuntimeError):
    """Transport-level failure: connect error, timeout, or a 4xx/5xx status."""

    def __init__(self, url: str, message: str) -> None:
        super().__init__(message)
        self.url = url


def _default_headers() -> dict[str, str]:
    return {
        "User-Agent": settings.user_agent,
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.9",
    }


def fetch_url(url: str) -> RawPage:
    """Fetch *url* once and return a :class:`RawPage`.

    No retry is attempted; a single failure is terminal for the URL.

    Raises:
        FetchError: On timeouts, connection failures, or a non-2xx status.
    """
    try:
        with httpx.Client(
            headers=_default_headers(),
            timeout=settings.request_timeout,
            follow_redirects=True,
        ) as client:
            response = client.get(url)
            response.raise_for_status()
            return RawPage(
                url=url,
                html=response.text,
                status_code=response.status_code,
                content=response.content,
            )
    except httpx.TimeoutException as exc:
        raise FetchError(url, f"Timed out fetching {url}: {exc}") from exc
    except httpx.HTTPStatusError as exc:
        raise FetchError(
            url, f"HTTP {exc.response.status_code} fetching {url}"
        ) from exc
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        raise FetchError(url, f"Failed to fetch {url}: {exc}") from exc
