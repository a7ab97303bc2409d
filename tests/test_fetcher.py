"""Tests for the HTTP fetcher.

``respx`` patches ``httpx`` at the transport layer so no real network calls
are made.
"""

from __future__ import annotations

import httpx
import pytest
import respx

from gleaner.config import settings
from gleaner.scraper.fetcher import FetchError, fetch_url

_URL = "https://example.com/story"


class TestFetchUrl:
    @respx.mock
    def test_returns_raw_page(self) -> None:
        respx.get(_URL).mock(
            return_value=httpx.Response(200, text="<html><body>Hello</body></html>")
        )
        page = fetch_url(_URL)
        assert page.url == _URL
        assert page.status_code == 200
        assert "Hello" in page.html
        assert page.content == b"<html><body>Hello</body></html>"

    @respx.mock
    def test_sends_browser_user_agent(self) -> None:
        route = respx.get(_URL).mock(return_value=httpx.Response(200, text="ok"))
        fetch_url(_URL)
        assert route.calls.last.request.headers["User-Agent"] == settings.user_agent

    @respx.mock
    def test_follows_redirects(self) -> None:
        respx.get("https://example.com/old").mock(
            return_value=httpx.Response(301, headers={"Location": _URL})
        )
        respx.get(_URL).mock(return_value=httpx.Response(200, text="moved here"))
        page = fetch_url("https://example.com/old")
        assert page.status_code == 200
        assert page.html == "moved here"

    @respx.mock
    def test_http_error_status_raises(self) -> None:
        respx.get(_URL).mock(return_value=httpx.Response(404))
        with pytest.raises(FetchError, match="HTTP 404"):
            fetch_url(_URL)

    @respx.mock
    def test_server_error_is_not_retried(self) -> None:
        route = respx.get(_URL).mock(return_value=httpx.Response(503))
        with pytest.raises(FetchError):
            fetch_url(_URL)
        assert route.call_count == 1

    @respx.mock
    def test_timeout_raises(self) -> None:
        respx.get(_URL).mock(side_effect=httpx.ConnectTimeout("too slow"))
        with pytest.raises(FetchError, match="Timed out") as info:
            fetch_url(_URL)
        assert info.value.url == _URL

    @respx.mock
    def test_connection_error_raises(self) -> None:
        respx.get(_URL).mock(side_effect=httpx.ConnectError("refused"))
        with pytest.raises(FetchError, match="Failed to fetch"):
            fetch_url(_URL)
