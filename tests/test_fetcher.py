"""Tests for the HTTP fetcher."""

import asyncio

import httpx
import pytest

from councilfeed.config import FetchConfig
from councilfeed.ingestion import FeedFetcher, FetchError


def _fetch(handler, url="https://blog.example.com/feed", config=None):
    fetcher = FeedFetcher(config, transport=httpx.MockTransport(handler))
    return asyncio.run(fetcher.fetch(url))


def test_successful_fetch():
    """Body, raw bytes and content type are returned"""
    body = "<rss><channel></channel></rss>"

    def handler(request):
        return httpx.Response(200, text=body, headers={"content-type": "application/rss+xml"})

    document = _fetch(handler)

    assert document.status_code == 200
    assert document.content_type == "application/rss+xml"
    assert document.text == body
    assert document.content == body.encode("utf-8")


def test_configured_headers_sent():
    """User-Agent and Accept come from the fetch config"""
    seen = {}

    def handler(request):
        seen.update(request.headers)
        return httpx.Response(200, text="ok")

    _fetch(handler, config=FetchConfig(user_agent="test-agent/2.0", accept="text/html"))

    assert seen["user-agent"] == "test-agent/2.0"
    assert seen["accept"] == "text/html"


@pytest.mark.parametrize(
    "status, message",
    [(404, "HTTP 404: Not Found"), (500, "HTTP 500: Internal Server Error")],
)
def test_non_2xx_raises(status, message):
    """Error statuses raise with the status code attached"""
    with pytest.raises(FetchError) as exc_info:
        _fetch(lambda request: httpx.Response(status))

    assert str(exc_info.value) == message
    assert exc_info.value.status_code == status


def test_timeout_raises():
    """Timeouts are reported as fetch errors"""

    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(FetchError, match="timed out") as exc_info:
        _fetch(handler)

    assert exc_info.value.status_code is None


def test_single_attempt():
    """A failed request is not retried"""
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(503)

    with pytest.raises(FetchError):
        _fetch(handler)

    assert len(calls) == 1
