"""Tests for the fetch orchestrator."""

import asyncio
from datetime import datetime

import httpx
import pendulum
import pytest

from councilfeed.ingestion import FeedFormat
from councilfeed.models import Category, SourceKind
from councilfeed.pipeline import SourceNotFoundError

from feed_fixtures import html_page, numbered_rss, rss_feed, rss_item
from support import FIXED_NOW, make_source

FEED_URL = "https://blog.example.com/feed"


def test_feed_items_are_saved(orchestrator, store, server):
    """New feed items are classified, sanitized and stored"""
    server.add(
        FEED_URL,
        rss_feed(
            [
                rss_item(
                    "子育て政策について",
                    "https://blog.example.com/posts/1",
                    "<![CDATA[<p>保育園の&quot;待機児童&quot;対策</p>]]>",
                    "Mon, 25 Dec 2023 10:00:00 +0900",
                ),
                rss_item("活動報告", "https://blog.example.com/posts/2", pub_date="2023年12月24日"),
                rss_item("雑記", "https://blog.example.com/posts/3", "今日は晴れ"),
            ]
        ),
    )

    outcome = orchestrator.fetch_from_source_sync(1)

    assert outcome.success
    assert outcome.total_found == 3
    assert outcome.new_candidates == 3
    assert outcome.saved_count == 3
    assert outcome.message == "3 new articles saved out of 3 found"

    first, second, third = store.articles
    assert first.category == Category.POLICY_PROPOSAL
    assert first.content == '保育園の"待機児童"対策'
    assert first.excerpt == '保育園の"待機児童"対策'
    assert first.published_at == datetime.fromisoformat("2023-12-25T10:00:00+09:00")
    assert first.fetched_at == FIXED_NOW
    assert first.source_url == FEED_URL
    assert first.council_member_id == "member-1"
    assert first.source_kind == SourceKind.RSS
    assert first.view_count == 0
    assert first.is_active

    assert second.category == Category.ACTIVITY_REPORT
    assert second.published_at == pendulum.datetime(2023, 12, 24, tz=pendulum.local_timezone())
    assert second.excerpt is None

    assert third.category == Category.OTHER
    assert third.published_at == FIXED_NOW

    assert store.sources[1].last_fetched_at == FIXED_NOW


def test_second_run_saves_nothing(orchestrator, store, server):
    """Fetching an unchanged feed twice does not duplicate articles"""
    server.add(FEED_URL, numbered_rss(3))

    orchestrator.fetch_from_source_sync(1)
    outcome = orchestrator.fetch_from_source_sync(1)

    assert outcome.success
    assert outcome.total_found == 3
    assert outcome.new_candidates == 0
    assert outcome.saved_count == 0
    assert len(store.articles) == 3


def test_http_error_fails_the_run(orchestrator, store, server):
    """A non-2xx response stores nothing and leaves last fetched alone"""
    server.add(FEED_URL, "gone", status=404)

    outcome = orchestrator.fetch_from_source_sync(1)

    assert not outcome.success
    assert outcome.message == "HTTP 404: Not Found"
    assert outcome.saved_count == 0
    assert store.articles == []
    assert store.sources[1].last_fetched_at is None


def test_connection_error_fails_the_run(orchestrator, store, server):
    """Transport errors become an unsuccessful outcome"""

    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    server.add_handler(FEED_URL, refuse)

    outcome = orchestrator.fetch_from_source_sync(1)

    assert not outcome.success
    assert "connection refused" in outcome.message
    assert store.articles == []


def test_page_links_use_ingestion_time(orchestrator, store, server):
    """Links scraped from a page are dated with the ingestion time"""
    store.sources[1] = make_source(url="https://blog.example.com/", kind=SourceKind.BLOG)
    server.add(
        "https://blog.example.com/",
        html_page(
            anchors=[("/about/", "About")],
            headings=[("/posts/1", "市政報告会のお知らせ"), ("/posts/2", "イベント開催")],
        ),
        content_type="text/html; charset=utf-8",
    )

    outcome = orchestrator.fetch_from_source_sync(1)

    assert outcome.saved_count == 3
    assert [a.original_url for a in store.articles] == [
        "https://blog.example.com/posts/1",
        "https://blog.example.com/posts/2",
        "https://blog.example.com/about/",
    ]
    assert all(a.published_at == FIXED_NOW for a in store.articles)
    assert all(a.source_kind == SourceKind.BLOG for a in store.articles)
    assert store.articles[1].category == Category.LOCAL_EVENT


def test_feed_marker_in_html_content_type(orchestrator, store, server):
    """A feed served as text/html is still parsed as a feed"""
    server.add(FEED_URL, numbered_rss(2), content_type="text/html")

    outcome = orchestrator.fetch_from_source_sync(1)

    assert outcome.saved_count == 2
    assert store.articles[0].title == "Post 1"


def test_at_most_ten_saved_per_run(orchestrator, store, server):
    """Fifteen new items are stored over two runs"""
    server.add(FEED_URL, numbered_rss(15))

    first = orchestrator.fetch_from_source_sync(1)
    second = orchestrator.fetch_from_source_sync(1)

    assert (first.new_candidates, first.saved_count) == (15, 10)
    assert (second.new_candidates, second.saved_count) == (5, 5)
    assert len({a.original_url for a in store.articles}) == 15


def test_feed_candidates_capped(orchestrator, server):
    """A 30-item feed reports 20 found"""
    server.add(FEED_URL, numbered_rss(30))

    outcome = orchestrator.fetch_from_source_sync(1)

    assert outcome.total_found == 20
    assert outcome.saved_count == 10


def test_persistence_failure_skips_item(orchestrator, store, server):
    """One failing insert does not stop the others"""
    server.add(FEED_URL, numbered_rss(3))
    store.fail_urls.add("https://blog.example.com/posts/2")

    outcome = orchestrator.fetch_from_source_sync(1)

    assert outcome.success
    assert outcome.saved_count == 2
    assert outcome.message == "2 new articles saved out of 3 found"
    assert [a.original_url for a in store.articles] == [
        "https://blog.example.com/posts/1",
        "https://blog.example.com/posts/3",
    ]
    assert store.sources[1].last_fetched_at == FIXED_NOW


def test_unparseable_date_uses_ingestion_time(orchestrator, store, server):
    """An item with a bad date is kept and dated now"""
    server.add(
        FEED_URL,
        rss_feed([rss_item("Post", "https://blog.example.com/p", pub_date="not a date")]),
    )

    orchestrator.fetch_from_source_sync(1)

    assert store.articles[0].published_at == FIXED_NOW


def test_long_description_excerpt(orchestrator, store, server):
    """The excerpt is the first 200 characters of the content"""
    body = "あ" * 250
    server.add(FEED_URL, rss_feed([rss_item("Post", "https://blog.example.com/p", body)]))

    orchestrator.fetch_from_source_sync(1)

    article = store.articles[0]
    assert article.content == body
    assert article.excerpt == "あ" * 200


def test_unknown_source(orchestrator):
    """Fetching an unknown source id raises"""
    with pytest.raises(SourceNotFoundError):
        orchestrator.fetch_from_source_sync(99)


def test_request_headers(orchestrator, server):
    """The fetch identifies itself and accepts feeds and HTML"""
    server.add(FEED_URL, numbered_rss(1))

    orchestrator.fetch_from_source_sync(1)

    request = server.requests[0]
    assert "councilfeed" in request.headers["user-agent"]
    assert "application/rss+xml" in request.headers["accept"]
    assert "text/html" in request.headers["accept"]


def test_preview_does_not_store(orchestrator, store, server):
    """Preview returns a sample and the total without persisting"""
    url = "https://other.example.com/rss"
    server.add(url, numbered_rss(8, base="https://other.example.com/posts"))

    result = orchestrator.preview_url_sync(url)

    assert result.success
    assert result.total_count == 8
    assert len(result.sample_articles) == 5
    assert result.message == "Found 8 articles"
    assert result.format_guess == FeedFormat.FEED
    assert result.content_type == "application/rss+xml"
    assert result.sample_articles[0].published_at is not None
    assert store.articles == []
    assert store.sources[1].last_fetched_at is None


def test_preview_failure(orchestrator, server):
    """A failing preview reports the HTTP error"""
    result = orchestrator.preview_url_sync("https://missing.example.com/")

    assert not result.success
    assert result.message == "HTTP 404: Not Found"
    assert result.sample_articles == []


def test_fetch_all_active_sources(orchestrator, store, server):
    """Every active source is fetched once"""
    store.sources[2] = make_source(2, url="https://two.example.com/feed", council_member_id="member-2")
    store.sources[3] = make_source(3, url="https://three.example.com/feed", is_active=False)
    server.add(FEED_URL, numbered_rss(2))
    server.add("https://two.example.com/feed", numbered_rss(3, base="https://two.example.com/posts"))

    outcomes = orchestrator.fetch_all_sync()

    assert sorted((o.source_id, o.saved_count) for o in outcomes) == [(1, 2), (2, 3)]
    assert {a.council_member_id for a in store.articles if a.source_id == 2} == {"member-2"}
    assert store.sources[3].last_fetched_at is None
    assert len(server.requests) == 2


def test_malformed_page_link_does_not_fail_run(orchestrator, store, server):
    """A page with an unparseable href still yields an outcome"""
    store.sources[1] = make_source(url="https://blog.example.com/", kind=SourceKind.BLOG)
    server.add(
        "https://blog.example.com/",
        html_page(
            anchors=[("https://[broken/post", "Broken link")],
            headings=[("/posts/1", "Good post")],
        ),
        content_type="text/html",
    )

    outcome = orchestrator.fetch_from_source_sync(1)

    assert outcome.success
    assert outcome.saved_count == 1
    assert store.articles[0].original_url == "https://blog.example.com/posts/1"


def test_same_source_runs_are_serialized(orchestrator, store, server):
    """Two overlapping fetches of one source store each item once"""
    server.add(FEED_URL, numbered_rss(3))

    async def fetch_twice():
        return await asyncio.gather(
            orchestrator.fetch_from_source(1),
            orchestrator.fetch_from_source(1),
        )

    first, second = asyncio.run(fetch_twice())

    assert sorted([first.saved_count, second.saved_count]) == [0, 3]
    assert len(store.articles) == 3


def test_fetch_all_survives_failing_sources(orchestrator, store, server):
    """A 404 and an unexpected error do not hide the other outcomes"""
    store.sources[2] = make_source(2, url="https://two.example.com/feed")
    store.sources[3] = make_source(3, url="https://three.example.com/feed")
    server.add(FEED_URL, numbered_rss(2))
    server.add("https://two.example.com/feed", "gone", status=404)

    def explode(request: httpx.Request) -> httpx.Response:
        raise RuntimeError("boom")

    server.add_handler("https://three.example.com/feed", explode)

    outcomes = {o.source_id: o for o in orchestrator.fetch_all_sync()}

    assert outcomes[1].success
    assert outcomes[1].saved_count == 2
    assert not outcomes[2].success
    assert outcomes[2].message == "HTTP 404: Not Found"
    assert not outcomes[3].success
    assert "boom" in outcomes[3].message
    assert store.sources[1].last_fetched_at == FIXED_NOW
    assert store.sources[3].last_fetched_at is None
