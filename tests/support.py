"""In-memory store and fake HTTP server for tests."""

from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Set

import httpx

from councilfeed.models import Article, Source, SourceKind

FIXED_NOW = datetime(2026, 1, 15, 9, 0, tzinfo=timezone.utc)


class InMemoryStore:
    """Dict-backed stand-in for the Postgres store."""

    def __init__(self, sources: List[Source]) -> None:
        self.sources: Dict[int, Source] = {source.id: source for source in sources}
        self.articles: List[Article] = []
        self.fail_urls: Set[str] = set()

    def get_source(self, source_id: int) -> Optional[Source]:
        return self.sources.get(source_id)

    def list_active_sources(self) -> List[Source]:
        return [source for source in self.sources.values() if source.is_active]

    def get_original_urls(self, source_id: int) -> Set[str]:
        return {a.original_url for a in self.articles if a.source_id == source_id}

    def insert_article(self, article: Article) -> Article:
        if article.original_url in self.fail_urls:
            raise RuntimeError("insert failed")
        stored = article.model_copy(update={"id": len(self.articles) + 1})
        self.articles.append(stored)
        return stored

    def touch_last_fetched(self, source_id: int, fetched_at: datetime) -> None:
        self.sources[source_id] = self.sources[source_id].model_copy(
            update={"last_fetched_at": fetched_at}
        )


def make_source(source_id: int = 1, url: str = "https://blog.example.com/feed", **kwargs) -> Source:
    fields = {
        "id": source_id,
        "council_member_id": "member-1",
        "kind": SourceKind.RSS,
        "url": url,
        "name": "Example Blog",
    }
    fields.update(kwargs)
    return Source(**fields)


class FakeServer:
    """Serve canned responses by URL and record requests."""

    def __init__(self) -> None:
        self.routes: Dict[str, Callable[[httpx.Request], httpx.Response]] = {}
        self.requests: List[httpx.Request] = []

    def add(
        self,
        url: str,
        body: str,
        content_type: str = "application/rss+xml",
        status: int = 200,
    ) -> None:
        self.routes[url] = lambda request: httpx.Response(
            status,
            content=body.encode("utf-8"),
            headers={"content-type": content_type},
        )

    def add_handler(self, url: str, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.routes[url] = handler

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get(str(request.url))
        if handler is None:
            return httpx.Response(404)
        return handler(request)
