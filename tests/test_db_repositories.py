"""Tests for the repositories against a recording connection."""

from datetime import datetime, timezone

from councilfeed.db import ArticleStorage, SourceRepository
from councilfeed.models import Article, Category, Source, SourceKind

NOW = datetime(2026, 1, 15, 9, 0, tzinfo=timezone.utc)


class RecordingCursor:
    def __init__(self, conn):
        self.conn = conn
        self.rowcount = 0

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def execute(self, query, params=None):
        self.conn.executed.append((query, list(params) if params is not None else None))
        self.rowcount = self.conn.rowcount

    def fetchone(self):
        return self.conn.rows.pop(0) if self.conn.rows else None

    def fetchall(self):
        rows, self.conn.rows = self.conn.rows, []
        return rows


class RecordingConnection:
    """Returns queued rows and records executed statements."""

    def __init__(self, rows=None, rowcount=0):
        self.rows = list(rows or [])
        self.rowcount = rowcount
        self.executed = []
        self.commits = 0

    def cursor(self):
        return RecordingCursor(self)

    def commit(self):
        self.commits += 1


def source_row(**overrides):
    row = {
        "id": 1,
        "council_member_id": "member-1",
        "kind": "rss",
        "url": "https://blog.example.com/feed",
        "name": "Example Blog",
        "fetch_interval": 60,
        "is_active": True,
        "last_fetched_at": None,
        "created_by": "admin",
        "created_at": NOW,
        "updated_at": NOW,
    }
    row.update(overrides)
    return row


def article_row(**overrides):
    row = {
        "id": 7,
        "source_id": 1,
        "council_member_id": "member-1",
        "title": "Title",
        "content": "Body",
        "excerpt": "Body",
        "source_url": "https://blog.example.com/feed",
        "original_url": "https://blog.example.com/posts/1",
        "image_url": None,
        "published_at": NOW,
        "fetched_at": NOW,
        "source_kind": "rss",
        "category": "notice",
        "is_active": True,
        "view_count": 0,
        "created_at": NOW,
        "updated_at": NOW,
    }
    row.update(overrides)
    return row


def test_create_source_stores_enum_value():
    """The kind is written by value and the returned row is parsed"""
    conn = RecordingConnection(rows=[source_row()])
    source = Source(
        council_member_id="member-1",
        kind=SourceKind.RSS,
        url="https://blog.example.com/feed",
        name="Example Blog",
        created_by="admin",
    )

    created = SourceRepository().create_source(conn, source)

    _, params = conn.executed[0]
    assert params[1] == "rss"
    assert created.id == 1
    assert created.kind == SourceKind.RSS
    assert conn.commits == 1


def test_get_missing_source():
    """An unknown id returns None"""
    conn = RecordingConnection()

    assert SourceRepository().get_source(conn, 5) is None


def test_update_source_ignores_none_and_unknown_fields():
    """Only provided, updatable fields are written"""
    conn = RecordingConnection(rows=[source_row(name="Renamed", kind="blog")])

    updated = SourceRepository().update_source(
        conn, 1, {"name": "Renamed", "kind": SourceKind.BLOG, "url": None, "id": 99}
    )

    _, params = conn.executed[0]
    assert params == ["Renamed", "blog", 1]
    assert updated.kind == SourceKind.BLOG


def test_update_source_without_changes_reads_back():
    """An empty update is a plain lookup"""
    conn = RecordingConnection(rows=[source_row()])

    SourceRepository().update_source(conn, 1, {"name": None})

    query, params = conn.executed[0]
    assert query.startswith("SELECT")
    assert params == [1]
    assert conn.commits == 0


def test_delete_source_reports_rowcount():
    """Deletion reports whether a row went away"""
    assert SourceRepository().delete_source(RecordingConnection(rowcount=1), 1)
    assert not SourceRepository().delete_source(RecordingConnection(rowcount=0), 1)


def test_original_urls():
    """Stored URLs come back as a set"""
    conn = RecordingConnection(
        rows=[{"original_url": "https://a.example/1"}, {"original_url": "https://a.example/2"}]
    )

    urls = ArticleStorage().get_original_urls(conn, 1)

    assert urls == {"https://a.example/1", "https://a.example/2"}
    assert conn.executed[0][1] == [1]


def test_insert_article_params():
    """Every column is bound and enums are stored by value"""
    conn = RecordingConnection(rows=[article_row()])
    row = article_row()
    for key in ("id", "created_at", "updated_at"):
        del row[key]
    article = Article(**row)

    stored = ArticleStorage().insert_article(conn, article)

    _, params = conn.executed[0]
    assert len(params) == 14
    assert "rss" in params
    assert "notice" in params
    assert params[-1] == 0
    assert stored.id == 7
    assert stored.category == Category.NOTICE


def test_list_articles_filters():
    """Filters are bound in order, with the limit last"""
    conn = RecordingConnection(rows=[article_row()])

    articles = ArticleStorage().list_articles(
        conn, category=Category.NOTICE, council_member_id="member-1", limit=5
    )

    _, params = conn.executed[0]
    assert params == ["notice", "member-1", 5]
    assert len(articles) == 1


def test_category_counts():
    """Counts cover every category plus the total"""
    conn = RecordingConnection(
        rows=[
            {"category": "notice", "total": 3},
            {"category": "policy-proposal", "total": 2},
        ]
    )

    counts = ArticleStorage().category_counts(conn)

    assert counts["all"] == 5
    assert counts["notice"] == 3
    assert counts["policy-proposal"] == 2
    assert counts["local-event"] == 0
    assert set(counts) == {"all"} | {c.value for c in Category}


def test_update_article_category():
    """Category updates are written by value"""
    conn = RecordingConnection(rows=[article_row(category="local-event")])

    updated = ArticleStorage().update_article(
        conn, 7, {"category": Category.LOCAL_EVENT, "title": None}
    )

    _, params = conn.executed[0]
    assert params == ["local-event", 7]
    assert updated.category == Category.LOCAL_EVENT


def test_increment_view_count():
    """The counter is bumped in SQL"""
    conn = RecordingConnection()

    ArticleStorage().increment_view_count(conn, 7)

    query, params = conn.executed[0]
    assert "view_count = view_count + 1" in query
    assert params == [7]
    assert conn.commits == 1
