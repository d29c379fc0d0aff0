"""Postgres-backed persistence for the fetch pipeline."""

from datetime import datetime
from typing import Any, Dict, List, Optional, Set

from ..models import Article, Source
from .articles import ArticleStorage
from .connection import get_connection
from .sources import SourceRepository


class PostgresArticleStore:
    """Source and article persistence on a pooled connection per call."""

    def __init__(self, db_config: Dict[str, Any]) -> None:
        self.db_config = db_config
        self.sources = SourceRepository()
        self.articles = ArticleStorage()

    def get_source(self, source_id: int) -> Optional[Source]:
        with get_connection(self.db_config) as conn:
            return self.sources.get_source(conn, source_id)

    def list_active_sources(self) -> List[Source]:
        with get_connection(self.db_config) as conn:
            return self.sources.list_sources(conn, active_only=True)

    def get_original_urls(self, source_id: int) -> Set[str]:
        with get_connection(self.db_config) as conn:
            return self.articles.get_original_urls(conn, source_id)

    def insert_article(self, article: Article) -> Article:
        with get_connection(self.db_config) as conn:
            return self.articles.insert_article(conn, article)

    def touch_last_fetched(self, source_id: int, fetched_at: datetime) -> None:
        with get_connection(self.db_config) as conn:
            self.sources.touch_last_fetched(conn, source_id, fetched_at)
