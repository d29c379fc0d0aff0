"""Article storage and queries."""

from typing import Any, Dict, List, Optional, Set

from psycopg import Connection, sql

from ..models import Article, Category
from .sources import db_value

UPDATABLE_ARTICLE_FIELDS = (
    "title",
    "content",
    "excerpt",
    "original_url",
    "image_url",
    "published_at",
    "category",
    "is_active",
)

_INSERT_COLUMNS = (
    "source_id",
    "council_member_id",
    "title",
    "content",
    "excerpt",
    "source_url",
    "original_url",
    "image_url",
    "published_at",
    "fetched_at",
    "source_kind",
    "category",
    "is_active",
    "view_count",
)


class ArticleStorage:
    """Handle article storage and lookups."""

    def get_original_urls(self, conn: Connection, source_id: int) -> Set[str]:
        """Original URLs already stored for a source."""
        with conn.cursor() as cur:
            cur.execute(
                "SELECT original_url FROM articles WHERE source_id = %s",
                (source_id,),
            )
            return {row["original_url"] for row in cur.fetchall()}

    def insert_article(self, conn: Connection, article: Article) -> Article:
        """Insert one article.

        No uniqueness is enforced here; callers filter known URLs first.
        """
        values = article.model_dump(include=set(_INSERT_COLUMNS), mode="python")
        query = sql.SQL("INSERT INTO articles ({}) VALUES ({}) RETURNING *").format(
            sql.SQL(", ").join(sql.Identifier(column) for column in _INSERT_COLUMNS),
            sql.SQL(", ").join(sql.Placeholder() for _ in _INSERT_COLUMNS),
        )
        with conn.cursor() as cur:
            cur.execute(query, [db_value(values[column]) for column in _INSERT_COLUMNS])
            row = cur.fetchone()
        conn.commit()
        return Article(**row)

    def get_article(self, conn: Connection, article_id: int) -> Optional[Article]:
        """Get an article by id."""
        with conn.cursor() as cur:
            cur.execute("SELECT * FROM articles WHERE id = %s", (article_id,))
            row = cur.fetchone()
        return Article(**row) if row else None

    def list_articles(
        self,
        conn: Connection,
        category: Optional[Category] = None,
        council_member_id: Optional[str] = None,
        source_id: Optional[int] = None,
        active_only: bool = True,
        limit: int = 20,
    ) -> List[Article]:
        """List articles, newest publication first."""
        conditions = []
        params: List[Any] = []
        if active_only:
            conditions.append(sql.SQL("is_active = TRUE"))
        if category is not None:
            conditions.append(sql.SQL("category = %s"))
            params.append(db_value(category))
        if council_member_id is not None:
            conditions.append(sql.SQL("council_member_id = %s"))
            params.append(council_member_id)
        if source_id is not None:
            conditions.append(sql.SQL("source_id = %s"))
            params.append(source_id)

        query = sql.SQL("SELECT * FROM articles")
        if conditions:
            query += sql.SQL(" WHERE ") + sql.SQL(" AND ").join(conditions)
        query += sql.SQL(" ORDER BY published_at DESC, id DESC LIMIT %s")
        params.append(limit)

        with conn.cursor() as cur:
            cur.execute(query, params)
            return [Article(**row) for row in cur.fetchall()]

    def popular_articles(self, conn: Connection, limit: int = 10) -> List[Article]:
        """Active articles by view count, ties broken by recency."""
        with conn.cursor() as cur:
            cur.execute(
                """
                SELECT * FROM articles
                WHERE is_active = TRUE
                ORDER BY view_count DESC, published_at DESC
                LIMIT %s
                """,
                (limit,),
            )
            return [Article(**row) for row in cur.fetchall()]

    def category_counts(self, conn: Connection) -> Dict[str, int]:
        """Active article counts per category, plus ``all``."""
        counts = {"all": 0}
        counts.update({category.value: 0 for category in Category})
        with conn.cursor() as cur:
            cur.execute(
                """
                SELECT category, COUNT(*) AS total
                FROM articles
                WHERE is_active = TRUE
                GROUP BY category
                """
            )
            for row in cur.fetchall():
                key = row["category"] if row["category"] in counts else Category.OTHER.value
                counts[key] += row["total"]
                counts["all"] += row["total"]
        return counts

    def update_article(
        self,
        conn: Connection,
        article_id: int,
        updates: Dict[str, Any],
    ) -> Optional[Article]:
        """Apply a partial update; None values are ignored."""
        changes = {
            key: db_value(value)
            for key, value in updates.items()
            if value is not None and key in UPDATABLE_ARTICLE_FIELDS
        }
        if not changes:
            return self.get_article(conn, article_id)

        assignments = sql.SQL(", ").join(
            sql.SQL("{} = %s").format(sql.Identifier(key)) for key in changes
        )
        with conn.cursor() as cur:
            cur.execute(
                sql.SQL("UPDATE articles SET {} WHERE id = %s RETURNING *").format(assignments),
                [*changes.values(), article_id],
            )
            row = cur.fetchone()
        conn.commit()
        return Article(**row) if row else None

    def delete_article(self, conn: Connection, article_id: int) -> bool:
        """Delete an article."""
        with conn.cursor() as cur:
            cur.execute("DELETE FROM articles WHERE id = %s", (article_id,))
            deleted = cur.rowcount > 0
        conn.commit()
        return deleted

    def increment_view_count(self, conn: Connection, article_id: int) -> None:
        """Add one view to an article."""
        with conn.cursor() as cur:
            cur.execute(
                "UPDATE articles SET view_count = view_count + 1 WHERE id = %s",
                (article_id,),
            )
        conn.commit()
