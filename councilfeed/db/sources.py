"""Source management in database."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from psycopg import Connection, sql

from ..models import Source

UPDATABLE_SOURCE_FIELDS = (
    "council_member_id",
    "kind",
    "url",
    "name",
    "fetch_interval",
    "is_active",
)


class SourceRepository:
    """Manage sources in database."""

    def create_source(self, conn: Connection, source: Source) -> Source:
        """Insert a source and return it with its id and timestamps."""
        with conn.cursor() as cur:
            cur.execute(
                """
                INSERT INTO sources (
                    council_member_id, kind, url, name,
                    fetch_interval, is_active, created_by
                ) VALUES (%s, %s, %s, %s, %s, %s, %s)
                RETURNING *
                """,
                (
                    source.council_member_id,
                    source.kind.value,
                    source.url,
                    source.name,
                    source.fetch_interval,
                    source.is_active,
                    source.created_by,
                ),
            )
            row = cur.fetchone()
        conn.commit()
        return Source(**row)

    def get_source(self, conn: Connection, source_id: int) -> Optional[Source]:
        """Get a source by id."""
        with conn.cursor() as cur:
            cur.execute("SELECT * FROM sources WHERE id = %s", (source_id,))
            row = cur.fetchone()
        return Source(**row) if row else None

    def list_sources(
        self,
        conn: Connection,
        active_only: bool = False,
        council_member_id: Optional[str] = None,
    ) -> List[Source]:
        """List sources ordered by id."""
        conditions = []
        params: List[Any] = []
        if active_only:
            conditions.append(sql.SQL("is_active = TRUE"))
        if council_member_id is not None:
            conditions.append(sql.SQL("council_member_id = %s"))
            params.append(council_member_id)

        query = sql.SQL("SELECT * FROM sources")
        if conditions:
            query += sql.SQL(" WHERE ") + sql.SQL(" AND ").join(conditions)
        query += sql.SQL(" ORDER BY id")

        with conn.cursor() as cur:
            cur.execute(query, params)
            return [Source(**row) for row in cur.fetchall()]

    def update_source(
        self,
        conn: Connection,
        source_id: int,
        updates: Dict[str, Any],
    ) -> Optional[Source]:
        """Apply a partial update; None values are ignored."""
        changes = {
            key: db_value(value)
            for key, value in updates.items()
            if value is not None and key in UPDATABLE_SOURCE_FIELDS
        }
        if not changes:
            return self.get_source(conn, source_id)

        assignments = sql.SQL(", ").join(
            sql.SQL("{} = %s").format(sql.Identifier(key)) for key in changes
        )
        with conn.cursor() as cur:
            cur.execute(
                sql.SQL("UPDATE sources SET {} WHERE id = %s RETURNING *").format(assignments),
                [*changes.values(), source_id],
            )
            row = cur.fetchone()
        conn.commit()
        return Source(**row) if row else None

    def delete_source(self, conn: Connection, source_id: int) -> bool:
        """Delete a source. Its articles are kept."""
        with conn.cursor() as cur:
            cur.execute("DELETE FROM sources WHERE id = %s", (source_id,))
            deleted = cur.rowcount > 0
        conn.commit()
        return deleted

    def touch_last_fetched(
        self,
        conn: Connection,
        source_id: int,
        fetched_at: datetime,
    ) -> None:
        """Record a completed fetch."""
        with conn.cursor() as cur:
            cur.execute(
                "UPDATE sources SET last_fetched_at = %s WHERE id = %s",
                (fetched_at, source_id),
            )
        conn.commit()


def db_value(value: Any) -> Any:
    """Enum members are stored by value."""
    return getattr(value, "value", value)
