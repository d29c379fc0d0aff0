"""Database management for councilfeed."""

from .articles import ArticleStorage
from .connection import close_connection_pool, get_connection, get_connection_pool
from .init import init_database, validate_connection
from .sources import SourceRepository
from .store import PostgresArticleStore

__all__ = [
    "ArticleStorage",
    "PostgresArticleStore",
    "SourceRepository",
    "close_connection_pool",
    "get_connection",
    "get_connection_pool",
    "init_database",
    "validate_connection",
]
