"""Pooled Postgres connections."""

import os
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

import psycopg
from psycopg.conninfo import make_conninfo
from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool


def build_conninfo(config: Dict[str, Any]) -> str:
    """libpq connection string from a ``postgres`` config section.

    An explicit password wins over the one named by ``password_env``.
    """
    password = config.get("password")
    if not password and config.get("password_env"):
        password = os.environ.get(config["password_env"])

    params = {
        "host": config.get("host", "localhost"),
        "port": config.get("port", 5432),
        "dbname": config.get("database", "councilfeed"),
        "user": config.get("user", "councilfeed"),
    }
    if password:
        params["password"] = password
    return make_conninfo(**params)


_pool: Optional[ConnectionPool] = None


def get_connection_pool(config: Dict[str, Any]) -> ConnectionPool:
    """Shared pool, opened on first use."""
    global _pool
    if _pool is None:
        _pool = ConnectionPool(
            build_conninfo(config),
            min_size=1,
            max_size=10,
            kwargs={"row_factory": dict_row},
            open=True,
        )
    return _pool


def close_connection_pool() -> None:
    """Close the shared pool, if one was opened."""
    global _pool
    if _pool is not None:
        _pool.close()
        _pool = None


@contextmanager
def get_connection(config: Dict[str, Any]) -> Iterator[psycopg.Connection]:
    """Borrow a connection; rows come back as dicts."""
    with get_connection_pool(config).connection() as conn:
        yield conn
