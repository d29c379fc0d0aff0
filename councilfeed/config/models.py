"""Configuration models."""

from typing import Optional

from pydantic import BaseModel, Field


DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; councilfeed/1.0)"
DEFAULT_ACCEPT = (
    "application/rss+xml, application/xml, text/xml, application/atom+xml, text/html"
)


class PostgresConfig(BaseModel):
    """Postgres configuration."""

    host: str = Field("localhost", description="Database host")
    port: int = Field(5432, description="Database port")
    database: str = Field("councilfeed", description="Database name")
    user: str = Field("councilfeed", description="Database user")
    password: Optional[str] = Field(None, description="Database password")
    password_env: Optional[str] = Field(None, description="Environment variable for password")


class FetchConfig(BaseModel):
    """Network and batch limits for feed ingestion."""

    user_agent: str = Field(DEFAULT_USER_AGENT, description="User-Agent sent with every fetch")
    accept: str = Field(DEFAULT_ACCEPT, description="Accept header sent with every fetch")
    timeout: float = Field(30.0, description="Fetch timeout in seconds", gt=0)
    max_concurrent: int = Field(5, description="Sources fetched at once by fetch_all", ge=1, le=50)
    max_feed_items: int = Field(20, description="Feed candidates taken forward", ge=1, le=100)
    max_page_items: int = Field(10, description="Page candidates taken forward", ge=1, le=100)
    max_saved_per_run: int = Field(10, description="Articles persisted per fetch", ge=1, le=100)
    preview_sample_size: int = Field(5, description="Candidates returned by a preview", ge=1, le=20)
    excerpt_length: int = Field(200, description="Excerpt length in characters", ge=0)
    sniff_length: int = Field(4096, description="Body prefix inspected for feed markers", ge=64)


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field("INFO", description="Log level")
    console: bool = Field(True, description="Log to the console")
    file: Optional[str] = Field(None, description="Optional log file path")


class ConfigModel(BaseModel):
    """Main configuration model."""

    postgres: PostgresConfig = Field(default_factory=PostgresConfig)
    fetch: FetchConfig = Field(default_factory=FetchConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
