"""Data models for ingestion."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from .detector import FeedFormat


class ParseCandidate(BaseModel):
    """Article extracted from a feed or page, before dedup and storage."""

    title: str = Field(..., description="Cleaned title")
    description: str = Field("", description="Cleaned description")
    link: str = Field(..., description="Original article URL")
    raw_date: str = Field("", description="Date string as found in the document")
    image_url: Optional[str] = Field(None, description="Image URL")
    published_at: Optional[datetime] = Field(None, description="Normalized publication time")
    date_estimated: bool = Field(
        False, description="Whether published_at is the ingestion time placeholder"
    )


class FetchedDocument(BaseModel):
    """Body and content type of a successful fetch."""

    url: str = Field(..., description="Requested URL")
    status_code: int = Field(..., description="HTTP status code")
    content_type: str = Field("", description="Declared content type")
    text: str = Field(..., description="Decoded response body")
    content: bytes = Field(b"", description="Raw response body")


class FetchOutcome(BaseModel):
    """Result of fetching and storing articles for one source."""

    source_id: Optional[int] = Field(None, description="Source database ID")
    success: bool = Field(..., description="Whether the fetch succeeded")
    message: str = Field(..., description="Human-readable summary")
    total_found: int = Field(0, description="Candidates extracted from the document")
    new_candidates: int = Field(0, description="Candidates not already stored")
    saved_count: int = Field(0, description="Articles actually stored")


class PreviewResult(BaseModel):
    """Result of previewing a URL without storing anything."""

    success: bool = Field(..., description="Whether the fetch succeeded")
    message: str = Field(..., description="Human-readable summary")
    sample_articles: List[ParseCandidate] = Field(
        default_factory=list, description="First few extracted candidates"
    )
    total_count: int = Field(0, description="Candidates extracted from the document")
    content_type: Optional[str] = Field(None, description="Declared content type")
    format_guess: Optional[FeedFormat] = Field(None, description="Detected document format")
