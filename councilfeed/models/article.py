"""Article model for ingested external content."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import Field

from .base import DBModel
from .source import SourceKind


class Category(str, Enum):
    """Fixed article category taxonomy."""

    POLICY_PROPOSAL = "policy-proposal"
    ACTIVITY_REPORT = "activity-report"
    MUNICIPAL_INFO = "municipal-info"
    LOCAL_EVENT = "local-event"
    NOTICE = "notice"
    OTHER = "other"

    @property
    def label(self) -> str:
        """Japanese display label."""
        return CATEGORY_LABELS[self]


CATEGORY_LABELS = {
    Category.POLICY_PROPOSAL: "政策・提案",
    Category.ACTIVITY_REPORT: "活動報告",
    Category.MUNICIPAL_INFO: "市政情報",
    Category.LOCAL_EVENT: "地域イベント",
    Category.NOTICE: "お知らせ",
    Category.OTHER: "その他",
}


class Article(DBModel):
    """Article ingested from a source or entered by an administrator."""

    source_id: int = Field(..., description="Foreign key to sources table")
    council_member_id: str = Field(..., description="Council member, copied from the source")
    title: str = Field(..., description="Article title")
    content: str = Field("", description="Article body or description")
    excerpt: Optional[str] = Field(None, description="Short summary")
    source_url: str = Field(..., description="Feed URL the article was found at")
    original_url: str = Field(..., description="URL of the original article")
    image_url: Optional[str] = Field(None, description="Image URL")
    published_at: datetime = Field(..., description="Publication timestamp (best effort)")
    fetched_at: datetime = Field(..., description="Ingestion timestamp")
    source_kind: SourceKind = Field(..., description="Source kind, copied from the source")
    category: Category = Field(Category.OTHER, description="Article category")
    is_active: bool = Field(True, description="Whether the article is visible")
    view_count: int = Field(0, description="Number of views", ge=0)
