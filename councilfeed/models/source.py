"""Source model for external publication endpoints."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import Field

from .base import DBModel


class SourceKind(str, Enum):
    """Kind of external publication endpoint."""

    BLOG = "blog"
    RSS = "rss"
    FACEBOOK = "facebook"
    TWITTER = "twitter"
    INSTAGRAM = "instagram"


class Source(DBModel):
    """External feed or page configured for a council member."""

    council_member_id: str = Field(..., description="Owning council member (opaque reference)")
    kind: SourceKind = Field(..., description="Source kind")
    url: str = Field(..., description="Feed or page URL")
    name: Optional[str] = Field(None, description="Human-readable source name")
    fetch_interval: int = Field(60, description="Advisory fetch interval in minutes", gt=0)
    is_active: bool = Field(True, description="Whether the source is active")
    last_fetched_at: Optional[datetime] = Field(None, description="Last completed fetch")
    created_by: Optional[str] = Field(None, description="Administrator who registered the source")

    @property
    def display_name(self) -> str:
        """Name for listings, falling back to the URL."""
        return self.name or self.url
