"""Feed and page ingestion."""

from .classifier import CATEGORY_RULES, classify
from .dates import parse_date
from .dedup import filter_new
from .detector import FeedFormat, detect_format
from .feed_parser import parse_feed
from .fetcher import FeedFetcher, FetchError
from .models import FetchedDocument, FetchOutcome, ParseCandidate, PreviewResult
from .page_parser import parse_page
from .text import clean_text

__all__ = [
    "CATEGORY_RULES",
    "FeedFetcher",
    "FeedFormat",
    "FetchError",
    "FetchOutcome",
    "FetchedDocument",
    "ParseCandidate",
    "PreviewResult",
    "classify",
    "clean_text",
    "detect_format",
    "filter_new",
    "parse_date",
    "parse_feed",
    "parse_page",
]
