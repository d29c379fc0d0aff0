"""Choose between feed and page parsing for a fetched document."""

import re
from enum import Enum

_FEED_CONTENT_TYPES = ("xml", "rss", "atom")
_FEED_MARKER_RE = re.compile(r"<(?:rss|feed)[\s>]", re.IGNORECASE)


class FeedFormat(str, Enum):
    """Parse strategy for a fetched document."""

    FEED = "feed"
    PAGE = "page"


def detect_format(content_type: str, body: str) -> FeedFormat:
    """Pick the parse strategy from the content type, then the body.

    The body check catches servers that send RSS or Atom as ``text/html``.
    """
    content_type = (content_type or "").lower()
    if any(marker in content_type for marker in _FEED_CONTENT_TYPES):
        return FeedFormat.FEED
    if body and _FEED_MARKER_RE.search(body):
        return FeedFormat.FEED
    return FeedFormat.PAGE
