"""RSS and Atom extraction."""

import io
import logging
from typing import Any, List, Optional, Union

import feedparser

from .models import ParseCandidate
from .text import clean_text

logger = logging.getLogger(__name__)

MAX_FEED_ITEMS = 20
UNTITLED_TITLE = "タイトルなし"

_DATE_KEYS = ("published", "updated", "created")


def parse_feed(
    document: Union[str, bytes], max_items: int = MAX_FEED_ITEMS
) -> List[ParseCandidate]:
    """Extract candidates from the first ``max_items`` feed entries.

    ``feedparser`` falls back to its loose parser on malformed XML, so a
    broken feed yields whatever entries it could recover. Entries without a
    link are skipped but still count toward ``max_items``.

    Raw bytes are preferred so the XML encoding declaration is honored.
    The document is always wrapped in a stream: ``feedparser`` would
    otherwise treat a short string as a URL or file name to open.
    """
    if isinstance(document, str):
        document = document.encode("utf-8")
    feed = feedparser.parse(io.BytesIO(document))
    if feed.bozo:
        logger.debug("Feed is not well formed: %s", feed.get("bozo_exception"))

    candidates = []
    for entry in feed.entries[:max_items]:
        link = _entry_link(entry)
        if not link:
            continue

        title = clean_text(entry.get("title", ""))
        description = clean_text(_entry_description(entry))

        candidates.append(
            ParseCandidate(
                title=title or UNTITLED_TITLE,
                description=description,
                link=link,
                raw_date=_entry_raw_date(entry),
                image_url=_entry_image(entry),
            )
        )

    return candidates


def _entry_link(entry: Any) -> str:
    # A permalink guid fills "link" but never "links"; only <link> elements count
    hrefs = [
        item["href"].strip()
        for item in entry.get("links", [])
        if item.get("href") and item.get("rel", "alternate") != "enclosure"
    ]
    if not hrefs:
        return ""
    link = (entry.get("link") or "").strip()
    return link if link in hrefs else hrefs[0]


def _entry_description(entry: Any) -> str:
    if entry.get("summary"):
        return entry["summary"]
    for content in entry.get("content", []):
        if content.get("value"):
            return content["value"]
    return ""


def _entry_raw_date(entry: Any) -> str:
    for key in _DATE_KEYS:
        value = entry.get(key)
        if value:
            return value.strip()
    return ""


def _entry_image(entry: Any) -> Optional[str]:
    for enclosure in entry.get("enclosures", []):
        if enclosure.get("type", "").startswith("image/") and enclosure.get("href"):
            return enclosure["href"]
    for media in entry.get("media_content", []):
        if media.get("url"):
            return media["url"]
    return None
