"""Article link extraction from plain HTML pages."""

import logging
import re
from typing import List, Set
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from .models import ParseCandidate
from .text import clean_text

logger = logging.getLogger(__name__)

MAX_PAGE_ITEMS = 10

_HEADING_RE = re.compile(r"^h[1-6]$")
_SCRIPT_SCHEMES = ("javascript:", "vbscript:")


def parse_page(html: str, base_url: str, max_items: int = MAX_PAGE_ITEMS) -> List[ParseCandidate]:
    """Collect article links from headings first, then from all anchors.

    No publish date can be read from a page, so candidates carry none and
    the caller stamps them with the ingestion time.
    """
    soup = BeautifulSoup(html or "", "html.parser")

    heading_anchors = [
        anchor
        for heading in soup.find_all(_HEADING_RE)
        for anchor in heading.find_all("a", href=True)
    ]
    all_anchors = soup.find_all("a", href=True)

    seen: Set[str] = set()
    candidates: List[ParseCandidate] = []
    for anchor in heading_anchors + all_anchors:
        if len(candidates) >= max_items:
            break

        href = anchor["href"].strip()
        title = clean_text(anchor.get_text(" "))
        if not title or not _is_article_href(href):
            continue

        try:
            url = urljoin(base_url, href)
        except ValueError:
            logger.debug("Skipping malformed link %r on %s", href, base_url)
            continue
        if url in seen:
            continue
        seen.add(url)

        candidates.append(ParseCandidate(title=title, link=url))

    logger.debug("Extracted %d links from %s", len(candidates), base_url)
    return candidates


def _is_article_href(href: str) -> bool:
    if not href or "#" in href:
        return False
    lowered = href.lower()
    if any(scheme in lowered for scheme in _SCRIPT_SCHEMES):
        return False
    return "/" in href or "?" in href
