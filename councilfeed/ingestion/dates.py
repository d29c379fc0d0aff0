"""Best-effort parsing of feed date strings."""

import logging
import re
from datetime import datetime
from typing import Optional

import pendulum

logger = logging.getLogger(__name__)

_JAPANESE_DATE_RE = re.compile(r"(\d{4})年(\d{1,2})月(\d{1,2})日")


def parse_date(raw: str) -> Optional[datetime]:
    """Convert a free-form date string to a timestamp.

    Tries a general-purpose parse first (ISO 8601, RFC 822 and the other
    formats ``pendulum`` accepts in non-strict mode), then the Japanese
    ``YYYY年MM月DD日`` form at local midnight. Returns None when neither
    works; callers decide what to substitute.
    """
    if not raw or not raw.strip():
        return None
    text = raw.strip()

    parsed = _parse_general(text)
    if parsed is not None:
        return parsed

    return _parse_japanese(text)


def _parse_general(text: str) -> Optional[datetime]:
    try:
        parsed = pendulum.parse(text, strict=False)
    except (ValueError, OverflowError, TypeError):
        return None
    # Durations, intervals and bare times are not publish dates
    if not isinstance(parsed, datetime):
        return None
    return parsed


def _parse_japanese(text: str) -> Optional[datetime]:
    match = _JAPANESE_DATE_RE.search(text)
    if not match:
        return None
    year, month, day = (int(group) for group in match.groups())
    try:
        return pendulum.datetime(year, month, day, tz=pendulum.local_timezone())
    except ValueError:
        logger.debug("Out of range Japanese date: %s", text)
        return None
