"""Text cleanup for extracted feed and page fragments."""

import re

_TAG_RE = re.compile(r"<[^>]*>")
_WHITESPACE_RE = re.compile(r"\s+")

# "&lt;" and "&gt;" are decoded before "&amp;" so "&amp;lt;" only loses one level per pass.
_ENTITIES = (
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&amp;", "&"),
    ("&quot;", '"'),
    ("&#39;", "'"),
)


def _clean_once(text: str) -> str:
    text = _TAG_RE.sub("", text)
    for entity, char in _ENTITIES:
        text = text.replace(entity, char)
    return _WHITESPACE_RE.sub(" ", text).strip()


def clean_text(text: str) -> str:
    """Strip markup, decode basic entities and collapse whitespace.

    Passes repeat until the output is stable, so decoded entities that form
    new tags or entities are cleaned as well and
    ``clean_text(clean_text(x)) == clean_text(x)`` holds for any input.
    Every pass that changes the text shortens it or normalizes whitespace,
    so the loop terminates.
    """
    if not text:
        return ""
    cleaned = _clean_once(text)
    while True:
        again = _clean_once(cleaned)
        if again == cleaned:
            return cleaned
        cleaned = again


def truncate(text: str, length: int) -> str:
    """First ``length`` characters of ``text``."""
    return text[:length]
