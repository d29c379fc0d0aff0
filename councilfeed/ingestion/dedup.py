"""Filter candidates already stored for a source."""

from typing import Iterable, List

from .models import ParseCandidate


def filter_new(
    candidates: List[ParseCandidate],
    existing_urls: Iterable[str],
) -> List[ParseCandidate]:
    """Drop candidates whose link is already stored for the source.

    URLs are compared as exact strings; trailing slashes, query order and
    scheme case are not normalized. A link repeated within ``candidates``
    is kept once, in its first position.
    """
    known = set(existing_urls)
    fresh = []
    for candidate in candidates:
        if candidate.link in known:
            continue
        known.add(candidate.link)
        fresh.append(candidate)
    return fresh
