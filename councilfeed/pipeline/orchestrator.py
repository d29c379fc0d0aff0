"""Fetch orchestration: fetch, parse, dedup, classify and store articles for a source."""

import asyncio
import logging
import time
from datetime import datetime
from enum import Enum
from typing import Callable, Dict, List, Optional, Protocol, Set, Tuple

import pendulum

from ..config import FetchConfig
from ..ingestion import (
    FeedFetcher,
    FeedFormat,
    FetchedDocument,
    FetchError,
    FetchOutcome,
    ParseCandidate,
    PreviewResult,
    classify,
    detect_format,
    filter_new,
    parse_date,
    parse_feed,
    parse_page,
)
from ..ingestion.text import truncate
from ..models import Article, Source, SourceKind

logger = logging.getLogger(__name__)


class SourceNotFoundError(LookupError):
    """Raised when a fetch is requested for an unknown source id."""


class ArticleStore(Protocol):
    """Persistence the orchestrator depends on."""

    def get_source(self, source_id: int) -> Optional[Source]: ...

    def list_active_sources(self) -> List[Source]: ...

    def get_original_urls(self, source_id: int) -> Set[str]: ...

    def insert_article(self, article: Article) -> Article: ...

    def touch_last_fetched(self, source_id: int, fetched_at: datetime) -> None: ...


class FetchStage(str, Enum):
    """Stages of a single fetch invocation, in order."""

    FETCHING = "fetching"
    DETECTING = "detecting"
    PARSING = "parsing"
    NORMALIZING = "normalizing"
    DEDUPLICATING = "deduplicating"
    CLASSIFYING = "classifying"
    PERSISTING = "persisting"
    DONE = "done"


class StageTimer:
    """Track the current stage of one invocation and time spent in each."""

    def __init__(self, label: str) -> None:
        self.label = label
        self.stage: Optional[FetchStage] = None
        self.durations: Dict[FetchStage, float] = {}
        self._started: Optional[float] = None

    def enter(self, stage: FetchStage) -> None:
        """Close the current stage and start ``stage``."""
        now = time.monotonic()
        if self.stage is not None and self._started is not None:
            self.durations[self.stage] = now - self._started
        self.stage = stage
        self._started = now
        logger.debug("%s: %s", self.label, stage.value)

    @property
    def total(self) -> float:
        """Seconds spent in completed stages."""
        return sum(self.durations.values())


def _utcnow() -> datetime:
    return pendulum.now("UTC")


class FetchOrchestrator:
    """Run the ingestion pipeline for sources.

    Invocations for the same source are serialized, so the set of stored
    URLs read at the start of a run cannot go stale during that run.
    """

    def __init__(
        self,
        store: ArticleStore,
        config: Optional[FetchConfig] = None,
        fetcher: Optional[FeedFetcher] = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        """Initialize orchestrator."""
        self.store = store
        self.config = config or FetchConfig()
        self.fetcher = fetcher or FeedFetcher(self.config)
        self.clock = clock
        self._locks: Dict[int, Tuple[asyncio.AbstractEventLoop, asyncio.Lock]] = {}

    def _lock_for(self, source_id: int) -> asyncio.Lock:
        # asyncio locks belong to one event loop; each sync wrapper call runs a new loop
        loop = asyncio.get_running_loop()
        entry = self._locks.get(source_id)
        if entry is None or entry[0] is not loop:
            entry = (loop, asyncio.Lock())
            self._locks[source_id] = entry
        return entry[1]

    async def fetch_from_source(self, source_id: int) -> FetchOutcome:
        """Fetch a source and store its new articles.

        Raises:
            SourceNotFoundError: if no source has this id
        """
        source = await asyncio.to_thread(self.store.get_source, source_id)
        if source is None:
            raise SourceNotFoundError(f"Source not found: {source_id}")

        async with self._lock_for(source_id):
            return await self._run(source)

    async def fetch_all(self) -> List[FetchOutcome]:
        """Fetch every active source with bounded concurrency.

        Store calls run in worker threads so a blocking database does not
        stall the other fetches. A source that fails unexpectedly yields an
        unsuccessful outcome instead of cancelling the batch.
        """
        sources = await asyncio.to_thread(self.store.list_active_sources)
        if not sources:
            return []

        semaphore = asyncio.Semaphore(self.config.max_concurrent)

        async def fetch_with_semaphore(source: Source) -> FetchOutcome:
            async with semaphore:
                async with self._lock_for(source.id):
                    try:
                        return await self._run(source)
                    except Exception as e:
                        logger.exception("Fetch of source %s failed", source.id)
                        return FetchOutcome(
                            source_id=source.id, success=False, message=f"Unexpected error: {e}"
                        )

        tasks = [fetch_with_semaphore(source) for source in sources]
        return list(await asyncio.gather(*tasks))

    async def preview_url(self, url: str, kind: SourceKind = SourceKind.RSS) -> PreviewResult:
        """Fetch and parse ``url`` without storing anything."""
        logger.info("Previewing %s (%s)", url, kind.value)
        try:
            document = await self.fetcher.fetch(url)
        except FetchError as e:
            logger.warning("Preview of %s failed: %s", url, e)
            return PreviewResult(success=False, message=str(e))

        fmt = self._detect(document)
        candidates = self._parse(document, fmt, url)
        now = self.clock()
        candidates = [self._normalize(candidate, now) for candidate in candidates]

        return PreviewResult(
            success=True,
            message=f"Found {len(candidates)} articles",
            sample_articles=candidates[: self.config.preview_sample_size],
            total_count=len(candidates),
            content_type=document.content_type,
            format_guess=fmt,
        )

    async def _run(self, source: Source) -> FetchOutcome:
        timer = StageTimer(f"source {source.id}")
        now = self.clock()

        timer.enter(FetchStage.FETCHING)
        try:
            document = await self.fetcher.fetch(source.url)
        except FetchError as e:
            logger.warning("Fetch of source %s failed: %s", source.id, e)
            return FetchOutcome(source_id=source.id, success=False, message=str(e))

        timer.enter(FetchStage.DETECTING)
        fmt = self._detect(document)

        timer.enter(FetchStage.PARSING)
        candidates = self._parse(document, fmt, source.url)

        timer.enter(FetchStage.NORMALIZING)
        candidates = [self._normalize(candidate, now) for candidate in candidates]

        timer.enter(FetchStage.DEDUPLICATING)
        existing_urls = await asyncio.to_thread(self.store.get_original_urls, source.id)
        new_candidates = filter_new(candidates, existing_urls)

        timer.enter(FetchStage.CLASSIFYING)
        articles = [
            self._build_article(source, candidate, now)
            for candidate in new_candidates[: self.config.max_saved_per_run]
        ]

        timer.enter(FetchStage.PERSISTING)
        saved_count = 0
        for article in articles:
            try:
                await asyncio.to_thread(self.store.insert_article, article)
                saved_count += 1
            except Exception:
                logger.exception(
                    "Failed to save article %r from source %s", article.title, source.id
                )

        await asyncio.to_thread(self.store.touch_last_fetched, source.id, now)
        timer.enter(FetchStage.DONE)

        message = f"{saved_count} new articles saved out of {len(candidates)} found"
        logger.info("Source %s: %s (%.2fs)", source.id, message, timer.total)
        return FetchOutcome(
            source_id=source.id,
            success=True,
            message=message,
            total_found=len(candidates),
            new_candidates=len(new_candidates),
            saved_count=saved_count,
        )

    def _detect(self, document: FetchedDocument) -> FeedFormat:
        fmt = detect_format(document.content_type, document.text[: self.config.sniff_length])
        logger.debug("Detected %s format for %s", fmt.value, document.url)
        return fmt

    def _parse(
        self, document: FetchedDocument, fmt: FeedFormat, base_url: str
    ) -> List[ParseCandidate]:
        if fmt is FeedFormat.FEED:
            body = document.content or document.text
            candidates = parse_feed(body, max_items=self.config.max_feed_items)
            return candidates[: self.config.max_feed_items]
        candidates = parse_page(document.text, base_url, max_items=self.config.max_page_items)
        return candidates[: self.config.max_page_items]

    def _normalize(self, candidate: ParseCandidate, now: datetime) -> ParseCandidate:
        """Resolve the publish date; unparseable dates become the ingestion time."""
        published_at = parse_date(candidate.raw_date)
        if published_at is not None:
            return candidate.model_copy(update={"published_at": published_at})

        if candidate.raw_date:
            logger.debug(
                "Unparseable date %r for %s, using ingestion time",
                candidate.raw_date,
                candidate.link,
            )
        return candidate.model_copy(update={"published_at": now, "date_estimated": True})

    def _build_article(self, source: Source, candidate: ParseCandidate, now: datetime) -> Article:
        content = candidate.description
        excerpt = truncate(candidate.description, self.config.excerpt_length) or None
        return Article(
            source_id=source.id,
            council_member_id=source.council_member_id,
            title=candidate.title,
            content=content,
            excerpt=excerpt,
            source_url=source.url,
            original_url=candidate.link,
            image_url=candidate.image_url,
            published_at=candidate.published_at or now,
            fetched_at=now,
            source_kind=source.kind,
            category=classify(candidate.title, content),
            is_active=True,
            view_count=0,
        )

    def fetch_from_source_sync(self, source_id: int) -> FetchOutcome:
        """Synchronous wrapper for fetch_from_source."""
        return asyncio.run(self.fetch_from_source(source_id))

    def fetch_all_sync(self) -> List[FetchOutcome]:
        """Synchronous wrapper for fetch_all."""
        return asyncio.run(self.fetch_all())

    def preview_url_sync(self, url: str, kind: SourceKind = SourceKind.RSS) -> PreviewResult:
        """Synchronous wrapper for preview_url."""
        return asyncio.run(self.preview_url(url, kind))
