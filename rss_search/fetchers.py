"""Feed-level and article-level fetch tasks."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Protocol

import feedparser

from .errors import (
    ArticleAddressError,
    ArticleError,
    ArticleFetchError,
    FeedError,
    FeedFetchError,
    FeedParseError,
    FetchError,
)
from .models import Article, validate_address
from .pool import CompletionBarrier, WorkerPool
from .repository import ArticleRepository

LOGGER = logging.getLogger(__name__)


class Fetcher(Protocol):
    def fetch_bytes(self, address: str) -> bytes: ...

    def fetch_text(self, address: str) -> str: ...


class FeedParser:
    """Turn a raw feed document into its entries, in document order."""

    def parse(self, raw: bytes) -> List[Mapping[str, Any]]:
        parsed = feedparser.parse(raw)
        entries = list(parsed.entries)
        if parsed.bozo and not entries:
            raise FeedParseError(f"Malformed feed document: {parsed.get('bozo_exception')}")
        if not entries and not parsed.get("version"):
            raise FeedParseError("Document is not a recognised feed")
        if parsed.bozo:
            LOGGER.warning("Feed parsed with problems: %s", parsed.get("bozo_exception"))
        return entries


@dataclass(frozen=True)
class EntryFields:
    title: Optional[str]
    description: Optional[str]
    address: Optional[str]
    published_date: Optional[str]


def _first_text(entry: Mapping[str, Any], *names: str) -> Optional[str]:
    for name in names:
        value = entry.get(name)
        if value:
            return str(value)
    return None


def extract_entry_fields(entry: Mapping[str, Any]) -> EntryFields:
    """Read the entry's metadata; missing fields come back as None."""

    return EntryFields(
        title=_first_text(entry, "title"),
        description=_first_text(entry, "description", "summary"),
        address=_first_text(entry, "link"),
        published_date=_first_text(entry, "published", "updated"),
    )


@dataclass(frozen=True)
class ArticleBuild:
    """Outcome of turning one entry into an :class:`Article`."""

    article: Optional[Article] = None
    error: Optional[ArticleError] = None

    @property
    def ok(self) -> bool:
        return self.article is not None


def build_article(entry: Mapping[str, Any], fetcher: Fetcher) -> ArticleBuild:
    """Fetch the entry's linked page and index it.

    Address and fetch problems are returned in ``ArticleBuild.error`` rather
    than raised. Fetches are not retried.
    """

    fields = extract_entry_fields(entry)
    if fields.address is None:
        return ArticleBuild(error=ArticleAddressError(f"Entry {fields.title!r} has no link"))
    address = validate_address(fields.address)
    if address is None:
        return ArticleBuild(error=ArticleAddressError(f"Bad URL: {fields.address}"))

    try:
        content = fetcher.fetch_text(address)
    except FetchError as exc:
        return ArticleBuild(error=ArticleFetchError(str(exc)))

    article = Article.from_content(
        title=fields.title,
        description=fields.description,
        address=address,
        published_date=fields.published_date,
        content=content,
    )
    return ArticleBuild(article=article)


class IngestProgress:
    """Counters for log output only; nothing depends on them for correctness."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.pending = 0
        self.added = 0
        self.duplicates = 0
        self.failed = 0

    def scheduled(self, count: int) -> None:
        with self._lock:
            self.pending += count

    def finished(self, outcome: str) -> None:
        with self._lock:
            self.pending -= 1
            if outcome == "added":
                self.added += 1
            elif outcome == "duplicate":
                self.duplicates += 1
            else:
                self.failed += 1
            pending = self.pending
        LOGGER.debug("%d article%s left", pending, "" if pending == 1 else "s")

    def summary(self) -> str:
        with self._lock:
            return (
                f"{self.added} added, {self.duplicates} duplicates, "
                f"{self.failed} failed"
            )


class ArticleFetchTask:
    """Fetch one entry's article and offer it to the shared repository."""

    def __init__(
        self,
        entry: Mapping[str, Any],
        repository: ArticleRepository,
        fetcher: Fetcher,
        done: CompletionBarrier,
        progress: Optional[IngestProgress] = None,
    ) -> None:
        self.entry = entry
        self.repository = repository
        self.fetcher = fetcher
        self.done = done
        self.progress = progress

    def run(self) -> None:
        outcome = "failed"
        try:
            outcome = self._process()
        except Exception as exc:  # pragma: no cover - guard clause
            LOGGER.exception("Unexpected error while processing entry: %s", exc)
        finally:
            if self.progress is not None:
                self.progress.finished(outcome)
            self.done.arrive()

    def _process(self) -> str:
        build = build_article(self.entry, self.fetcher)
        if not build.ok:
            if isinstance(build.error, ArticleAddressError):
                LOGGER.warning("Skipping entry: %s", build.error)
            else:
                LOGGER.info("Skipping entry: %s", build.error)
            return "failed"

        article = build.article
        if self.repository.insert_if_absent(article):
            LOGGER.info("New article added: %s", article.title)
            return "added"
        LOGGER.debug("Duplicate article: %s", article.title)
        return "duplicate"


class FeedFetchTask:
    """Fetch one feed and fan out an :class:`ArticleFetchTask` per entry.

    ``done`` is signalled exactly once: straight away when the feed cannot be
    fetched or parsed, otherwise when the last of its article tasks finishes.
    """

    def __init__(
        self,
        address: str,
        pool: WorkerPool,
        repository: ArticleRepository,
        fetcher: Fetcher,
        done: CompletionBarrier,
        parser: Optional[FeedParser] = None,
        progress: Optional[IngestProgress] = None,
    ) -> None:
        self.address = address
        self.pool = pool
        self.repository = repository
        self.fetcher = fetcher
        self.done = done
        self.parser = parser or FeedParser()
        self.progress = progress
        self.spawned = 0

    def load_entries(self) -> List[Mapping[str, Any]]:
        try:
            raw = self.fetcher.fetch_bytes(self.address)
        except FetchError as exc:
            raise FeedFetchError(str(exc)) from exc
        return self.parser.parse(raw)

    def run(self) -> None:
        try:
            entries = self.load_entries()
        except FeedError as exc:
            LOGGER.warning("Skipping feed %s: %s", self.address, exc)
            self._finished()
            return
        except Exception as exc:  # pragma: no cover - guard clause
            LOGGER.exception("Feed %s failed unexpectedly: %s", self.address, exc)
            self._finished()
            return

        LOGGER.info("Feed %s lists %d entries", self.address, len(entries))
        if self.progress is not None:
            self.progress.scheduled(len(entries))
        articles_done = CompletionBarrier(len(entries), on_complete=self._finished)
        try:
            for entry in entries:
                task = ArticleFetchTask(entry, self.repository, self.fetcher, articles_done, self.progress)
                future = self.pool.submit(task.run)
                # A task dropped by a cancelling shutdown never runs its finally.
                future.add_done_callback(lambda f: f.cancelled() and articles_done.arrive())
                self.spawned += 1
        except RuntimeError as exc:
            LOGGER.warning("Stopped scheduling articles for %s: %s", self.address, exc)
        finally:
            unscheduled = len(entries) - self.spawned
            if unscheduled:
                articles_done.arrive(unscheduled)

    def _finished(self) -> None:
        LOGGER.debug("Feed %s complete", self.address)
        self.done.arrive()
