"""High-level orchestration for indexing a list of feeds."""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Iterable, List, Optional

from .config import Config, load_config
from .content import ContentFetcher
from .errors import IngestionAborted, SourceReadError
from .fetchers import FeedFetchTask, FeedParser, Fetcher, IngestProgress
from .models import Article, validate_address
from .pool import CompletionBarrier, WorkerPool
from .repository import ArticleRepository

LOGGER = logging.getLogger(__name__)


def read_feed_sources(path: Path) -> List[str]:
    """Read newline-separated feed addresses, skipping blank lines."""

    try:
        text = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise SourceReadError(f"Cannot read feed list {path}: {exc}") from exc

    addresses = []
    for number, line in enumerate(text.splitlines(), start=1):
        line = line.strip()
        if not line:
            LOGGER.debug("Skipping blank line %d of %s", number, path)
            continue
        addresses.append(line)
    if not addresses:
        raise SourceReadError(f"Feed list {path} is empty")
    LOGGER.info("Read %d feed addresses from %s", len(addresses), path)
    return addresses


class Ingestor:
    """Fetch every feed and its articles on one shared worker pool."""

    def __init__(
        self,
        fetcher: Fetcher,
        parser: Optional[FeedParser] = None,
        concurrency_limit: int = 0,
        poll_interval: float = 0.2,
    ) -> None:
        self.fetcher = fetcher
        self.parser = parser or FeedParser()
        self.concurrency_limit = concurrency_limit
        self.poll_interval = poll_interval
        self.progress: Optional[IngestProgress] = None

    def ingest(
        self,
        feed_addresses: Iterable[str],
        cancel_event: Optional[threading.Event] = None,
    ) -> List[Article]:
        """Index every valid feed and return the unique articles found.

        Raises :class:`IngestionAborted` if ``cancel_event`` is set or the
        wait is interrupted; partial results are discarded.
        """

        addresses = []
        for raw in feed_addresses:
            address = validate_address(raw)
            if address is None:
                LOGGER.warning("Bad feed URL, skipping: %r", raw)
                continue
            addresses.append(address)

        repository = ArticleRepository()
        self.progress = IngestProgress()
        feeds_done = CompletionBarrier(len(addresses))
        pool = WorkerPool(self.concurrency_limit)
        LOGGER.info(
            "Indexing %d feeds with %s",
            len(addresses),
            f"up to {self.concurrency_limit} threads" if pool.bounded else "unbounded threads",
        )

        try:
            for address in addresses:
                task = FeedFetchTask(
                    address,
                    pool,
                    repository,
                    self.fetcher,
                    feeds_done,
                    parser=self.parser,
                    progress=self.progress,
                )
                pool.submit(task.run)
            self._wait(feeds_done, cancel_event)
        except (IngestionAborted, KeyboardInterrupt) as exc:
            pool.shutdown(cancel=True)
            LOGGER.error("Ingestion aborted, discarding %d partial articles", repository.size())
            if isinstance(exc, IngestionAborted):
                raise
            raise IngestionAborted("Ingestion interrupted") from exc

        pool.shutdown()
        LOGGER.info("Indexed %d articles (%s)", repository.size(), self.progress.summary())
        return repository.snapshot()

    def _wait(self, barrier: CompletionBarrier, cancel_event: Optional[threading.Event]) -> None:
        while not barrier.wait(timeout=self.poll_interval):
            if cancel_event is not None and cancel_event.is_set():
                raise IngestionAborted("Ingestion cancelled")


def ingest_feeds(
    feed_addresses: Iterable[str],
    config: Optional[Config] = None,
    cancel_event: Optional[threading.Event] = None,
) -> List[Article]:
    config = config or load_config()
    ingestor = Ingestor(
        ContentFetcher.from_config(config),
        concurrency_limit=config.max_threads,
        poll_interval=config.poll_interval,
    )
    return ingestor.ingest(feed_addresses, cancel_event=cancel_event)


def ingest_file(
    path: Optional[Path] = None,
    config: Optional[Config] = None,
    cancel_event: Optional[threading.Event] = None,
) -> List[Article]:
    """Read the feed list at ``path`` (default ``config.feed_file``) and index it."""

    config = config or load_config()
    addresses = read_feed_sources(path or config.feed_file)
    return ingest_feeds(addresses, config, cancel_event=cancel_event)


__all__ = [
    "Ingestor",
    "ingest_feeds",
    "ingest_file",
    "read_feed_sources",
]
