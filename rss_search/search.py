"""Single-term search over indexed articles, ranked by occurrence count."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from .config import Config, load_config
from .ingest import ingest_file
from .models import Article, tokenize

LOGGER = logging.getLogger(__name__)


def normalize_query(query: str) -> str:
    """Reduce a query to its first word, or "" if it has none."""

    tokens = tokenize(query.strip())
    return tokens[0] if tokens else ""


def search(articles: Sequence[Article], query: str) -> List[Article]:
    """Return the articles containing ``query``, most occurrences first.

    The sort is stable, so articles with equal counts keep their order in
    ``articles``.
    """

    word = normalize_query(query)
    if not word:
        return []
    matches = [article for article in articles if article.occurrences(word) > 0]
    return sorted(matches, key=lambda article: article.occurrences(word), reverse=True)


@dataclass(frozen=True)
class SearchHit:
    title: Optional[str]
    description: Optional[str]
    address: Optional[str]
    published_date: Optional[str]
    occurrences: int
    article: Article

    @classmethod
    def from_article(cls, article: Article, word: str) -> "SearchHit":
        return cls(
            title=article.title,
            description=article.description,
            address=article.address,
            published_date=article.published_date,
            occurrences=article.occurrences(word),
            article=article,
        )


class SearchEngine:
    """Search entry point over a finished ingestion."""

    def __init__(self, articles: Iterable[Article]) -> None:
        self._articles = list(articles)

    @classmethod
    def from_feed_file(
        cls,
        config: Optional[Config] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> "SearchEngine":
        config = config or load_config()
        return cls(ingest_file(config.feed_file, config, cancel_event=cancel_event))

    def article_count(self) -> int:
        return len(self._articles)

    def search(self, query: str) -> List[SearchHit]:
        word = normalize_query(query)
        hits = [SearchHit.from_article(article, word) for article in search(self._articles, word)]
        LOGGER.debug("Query %r matched %d articles", word, len(hits))
        return hits


__all__ = ["SearchEngine", "SearchHit", "normalize_query", "search"]
