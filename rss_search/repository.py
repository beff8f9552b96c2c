"""Thread-safe article collection with dedup on insert."""

from __future__ import annotations

import threading
from typing import Dict, Hashable, List

from .models import Article


class ArticleRepository:
    """Ordered set of unique articles, keyed by their identity rule.

    The first article inserted for a given identity wins and iteration
    follows insertion order.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._articles: List[Article] = []
        self._index: Dict[Hashable, Article] = {}

    def insert_if_absent(self, article: Article) -> bool:
        """Add ``article`` unless an equal one is already stored.

        Returns True if the article was added.
        """

        key = article.identity_key
        with self._lock:
            if key is not None:
                if key in self._index:
                    return False
                self._index[key] = article
            self._articles.append(article)
        return True

    def snapshot(self) -> List[Article]:
        with self._lock:
            return list(self._articles)

    def size(self) -> int:
        with self._lock:
            return len(self._articles)

    def __len__(self) -> int:
        return self.size()


__all__ = ["ArticleRepository"]
