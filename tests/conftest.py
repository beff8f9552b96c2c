"""Pytest configuration and shared fixtures."""

import threading
from typing import Dict, List, Optional

from rss_search.errors import FetchError


def rss_document(*items: Dict[str, Optional[str]]) -> bytes:
    """Build a small RSS 2.0 document from item field dicts."""
    parts = []
    for item in items:
        fields = "".join(
            f"<{tag}>{value}</{tag}>" for tag, value in item.items() if value is not None
        )
        parts.append(f"<item>{fields}</item>")
    return (
        '<?xml version="1.0"?><rss version="2.0"><channel>'
        "<title>Test feed</title><link>http://feeds.example.com/</link>"
        "<description>Test</description>"
        f"{''.join(parts)}</channel></rss>"
    ).encode("utf-8")


class FakeFetcher:
    """In-memory stand-in for ContentFetcher."""

    def __init__(self, pages: Dict[str, object]) -> None:
        self.pages = pages
        self.calls: List[str] = []
        self._lock = threading.Lock()

    def _lookup(self, address: str):
        with self._lock:
            self.calls.append(address)
        page = self.pages.get(address)
        if page is None:
            raise FetchError(f"Unable to fetch {address}: 404")
        return page

    def fetch_bytes(self, address: str) -> bytes:
        page = self._lookup(address)
        return page if isinstance(page, bytes) else page.encode("utf-8")

    def fetch_text(self, address: str) -> str:
        page = self._lookup(address)
        return page.decode("utf-8") if isinstance(page, bytes) else page
