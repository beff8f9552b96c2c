"""Article entity, its frequency index and the identity rule used for dedup."""

from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import List, Mapping, Optional, Tuple
from urllib.parse import urlsplit

from bs4 import BeautifulSoup
from dateutil import parser as date_parser

# Anything that is not an ASCII letter, digit or whitespace splits tokens.
INVALID_CHARS = re.compile(r"[^a-z0-9\s]", re.ASCII)
LINE_BREAKS = re.compile(r"\r\n|\r|\n")


def tokenize(content: str) -> List[str]:
    """Split raw content into lowercase tokens.

    Markup and script text are tokenized like any other text.
    """

    cleaned = INVALID_CHARS.sub(" ", content.lower())
    return cleaned.split()


def join_lines(content: str) -> str:
    """Drop line terminators so words either side of a break run together."""

    return LINE_BREAKS.sub("", content)


def count_tokens(content: str) -> Counter:
    return Counter(tokenize(content))


def host_of(address: Optional[str]) -> Optional[str]:
    """Return the lowercased host of ``address`` or None if there is none."""

    if not address:
        return None
    try:
        return urlsplit(address).hostname or None
    except ValueError:
        return None


def validate_address(raw: Optional[str]) -> Optional[str]:
    """Return the trimmed address if it is an absolute http(s) URL, else None."""

    if raw is None:
        return None
    address = raw.strip()
    try:
        parts = urlsplit(address)
    except ValueError:
        return None
    if parts.scheme.lower() not in ("http", "https") or not parts.hostname:
        return None
    return address


@dataclass(frozen=True, eq=False)
class Article:
    """One fetched feed entry together with its word counts."""

    title: Optional[str]
    description: Optional[str]
    address: Optional[str]
    published_date: Optional[str]
    frequencies: Mapping[str, int] = field(default_factory=lambda: MappingProxyType({}), repr=False)

    @classmethod
    def from_content(
        cls,
        title: Optional[str],
        description: Optional[str],
        address: str,
        published_date: Optional[str],
        content: str,
    ) -> "Article":
        counts = MappingProxyType(dict(count_tokens(join_lines(content))))
        return cls(
            title=title,
            description=description,
            address=address,
            published_date=published_date,
            frequencies=counts,
        )

    def occurrences(self, word: str) -> int:
        return self.frequencies.get(word.lower(), 0)

    @property
    def host(self) -> Optional[str]:
        return host_of(self.address)

    @property
    def identity_key(self) -> Optional[Tuple[Optional[str], str]]:
        """Key shared by articles that are the same story, None if unknown."""

        host = self.host
        if host is None:
            return None
        return (self.title, host)

    def is_same_article(self, other: "Article") -> bool:
        """Same title and same address host; a bad address never matches."""

        key = self.identity_key
        return key is not None and key == other.identity_key

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Article):
            return NotImplemented
        return self.is_same_article(other)

    def __hash__(self) -> int:
        key = self.identity_key
        return hash(key) if key is not None else id(self)

    @property
    def published_at(self) -> Optional[datetime]:
        if not self.published_date:
            return None
        try:
            return date_parser.parse(self.published_date)
        except (ValueError, TypeError, OverflowError):
            return None

    @property
    def plain_description(self) -> str:
        """Return the description with any markup stripped."""

        if not self.description:
            return ""
        return BeautifulSoup(self.description, "html.parser").get_text(" ", strip=True)
