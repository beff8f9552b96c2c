"""Exception hierarchy for feed ingestion and search."""

from __future__ import annotations


class RSSSearchError(Exception):
    """Base class for every error raised by rss_search."""


class SourceReadError(RSSSearchError):
    """The feed source list could not be read."""


class FetchError(RSSSearchError):
    """Content could not be retrieved from an address."""


class FeedError(RSSSearchError):
    """A single feed could not be processed."""


class FeedFetchError(FeedError, FetchError):
    """The feed document could not be downloaded."""


class FeedParseError(FeedError):
    """The feed document could not be parsed."""


class ArticleError(RSSSearchError):
    """A single feed entry could not be turned into an article."""


class ArticleFetchError(ArticleError, FetchError):
    """The article content could not be downloaded."""


class ArticleAddressError(ArticleError):
    """The feed entry has no usable link."""


class IngestionAborted(RSSSearchError):
    """Ingestion was cancelled before every feed finished."""


__all__ = [
    "ArticleAddressError",
    "ArticleError",
    "ArticleFetchError",
    "FeedError",
    "FeedFetchError",
    "FeedParseError",
    "FetchError",
    "IngestionAborted",
    "RSSSearchError",
    "SourceReadError",
]
