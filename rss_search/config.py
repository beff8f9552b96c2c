"""Configuration utilities for the RSS search project."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from . import __version__

LOGGER = logging.getLogger(__name__)

DEFAULT_FEED_FILE = Path("feeds.txt")
DEFAULT_MAX_THREADS = 16
DEFAULT_TIMEOUT = 10.0
DEFAULT_MAX_RESULTS = 10


@dataclass(frozen=True)
class Config:
    """Runtime configuration values for an indexing run."""

    feed_file: Path = DEFAULT_FEED_FILE
    # Zero or less lets the worker pool grow without bound.
    max_threads: int = DEFAULT_MAX_THREADS
    request_timeout: float = DEFAULT_TIMEOUT
    user_agent: str = f"rss-search/{__version__}"
    max_results: int = DEFAULT_MAX_RESULTS
    poll_interval: float = 0.2

    @property
    def unbounded(self) -> bool:
        return self.max_threads <= 0


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        LOGGER.warning("Ignoring %s=%r, expected an integer", name, value)
        return default


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return float(value)
    except ValueError:
        LOGGER.warning("Ignoring %s=%r, expected a number", name, value)
        return default


def load_config() -> Config:
    """Load configuration from environment variables and defaults."""

    defaults = Config()
    return Config(
        feed_file=Path(os.getenv("RSS_SEARCH_FEED_FILE", str(DEFAULT_FEED_FILE))),
        max_threads=_env_int("RSS_SEARCH_MAX_THREADS", DEFAULT_MAX_THREADS),
        request_timeout=_env_float("RSS_SEARCH_TIMEOUT", DEFAULT_TIMEOUT),
        user_agent=os.getenv("RSS_SEARCH_USER_AGENT", defaults.user_agent),
        max_results=_env_int("RSS_SEARCH_MAX_RESULTS", DEFAULT_MAX_RESULTS),
    )
