"""HTTP retrieval of feed documents and article pages."""

from __future__ import annotations

import logging
import threading
from typing import Optional

import requests

from .config import Config
from .errors import FetchError

LOGGER = logging.getLogger(__name__)


class ContentFetcher:
    """Fetch raw content over HTTP, one ``requests`` session per thread."""

    def __init__(self, timeout: float = 10, user_agent: Optional[str] = None) -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        self._local = threading.local()

    @classmethod
    def from_config(cls, config: Config) -> "ContentFetcher":
        return cls(timeout=config.request_timeout, user_agent=config.user_agent)

    @property
    def session(self) -> requests.Session:
        session = getattr(self._local, "session", None)
        if session is None:
            session = requests.Session()
            if self.user_agent:
                session.headers.update({"User-Agent": self.user_agent})
            self._local.session = session
        return session

    def _get(self, address: str) -> requests.Response:
        try:
            response = self.session.get(address, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise FetchError(f"Unable to fetch {address}: {exc}") from exc
        LOGGER.debug("Fetched %s (%d bytes)", address, len(response.content))
        return response

    def fetch_bytes(self, address: str) -> bytes:
        """Return the undecoded body, used for feed documents."""

        return self._get(address).content

    def fetch_text(self, address: str) -> str:
        """Return the decoded body, used for article pages."""

        return self._get(address).text
