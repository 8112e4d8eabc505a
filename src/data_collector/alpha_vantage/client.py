"""
Fetchers that turn a request URL into raw response bytes
"""

import threading
from typing import Optional, Protocol

import requests

from src.data_collector.config import config
from src.utils.core.credentials import mask_credential
from src.utils.core.logger import get_logger

logger = get_logger(__name__, utility="data_collector")


class CollectorConnectionError(Exception):
    """Transport failure: the API could not be reached or the body not read"""

    def __init__(self, message: str, url: Optional[str] = None):
        self.message = message
        self.url = url
        super().__init__(message)


class Fetcher(Protocol):
    """Anything that returns the raw bytes behind a URL"""

    def fetch(self, url: str) -> bytes:
        ...


class HttpFetcher:
    """
    Production fetcher: plain HTTP GET through ``requests``

    The body is returned whatever the status code; classification of the
    payload happens downstream. Each thread gets its own session so the
    fetcher can be shared by the worker pool of the concurrent pipeline.
    """

    def __init__(self, timeout: Optional[float] = None, api_key: Optional[str] = None) -> None:
        self.timeout: float = timeout if timeout is not None else config.REQUEST_TIMEOUT
        self._api_key = api_key
        self._local = threading.local()

    @property
    def session(self) -> requests.Session:
        session = getattr(self._local, "session", None)
        if session is None:
            session = requests.Session()
            session.headers.update({"User-Agent": "WeeklyPriceCollector/1.0", "Accept": "application/json"})
            self._local.session = session
        return session

    def _safe_url(self, url: str) -> str:
        if self._api_key:
            return url.replace(self._api_key, mask_credential(self._api_key))
        return url

    def fetch(self, url: str) -> bytes:
        """
        GET ``url`` and return the body

        Raises:
            CollectorConnectionError: on connection, timeout or read failures
        """
        logger.debug(f"Making request to {self._safe_url(url)}")
        try:
            response = self.session.get(url, timeout=self.timeout)
            body = response.content
        except requests.RequestException as e:
            raise CollectorConnectionError(
                f"Failed to fetch data from API: {type(e).__name__}", self._safe_url(url)
            ) from e

        if response.status_code != 200:
            logger.warning(f"HTTP {response.status_code} from {self._safe_url(url)}")
        return body

    def close(self) -> None:
        """Close the session of the calling thread"""
        session = getattr(self._local, "session", None)
        if session is not None:
            session.close()
            self._local.session = None
