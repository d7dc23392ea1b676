"""Polite, single-flight HTTP fetching."""

import logging
import time
from typing import Callable

import requests

logger = logging.getLogger(__name__)

DEFAULT_DELAY_SECONDS = 30.0
DEFAULT_USER_AGENT = "voa-corpus/1.0 (research corpus builder)"


class RateLimitedFetcher:
    """Issues one GET at a time with a minimum interval between requests.

    The interval applies to every fetch made through this instance,
    regardless of host. ``last_fetch_time`` is the clock reading taken
    just before the most recent request was issued.
    """

    def __init__(
        self,
        min_interval: float = DEFAULT_DELAY_SECONDS,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float | None = None,
        session: requests.Session | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.min_interval = min_interval
        self.timeout = timeout
        self.last_fetch_time: float | None = None
        self._clock = clock
        self._sleep = sleep
        self._session = session or requests.Session()
        self._session.headers["User-Agent"] = user_agent

    def wait(self) -> float:
        """Block until the minimum interval has passed. Returns seconds slept."""
        if self.last_fetch_time is None:
            return 0.0
        delay = self.min_interval - (self._clock() - self.last_fetch_time)
        if delay > 0:
            logger.debug(f"Rate limit: sleeping {delay:.2f}s")
            self._sleep(delay)
            return delay
        return 0.0

    def fetch(self, url: str) -> bytes | None:
        """Fetch ``url`` and return the response body, or None on failure."""
        self.wait()
        self.last_fetch_time = self._clock()

        try:
            response = self._session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.warning(f"Failed to fetch {url}: {e}")
            return None

        logger.debug(f"Fetched {url} ({len(response.content)} bytes)")
        return response.content
