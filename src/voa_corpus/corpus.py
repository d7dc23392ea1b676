"""Crawl orchestration for a VOA news corpus.

A corpus lives in one directory::

    <corpus_directory>/
        cache/          raw article pages and control records
        sitenews/new/   sitemap snapshots waiting to be processed
        sitenews/old/   processed sitemap snapshots

Only one Corpus instance may use a directory at a time; the url index is
read once and rewritten after each change with no locking.
"""

import logging
import os
import time
from pathlib import Path
from typing import Callable, Iterator

from dotenv import load_dotenv

from common.hashing import url_cache_key
from voa_corpus.cache import FileCache
from voa_corpus.config import CORPUS_DIRECTORY_ENV, CorpusConfig, get_config
from voa_corpus.discovery import RssPoller, SitemapPoller
from voa_corpus.document import parse_document
from voa_corpus.fetcher import RateLimitedFetcher
from voa_corpus.helpers import duration_in_words
from voa_corpus.index import DocumentIndex
from voa_corpus.models import Document

logger = logging.getLogger(__name__)


class Corpus:
    """Incrementally crawled, locally cached corpus of VOA articles."""

    def __init__(
        self,
        corpus_directory: str | Path | None = None,
        config: CorpusConfig | None = None,
        fetcher: RateLimitedFetcher | None = None,
        clock: Callable[[], float] = time.time,
    ):
        """Open (creating if needed) the corpus in ``corpus_directory``.

        Args:
            corpus_directory: Root directory of the corpus. Falls back to
                the config's ``corpus_directory`` and then the
                ``VOA_CORPUS_DIRECTORY`` environment variable.
            config: Configuration; the global config is used if None.
            fetcher: Fetcher to use instead of one built from the config.
            clock: Wall clock used for sitemap cooldowns and cache expiry.

        Raises:
            ValueError: If no corpus directory is given anywhere.
            CacheError: If the cache directory cannot be created.
        """
        self.config = config or get_config()

        load_dotenv()
        directory = (
            corpus_directory
            or self.config.corpus_directory
            or os.environ.get(CORPUS_DIRECTORY_ENV)
        )
        if not directory:
            logger.error("Corpus directory not defined")
            raise ValueError(
                f"corpus_directory not defined; pass it or set {CORPUS_DIRECTORY_ENV}"
            )
        self.corpus_directory = Path(directory)

        self.cache = FileCache(
            self.corpus_directory / "cache",
            default_expiration=self.config.cache_expiration,
            clock=clock,
        )

        sitenews_new = self.corpus_directory / "sitenews" / "new"
        sitenews_old = self.corpus_directory / "sitenews" / "old"
        for path in (sitenews_new, sitenews_old):
            path.mkdir(mode=0o700, parents=True, exist_ok=True)

        self.fetcher = fetcher or RateLimitedFetcher(
            min_interval=self.config.fetch_delay_seconds,
            user_agent=self.config.user_agent,
            timeout=self.config.request_timeout,
        )

        self.sitemap = SitemapPoller(
            fetcher=self.fetcher,
            cache=self.cache,
            new_dir=sitenews_new,
            old_dir=sitenews_old,
            sitemap_url=self.config.sitemap_url,
            namespaces=self.config.sitemap_namespaces,
            cooldown_seconds=self.config.sitemap_cooldown_seconds,
            clock=clock,
        )
        self.rss = RssPoller(
            fetcher=self.fetcher,
            feeds_page_url=self.config.feeds_page_url,
            abort_on_parse_error=self.config.rss_abort_on_parse_error,
        )

        self.index = DocumentIndex(self.cache, expiration=self.config.cache_expiration)

    # ------------------------------------------------------------------
    # Crawling
    # ------------------------------------------------------------------

    def discover(self, testing: bool = False) -> list[str]:
        """Collect candidate article URLs from the sitemap and RSS feeds."""
        urls = []
        for name, poller in (("sitemap", self.sitemap), ("rss", self.rss)):
            try:
                urls.extend(poller.poll(testing=testing))
            except Exception as e:
                logger.error(f"Failed {name} discovery: {e}")
        return urls

    def update(
        self,
        verbose: bool = False,
        testing: bool = False,
        urls: list[str] | None = None,
    ) -> int:
        """Add newly listed articles to the index and fetch uncached ones.

        Args:
            verbose: Log progress and time remaining while fetching.
            testing: Use only one feed and fetch only one document.
            urls: Explicit article URLs to add instead of running discovery.

        Returns:
            Number of documents fetched into the cache.
        """
        if urls is None:
            urls = self.discover(testing=testing)

        candidates = [url for url in urls if url.lower().startswith("http")]
        added = self.index.extend(candidates)
        logger.info(f"Added {added} new documents ({self.index.size()} total)")

        return self.prime_cache(verbose=verbose, testing=testing)

    def prime_cache(self, verbose: bool = False, testing: bool = False) -> int:
        """Fetch every indexed document not yet in the cache, in index order."""
        positions = [p for p in range(self.index.size()) if not self.is_document_cached(p)]

        remaining = len(positions)
        fetched = 0
        for position in positions:
            if verbose:
                seconds = max(1, remaining * self.fetcher.min_interval)
                logger.info(
                    f"{remaining} documents left to fetch; "
                    f"time remaining about {duration_in_words(seconds)}."
                )

            url = self.index.get(position)
            try:
                if self._fetch_and_store(url) is not None:
                    fetched += 1
            except Exception as e:
                logger.warning(f"Failed to fetch document {position} ({url}): {e}")

            remaining -= 1
            if testing:
                break

        return fetched

    def is_document_cached(self, position: int) -> bool:
        url = self.index.get(position)
        if url is None:
            return False
        try:
            return self.cache.exists(url_cache_key(url))
        except OSError as e:
            logger.warning(f"Cache lookup failed for {url}: {e}")
            return False

    # ------------------------------------------------------------------
    # Page access
    # ------------------------------------------------------------------

    def _fetch_and_store(self, url: str) -> bytes | None:
        content = self.fetcher.fetch(url)
        if content is None:
            return None
        try:
            self.cache.set(url_cache_key(url), content)
        except OSError as e:
            logger.warning(f"Failed to cache {url}: {e}")
        return content

    def is_sentinel(self, content: bytes) -> bool:
        """True for empty pages and known placeholder or error pages."""
        if not content.strip():
            return True
        text = content.decode("utf-8", errors="replace")
        return any(phrase in text for phrase in self.config.sentinel_phrases)

    def get_article_html(self, url: str) -> bytes | None:
        """Return the raw HTML of ``url`` from the cache, fetching on a miss.

        Returns None if the page cannot be fetched or is sentinel content.
        """
        try:
            content = self.cache.get(url_cache_key(url))
        except OSError as e:
            logger.warning(f"Cache read failed for {url}: {e}")
            content = None

        if content is None:
            content = self._fetch_and_store(url)
            if content is None:
                return None

        if self.is_sentinel(content):
            logger.info(f"Skipping placeholder or error page {url}")
            return None
        return content

    def get_document(self, index: int | None = None, uri: str | None = None) -> Document | None:
        """Return the parsed document by index or uri, or None on any error.

        A valid ``index`` takes precedence over ``uri``. A uri not yet in
        the corpus is appended to the index.
        """
        position = None
        if index is not None:
            if 0 <= index < self.index.size():
                position = index
            else:
                logger.warning(f"Document index {index} is out of range [0, {self.index.size()})")

        if position is None and uri is not None:
            if not uri.lower().startswith("http"):
                logger.warning(f"Document uri {uri!r} is not an http url")
                return None
            position = self.index.get_or_assign(uri)

        if position is None:
            logger.warning("Document index and/or uri invalid, returning None")
            return None

        url = self.index.get(position)
        html = self.get_article_html(url)
        if html is None:
            return None

        try:
            return parse_document(html, url)
        except Exception as e:
            logger.warning(f"Failed to parse {url}, skipping the document: {e}")
            return None

    def iter_documents(self) -> Iterator[tuple[int, Document]]:
        """Yield ``(index, document)`` for every cached, parseable document."""
        for position in range(self.index.size()):
            if not self.is_document_cached(position):
                continue
            document = self.get_document(index=position)
            if document is not None:
                yield position, document

    def get_total_documents(self) -> int:
        return self.index.size()

    def get_all_uris(self) -> list[str]:
        return self.index.all()
