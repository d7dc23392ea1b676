"""Sitemap snapshot polling and URL extraction.

Each poll may download one snapshot of the news sitemap into the ``new``
directory. Every snapshot found there is then parsed and moved to ``old``,
so a snapshot is processed at most once whether or not parsing succeeds.
"""

import logging
import re
import shutil
import time
from pathlib import Path
from typing import Callable

from lxml import etree

from voa_corpus.cache import FileCache
from voa_corpus.discovery.urls import is_article_url
from voa_corpus.fetcher import RateLimitedFetcher

logger = logging.getLogger(__name__)

LAST_FETCH_TIME_KEY = "lastFetchTime"
SNAPSHOT_SUFFIX = ".sitemap_news.xml"
DEFAULT_COOLDOWN_SECONDS = 10 * 60

LOC_RE = re.compile(rb"<loc>(http.*?)</loc>", re.IGNORECASE | re.DOTALL)


def urls_from_sitemap_xml(content: bytes, namespaces: list[str]) -> list[str]:
    """Extract ``/urlset/url/loc`` values using the given sitemap namespaces.

    Raises:
        lxml.etree.XMLSyntaxError: If the content is not well-formed XML.
    """
    parser = etree.XMLParser(
        load_dtd=False,
        no_network=True,
        resolve_entities=False,
        recover=False,
    )
    root = etree.fromstring(content, parser)

    urls = []
    for namespace in namespaces:
        nodes = root.xpath("/x:urlset/x:url/x:loc", namespaces={"x": namespace})
        urls.extend(node.text.strip() for node in nodes if node.text and node.text.strip())
    return urls


def urls_from_sitemap_regex(content: bytes) -> list[str]:
    """Fallback scan for ``<loc>http...</loc>`` spans; unique, in no set order."""
    return list({m.decode("utf-8", errors="replace").strip() for m in LOC_RE.findall(content)})


class SitemapPoller:
    """Downloads sitemap snapshots and returns the article URLs they list."""

    def __init__(
        self,
        fetcher: RateLimitedFetcher,
        cache: FileCache,
        new_dir: Path,
        old_dir: Path,
        sitemap_url: str,
        namespaces: list[str],
        cooldown_seconds: float = DEFAULT_COOLDOWN_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        self.fetcher = fetcher
        self.cache = cache
        self.new_dir = Path(new_dir)
        self.old_dir = Path(old_dir)
        self.sitemap_url = sitemap_url
        self.namespaces = namespaces
        self.cooldown_seconds = cooldown_seconds
        self._clock = clock

    def last_fetch_time(self) -> float:
        raw = self.cache.get(LAST_FETCH_TIME_KEY)
        if raw is None:
            return 0.0
        try:
            return float(raw.decode("ascii"))
        except ValueError:
            logger.warning(f"Ignoring malformed {LAST_FETCH_TIME_KEY} record: {raw!r}")
            return 0.0

    def fetch_snapshot(self) -> Path | None:
        """Download a new snapshot unless the cooldown has not elapsed.

        Returns the snapshot path, or None if nothing was written.
        """
        fetch_time = int(self._clock())
        snapshot_path = self.new_dir / f"{fetch_time}{SNAPSHOT_SUFFIX}"
        if snapshot_path.exists():
            return None

        elapsed = fetch_time - self.last_fetch_time()
        if elapsed < self.cooldown_seconds:
            logger.info(
                f"Sitemap fetched {elapsed:.0f}s ago (cooldown {self.cooldown_seconds:.0f}s), not fetching"
            )
            return None

        content = self.fetcher.fetch(self.sitemap_url)
        if content is None:
            logger.error(f"Failed to fetch sitemap {self.sitemap_url}")
            return None

        snapshot_path.write_bytes(content)
        self.cache.set(LAST_FETCH_TIME_KEY, str(fetch_time).encode("ascii"), "never")
        logger.info(f"Saved sitemap snapshot {snapshot_path.name}")
        return snapshot_path

    def pending_snapshots(self) -> list[Path]:
        return sorted(p for p in self.new_dir.iterdir() if p.name.endswith("xml"))

    def urls_from_snapshot(self, path: Path) -> list[str]:
        """Extract URLs from one snapshot, falling back to a regex scan."""
        content = path.read_bytes()

        urls = []
        try:
            urls = urls_from_sitemap_xml(content, self.namespaces)
        except etree.XMLSyntaxError as e:
            logger.warning(f"XML parsing error in {path}: {e}")

        if not urls:
            urls = urls_from_sitemap_regex(content)
            logger.warning(
                f"No urls found via XML parsing in {path.name}, "
                f"{len(urls)} found using regular expression"
            )
        return urls

    def archive(self, path: Path) -> None:
        shutil.move(str(path), str(self.old_dir / path.name))

    def poll(self, testing: bool = False) -> list[str]:
        """Run one poll cycle and return the sorted distinct article URLs."""
        if testing:
            return []

        self.fetch_snapshot()

        snapshots = self.pending_snapshots()
        article_urls = set()
        for path in snapshots:
            if path.stat().st_size == 0:
                logger.warning(f"Skipping empty sitemap snapshot {path}")
                continue
            try:
                urls = self.urls_from_snapshot(path)
            except Exception as e:
                logger.warning(f"Failed to read sitemap snapshot {path}, skipping: {e}")
                continue
            article_urls.update(url for url in urls if is_article_url(url))

        for path in snapshots:
            self.archive(path)

        logger.info(f"Found {len(article_urls)} article urls in {len(snapshots)} sitemap snapshots")
        return sorted(article_urls)
