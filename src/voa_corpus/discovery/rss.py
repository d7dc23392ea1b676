"""RSS feed polling for article URLs."""

import logging

import feedparser

from voa_corpus.discovery.urls import extract_feed_urls, is_article_url, normalize_feed_link
from voa_corpus.fetcher import RateLimitedFetcher

logger = logging.getLogger(__name__)


class FeedParseError(Exception):
    """Raised when a fetched feed cannot be parsed as RSS."""


def parse_feed(content: bytes, feed_url: str) -> list:
    """Parse feed content with feedparser and return its entries.

    A feed that is malformed and yields no entries at all counts as a
    parse failure; feedparser recovers from most minor problems.

    Raises:
        FeedParseError: If the content is not a usable feed.
    """
    feed = feedparser.parse(content)
    if feed.bozo and not feed.entries:
        raise FeedParseError(f"could not parse feed {feed_url}: {feed.get('bozo_exception')}")
    return feed.entries


def links_from_entries(entries) -> set[str]:
    """Normalize and filter the ``link`` of every feed entry."""
    links = set()
    for entry in entries:
        link = entry.get("link")
        if not link:
            continue
        link = normalize_feed_link(link)
        if link and is_article_url(link):
            links.add(link)
    return links


class RssPoller:
    """Discovers article URLs from every feed on the site's feed listing page."""

    def __init__(
        self,
        fetcher: RateLimitedFetcher,
        feeds_page_url: str,
        abort_on_parse_error: bool = True,
    ):
        self.fetcher = fetcher
        self.feeds_page_url = feeds_page_url
        self.abort_on_parse_error = abort_on_parse_error

    def feed_urls(self) -> list[str]:
        content = self.fetcher.fetch(self.feeds_page_url)
        if content is None:
            logger.warning(f"Could not fetch feed listing page {self.feeds_page_url}")
            return []
        return extract_feed_urls(content.decode("utf-8", errors="replace"))

    def poll(self, testing: bool = False) -> list[str]:
        """Run one poll cycle and return the sorted distinct article URLs.

        A feed that fails to parse aborts the whole cycle with an empty
        result unless ``abort_on_parse_error`` is False, in which case
        only that feed is skipped.
        """
        feed_urls = self.feed_urls()
        logger.info(f"Found {len(feed_urls)} RSS feeds")

        links = set()
        for feed_url in feed_urls:
            content = self.fetcher.fetch(feed_url)
            if content is None:
                continue

            try:
                entries = parse_feed(content, feed_url)
            except FeedParseError as e:
                if self.abort_on_parse_error:
                    logger.warning(f"{e}; abandoning RSS discovery for this cycle")
                    return []
                logger.warning(f"{e}; skipping feed")
                entries = []
            links.update(links_from_entries(entries))

            # Testing mode stops after the first feed actually fetched.
            if testing:
                break

        logger.info(f"Found {len(links)} article urls in RSS feeds")
        return sorted(links)
