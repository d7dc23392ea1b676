"""Article URL discovery from the site's sitemap and RSS feeds."""

from voa_corpus.discovery.rss import RssPoller
from voa_corpus.discovery.sitemap import SitemapPoller

__all__ = ["RssPoller", "SitemapPoller"]
