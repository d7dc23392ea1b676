"""URL rules shared by the sitemap and RSS discovery paths."""

import re
from urllib.parse import unquote

# Article pages live under /news/ and end in .html (or .cfm.html etc).
ARTICLE_PATH_MARKER = "/news/"
ARTICLE_SUFFIX = "html"

SITE_DOMAIN = "voanews.com"

# Feeds are linked from the listing page as quoted absolute URLs, e.g.
# "http://www1.voanews.com/english-usa.rss". Regex scanning is crude but
# the listing page has no structured markup for them.
FEED_URL_RE = re.compile(r'"(http://www.?\.voanews\.com/english[^"]*?\.rss)"', re.IGNORECASE)

TRACKING_SUFFIX_RE = re.compile(r"\?rss=.*$")

# Some feed links wrap the real article URL in a redirect, URL-encoded.
WRAPPED_URL_RE = re.compile(r"(http%3A%2F%2Fwww1.+?)$", re.DOTALL)

CONTROL_CHARS_RE = re.compile(r"[\x00-\x20]")


def is_article_url(url: str) -> bool:
    """Check if a URL looks like an article page (http, /news/, html)."""
    lowered = url.lower()
    return (
        lowered.startswith("http")
        and ARTICLE_PATH_MARKER in lowered
        and lowered.endswith(ARTICLE_SUFFIX)
    )


def normalize_feed_link(link: str) -> str | None:
    """Normalize a link taken from an RSS item.

    Strips the ``?rss=`` tracking suffix and unwraps URL-encoded redirect
    targets. Returns None for links that are off-site or empty.
    """
    link = TRACKING_SUFFIX_RE.sub("", link.strip())
    if not link or SITE_DOMAIN not in link.lower():
        return None

    match = WRAPPED_URL_RE.search(link)
    if match:
        link = unquote(match.group(1))

    return link


def extract_feed_urls(page: str) -> list[str]:
    """Pull the feed URLs out of the feed listing page, sorted and unique."""
    page = CONTROL_CHARS_RE.sub(" ", page)
    return sorted(set(FEED_URL_RE.findall(page)))
