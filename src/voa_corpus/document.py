"""Field extraction from VOA article HTML.

The page layout changed over the years, so each field is looked up through
a list of XPath queries covering the old table-based layout and the newer
div-based one. Missing fields come back empty rather than raising.
"""

import logging
import re
from datetime import datetime
from typing import Optional

import trafilatura
from dateutil.parser import parse as parse_date
from lxml import html as lxml_html

from voa_corpus.models import Document
from voa_corpus.sentences import split_sentences

logger = logging.getLogger(__name__)

TITLE_XPATHS = [
    '/html/body/div/table/tr/td/table/tr/td/div/div/table/tr/td/span[@class="articleheadline"]',
    "/html/body/div[2]/div[2]/div[2]/div/h2",
]

# Tried in order; the first query that yields any text wins.
BODY_XPATHS = [
    "/html/body/div/table/tr/td/table/tr/td/div/div/span/p",
    "/html/body/div/table/tr/td/table/tr/td/div/div/span/span",
    "/html/body/div/table/tr/td/table/tr/td/div/div/div/table/span/span/p",
    "/html/body/div/table/tr/td/table/tr/td/div/div/div/span/p",
    "/html/body/div/table/tr/td/table/tr/td/div/span/p",
    '/html/body/div[2]/div[2]/div[2]/div[@id="mainContent"]'
    '/p[not(@class="byline") and not(@class="articleSummary")]',
]

DESCRIPTION_XPATHS = [
    '/html/head/meta[@name="Description"]/@content',
    '/html/body/div[2]/div[2]/div[2]/div/p[@class="articleSummary"]',
]

CATEGORY_XPATHS = [
    '/html/head/meta[@name="Keywords"]/@content',
    '/html/head/meta[@name="keywords"]/@content',
]

DATE_XPATHS = [
    '//*[@class="dateStamp"]',
    '//*[@class="datetime"]/em',
]

CREDIT_RE = re.compile(r"Some\s*information\s*for\s*this\s*report\s*was\s*provided\s*by.*?\.", re.IGNORECASE)
BR_RE = re.compile(r"<br\s*/?>", re.IGNORECASE)
CATEGORY_SPLIT_RE = re.compile(r",\s*")


def _find_values(tree, query: str) -> list[str]:
    """Return the string value of every node matched by ``query``."""
    values = []
    for node in tree.xpath(query):
        if isinstance(node, str):
            values.append(str(node))
        else:
            values.append(node.text_content())
    return values


def extract_title(tree) -> list[str]:
    titles = []
    for query in TITLE_XPATHS:
        titles.extend(_find_values(tree, query))
    return [t.strip() for t in titles if t.strip()]


def _clean_paragraph(text: str) -> str:
    text = CREDIT_RE.sub("", text)
    text = text.replace("\xa0", " ")
    return text.strip()


def extract_body(tree, html: str | bytes) -> list[str]:
    for query in BODY_XPATHS:
        sentences = []
        for paragraph in _find_values(tree, query):
            paragraph = _clean_paragraph(paragraph)
            if paragraph:
                sentences.extend(split_sentences(paragraph))
        if sentences:
            return sentences

    # None of the known layouts matched; fall back to generic extraction.
    text = trafilatura.extract(html)
    if not text:
        return []
    sentences = []
    for paragraph in text.splitlines():
        paragraph = _clean_paragraph(paragraph)
        if paragraph:
            sentences.extend(split_sentences(paragraph))
    return sentences


def extract_description(tree) -> list[str]:
    sentences = []
    for query in DESCRIPTION_XPATHS:
        for description in _find_values(tree, query):
            description = BR_RE.sub(" ", description).strip()
            if description:
                sentences.extend(split_sentences(description))
    return sentences


def extract_categories(tree) -> list[str]:
    """Comma-separated keywords, de-duplicated ignoring case, sorted."""
    values = []
    for query in CATEGORY_XPATHS:
        values.extend(_find_values(tree, query))

    categories = [c.strip() for c in CATEGORY_SPLIT_RE.split(",".join(values))]
    unique = {}
    for category in sorted(c for c in categories if c):
        unique[category.lower()] = category
    return sorted(unique.values())


def extract_date(tree) -> Optional[datetime]:
    for query in DATE_XPATHS:
        for value in _find_values(tree, query):
            value = value.strip()
            if not value:
                continue
            try:
                return parse_date(value, fuzzy=True)
            except (ValueError, OverflowError):
                logger.debug(f"Unparseable date {value!r}")
    return None


def parse_document(html: str | bytes, uri: str) -> Document:
    """Parse article HTML into a Document.

    Raises:
        lxml.etree.ParserError: If no tree can be built (e.g. empty input).
    """
    tree = lxml_html.fromstring(html)
    # fromstring may return a fragment root; XPaths expect the <html> root.
    tree = tree.getroottree().getroot()

    return Document(
        uri=uri,
        title=extract_title(tree),
        body=extract_body(tree, html),
        description=extract_description(tree),
        categories=extract_categories(tree),
        date=extract_date(tree),
    )
