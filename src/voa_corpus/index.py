"""Append-only index of document URLs, persisted in the cache."""

import json
import logging
from typing import Iterable

from voa_corpus.cache import FileCache

logger = logging.getLogger(__name__)

URL_INDEX_KEY = "urlIndex"


class DocumentIndex:
    """Maps document ids (list positions) to URLs and back.

    Ids are assigned by appending only, so an id stays valid for as long
    as the cache lives. Every mutation rewrites the whole index.
    """

    def __init__(self, cache: FileCache, key: str = URL_INDEX_KEY, expiration="never"):
        self.cache = cache
        self.key = key
        self.expiration = expiration
        self._urls: list[str] = []
        self._positions: dict[str, int] = {}
        self._load()

    def _load(self) -> None:
        raw = self.cache.get(self.key)
        urls = json.loads(raw.decode("utf-8")) if raw is not None else []
        self._urls = []
        self._positions = {}
        for url in urls:
            # Tolerate a hand-edited index with repeats; first position wins.
            if url not in self._positions:
                self._positions[url] = len(self._urls)
                self._urls.append(url)
        logger.debug(f"Loaded url index with {len(self._urls)} documents")

    def _persist(self) -> None:
        self.cache.set(self.key, json.dumps(self._urls).encode("utf-8"), self.expiration)

    def _append(self, url: str) -> int:
        position = len(self._urls)
        self._urls.append(url)
        self._positions[url] = position
        return position

    def get(self, position: int) -> str | None:
        """Return the URL at ``position``, or None if out of range."""
        if 0 <= position < len(self._urls):
            return self._urls[position]
        return None

    def position(self, url: str) -> int | None:
        return self._positions.get(url)

    def get_or_assign(self, url: str) -> int:
        """Return the id of ``url``, appending it first if unseen."""
        position = self._positions.get(url)
        if position is None:
            position = self._append(url)
            self._persist()
        return position

    def extend(self, urls: Iterable[str]) -> int:
        """Append every unseen URL in order and persist once. Returns count added."""
        added = 0
        for url in urls:
            if url not in self._positions:
                self._append(url)
                added += 1
        if added:
            self._persist()
        return added

    def size(self) -> int:
        return len(self._urls)

    def __len__(self) -> int:
        return len(self._urls)

    def all(self) -> list[str]:
        return list(self._urls)
