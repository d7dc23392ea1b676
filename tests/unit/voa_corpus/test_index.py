"""Tests for voa_corpus.index module."""

import json

import pytest

from voa_corpus.cache import FileCache
from voa_corpus.index import URL_INDEX_KEY, DocumentIndex

U1 = "http://www1.voanews.com/english/news/a-1.html"
U2 = "http://www1.voanews.com/english/news/a-2.html"
U3 = "http://www1.voanews.com/english/news/a-3.html"


@pytest.fixture
def cache(tmp_path):
    return FileCache(tmp_path / "cache")


class TestDocumentIndex:
    def test_empty(self, cache) -> None:
        index = DocumentIndex(cache)
        assert index.size() == 0
        assert len(index) == 0
        assert index.get(0) is None

    def test_extend_keeps_first_seen_order(self, cache) -> None:
        index = DocumentIndex(cache)
        assert index.extend([U2, U1, U2]) == 2
        assert index.extend([U1, U3]) == 1
        assert index.all() == [U2, U1, U3]
        assert index.position(U3) == 2
        assert index.position("http://unknown") is None

    def test_positions_survive_reload(self, cache) -> None:
        DocumentIndex(cache).extend([U1, U2])
        reloaded = DocumentIndex(cache)
        assert reloaded.get(0) == U1
        assert reloaded.get(1) == U2
        assert json.loads(cache.get(URL_INDEX_KEY)) == [U1, U2]

    def test_get_or_assign_appends_unseen(self, cache) -> None:
        index = DocumentIndex(cache)
        index.extend([U1])
        assert index.get_or_assign(U1) == 0
        assert index.get_or_assign(U2) == 1
        assert DocumentIndex(cache).get(1) == U2

    def test_out_of_range(self, cache) -> None:
        index = DocumentIndex(cache)
        index.extend([U1])
        assert index.get(1) is None
        assert index.get(-1) is None

    def test_nothing_added_does_not_write(self, cache) -> None:
        index = DocumentIndex(cache)
        assert index.extend([]) == 0
        assert cache.get(URL_INDEX_KEY) is None

    def test_repeated_urls_in_stored_index(self, cache) -> None:
        cache.set(URL_INDEX_KEY, json.dumps([U1, U2, U1]).encode("utf-8"))
        index = DocumentIndex(cache)
        assert index.all() == [U1, U2]

    def test_all_returns_copy(self, cache) -> None:
        index = DocumentIndex(cache)
        index.extend([U1])
        index.all().append(U2)
        assert index.size() == 1
