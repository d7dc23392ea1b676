"""Shared fixtures: an in-memory fetcher and a config that never hits the network."""

from pathlib import Path

import pytest

from voa_corpus.config import CorpusConfig, reset_config


class FakeFetcher:
    """Stands in for RateLimitedFetcher; serves pages from a dict."""

    def __init__(self, pages: dict[str, bytes] | None = None, min_interval: float = 30.0):
        self.pages = dict(pages or {})
        self.min_interval = min_interval
        self.calls: list[str] = []

    def fetch(self, url: str) -> bytes | None:
        self.calls.append(url)
        return self.pages.get(url)


class FakeClock:
    def __init__(self, now: float = 1_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_fetcher() -> FakeFetcher:
    return FakeFetcher()


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def corpus_dir(tmp_path) -> Path:
    return tmp_path / "corpus_voa"


@pytest.fixture
def config(corpus_dir) -> CorpusConfig:
    return CorpusConfig(corpus_directory=str(corpus_dir))


@pytest.fixture(autouse=True)
def isolate_global_config(monkeypatch):
    """Keep the global config and env vars from leaking between tests."""
    monkeypatch.delenv("VOA_CORPUS_DIRECTORY", raising=False)
    monkeypatch.delenv("VOA_CORPUS_CONFIG", raising=False)
    reset_config()
    yield
    reset_config()
