"""Configuration loader for voa-corpus."""

import os
from dataclasses import dataclass, field, fields
from pathlib import Path

from dotenv import load_dotenv

from common.config import ConfigSingleton, find_config_path, load_yaml

CORPUS_DIRECTORY_ENV = "VOA_CORPUS_DIRECTORY"
CONFIG_ENV = "VOA_CORPUS_CONFIG"

CONFIG_DIR = Path(__file__).resolve().parent.parent.parent / "configs"

DEFAULT_SITEMAP_URL = "http://www1.voanews.com/sitemap.xml"
DEFAULT_FEEDS_PAGE_URL = "http://www1.voanews.com/english/rss/"

# Google's legacy sitemap namespace is what the site serves; the
# sitemaps.org one is accepted too.
DEFAULT_SITEMAP_NAMESPACES = [
    "http://www.google.com/schemas/sitemap/0.84",
    "http://www.sitemaps.org/schemas/sitemap/0.9",
]

DEFAULT_SENTINEL_PHRASES = [
    "This page is in the process of being created or has temporarily been inactivated",
    "Error Occurred While Processing Request",
    "File not found",
]


@dataclass
class CorpusConfig:
    corpus_directory: str | None = None
    sitemap_url: str = DEFAULT_SITEMAP_URL
    feeds_page_url: str = DEFAULT_FEEDS_PAGE_URL
    cache_expiration: str | int | float = "never"
    fetch_delay_seconds: float = 30.0
    sitemap_cooldown_seconds: float = 600.0
    sitemap_namespaces: list[str] = field(default_factory=lambda: list(DEFAULT_SITEMAP_NAMESPACES))
    sentinel_phrases: list[str] = field(default_factory=lambda: list(DEFAULT_SENTINEL_PHRASES))
    user_agent: str = "voa-corpus/1.0 (research corpus builder)"
    request_timeout: float | None = None
    rss_abort_on_parse_error: bool = True


def load_config(path: str | Path | None = None) -> CorpusConfig:
    """Load configuration from an optional YAML file plus the environment.

    Args:
        path: Config name in ``configs/`` or a path to a YAML file. If None,
            the ``VOA_CORPUS_CONFIG`` env var is checked, and when that is
            unset the built-in defaults are used.

    Returns:
        Loaded CorpusConfig object
    """
    load_dotenv()

    data = {}
    if path is None:
        path = os.environ.get(CONFIG_ENV)
    if path is not None:
        data = load_yaml(find_config_path(path, CONFIG_DIR))

    config = _parse_config(data)

    if config.corpus_directory is None:
        config.corpus_directory = os.environ.get(CORPUS_DIRECTORY_ENV)

    return config


def _parse_config(data: dict) -> CorpusConfig:
    """Parse config dictionary into CorpusConfig, rejecting unknown keys."""
    known = {f.name for f in fields(CorpusConfig)}
    unknown = set(data) - known
    if unknown:
        raise ValueError(f"Unknown config options: {sorted(unknown)}")

    config = CorpusConfig(**data)

    if config.fetch_delay_seconds < 0:
        raise ValueError("fetch_delay_seconds must be >= 0")
    if config.sitemap_cooldown_seconds < 0:
        raise ValueError("sitemap_cooldown_seconds must be >= 0")
    if not config.sitemap_namespaces:
        raise ValueError("sitemap_namespaces must not be empty")

    return config


_manager = ConfigSingleton(load_config)
get_config = _manager.get
set_config = _manager.set
reset_config = _manager.reset
