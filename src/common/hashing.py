"""Hashing utilities."""

import hashlib


def url_cache_key(url: str) -> str:
    """Derive the cache key for a URL (32-char hex MD5 digest).

    Keys stay short and filesystem-safe regardless of URL length.
    """
    return hashlib.md5(url.encode("utf-8")).hexdigest()
