"""On-disk key/value cache for raw pages and small control records.

Each entry is stored as two files under the cache root: ``<name>.dat`` with
the raw bytes and ``<name>.meta.json`` with its creation and expiry times.
``<name>`` is the percent-escaped key, so any key maps to a safe file name.

The cache assumes a single writer per root directory; there is no locking.
"""

from __future__ import annotations

import json
import logging
import os
import re
import tempfile
import time
from pathlib import Path
from typing import Callable, Iterator
from urllib.parse import quote, unquote

logger = logging.getLogger(__name__)

DATA_SUFFIX = ".dat"
META_SUFFIX = ".meta.json"

NEVER = "never"
NOW = "now"

_UNIT_SECONDS = {
    "second": 1,
    "minute": 60,
    "hour": 60 * 60,
    "day": 24 * 60 * 60,
    "week": 7 * 24 * 60 * 60,
}

_DURATION_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*([a-z]+?)s?\s*$", re.IGNORECASE)


class CacheError(Exception):
    """Raised when the cache root cannot be created or used."""


def parse_expiration(expiration: str | int | float | None) -> float | None:
    """Convert an expiration label to a number of seconds.

    Returns None for entries that never expire. Accepts ``"never"``,
    ``"now"``, a number of seconds, or a duration such as ``"10 minutes"``.

    Raises:
        ValueError: If the label is not recognised.
    """
    if expiration is None:
        return None
    if isinstance(expiration, bool):
        raise ValueError(f"Invalid cache expiration: {expiration!r}")
    if isinstance(expiration, (int, float)):
        if expiration < 0:
            raise ValueError(f"Cache expiration must be >= 0: {expiration!r}")
        return float(expiration)

    label = expiration.strip().lower()
    if label == NEVER:
        return None
    if label == NOW:
        return 0.0

    match = _DURATION_RE.match(label)
    if match is None or match.group(2) not in _UNIT_SECONDS:
        raise ValueError(f"Invalid cache expiration: {expiration!r}")
    return float(match.group(1)) * _UNIT_SECONDS[match.group(2)]


class FileCache:
    """Durable bytes cache rooted at a directory."""

    def __init__(
        self,
        root: str | Path,
        default_expiration: str | int | float = NEVER,
        clock: Callable[[], float] = time.time,
    ):
        self.root = Path(root)
        self.default_expiration = default_expiration
        self._clock = clock

        # Validate once so a bad config fails at construction.
        parse_expiration(default_expiration)

        try:
            self.root.mkdir(mode=0o700, parents=True, exist_ok=True)
        except OSError as e:
            raise CacheError(f"could not create cache within '{self.root}': {e}") from e
        if not self.root.is_dir():
            raise CacheError(f"cache root '{self.root}' is not a directory")

    def _paths(self, key: str) -> tuple[Path, Path]:
        name = quote(key, safe="")
        return self.root / f"{name}{DATA_SUFFIX}", self.root / f"{name}{META_SUFFIX}"

    def _is_expired(self, meta_path: Path) -> bool:
        if not meta_path.exists():
            return False
        try:
            meta = json.loads(meta_path.read_text(encoding="utf-8"))
            expires_at = meta["expires_at"]
            return expires_at is not None and self._clock() >= expires_at
        except (ValueError, TypeError, KeyError) as e:
            # A torn or hand-edited sidecar; drop the entry so it is refetched.
            logger.warning(f"Unreadable cache metadata {meta_path.name}, treating entry as expired: {e}")
            return True

    def get(self, key: str) -> bytes | None:
        """Return the bytes stored under ``key``, or None if absent or expired."""
        data_path, meta_path = self._paths(key)
        if not data_path.exists():
            return None
        if self._is_expired(meta_path):
            logger.debug(f"Cache entry expired: {key}")
            self.delete(key)
            return None
        return data_path.read_bytes()

    def set(self, key: str, value: bytes, expiration: str | int | float | None = None) -> None:
        """Store ``value`` under ``key`` with the given (or default) expiration."""
        if not isinstance(value, bytes):
            raise TypeError(f"cache values must be bytes, got {type(value).__name__}")

        seconds = parse_expiration(self.default_expiration if expiration is None else expiration)
        now = self._clock()
        meta = {
            "key": key,
            "created_at": now,
            "expires_at": None if seconds is None else now + seconds,
        }

        data_path, meta_path = self._paths(key)
        _atomic_write(meta_path, json.dumps(meta).encode("utf-8"))
        _atomic_write(data_path, value)

    def exists(self, key: str) -> bool:
        """Return True if ``key`` holds a live (unexpired) entry."""
        data_path, meta_path = self._paths(key)
        return data_path.exists() and not self._is_expired(meta_path)

    def delete(self, key: str) -> None:
        """Remove ``key`` from the cache (no-op if absent)."""
        for path in self._paths(key):
            path.unlink(missing_ok=True)

    def keys(self) -> Iterator[str]:
        """Iterate over the keys of all live entries."""
        for data_path in sorted(self.root.glob(f"*{DATA_SUFFIX}")):
            key = unquote(data_path.name[: -len(DATA_SUFFIX)])
            if self.exists(key):
                yield key


def _atomic_write(path: Path, data: bytes) -> None:
    """Write ``data`` to ``path`` via a temp file in the same directory."""
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".tmp-")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
