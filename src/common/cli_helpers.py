"""Common CLI helper utilities."""

from __future__ import annotations

import json
import logging
from typing import Any


def setup_logging(verbose: bool = False) -> None:
    """Configure standard logging format for CLI tools."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )


def print_json(record: Any) -> None:
    """Print a JSON-serializable record, one object per call."""
    print(json.dumps(record, default=str, ensure_ascii=False, indent=2))
