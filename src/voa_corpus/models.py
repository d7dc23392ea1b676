"""Data models for voa-corpus."""

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Optional

RFC2822_FORMAT = "%a, %d %b %Y %H:%M:%S %z"


@dataclass(frozen=True)
class Document:
    """Fields parsed from one article page. Lists hold sentences."""
    uri: str
    title: list[str] = field(default_factory=list)
    body: list[str] = field(default_factory=list)
    description: list[str] = field(default_factory=list)
    categories: list[str] = field(default_factory=list)
    date: Optional[datetime] = None

    @property
    def content(self) -> list[str]:
        """Title followed by body."""
        return self.title + self.body

    def format_date(self, fmt: str = RFC2822_FORMAT) -> Optional[str]:
        """Render the publish date with strftime, or None if unknown."""
        if self.date is None:
            return None
        return self.date.strftime(fmt).strip()

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready record: every field, ISO date, plus ``content``."""
        record = asdict(self)
        record["date"] = self.date.isoformat() if self.date else None
        record["content"] = self.content
        return record
