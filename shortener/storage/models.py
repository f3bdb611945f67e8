"""Data models for URL shortener storage."""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ShortURLEntry:
    """Represents a short code -> long URL mapping held by the store.

    Entries are immutable. The store swaps in a new record when the click
    count changes, so any entry a caller holds is a consistent snapshot.
    """

    short_code: str
    long_url: str
    created_at: datetime = field(default_factory=_utcnow)
    click_count: int = 0

    @property
    def key(self) -> str:
        """Case-insensitive identity of this entry."""
        return self.short_code.lower()

    def with_click(self) -> "ShortURLEntry":
        """Return a copy with the click count incremented by one."""
        return replace(self, click_count=self.click_count + 1)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "short_code": self.short_code,
            "long_url": self.long_url,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "click_count": self.click_count,
        }
