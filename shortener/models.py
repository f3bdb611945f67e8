"""Result records returned by the shortener service."""

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Generic, List, TypeVar

from .storage.models import ShortURLEntry


T = TypeVar("T")


@dataclass(frozen=True)
class ShortURLResult:
    """A short URL enriched with the aggregate clicks of its destination."""

    short_code: str
    long_url: str
    click_count: int
    long_url_click_count: int
    created_at: datetime

    @classmethod
    def from_entry(cls, entry: ShortURLEntry, long_url_click_count: int) -> "ShortURLResult":
        return cls(
            short_code=entry.short_code,
            long_url=entry.long_url,
            click_count=entry.click_count,
            long_url_click_count=long_url_click_count,
            created_at=entry.created_at,
        )

    def to_dict(self) -> dict:
        data = asdict(self)
        data["created_at"] = self.created_at.isoformat()
        return data


@dataclass(frozen=True)
class URLStats:
    """Click statistics for one short code."""

    short_code: str
    click_count: int
    created_at: datetime


@dataclass(frozen=True)
class PagedResult(Generic[T]):
    """One page of items plus the total number of matches."""

    items: List[T]
    total_count: int
