"""Core business logic for URL shortener."""

from .exceptions import ErrorKind, ShortenerError
from .normalization import normalize_url
from .shortcode import ShortCodeGenerator
from .events import EventChannel, EventKind, URLEvent
from .models import ShortURLResult, URLStats, PagedResult
from .storage import InMemoryURLStore, ShortURLEntry, URLStoreBase
from .service import URLShortenerService

__all__ = [
    "ErrorKind",
    "ShortenerError",
    "normalize_url",
    "ShortCodeGenerator",
    "EventChannel",
    "EventKind",
    "URLEvent",
    "ShortURLResult",
    "URLStats",
    "PagedResult",
    "InMemoryURLStore",
    "ShortURLEntry",
    "URLStoreBase",
    "URLShortenerService",
]
