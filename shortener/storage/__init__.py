"""Storage layer for URL shortener."""

from .base import URLStoreBase
from .memory import InMemoryURLStore
from .models import ShortURLEntry

__all__ = ["URLStoreBase", "InMemoryURLStore", "ShortURLEntry"]
