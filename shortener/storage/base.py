"""Abstract base class for URL shortener store implementations."""

from abc import ABC, abstractmethod
from typing import List, Optional

from .models import ShortURLEntry


class URLStoreBase(ABC):
    """Abstract base class for short URL storage operations.

    Short codes are matched case-insensitively by every operation.
    """

    @abstractmethod
    def insert(self, entry: ShortURLEntry) -> bool:
        """Atomically add an entry if its short code is not taken.

        Args:
            entry: The entry to store

        Returns:
            True if stored, False if an entry with the same code already exists
        """
        pass

    @abstractmethod
    def get(self, short_code: str) -> Optional[ShortURLEntry]:
        """Look up an entry by short code.

        Args:
            short_code: The short code to lookup

        Returns:
            The entry if found, None otherwise
        """
        pass

    @abstractmethod
    def delete(self, short_code: str) -> bool:
        """Atomically remove an entry.

        Args:
            short_code: The short code to delete

        Returns:
            True if deleted, False if not found
        """
        pass

    @abstractmethod
    def exists(self, short_code: str) -> bool:
        """Check if a short code exists."""
        pass

    @abstractmethod
    def increment_clicks(self, short_code: str) -> int:
        """Atomically increment the click count for a short code.

        Args:
            short_code: The short code to update

        Returns:
            The new click count, or 0 if the short code does not exist
        """
        pass

    @abstractmethod
    def list_all(self) -> List[ShortURLEntry]:
        """Return a snapshot of all entries in no particular order."""
        pass

    @abstractmethod
    def list_by_long_url(self, long_url: str) -> List[ShortURLEntry]:
        """Return all entries whose long URL equals the argument exactly."""
        pass

    @abstractmethod
    def count(self, search: Optional[str] = None) -> int:
        """Count entries, optionally filtered by a long URL search term.

        Args:
            search: Case-insensitive substring matched against long URLs

        Returns:
            Number of matching entries
        """
        pass

    @abstractmethod
    def list_paged(
        self,
        offset: int,
        limit: int,
        search: Optional[str] = None,
    ) -> List[ShortURLEntry]:
        """Return a page of entries, newest first.

        Args:
            offset: Number of matching entries to skip
            limit: Maximum number of entries to return
            search: Case-insensitive substring matched against long URLs

        Returns:
            List of entries sorted by creation time descending
        """
        pass

    @abstractmethod
    def __len__(self) -> int:
        pass
