"""Business logic service for URL shortener."""

import logging
from typing import Any, Dict, List, Optional

from .shortcode import ShortCodeGenerator
from .normalization import normalize_url, MAX_URL_LENGTH
from .storage.base import URLStoreBase
from .storage.models import ShortURLEntry
from .models import ShortURLResult, URLStats, PagedResult
from .events import EventChannel, URLEvent, url_created, url_clicked, url_deleted
from .exceptions import invalid_input, not_found, duplicate_code
from .common.validators import is_valid_short_code


class URLShortenerService:
    """Service layer for URL shortening business logic.

    Every operation is a single pass over the store's atomic primitives; no
    lock is held across store calls. Aggregate click counts are best-effort
    reads and may miss a concurrent click on a sibling short code.
    """

    def __init__(
        self,
        store: URLStoreBase,
        short_code_generator: Optional[ShortCodeGenerator] = None,
        events: Optional[EventChannel] = None,
        logger: Optional[logging.Logger] = None,
        max_collision_retries: int = 5,
        custom_code_min_length: int = 5,
        short_code_max_length: int = 20,
        max_url_length: int = MAX_URL_LENGTH,
    ):
        """Initialize URL shortener service.

        Args:
            store: Entry store instance
            short_code_generator: Optional short code generator
            events: Optional event channel for push notifications
            logger: Optional logger
            max_collision_retries: Attempts at a unique generated code
            custom_code_min_length: Minimum length of a custom code
            short_code_max_length: Maximum length of any short code
            max_url_length: Maximum length of a long URL
        """
        if max_collision_retries < 1:
            raise ValueError("max_collision_retries must be at least 1")
        self.store = store
        self.generator = short_code_generator or ShortCodeGenerator()
        self.events = events
        self.logger = logger or logging.getLogger(__name__)
        self.max_collision_retries = max_collision_retries
        self.custom_code_min_length = custom_code_min_length
        self.short_code_max_length = short_code_max_length
        self.max_url_length = max_url_length

    def create_short_url(
        self,
        long_url: str,
        custom_code: Optional[str] = None,
    ) -> ShortURLResult:
        """Create a new short URL.

        Args:
            long_url: The destination URL
            custom_code: Optional custom short code

        Returns:
            The created short URL with aggregate click count

        Raises:
            ShortenerError: INVALID_INPUT for a bad URL or custom code,
                DUPLICATE_CODE if the code is taken or no unique code
                could be generated
        """
        normalized_url = normalize_url(long_url, max_length=self.max_url_length)

        if custom_code is not None:
            self._validate_code(custom_code, min_length=self.custom_code_min_length)
            entry = ShortURLEntry(short_code=custom_code, long_url=normalized_url)
            if not self.store.insert(entry):
                self.logger.warning(f"Custom code already taken: {custom_code}")
                raise duplicate_code(custom_code)
            self.logger.info(f"Created short URL with custom code: {custom_code} -> {normalized_url}")
            return self._created(entry)

        for attempt in range(self.max_collision_retries):
            entry = ShortURLEntry(short_code=self.generator.generate(), long_url=normalized_url)
            if self.store.insert(entry):
                self.logger.info(f"Created short URL: {entry.short_code} -> {normalized_url}")
                return self._created(entry)
            self.logger.warning(
                f"Generated code collision on attempt {attempt + 1}: {entry.short_code}"
            )

        self.logger.error(
            f"Failed to generate unique short code after {self.max_collision_retries} "
            f"attempts for URL: {normalized_url}"
        )
        raise duplicate_code(
            message=f"Failed to generate a unique short code after {self.max_collision_retries} attempts"
        )

    def resolve(self, short_code: str) -> ShortURLResult:
        """Resolve a short code, counting the click.

        Args:
            short_code: The short code to resolve

        Returns:
            The short URL with its updated click counts

        Raises:
            ShortenerError: INVALID_INPUT for a malformed code, NOT_FOUND if absent
        """
        entry, click_count, long_url_click_count = self._click(short_code)
        return ShortURLResult(
            short_code=entry.short_code,
            long_url=entry.long_url,
            click_count=click_count,
            long_url_click_count=long_url_click_count,
            created_at=entry.created_at,
        )

    def resolve_for_redirect(self, short_code: str) -> str:
        """Resolve a short code to its destination, counting the click.

        Raises:
            ShortenerError: INVALID_INPUT for a malformed code, NOT_FOUND if absent
        """
        entry, _, _ = self._click(short_code)
        return entry.long_url

    def get_stats(self, short_code: str) -> URLStats:
        """Get click statistics without counting a click.

        Raises:
            ShortenerError: INVALID_INPUT for a malformed code, NOT_FOUND if absent
        """
        self._validate_code(short_code)
        entry = self.store.get(short_code)
        if entry is None:
            raise not_found(short_code)
        return URLStats(
            short_code=entry.short_code,
            click_count=entry.click_count,
            created_at=entry.created_at,
        )

    def delete_short_url(self, short_code: str) -> None:
        """Delete a short URL.

        Raises:
            ShortenerError: INVALID_INPUT for a malformed code, NOT_FOUND if absent
        """
        self._validate_code(short_code)
        if not self.store.delete(short_code):
            self.logger.warning(f"Short code not found for delete: {short_code}")
            raise not_found(short_code)

        self.logger.info(f"Deleted short URL: {short_code}")
        self._publish(url_deleted(short_code))

    def list_all_urls(self) -> List[ShortURLResult]:
        """List every stored short URL with aggregate click counts."""
        return [self._enrich(entry) for entry in self.store.list_all()]

    def list_paged_urls(
        self,
        offset: int = 0,
        limit: int = 50,
        search: Optional[str] = None,
    ) -> PagedResult[ShortURLResult]:
        """List a page of short URLs, newest first.

        The total is counted separately from the page, so it may disagree
        with the page contents under concurrent writes.

        Args:
            offset: Number of matches to skip
            limit: Maximum number of items
            search: Optional case-insensitive long URL filter

        Returns:
            Page of results with the total number of matches
        """
        total_count = self.store.count(search)
        entries = self.store.list_paged(offset, limit, search)
        return PagedResult(
            items=[self._enrich(entry) for entry in entries],
            total_count=total_count,
        )

    def list_recent_urls(self, count: int = 10) -> List[ShortURLResult]:
        """List the most recently created short URLs."""
        return [self._enrich(entry) for entry in self.store.list_paged(0, count)]

    def health_check(self) -> Dict[str, Any]:
        """Perform health check.

        Returns:
            Dictionary with health status
        """
        try:
            total_urls = len(self.store)
            store_healthy = True
        except Exception as e:
            self.logger.error(f"Store health check failed: {e}")
            total_urls = 0
            store_healthy = False

        return {
            "store": store_healthy,
            "total_urls": total_urls,
            "events_bound": bool(self.events and self.events.bound),
            "overall": store_healthy,
        }

    def aggregate_clicks(self, long_url: str) -> int:
        """Sum click counts over every short code pointing at ``long_url``."""
        return sum(entry.click_count for entry in self.store.list_by_long_url(long_url))

    def _click(self, short_code: str):
        self._validate_code(short_code)
        entry = self.store.get(short_code)
        if entry is None:
            self.logger.warning(f"Short code not found: {short_code}")
            raise not_found(short_code)

        click_count = self.store.increment_clicks(short_code)
        if click_count == 0:
            # Deleted between lookup and increment
            self.logger.debug(f"Short code {short_code} vanished before its click was counted")
            click_count = entry.click_count
        long_url_click_count = self.aggregate_clicks(entry.long_url)

        self._publish(url_clicked(entry.short_code, click_count, entry.long_url, long_url_click_count))
        self.logger.debug(f"Resolved {short_code} -> {entry.long_url} ({click_count} clicks)")
        return entry, click_count, long_url_click_count

    def _created(self, entry: ShortURLEntry) -> ShortURLResult:
        result = self._enrich(entry)
        self._publish(url_created(result))
        return result

    def _enrich(self, entry: ShortURLEntry) -> ShortURLResult:
        return ShortURLResult.from_entry(entry, self.aggregate_clicks(entry.long_url))

    def _validate_code(self, short_code: str, min_length: int = 1) -> None:
        is_valid, error = is_valid_short_code(
            short_code,
            min_length=min_length,
            max_length=self.short_code_max_length,
        )
        if not is_valid:
            raise invalid_input(f"Invalid short code: {error}")

    def _publish(self, event: URLEvent) -> None:
        if self.events is None:
            return
        try:
            self.events.publish(event)
        except Exception as e:
            self.logger.warning(f"Failed to send {event.kind.value} notification: {e}")
