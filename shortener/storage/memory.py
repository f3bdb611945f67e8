"""Thread-safe in-memory store for URL shortener."""

import itertools
import logging
import threading
from typing import Dict, Iterator, List, Optional, Tuple

from .base import URLStoreBase
from .models import ShortURLEntry


# (insertion sequence, entry)
_Slot = Tuple[int, ShortURLEntry]


class _Shard:
    """One lock-guarded partition of the key space."""

    __slots__ = ("lock", "slots")

    def __init__(self):
        self.lock = threading.Lock()
        self.slots: Dict[str, _Slot] = {}


class InMemoryURLStore(URLStoreBase):
    """Lock-striped in-memory store keyed by lowercased short code.

    Keys hash into a fixed number of shards, each with its own lock, so writers
    on different codes never contend on a single process-wide lock. Every
    mutation (insert, delete, increment) is one critical section on the
    owning shard, which makes it atomic for that key.

    Enumerations copy each shard under its lock in turn. The result is safe to
    iterate while the store keeps changing but is not a point-in-time snapshot
    of the whole store.
    """

    def __init__(self, shards: int = 16, logger: Optional[logging.Logger] = None):
        """Initialize store.

        Args:
            shards: Number of lock stripes
            logger: Optional logger
        """
        if shards < 1:
            raise ValueError("shards must be at least 1")
        self._shards = [_Shard() for _ in range(shards)]
        # next() on itertools.count is atomic in CPython
        self._sequence = itertools.count(1)
        self.logger = logger or logging.getLogger(__name__)
        self.logger.debug(f"In-memory store initialized with {shards} shards")

    def _shard_for(self, key: str) -> _Shard:
        return self._shards[hash(key) % len(self._shards)]

    def insert(self, entry: ShortURLEntry) -> bool:
        key = entry.key
        shard = self._shard_for(key)
        with shard.lock:
            if key in shard.slots:
                return False
            shard.slots[key] = (next(self._sequence), entry)
            return True

    def get(self, short_code: str) -> Optional[ShortURLEntry]:
        key = short_code.lower()
        shard = self._shard_for(key)
        with shard.lock:
            slot = shard.slots.get(key)
        return slot[1] if slot else None

    def delete(self, short_code: str) -> bool:
        key = short_code.lower()
        shard = self._shard_for(key)
        with shard.lock:
            return shard.slots.pop(key, None) is not None

    def exists(self, short_code: str) -> bool:
        key = short_code.lower()
        shard = self._shard_for(key)
        with shard.lock:
            return key in shard.slots

    def increment_clicks(self, short_code: str) -> int:
        key = short_code.lower()
        shard = self._shard_for(key)
        with shard.lock:
            slot = shard.slots.get(key)
            if slot is None:
                return 0
            sequence, entry = slot
            updated = entry.with_click()
            shard.slots[key] = (sequence, updated)
            return updated.click_count

    def _iter_slots(self) -> Iterator[_Slot]:
        for shard in self._shards:
            with shard.lock:
                slots = list(shard.slots.values())
            yield from slots

    def list_all(self) -> List[ShortURLEntry]:
        return [entry for _, entry in self._iter_slots()]

    def list_by_long_url(self, long_url: str) -> List[ShortURLEntry]:
        return [entry for _, entry in self._iter_slots() if entry.long_url == long_url]

    def _search(self, search: Optional[str]) -> List[_Slot]:
        if search is None or not search.strip():
            return list(self._iter_slots())
        needle = search.casefold()
        return [
            slot for slot in self._iter_slots()
            if needle in slot[1].long_url.casefold()
        ]

    def count(self, search: Optional[str] = None) -> int:
        return len(self._search(search))

    def list_paged(
        self,
        offset: int,
        limit: int,
        search: Optional[str] = None,
    ) -> List[ShortURLEntry]:
        offset = max(offset, 0)
        if limit <= 0:
            return []
        slots = sorted(
            self._search(search),
            key=lambda slot: (slot[1].created_at, slot[0]),
            reverse=True,
        )
        return [entry for _, entry in slots[offset:offset + limit]]

    def __len__(self) -> int:
        total = 0
        for shard in self._shards:
            with shard.lock:
                total += len(shard.slots)
        return total
