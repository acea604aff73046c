"""In-process verification record cache backed by cachetools."""

import logging
import time
from typing import Callable, Optional, Tuple

from cachetools import TLRUCache
from pydantic import ValidationError

from ...domain.models.errors import CacheError
from ...domain.models.verification import VerificationRecord
from ...domain.ports.cache_provider import CacheProvider

logger = logging.getLogger(__name__)

# Stored value: (serialized record, ttl in seconds)
_Entry = Tuple[str, float]


def _time_to_use(_key: str, value: _Entry, now: float) -> float:
    return now + value[1]


class MemoryCacheAdapter(CacheProvider):
    """Bounded LRU cache with a per-entry TTL.

    Records are stored as JSON so a caller mutating a returned record
    never affects what later callers read.
    """

    def __init__(
        self,
        maxsize: int = 1000,
        default_ttl: int = 86400,
        timer: Callable[[], float] = time.monotonic,
    ):
        """Initialize the cache.

        Args:
            maxsize: Maximum number of entries before LRU eviction
            default_ttl: TTL used when ``set`` is called without one
            timer: Clock used for expiry
        """
        self._default_ttl = default_ttl
        self._cache: TLRUCache = TLRUCache(maxsize=maxsize, ttu=_time_to_use, timer=timer)

    async def get(self, key: str) -> Optional[VerificationRecord]:
        """Retrieve a cached record, or None if missing or expired."""
        entry = self._cache.get(key)
        if entry is None:
            return None

        try:
            return VerificationRecord.model_validate_json(entry[0])
        except ValidationError as e:
            self._cache.pop(key, None)
            raise CacheError(f"Corrupt cache entry for {key}") from e

    async def set(
        self,
        key: str,
        record: VerificationRecord,
        ttl_seconds: Optional[int] = None,
    ) -> None:
        """Store a record; a non-positive TTL stores nothing."""
        ttl = self._default_ttl if ttl_seconds is None else ttl_seconds
        if ttl <= 0:
            return
        self._cache[key] = (record.model_dump_json(by_alias=True), float(ttl))
        logger.debug(f"Cached record for key {key} with TTL {ttl}s")

    async def invalidate(self, key: str) -> bool:
        """Remove a cached entry. Returns True if it existed."""
        return self._cache.pop(key, None) is not None

    async def clear(self) -> int:
        """Remove all entries."""
        self._cache.expire()
        count = len(self._cache)
        self._cache.clear()
        return count

    def __len__(self) -> int:
        return len(self._cache)
