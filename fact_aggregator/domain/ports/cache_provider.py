"""Port interface for the verification result cache."""

from abc import ABC, abstractmethod
from typing import Optional

from ..models.verification import VerificationRecord

CACHE_PREFIX = "factcheck:"


def make_cache_key(claim_text: str, language_code: str = "ko") -> str:
    """Build the cache key for a claim.

    The key is an exact concatenation with no normalization, so claims that
    differ only in case or whitespace occupy different slots.
    """
    return f"{CACHE_PREFIX}{language_code}:{claim_text}"


class CacheProvider(ABC):
    """Key/value store with TTL used to memoize verification records.

    Implementations raise ``CacheError`` when the backend fails; callers
    treat that as a miss.
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[VerificationRecord]:
        """Retrieve a cached record, or None if missing or expired."""
        ...

    @abstractmethod
    async def set(
        self,
        key: str,
        record: VerificationRecord,
        ttl_seconds: Optional[int] = None,
    ) -> None:
        """Store a record.

        Args:
            key: Cache key
            record: Record to store
            ttl_seconds: Time-to-live in seconds (None = backend default)
        """
        ...

    @abstractmethod
    async def invalidate(self, key: str) -> bool:
        """Remove a cached entry. Returns True if it existed."""
        ...

    @abstractmethod
    async def clear(self) -> int:
        """Remove all entries. Returns the number removed (-1 if unknown)."""
        ...

    async def connect(self) -> None:
        """Open backend connections."""
        return None

    async def disconnect(self) -> None:
        """Close backend connections."""
        return None

    async def health_check(self) -> bool:
        """Check if the cache is operational."""
        return True
