"""Redis implementation of the verification record cache."""

import logging
from typing import List, Optional

import redis.asyncio as redis
from pydantic import ValidationError
from redis.exceptions import RedisError

from ...domain.models.errors import CacheError
from ...domain.models.verification import VerificationRecord
from ...domain.ports.cache_provider import CACHE_PREFIX, CacheProvider

logger = logging.getLogger(__name__)


class RedisCacheAdapter(CacheProvider):
    """Verification record cache shared between processes via Redis.

    Keys are stored as given (they already carry the ``factcheck:``
    prefix) with a Redis-side expiry, so stale records vanish on their own.
    """

    def __init__(
        self,
        url: str = "redis://localhost:6379/0",
        default_ttl: int = 86400,
        client: Optional[redis.Redis] = None,
    ):
        """Initialize the adapter.

        Args:
            url: Redis connection URL
            default_ttl: TTL used when ``set`` is called without one
            client: Pre-built client (created on ``connect`` when omitted)
        """
        self._url = url
        self._default_ttl = default_ttl
        self._client = client

    async def connect(self) -> None:
        """Create the client and verify the server answers."""
        if self._client is None:
            self._client = redis.from_url(self._url, decode_responses=False)
        try:
            await self._client.ping()
        except (RedisError, OSError) as e:
            logger.error(f"❌ Redis connection failed: {e}")
            raise CacheError(f"Connection failed: {e}") from e
        logger.info(f"✅ Connected to Redis at {self._url}")

    async def disconnect(self) -> None:
        """Close the Redis connection."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            logger.info("Disconnected from Redis")

    async def health_check(self) -> bool:
        """Check if Redis is reachable."""
        if self._client is None:
            return False
        try:
            await self._client.ping()
            return True
        except (RedisError, OSError) as e:
            logger.warning(f"⚠️ Redis health check failed: {e}")
            return False

    def _require_client(self) -> redis.Redis:
        if self._client is None:
            raise CacheError("Redis client not connected")
        return self._client

    async def get(self, key: str) -> Optional[VerificationRecord]:
        """Retrieve a cached record, or None if missing or expired."""
        client = self._require_client()
        try:
            data = await client.get(key)
        except (RedisError, OSError) as e:
            raise CacheError(f"Cache get failed: {e}") from e

        if data is None:
            return None

        try:
            return VerificationRecord.model_validate_json(data)
        except ValidationError as e:
            logger.error(f"❌ Failed to deserialize cached record for {key}")
            await self.invalidate(key)
            raise CacheError(f"Corrupt cache entry for {key}") from e

    async def set(
        self,
        key: str,
        record: VerificationRecord,
        ttl_seconds: Optional[int] = None,
    ) -> None:
        """Store a record with a Redis-side expiry."""
        ttl = self._default_ttl if ttl_seconds is None else ttl_seconds
        if ttl <= 0:
            return
        client = self._require_client()
        try:
            await client.set(key, record.model_dump_json(by_alias=True), ex=ttl)
        except (RedisError, OSError) as e:
            raise CacheError(f"Cache set failed: {e}") from e
        logger.debug(f"Cached record for key {key} with TTL {ttl}s")

    async def invalidate(self, key: str) -> bool:
        """Remove a cached entry. Returns True if it existed."""
        client = self._require_client()
        try:
            return await client.delete(key) > 0
        except (RedisError, OSError) as e:
            raise CacheError(f"Cache invalidate failed: {e}") from e

    async def clear(self) -> int:
        """Remove every entry under the cache prefix."""
        client = self._require_client()
        try:
            keys: List[bytes] = [key async for key in client.scan_iter(match=f"{CACHE_PREFIX}*")]
            if not keys:
                return 0
            deleted = await client.delete(*keys)
        except (RedisError, OSError) as e:
            raise CacheError(f"Cache clear failed: {e}") from e

        logger.info(f"🧹 Cleared {deleted} cached entries")
        return int(deleted)
