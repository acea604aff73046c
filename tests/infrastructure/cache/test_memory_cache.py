"""Tests for the in-process cache."""

import pytest

from conftest import NOW, make_result
from fact_aggregator.domain.models.errors import CacheError
from fact_aggregator.domain.models.verification import (
    IntegratedResult,
    VerificationRecord,
    VerificationStatus,
)
from fact_aggregator.infrastructure.cache.memory_cache import MemoryCacheAdapter


class FakeClock:
    """Manually advanced clock."""

    def __init__(self):
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def record() -> VerificationRecord:
    """A record worth caching."""
    return VerificationRecord(
        claim="The earth is round",
        verification=IntegratedResult(
            trust_score=0.9,
            status=VerificationStatus.VERIFIED_TRUE,
            explanation="True",
        ),
        raw_results=[make_result(url="https://a.example")],
        timestamp=NOW,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock) -> MemoryCacheAdapter:
    return MemoryCacheAdapter(maxsize=2, default_ttl=60, timer=clock)


@pytest.mark.asyncio
async def test_get_returns_stored_record(cache, record):
    """Test a stored record comes back equal."""
    await cache.set("factcheck:ko:a", record)
    assert await cache.get("factcheck:ko:a") == record
    assert await cache.get("factcheck:ko:missing") is None


@pytest.mark.asyncio
async def test_entries_expire(cache, clock, record):
    """Test per-entry TTLs."""
    await cache.set("short", record, ttl_seconds=10)
    await cache.set("long", record)

    clock.now = 30
    assert await cache.get("short") is None
    assert await cache.get("long") == record

    clock.now = 61
    assert await cache.get("long") is None


@pytest.mark.asyncio
async def test_returned_records_are_independent(cache, record):
    """Test mutating a returned record does not affect the cache."""
    await cache.set("k", record)
    first = await cache.get("k")
    first.raw_results.clear()

    assert len((await cache.get("k")).raw_results) == 1


@pytest.mark.asyncio
async def test_lru_eviction(cache, record):
    """Test the least recently used entry is evicted."""
    await cache.set("a", record)
    await cache.set("b", record)
    await cache.get("a")
    await cache.set("c", record)

    assert await cache.get("a") is not None
    assert await cache.get("b") is None


@pytest.mark.asyncio
async def test_invalidate_and_clear(cache, record):
    """Test removal."""
    await cache.set("a", record)
    await cache.set("b", record)

    assert await cache.invalidate("a") is True
    assert await cache.invalidate("a") is False
    assert await cache.clear() == 1
    assert len(cache) == 0


@pytest.mark.asyncio
async def test_corrupt_entry_raises_cache_error(cache):
    """Test undecodable entries surface as cache errors."""
    cache._cache["bad"] = ("{not json", 60.0)

    with pytest.raises(CacheError):
        await cache.get("bad")
    assert await cache.get("bad") is None


@pytest.mark.asyncio
async def test_health_check(cache):
    assert await cache.health_check() is True
