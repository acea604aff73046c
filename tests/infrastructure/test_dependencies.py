"""Tests for the service container."""

import pytest

from fact_aggregator.infrastructure.cache.memory_cache import MemoryCacheAdapter
from fact_aggregator.infrastructure.cache.redis_cache import RedisCacheAdapter
from fact_aggregator.infrastructure.config import (
    AggregatorSettings,
    CacheSettings,
    ProviderSettings,
)
from fact_aggregator.infrastructure.dependencies import ServiceContainer


def test_cache_backend_selection():
    """Test the configured backend is built."""
    memory = ServiceContainer(settings=AggregatorSettings())
    redis = ServiceContainer(settings=AggregatorSettings(cache=CacheSettings(backend="redis")))
    disabled = ServiceContainer(settings=AggregatorSettings(cache=CacheSettings(enabled=False)))

    assert isinstance(memory.cache, MemoryCacheAdapter)
    assert isinstance(redis.cache, RedisCacheAdapter)
    assert disabled.cache is None


def test_one_service_per_container():
    """Test both entry points share a single orchestrator."""
    container = ServiceContainer(settings=AggregatorSettings())
    assert container.get_fact_checking_service() is container.get_fact_checking_service()


@pytest.mark.asyncio
async def test_startup_activates_enabled_providers():
    """Test startup creates only enabled providers, in order."""
    settings = AggregatorSettings(
        bigkinds=ProviderSettings(base_url="https://bigkinds.test", enabled=False),
    )
    container = ServiceContainer(settings=settings)

    await container.startup()
    try:
        assert container.provider_factory.active_provider_ids() == ["google", "factiverse"]
    finally:
        await container.shutdown()

    assert container.provider_factory.active_provider_ids() == []
