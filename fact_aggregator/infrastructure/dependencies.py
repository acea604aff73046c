"""Dependency injection configuration for hexagonal architecture."""

import logging
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv

from ..domain.models.errors import CacheError
from ..domain.ports.cache_provider import CacheProvider
from ..domain.services.fact_checking_service import FactCheckingService
from ..domain.services.resilience import ResilienceController
from ..domain.services.result_integrator import ResultIntegrator
from .cache.memory_cache import MemoryCacheAdapter
from .cache.redis_cache import RedisCacheAdapter
from .config import AggregatorSettings
from .providers.base import ProviderConfig
from .providers.factory import ProviderFactory

# Load environment variables from a .env file in the working directory or a parent
load_dotenv()

logger = logging.getLogger(__name__)


class ServiceContainer:
    """Service container for dependency injection."""

    def __init__(
        self,
        settings: Optional[AggregatorSettings] = None,
        provider_factory: Optional[ProviderFactory] = None,
        cache: Optional[CacheProvider] = None,
    ):
        """Initialize service container.

        Args:
            settings: Configuration (read from the environment when omitted)
            provider_factory: Provider registry (a default one when omitted)
            cache: Cache backend (built from settings when omitted)
        """
        logger.info("🔧 Setting up service container...")
        self.settings = settings or AggregatorSettings.from_env()
        self.provider_factory = provider_factory or ProviderFactory()
        self.cache = cache if cache is not None else self._build_cache()
        self._started = False

        resilience = ResilienceController(
            self.provider_factory,
            max_retries=self.settings.resilience.max_retries,
            base_delay=self.settings.resilience.base_delay,
            # One attempt may authenticate and then query, each bounded by the client timeout
            attempt_timeout=self.settings.resilience.provider_timeout * 2,
        )
        integrator = ResultIntegrator(
            dedupe_sources=self.settings.dedupe_sources,
            clamp_time_weight=self.settings.clamp_time_weight,
        )
        self.fact_checking_service = FactCheckingService(
            providers=self.provider_factory,
            cache=self.cache,
            integrator=integrator,
            resilience=resilience,
            cache_enabled=self.settings.cache.enabled,
            cache_ttl=self.settings.cache.ttl_seconds,
            cache_timeout=self.settings.cache.timeout,
            max_concurrent_verifications=self.settings.max_concurrent_verifications,
            single_flight=self.settings.single_flight,
        )
        logger.info("✅ Service container setup completed")

    def _build_cache(self) -> Optional[CacheProvider]:
        cache_settings = self.settings.cache
        if not cache_settings.enabled:
            logger.info("💾 Caching disabled")
            return None
        if cache_settings.backend == "redis":
            logger.info(f"💾 Using Redis cache at {cache_settings.redis_url}")
            return RedisCacheAdapter(url=cache_settings.redis_url, default_ttl=cache_settings.ttl_seconds)
        if cache_settings.backend != "memory":
            logger.warning(f"⚠️ Unknown cache backend '{cache_settings.backend}', using memory")
        return MemoryCacheAdapter(maxsize=cache_settings.maxsize, default_ttl=cache_settings.ttl_seconds)

    async def startup(self) -> None:
        """Initialize enabled providers and connect the cache.

        A provider that fails to initialize is left out; the service keeps
        running with the others. A cache that cannot connect degrades to
        misses on every lookup.
        """
        if self._started:
            return

        for name in ("google", "factiverse", "bigkinds"):
            provider_settings = self.settings.provider(name)
            if provider_settings is None or not provider_settings.enabled:
                logger.info(f"⏭️ Provider {name} disabled")
                continue
            if self.provider_factory.get_provider(name) is not None:
                continue
            config = ProviderConfig(
                api_key=provider_settings.api_key,
                base_url=provider_settings.base_url,
                timeout=self.settings.resilience.provider_timeout,
            )
            try:
                await self.provider_factory.create_provider(name, config=config)
            except (ValueError, RuntimeError) as e:
                logger.warning(f"⚠️ Failed to set up provider {name}: {e}")

        if self.cache is not None:
            try:
                await self.cache.connect()
            except CacheError as e:
                logger.warning(f"⚠️ Cache unavailable, verifications will not be cached: {e}")

        self._started = True
        logger.info(f"✅ Active providers: {self.provider_factory.active_provider_ids()}")

    async def shutdown(self) -> None:
        """Shut down providers and disconnect the cache."""
        await self.provider_factory.shutdown_all()
        if self.cache is not None:
            await self.cache.disconnect()
        self._started = False

    def get_fact_checking_service(self) -> FactCheckingService:
        """Get fact checking service."""
        return self.fact_checking_service


# Global service container instance
@lru_cache()
def get_service_container() -> ServiceContainer:
    """Get global service container instance.

    Returns:
        Service container instance
    """
    return ServiceContainer()


def get_fact_checking_service() -> FactCheckingService:
    """FastAPI dependency for fact checking service."""
    return get_service_container().get_fact_checking_service()
