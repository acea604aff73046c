"""Configuration management for the verification engine."""

import logging
import os
from typing import Optional

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


def _env_bool(name: str, default: bool) -> bool:
    return os.getenv(name, str(default)).strip().lower() in ("1", "true", "yes", "on")


class ProviderSettings(BaseModel):
    """Credentials and endpoint for one provider."""

    api_key: str = ""
    base_url: str
    enabled: bool = True


class CacheSettings(BaseModel):
    """Configuration for the verification record cache."""

    enabled: bool = True
    backend: str = Field(default="memory", description="'memory' or 'redis'")
    ttl_seconds: int = Field(default=86400, description="Record TTL in seconds")
    maxsize: int = Field(default=1000, description="Maximum entries for the memory backend")
    redis_url: str = "redis://localhost:6379/0"
    timeout: float = Field(default=2.0, description="Deadline for a single cache operation")


class ResilienceSettings(BaseModel):
    """Retry and timeout configuration for provider calls."""

    max_retries: int = 3
    base_delay: float = 1.0
    provider_timeout: float = Field(default=10.0, description="HTTP timeout per provider request")


class AggregatorSettings(BaseModel):
    """Top-level configuration."""

    google: ProviderSettings = ProviderSettings(
        base_url="https://factchecktools.googleapis.com/v1alpha1"
    )
    factiverse: ProviderSettings = ProviderSettings(base_url="https://api.factiverse.com/v1")
    bigkinds: ProviderSettings = ProviderSettings(base_url="https://API.bigkinds.or.kr")
    cache: CacheSettings = CacheSettings()
    resilience: ResilienceSettings = ResilienceSettings()
    max_concurrent_verifications: int = 5
    dedupe_sources: bool = False
    clamp_time_weight: bool = False
    single_flight: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "AggregatorSettings":
        """Create configuration from environment variables."""
        settings = cls(
            google=ProviderSettings(
                api_key=os.getenv("GOOGLE_FACTCHECK_API_KEY", ""),
                base_url=os.getenv(
                    "GOOGLE_FACTCHECK_API_URL",
                    "https://factchecktools.googleapis.com/v1alpha1",
                ),
                enabled=_env_bool("GOOGLE_FACTCHECK_API_ENABLED", True),
            ),
            factiverse=ProviderSettings(
                api_key=os.getenv("FACTIVERSE_API_KEY", ""),
                base_url=os.getenv("FACTIVERSE_API_URL", "https://api.factiverse.com/v1"),
                enabled=_env_bool("FACTIVERSE_API_ENABLED", True),
            ),
            bigkinds=ProviderSettings(
                api_key=os.getenv("BIGKINDS_API_KEY", ""),
                base_url=os.getenv("BIGKINDS_API_URL", "https://API.bigkinds.or.kr"),
                enabled=_env_bool("BIGKINDS_API_ENABLED", True),
            ),
            cache=CacheSettings(
                enabled=_env_bool("CACHE_ENABLED", True),
                backend=os.getenv("CACHE_BACKEND", "memory").lower(),
                ttl_seconds=int(os.getenv("CACHE_TTL", "86400")),
                maxsize=int(os.getenv("CACHE_MAXSIZE", "1000")),
                redis_url=os.getenv("REDIS_URL", "redis://localhost:6379/0"),
                timeout=float(os.getenv("CACHE_TIMEOUT", "2.0")),
            ),
            resilience=ResilienceSettings(
                max_retries=int(os.getenv("MAX_RETRIES", "3")),
                base_delay=float(os.getenv("RETRY_BASE_DELAY", "1.0")),
                provider_timeout=float(os.getenv("PROVIDER_TIMEOUT", "10.0")),
            ),
            max_concurrent_verifications=int(os.getenv("MAX_CONCURRENT_VERIFICATIONS", "5")),
            dedupe_sources=_env_bool("DEDUPE_SOURCES", False),
            clamp_time_weight=_env_bool("CLAMP_TIME_WEIGHT", False),
            single_flight=_env_bool("SINGLE_FLIGHT", False),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

        for name in ("google", "factiverse", "bigkinds"):
            provider: ProviderSettings = getattr(settings, name)
            if provider.enabled and not provider.api_key:
                logger.warning(f"⚠️ {name} API key not configured - requests will likely be rejected")

        return settings

    def provider(self, name: str) -> Optional[ProviderSettings]:
        """Settings for a provider id, or None if unknown."""
        return getattr(self, name, None) if name in ("google", "factiverse", "bigkinds") else None
