"""Tests for environment configuration."""

from fact_aggregator.infrastructure.config import AggregatorSettings


def test_defaults(monkeypatch):
    """Test defaults when nothing is configured."""
    for name in ("CACHE_BACKEND", "CACHE_TTL", "MAX_RETRIES", "SINGLE_FLIGHT", "GOOGLE_FACTCHECK_API_URL"):
        monkeypatch.delenv(name, raising=False)

    settings = AggregatorSettings.from_env()

    assert settings.cache.backend == "memory"
    assert settings.cache.ttl_seconds == 86400
    assert settings.resilience.max_retries == 3
    assert settings.single_flight is False
    assert settings.google.base_url == "https://factchecktools.googleapis.com/v1alpha1"


def test_from_env(monkeypatch):
    """Test environment overrides."""
    monkeypatch.setenv("FACTIVERSE_API_KEY", "fv-key")
    monkeypatch.setenv("BIGKINDS_API_ENABLED", "false")
    monkeypatch.setenv("CACHE_BACKEND", "Redis")
    monkeypatch.setenv("CACHE_TTL", "60")
    monkeypatch.setenv("MAX_CONCURRENT_VERIFICATIONS", "2")
    monkeypatch.setenv("DEDUPE_SOURCES", "yes")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = AggregatorSettings.from_env()

    assert settings.factiverse.api_key == "fv-key"
    assert settings.bigkinds.enabled is False
    assert settings.cache.backend == "redis"
    assert settings.cache.ttl_seconds == 60
    assert settings.max_concurrent_verifications == 2
    assert settings.dedupe_sources is True
    assert settings.log_level == "DEBUG"


def test_provider_lookup():
    """Test provider settings lookup by id."""
    settings = AggregatorSettings()
    assert settings.provider("google") is settings.google
    assert settings.provider("unknown") is None
