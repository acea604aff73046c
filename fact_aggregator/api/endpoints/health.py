"""Health check endpoints."""

from typing import Any, Dict

from fastapi import APIRouter, Depends

from ...infrastructure.dependencies import ServiceContainer, get_service_container

router = APIRouter(tags=["health"])

VERSION = "0.1.0"


@router.get("/health")
async def health_check(
    container: ServiceContainer = Depends(get_service_container),
) -> Dict[str, Any]:
    """Check the health of all service components.

    Returns:
        Provider availability and cache reachability
    """
    cache_ok = False
    if container.cache is not None:
        cache_ok = await container.cache.health_check()

    return {
        "status": "healthy",
        "version": VERSION,
        "providers": container.provider_factory.available_providers,
        "cache": cache_ok,
    }
