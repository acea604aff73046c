"""FastAPI application for the fact aggregation service."""

import contextlib
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..infrastructure.dependencies import get_service_container
from ..infrastructure.logging import configure_logging
from .endpoints import fact_check, health

logger = logging.getLogger(__name__)


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize providers and the cache on startup, release them on shutdown."""
    container = get_service_container()
    configure_logging(container.settings.log_level)
    logger.info("🚀 Starting fact aggregation service")
    await container.startup()

    yield  # Application runs here

    logger.info("🛑 Shutting down fact aggregation service")
    await container.shutdown()


def create_app() -> FastAPI:
    """Build the FastAPI application."""
    application = FastAPI(
        title="Fact Aggregator API",
        description="Multi-provider claim verification with weighted trust scoring",
        version=health.VERSION,
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.include_router(health.router)
    application.include_router(fact_check.router)
    return application


app = create_app()
