#!/usr/bin/env python3
"""
Startup script for the Product Lookup API.
Validates the engine configuration, then starts uvicorn.
"""

import sys

import uvicorn
import structlog

from productlookup.core.config import settings
from productlookup.services.lookup import DuplicateEngineError, LookupEngineFactory

logger = structlog.get_logger(__name__)


def check_engine_configuration() -> bool:
    """Builds the registry once so configuration errors surface before serving."""
    factory = LookupEngineFactory(settings)
    try:
        registry = factory.create_registry(factory.create_http_client())
    except DuplicateEngineError as e:
        logger.error(f"Engine configuration invalid: {e}")
        return False

    if not len(registry):
        logger.error("Every lookup engine is disabled")
        return False

    logger.info("Engine configuration valid", engines=registry.names())
    return True


def start_development_server():
    """Start the development server with hot reload."""
    logger.info("Starting Product Lookup API in development mode...")

    uvicorn.run(
        "productlookup.main:app",
        host=settings.host,
        port=settings.port,
        reload=True,
        reload_dirs=["productlookup"],
        log_level="info",
        access_log=True,
        use_colors=True,
        loop="asyncio"
    )


def start_production_server():
    """Start the production server."""
    logger.info("Starting Product Lookup API in production mode...")

    uvicorn.run(
        "productlookup.main:app",
        host=settings.host,
        port=settings.port,
        workers=1,
        log_level="warning",
        access_log=False,
        loop="asyncio"
    )


def main():
    """Main startup function."""
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer()
        ],
        cache_logger_on_first_use=True,
    )

    logger.info("Starting Product Lookup API")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Debug mode: {settings.debug}")

    if not check_engine_configuration():
        sys.exit(1)

    if settings.environment == "production":
        start_production_server()
    else:
        start_development_server()


if __name__ == "__main__":
    main()
