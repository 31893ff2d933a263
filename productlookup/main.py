"""
Main FastAPI application with middleware, routing, and lifecycle management.
"""

from contextlib import asynccontextmanager
import logging
import sys
import time
import uuid

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import structlog

from productlookup.api.v1.router import api_router
from productlookup.core.config import settings
from productlookup.services.lookup import LookupEngineFactory

# Configure structured logging
logging.basicConfig(
    format="%(message)s",
    stream=sys.stdout,
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
)

structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    wrapper_class=structlog.stdlib.BoundLogger,
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan management."""
    # Startup
    logger.info("Starting Product Lookup API")

    factory = LookupEngineFactory(settings)
    http_client = factory.create_http_client()
    registry = factory.create_registry(http_client)

    app.state.http_client = http_client
    app.state.orchestrator = factory.create_orchestrator(registry)

    logger.info("Application startup complete", engines=registry.names())

    yield

    # Shutdown
    logger.info("Shutting down Product Lookup API")

    try:
        await http_client.close()
        logger.info("HTTP client closed")
    except Exception as e:
        logger.error(f"Shutdown error: {e}")

    logger.info("Application shutdown complete")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    description="Multi-source product lookup: one barcode, every capable catalog, one canonical product",
    version=settings.version,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)


# Request context middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Bind a request id to every log line of the request and time it."""
    request_id = request.headers.get("x-request-id") or uuid.uuid4().hex
    request.state.request_id = request_id

    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(
        request_id=request_id,
        method=request.method,
        path=request.url.path,
    )

    start_time = time.perf_counter()
    response = await call_next(request)
    process_time = time.perf_counter() - start_time

    logger.info(
        "Request completed",
        status_code=response.status_code,
        process_time=round(process_time, 4),
    )

    response.headers["X-Request-ID"] = request_id
    response.headers["X-Process-Time"] = f"{process_time:.4f}"
    return response


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Unexpected failures become a 500 carrying the request id, never the error text."""
    request_id = getattr(request.state, "request_id", None)
    logger.exception("Unhandled exception", error_type=type(exc).__name__)

    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "request_id": request_id},
        headers={"X-Request-ID": request_id} if request_id else None,
    )


# Health check endpoints
@app.get("/health")
async def health_check():
    """Basic health check endpoint."""
    return {
        "status": "healthy",
        "service": "product-lookup",
        "version": settings.version,
        "environment": settings.environment,
    }


@app.get("/health/detailed")
async def detailed_health_check(request: Request):
    """Detailed health check with registered engines."""
    orchestrator = getattr(request.app.state, "orchestrator", None)
    return {
        "status": "healthy" if orchestrator is not None else "starting",
        "service": "product-lookup",
        "version": settings.version,
        "environment": settings.environment,
        "timestamp": time.time(),
        "engines": orchestrator.registry.names() if orchestrator is not None else [],
    }


# Include API routes
app.include_router(api_router, prefix="/api/v1")
