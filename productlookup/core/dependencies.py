"""
FastAPI dependencies for the lookup stack built at startup.
"""

from fastapi import Depends, HTTPException, Request, status
import structlog

from productlookup.services.lookup import EngineRegistry, LookupOrchestrator

logger = structlog.get_logger(__name__)


def get_orchestrator(request: Request) -> LookupOrchestrator:
    """Orchestrator created by the application lifespan."""
    orchestrator = getattr(request.app.state, "orchestrator", None)
    if orchestrator is None:
        logger.error("Lookup orchestrator requested before startup completed")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Lookup service is not ready"
        )
    return orchestrator


def get_registry(orchestrator: LookupOrchestrator = Depends(get_orchestrator)) -> EngineRegistry:
    return orchestrator.registry
